"""
LLM Stream Module

The generation pipeline: prompt construction, provider streaming, SSE
decoding, reply extraction and the model-fallback orchestrator.
"""

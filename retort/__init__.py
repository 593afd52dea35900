"""
Retort Streaming Service

Generates three short rebuttals to an opponent's line by streaming a
chat-completion request through an ordered chain of candidate models and
relaying partial and final replies as newline-delimited JSON frames.
"""

__version__ = "1.0.0"

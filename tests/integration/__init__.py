"""
Integration tests.

These run the whole path in-process: RetortClient over ``httpx.ASGITransport``
into the FastAPI application, whose provider is answered by
``httpx.MockTransport`` scripts. No network access is needed.
"""

#!/usr/bin/env python3
"""
Application Startup Script

Checks configuration and starts the FastAPI application under uvicorn.

Usage:
    python start_app.py
"""

import sys

import uvicorn

from retort.core.config.settings import get_settings


def main():
    """Start the application after a configuration check."""

    print("=" * 60)
    print("Retort Streaming Service - Startup")
    print("=" * 60)
    print()

    settings = get_settings()

    # Step 1: Check provider configuration
    print("Step 1: Checking provider configuration...")
    if not settings.model_candidates:
        print("\n[X] OPENROUTER_MODELS resolves to an empty model list")
        sys.exit(1)
    print(f"[OK] Candidate models: {', '.join(settings.model_candidates)}")

    if settings.OPENROUTER_API_KEY:
        print("[OK] OPENROUTER_API_KEY configured")
    else:
        print("[!] OPENROUTER_API_KEY not set, /api/argue will answer 500 until it is")

    # Step 2: Start FastAPI application
    print("\nStep 2: Starting FastAPI application...")
    print("=" * 60)
    print()

    try:
        uvicorn.run(
            "retort.application.app:app",
            host=settings.app.API_HOST,
            port=settings.app.API_PORT,
            reload=settings.app.ENVIRONMENT == "development",
            log_level=settings.logging.LOG_LEVEL.lower(),
        )
    except KeyboardInterrupt:
        print("\n\nShutting down...")


if __name__ == "__main__":
    main()

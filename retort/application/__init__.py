"""
Application Layer

FastAPI surface of the retort service: routes, middleware, validation.
"""

"""
Core Module

Cross-cutting infrastructure shared by every layer:

- **config**: pydantic-settings configuration and constants
- **exceptions**: RetortBaseError hierarchy
- **logging**: structlog setup and request ID correlation
"""

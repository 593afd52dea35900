"""
Configuration Module

Centralized, type-safe configuration for the retort streaming service.

Components:
-----------
- **settings.py**: Pydantic-based configuration with environment variable loading
- **constants.py**: System-wide constants, enums, and user-facing messages

Environment Variables:
---------------------
```bash
OPENROUTER_API_KEY=sk-or-...
OPENROUTER_MODEL=deepseek/deepseek-chat-v3.1:free
OPENROUTER_MODELS=deepseek/deepseek-chat-v3.1:free,openrouter/auto

LOG_LEVEL=INFO
LOG_FORMAT=json
ENVIRONMENT=production
```
"""

from retort.core.config.settings import (
    Settings,
    get_settings,
    parse_model_list,
    reload_settings,
)

__all__ = [
    "Settings",
    "get_settings",
    "parse_model_list",
    "reload_settings",
]

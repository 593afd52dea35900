"""
Validators Module

Inbound request validation for the HTTP layer.
"""

from retort.application.validators.request_validator import ArgueRequestValidator

__all__ = ["ArgueRequestValidator"]

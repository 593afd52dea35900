"""API request/response models."""

from .streaming import ArgueRequestModel, ErrorResponse, HealthResponse

__all__ = ["ArgueRequestModel", "ErrorResponse", "HealthResponse"]

"""
Validation Exceptions

All exceptions related to inbound request validation. These map to a
client-error response and are never retried.
"""

from retort.core.exceptions.base import RetortBaseError


class ValidationError(RetortBaseError):
    """
    Raised when request validation fails.

    This is the base class for all validation-related errors.
    """
    pass


class InvalidInputError(ValidationError):
    """
    Raised when input validation fails.

    Common causes:
    - Body is not a JSON object
    - opponentLine missing, not a string, or blank
    - opponentLine too long
    """
    pass

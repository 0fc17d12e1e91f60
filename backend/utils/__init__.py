"""
Utils Package

Provides utility modules for:
- validation_errors: Structured 422 error bodies for routers
"""

from .validation_errors import (
    ValidationErrorResponse,
    raise_missing_parameter,
    raise_invalid_parameter,
    raise_validation_error,
    validate_required_uuid,
)

__all__ = [
    'ValidationErrorResponse',
    'raise_missing_parameter',
    'raise_invalid_parameter',
    'raise_validation_error',
    'validate_required_uuid',
]

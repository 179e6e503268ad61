"""Structural validation of roster records."""

from .enrollment_validator import AppStateValidator, EnrollmentValidator, validate_state
from .validators import ValidationResult, Validator

__all__ = [
    "AppStateValidator",
    "EnrollmentValidator",
    "ValidationResult",
    "Validator",
    "validate_state",
]

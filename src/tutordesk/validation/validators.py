"""
Validation framework with Strategy pattern.

This module provides:
- Abstract Validator interface
- ValidationResult for consistent validation reporting
- Shared checks reused by the entity validators
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from typing import Any, List, Optional


@dataclass
class ValidationResult:
    """
    Result of data validation.

    Attributes:
        is_valid: Whether validation passed
        errors: List of error messages
        warnings: List of warning messages (non-fatal)
    """

    is_valid: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def add_error(self, message: str) -> 'ValidationResult':
        """
        Add an error message.

        Returns:
            Self for method chaining
        """
        self.errors.append(message)
        self.is_valid = False
        return self

    def add_warning(self, message: str) -> 'ValidationResult':
        """Add a warning message; returns self for chaining."""
        self.warnings.append(message)
        return self

    def merge(self, other: 'ValidationResult', prefix: str = "") -> 'ValidationResult':
        """Fold another result into this one, prefixing its messages."""
        for error in other.errors:
            self.add_error(f"{prefix}{error}")
        for warning in other.warnings:
            self.add_warning(f"{prefix}{warning}")
        return self

    @property
    def has_errors(self) -> bool:
        return len(self.errors) > 0

    @property
    def has_warnings(self) -> bool:
        return len(self.warnings) > 0

    def get_summary(self) -> str:
        """
        Get validation summary.

        Returns:
            Human-readable summary of validation results
        """
        if self.is_valid and not self.has_warnings:
            return "Validation passed"

        parts = []

        if self.has_errors:
            parts.append(f"Errors ({len(self.errors)}):")
            for error in self.errors:
                parts.append(f"  - {error}")

        if self.has_warnings:
            parts.append(f"Warnings ({len(self.warnings)}):")
            for warning in self.warnings:
                parts.append(f"  - {warning}")

        return "\n".join(parts)


class Validator(ABC):
    """
    Abstract base class for validators.

    Subclasses implement validate() for one record type and reuse the
    shared checks below.
    """

    @abstractmethod
    def validate(self, data: Any) -> ValidationResult:
        """
        Validate data.

        Args:
            data: Record to validate

        Returns:
            ValidationResult with errors and warnings
        """
        pass

    def validate_identity(self, value: Any, field_name: str = "id") -> Optional[str]:
        """Error message if value is not a non-empty string."""
        if not isinstance(value, str) or not value:
            return f"Missing required field: {field_name}"
        return None

    def validate_date_range(
        self,
        start: Optional[date],
        end: Optional[date],
        label: str
    ) -> Optional[str]:
        """Error message if the inclusive range is missing a bound or reversed."""
        if start is None or end is None:
            return f"{label} is missing a start or end date"
        if start > end:
            return f"{label} starts after it ends ({start.isoformat()} > {end.isoformat()})"
        return None

    def validate_non_negative(self, value: Any, field_name: str) -> Optional[str]:
        """Error message if value is not an integer >= 0."""
        if isinstance(value, bool) or not isinstance(value, int):
            return f"{field_name} must be an integer, got {type(value).__name__}"
        if value < 0:
            return f"{field_name} must not be negative, got {value}"
        return None

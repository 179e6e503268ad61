"""
Enrollment and aggregate validators.

Structural checks only: the store accepts whatever callers upsert, and
these validators report problems for the host UI and the load path.
"""

from typing import Set

from ..models.entities import AppState, Enrollment
from ..utils.timeutils import is_valid_hhmm
from .validators import Validator, ValidationResult


class EnrollmentValidator(Validator):
    """
    Validator for a single enrollment.

    Validates:
    - Identity and owning student present
    - Window and explicit date ranges ordered
    - selected_window_id resolves within windows
    - Weekdays within 1..7
    - Start time readable
    - Money and lesson counts non-negative, duration positive

    Examples:
        >>> result = EnrollmentValidator().validate(enrollment)
        >>> if not result.is_valid:
        ...     print(result.get_summary())
    """

    MAX_DURATION = 300  # minutes

    def validate(self, data: Enrollment) -> ValidationResult:
        result = ValidationResult()

        for value, name in ((data.id, "id"), (data.student_id, "student_id")):
            error = self.validate_identity(value, name)
            if error:
                result.add_error(error)

        for window in data.windows:
            error = self.validate_date_range(window.start, window.end, f"Window '{window.name}'")
            if error:
                result.add_error(error)

        if data.selected_window_id is not None and data.resolved_window() is None:
            result.add_error(
                f"selected_window_id {data.selected_window_id} does not match any window"
            )

        if data.windows:
            if data.start_date is not None or data.end_date is not None:
                result.add_warning("Explicit start/end dates are ignored while windows are set")
        elif data.start_date is not None or data.end_date is not None:
            error = self.validate_date_range(data.start_date, data.end_date, "Date range")
            if error:
                result.add_error(error)

        invalid_days = sorted(d for d in data.weekdays if not 1 <= d <= 7)
        if invalid_days:
            result.add_error(f"Invalid weekdays: {invalid_days} (must be 1..7)")

        if not is_valid_hhmm(data.time_hhmm):
            result.add_error(f"Unreadable start time: {data.time_hhmm!r} (falls back to 18:30)")

        for value, name in (
            (data.price_per_lesson, "price_per_lesson"),
            (data.planned_lessons, "planned_lessons"),
            (data.total_paid, "total_paid"),
        ):
            error = self.validate_non_negative(value, name)
            if error:
                result.add_error(error)

        if data.duration_minutes <= 0:
            result.add_error(f"duration_minutes must be positive, got {data.duration_minutes}")
        elif data.duration_minutes > self.MAX_DURATION:
            result.add_warning(
                f"Duration unusually long: {data.duration_minutes} minutes "
                f"(maximum recommended: {self.MAX_DURATION})"
            )

        return result


class AppStateValidator(Validator):
    """
    Validator for the whole aggregate.

    Runs EnrollmentValidator over every enrollment, checks holiday
    ranges, and warns about foreign keys that point at missing records.
    """

    def __init__(self):
        self._enrollment_validator = EnrollmentValidator()

    def validate(self, data: AppState) -> ValidationResult:
        result = ValidationResult()

        student_ids: Set[str] = {s.id for s in data.students}
        enrollment_ids: Set[str] = {e.id for e in data.enrollments}

        for enrollment in data.enrollments:
            result.merge(
                self._enrollment_validator.validate(enrollment),
                prefix=f"Enrollment '{enrollment.title}' ({enrollment.id}): "
            )
            if enrollment.student_id not in student_ids:
                result.add_warning(
                    f"Enrollment {enrollment.id} references missing student {enrollment.student_id}"
                )

        for session in data.sessions:
            if session.student_id not in student_ids:
                result.add_warning(
                    f"Session {session.id} references missing student {session.student_id}"
                )
            if session.enrollment_id is not None and session.enrollment_id not in enrollment_ids:
                result.add_warning(
                    f"Session {session.id} references missing enrollment {session.enrollment_id}"
                )

        for holiday in data.settings.holiday_ranges:
            error = self.validate_date_range(holiday.start, holiday.end, f"Holiday '{holiday.name}'")
            if error:
                result.add_error(error)

        return result


def validate_state(state: AppState) -> ValidationResult:
    """Validate an aggregate with AppStateValidator."""
    return AppStateValidator().validate(state)

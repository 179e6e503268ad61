"""Roster store, derived metrics and autosave debouncing."""

from .app_store import AppStore, enrollment_sort_key, ordered_enrollments
from .debounce import DebounceState, Debouncer
from .metrics import EnrollmentMetrics

__all__ = [
    "AppStore",
    "DebounceState",
    "Debouncer",
    "EnrollmentMetrics",
    "enrollment_sort_key",
    "ordered_enrollments",
]

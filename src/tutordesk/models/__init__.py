"""Domain data models."""

from .entities import (
    AppLanguage,
    AppSettings,
    AppState,
    DateWindow,
    Enrollment,
    HolidayRange,
    Session,
    SessionStatus,
    SidebarItem,
    Student,
    Teacher,
    TermTemplate,
    WeekdayAvailability,
    new_id,
)
from .result import Result, ResultStatus

__all__ = [
    "AppLanguage",
    "AppSettings",
    "AppState",
    "DateWindow",
    "Enrollment",
    "HolidayRange",
    "Result",
    "ResultStatus",
    "Session",
    "SessionStatus",
    "SidebarItem",
    "Student",
    "Teacher",
    "TermTemplate",
    "WeekdayAvailability",
    "new_id",
]

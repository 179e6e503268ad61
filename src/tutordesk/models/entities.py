"""
Domain entities for the tutor roster.

This module provides dataclass definitions for every record the store
holds, together with dictionary conversion for the persisted document.

Conversion rules:
- Enums serialize as their string value
- Dates serialize as ISO-8601 ("2026-01-23", "2026-01-23T18:30:00")
- from_dict() ignores unknown keys and applies defaults for missing ones
"""

import math
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional, Set, Type, TypeVar

from ..utils.timeutils import DEFAULT_HHMM, parse_date, parse_datetime


E = TypeVar("E", bound=Enum)


def new_id() -> str:
    """Generate a fresh opaque identity."""
    return str(uuid.uuid4())


def _enum_value(enum_cls: Type[E], value: Any, default: E) -> E:
    try:
        return enum_cls(value)
    except ValueError:
        return default


def _int(value: Any, default: int) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, float) and not math.isfinite(value):
        # json.load accepts NaN and Infinity
        return default
    if isinstance(value, (int, float)):
        return int(value)
    return default


def _str(value: Any, default: str = "") -> str:
    return value if isinstance(value, str) else default


def _optional_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def _bool(value: Any, default: bool) -> bool:
    return value if isinstance(value, bool) else default


def _list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _date_str(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


class AppLanguage(Enum):
    """UI language preference."""
    SYSTEM = "system"
    ZH_HANS = "zhHans"
    EN = "en"


class SidebarItem(Enum):
    """Active section of the host UI."""
    SCHEDULE = "schedule"
    BOOKING = "booking"
    STUDENTS = "students"
    TEACHER = "teacher"
    SETTINGS = "settings"


class SessionStatus(Enum):
    """Lifecycle state of a single lesson."""
    PLANNED = "planned"
    ATTENDED = "attended"
    MISSED = "missed"
    CANCELED = "canceled"


@dataclass
class Teacher:
    """
    Teacher profile.

    Attributes:
        id: Unique identity
        display_name: Name shown on the profile
        headline: One-line tagline
        bio: Free-text biography
        contact: Contact string (e-mail, phone, handle)
    """

    id: str = field(default_factory=new_id)
    display_name: str = "Primary Teacher"
    headline: str = "Math & Programming Coach"
    bio: str = "Edit your story here."
    contact: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "displayName": self.display_name,
            "headline": self.headline,
            "bio": self.bio,
            "contact": self.contact,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Teacher":
        defaults = cls()
        return cls(
            id=_str(d.get("id")) or defaults.id,
            display_name=_str(d.get("displayName"), defaults.display_name),
            headline=_str(d.get("headline"), defaults.headline),
            bio=_str(d.get("bio"), defaults.bio),
            contact=_str(d.get("contact")),
        )


@dataclass
class Student:
    """
    Student record.

    Attributes:
        name: Student name
        id: Unique identity
        grade: Free-text grade or level
        notes: Free-text notes
        teacher_id: Owning teacher, if any
        is_archived: Hidden from active lists
    """

    name: str
    id: str = field(default_factory=new_id)
    grade: str = ""
    notes: str = ""
    teacher_id: Optional[str] = None
    is_archived: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "grade": self.grade,
            "notes": self.notes,
            "teacherID": self.teacher_id,
            "isArchived": self.is_archived,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Student":
        return cls(
            id=_str(d.get("id")) or new_id(),
            name=_str(d.get("name")),
            grade=_str(d.get("grade")),
            notes=_str(d.get("notes")),
            teacher_id=_optional_str(d.get("teacherID")),
            is_archived=_bool(d.get("isArchived"), False),
        )


@dataclass
class DateWindow:
    """Named inclusive date range in which sessions may be generated."""

    name: str
    start: date
    end: date
    id: str = field(default_factory=new_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "start": _date_str(self.start),
            "end": _date_str(self.end),
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> Optional["DateWindow"]:
        """Returns None when either bound is missing or malformed."""
        start = parse_date(d.get("start"))
        end = parse_date(d.get("end"))
        if start is None or end is None:
            return None
        return cls(
            id=_str(d.get("id")) or new_id(),
            name=_str(d.get("name")),
            start=start,
            end=end,
        )

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


@dataclass
class HolidayRange:
    """Named inclusive blackout range."""

    name: str
    start: date
    end: date
    id: str = field(default_factory=new_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "start": _date_str(self.start),
            "end": _date_str(self.end),
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> Optional["HolidayRange"]:
        start = parse_date(d.get("start"))
        end = parse_date(d.get("end"))
        if start is None or end is None:
            return None
        return cls(
            id=_str(d.get("id")) or new_id(),
            name=_str(d.get("name")),
            start=start,
            end=end,
        )

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


def _windows_from(value: Any) -> List[DateWindow]:
    windows = (DateWindow.from_dict(w) for w in _list(value) if isinstance(w, dict))
    return [w for w in windows if w is not None]


@dataclass
class Enrollment:
    """
    Purchased package of lessons for one student.

    Scheduling rules used by the session generator:
    - windows: candidate date ranges; when non-empty, start_date and
      end_date are ignored
    - selected_window_id: restricts generation to a single window
    - weekdays: allowed weekdays, 1=Sunday ... 7=Saturday (empty = any)
    - time_hhmm: canonical daily start time
    - skip_holidays: skip days inside the configured holiday ranges

    Attributes:
        student_id: Owning student (required)
        teacher_id: Assigned teacher, if any
        title: Package title
        price_per_lesson: Price of one lesson
        planned_lessons: Lesson quota
        total_paid: Amount paid so far
        duration_minutes: Lesson length
        end_hhmm: Explicit end time ("" = derived from duration)
        meeting_link: Online meeting URL copied to generated sessions
    """

    student_id: str
    id: str = field(default_factory=new_id)
    teacher_id: Optional[str] = None

    title: str = "Phase"
    price_per_lesson: int = 220
    planned_lessons: int = 12
    total_paid: int = 0

    duration_minutes: int = 120

    windows: List[DateWindow] = field(default_factory=list)
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    selected_window_id: Optional[str] = None

    weekdays: Set[int] = field(default_factory=set)

    time_hhmm: str = DEFAULT_HHMM
    end_hhmm: str = ""

    meeting_link: str = ""
    skip_holidays: bool = True

    def resolved_window(self) -> Optional[DateWindow]:
        """The window referenced by selected_window_id, if it exists."""
        if self.selected_window_id is None:
            return None
        for window in self.windows:
            if window.id == self.selected_window_id:
                return window
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "studentID": self.student_id,
            "teacherID": self.teacher_id,
            "title": self.title,
            "pricePerLesson": self.price_per_lesson,
            "plannedLessons": self.planned_lessons,
            "totalPaid": self.total_paid,
            "durationMinutes": self.duration_minutes,
            "windows": [w.to_dict() for w in self.windows],
            "startDate": _date_str(self.start_date),
            "endDate": _date_str(self.end_date),
            "selectedWindowID": self.selected_window_id,
            "weekdays": sorted(self.weekdays),
            "timeHHmm": self.time_hhmm,
            "endHHmm": self.end_hhmm,
            "meetingLink": self.meeting_link,
            "skipHolidays": self.skip_holidays,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Enrollment":
        defaults = cls(student_id="")
        weekdays = {
            w for w in _list(d.get("weekdays"))
            if isinstance(w, int) and not isinstance(w, bool)
        }
        return cls(
            id=_str(d.get("id")) or defaults.id,
            student_id=_str(d.get("studentID")),
            teacher_id=_optional_str(d.get("teacherID")),
            title=_str(d.get("title"), defaults.title),
            price_per_lesson=_int(d.get("pricePerLesson"), defaults.price_per_lesson),
            planned_lessons=_int(d.get("plannedLessons"), defaults.planned_lessons),
            total_paid=_int(d.get("totalPaid"), defaults.total_paid),
            duration_minutes=_int(d.get("durationMinutes"), defaults.duration_minutes),
            windows=_windows_from(d.get("windows")),
            start_date=parse_date(d.get("startDate")),
            end_date=parse_date(d.get("endDate")),
            selected_window_id=_optional_str(d.get("selectedWindowID")),
            weekdays=weekdays,
            time_hhmm=_str(d.get("timeHHmm"), defaults.time_hhmm),
            end_hhmm=_str(d.get("endHHmm")),
            meeting_link=_str(d.get("meetingLink")),
            skip_holidays=_bool(d.get("skipHolidays"), defaults.skip_holidays),
        )


@dataclass
class Session:
    """
    One concrete, dated lesson.

    Attributes:
        student_id: Student attending the lesson
        start_at: Local start timestamp
        id: Unique identity
        teacher_id: Teacher giving the lesson, if known
        enrollment_id: Enrollment the lesson belongs to, if any
        duration_minutes: Lesson length
        status: planned / attended / missed / canceled
        meeting_link: Online meeting URL
        notes: Free-text notes
    """

    student_id: str
    start_at: datetime
    id: str = field(default_factory=new_id)
    teacher_id: Optional[str] = None
    enrollment_id: Optional[str] = None
    duration_minutes: int = 120
    status: SessionStatus = SessionStatus.PLANNED
    meeting_link: str = ""
    notes: str = ""

    @property
    def end_at(self) -> datetime:
        return self.start_at + timedelta(minutes=self.duration_minutes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "studentID": self.student_id,
            "teacherID": self.teacher_id,
            "enrollmentID": self.enrollment_id,
            "startAt": self.start_at.isoformat(),
            "durationMinutes": self.duration_minutes,
            "status": self.status.value,
            "meetingLink": self.meeting_link,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> Optional["Session"]:
        """Returns None when startAt is missing or malformed."""
        start_at = parse_datetime(d.get("startAt"))
        if start_at is None:
            return None
        return cls(
            id=_str(d.get("id")) or new_id(),
            student_id=_str(d.get("studentID")),
            teacher_id=_optional_str(d.get("teacherID")),
            enrollment_id=_optional_str(d.get("enrollmentID")),
            start_at=start_at,
            duration_minutes=_int(d.get("durationMinutes"), 120),
            status=_enum_value(SessionStatus, d.get("status"), SessionStatus.PLANNED),
            meeting_link=_str(d.get("meetingLink")),
            notes=_str(d.get("notes")),
        )


@dataclass
class WeekdayAvailability:
    """Weekly availability entry shown on a term template."""

    weekday: int
    time_ranges: List[str] = field(default_factory=list)
    note: str = "Flexible"
    status: str = "Available"
    id: str = field(default_factory=new_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "weekday": self.weekday,
            "timeRanges": list(self.time_ranges),
            "note": self.note,
            "status": self.status,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "WeekdayAvailability":
        return cls(
            id=_str(d.get("id")) or new_id(),
            weekday=_int(d.get("weekday"), 1),
            time_ranges=[t for t in _list(d.get("timeRanges")) if isinstance(t, str)],
            note=_str(d.get("note"), "Flexible"),
            status=_str(d.get("status"), "Available"),
        )


@dataclass
class TermTemplate:
    """
    Reusable preset used to pre-populate a new enrollment.

    time_options are display strings such as "08:30–10:30"; the first
    one seeds the enrollment's start time and duration.
    """

    title: str
    subtitle: str = ""
    id: str = field(default_factory=new_id)
    windows: List[DateWindow] = field(default_factory=list)
    time_options: List[str] = field(default_factory=list)
    weekday_availability: List[WeekdayAvailability] = field(default_factory=list)
    suggested_lessons: int = 12
    suggested_price_per_lesson: int = 220
    suggested_duration_minutes: int = 120

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "subtitle": self.subtitle,
            "windows": [w.to_dict() for w in self.windows],
            "timeOptions": list(self.time_options),
            "weekdayAvailability": [a.to_dict() for a in self.weekday_availability],
            "suggestedLessons": self.suggested_lessons,
            "suggestedPricePerLesson": self.suggested_price_per_lesson,
            "suggestedDurationMinutes": self.suggested_duration_minutes,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "TermTemplate":
        return cls(
            id=_str(d.get("id")) or new_id(),
            title=_str(d.get("title")),
            subtitle=_str(d.get("subtitle")),
            windows=_windows_from(d.get("windows")),
            time_options=[t for t in _list(d.get("timeOptions")) if isinstance(t, str)],
            weekday_availability=[
                WeekdayAvailability.from_dict(a)
                for a in _list(d.get("weekdayAvailability"))
                if isinstance(a, dict)
            ],
            suggested_lessons=_int(d.get("suggestedLessons"), 12),
            suggested_price_per_lesson=_int(d.get("suggestedPricePerLesson"), 220),
            suggested_duration_minutes=_int(d.get("suggestedDurationMinutes"), 120),
        )


@dataclass
class AppSettings:
    """Application-wide settings, including the holiday calendar."""

    currency_code: str = "CNY"
    accent_hex: str = "#2A7BFF"
    skip_holidays_by_default: bool = True
    app_language: AppLanguage = AppLanguage.ZH_HANS
    export_enabled: bool = False
    import_enabled: bool = False
    holiday_ranges: List[HolidayRange] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "currencyCode": self.currency_code,
            "accentHex": self.accent_hex,
            "skipHolidaysByDefault": self.skip_holidays_by_default,
            "appLanguage": self.app_language.value,
            "exportEnabled": self.export_enabled,
            "importEnabled": self.import_enabled,
            "holidayRanges": [h.to_dict() for h in self.holiday_ranges],
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "AppSettings":
        defaults = cls()
        holidays = (
            HolidayRange.from_dict(h)
            for h in _list(d.get("holidayRanges"))
            if isinstance(h, dict)
        )
        return cls(
            currency_code=_str(d.get("currencyCode"), defaults.currency_code),
            accent_hex=_str(d.get("accentHex"), defaults.accent_hex),
            skip_holidays_by_default=_bool(
                d.get("skipHolidaysByDefault"), defaults.skip_holidays_by_default
            ),
            app_language=_enum_value(AppLanguage, d.get("appLanguage"), defaults.app_language),
            export_enabled=_bool(d.get("exportEnabled"), False),
            import_enabled=_bool(d.get("importEnabled"), False),
            holiday_ranges=[h for h in holidays if h is not None],
        )


@dataclass
class AppState:
    """
    Aggregate root of the persisted document.

    Collection order carries no meaning beyond acting as a stable
    tiebreak.
    """

    teachers: List[Teacher] = field(default_factory=list)
    students: List[Student] = field(default_factory=list)
    enrollments: List[Enrollment] = field(default_factory=list)
    sessions: List[Session] = field(default_factory=list)
    templates: List[TermTemplate] = field(default_factory=list)
    settings: AppSettings = field(default_factory=AppSettings)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "teachers": [t.to_dict() for t in self.teachers],
            "students": [s.to_dict() for s in self.students],
            "enrollments": [e.to_dict() for e in self.enrollments],
            "sessions": [s.to_dict() for s in self.sessions],
            "templates": [t.to_dict() for t in self.templates],
            "settings": self.settings.to_dict(),
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "AppState":
        """
        Build an aggregate from a persisted document.

        Records that cannot be read (for example a session without a
        start timestamp) are dropped; everything else falls back to
        field defaults.
        """
        sessions = (
            Session.from_dict(s) for s in _list(d.get("sessions")) if isinstance(s, dict)
        )
        settings = d.get("settings")
        return cls(
            teachers=[Teacher.from_dict(t) for t in _list(d.get("teachers")) if isinstance(t, dict)],
            students=[Student.from_dict(s) for s in _list(d.get("students")) if isinstance(s, dict)],
            enrollments=[
                Enrollment.from_dict(e) for e in _list(d.get("enrollments")) if isinstance(e, dict)
            ],
            sessions=[s for s in sessions if s is not None],
            templates=[
                TermTemplate.from_dict(t) for t in _list(d.get("templates")) if isinstance(t, dict)
            ],
            settings=AppSettings.from_dict(settings) if isinstance(settings, dict) else AppSettings(),
        )

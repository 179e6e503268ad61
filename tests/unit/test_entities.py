"""
Unit tests for domain entities and their dictionary conversion.
"""

from datetime import date, datetime, timedelta

from tutordesk.models.entities import (
    AppLanguage,
    AppSettings,
    AppState,
    DateWindow,
    Enrollment,
    HolidayRange,
    Session,
    SessionStatus,
    Student,
    Teacher,
    TermTemplate,
    WeekdayAvailability,
    new_id,
)


class TestIdentity:
    """Test cases for identities."""

    def test_new_ids_are_unique(self):
        """Test generated identities never collide."""
        assert len({new_id() for _ in range(100)}) == 100

    def test_records_get_distinct_ids(self):
        """Test default identities differ between instances."""
        assert Student(name="A").id != Student(name="A").id


class TestEnrollment:
    """Test cases for Enrollment."""

    def test_defaults(self):
        """Test package defaults."""
        enrollment = Enrollment(student_id="s")

        assert enrollment.title == "Phase"
        assert enrollment.price_per_lesson == 220
        assert enrollment.planned_lessons == 12
        assert enrollment.duration_minutes == 120
        assert enrollment.time_hhmm == "18:30"
        assert enrollment.weekdays == set()
        assert enrollment.skip_holidays

    def test_resolved_window(self):
        """Test selected_window_id lookup."""
        window = DateWindow(name="W", start=date(2026, 1, 1), end=date(2026, 1, 2))
        enrollment = Enrollment(student_id="s", windows=[window])

        assert enrollment.resolved_window() is None

        enrollment.selected_window_id = window.id
        assert enrollment.resolved_window() is window

        enrollment.selected_window_id = "missing"
        assert enrollment.resolved_window() is None

    def test_from_dict_ignores_bad_weekdays_and_windows(self):
        """Test malformed entries are dropped rather than failing the load."""
        enrollment = Enrollment.from_dict({
            "studentID": "s",
            "weekdays": [1, "2", True, 7],
            "windows": [
                {"name": "ok", "start": "2026-01-23", "end": "2026-01-29"},
                {"name": "broken", "start": "soon"},
                "not a window",
            ],
            "plannedLessons": "many",
        })

        assert enrollment.weekdays == {1, 7}
        assert [w.name for w in enrollment.windows] == ["ok"]
        assert enrollment.planned_lessons == 12

    def test_from_dict_non_finite_numbers_use_defaults(self):
        """Test NaN and infinities read from JSON fall back to field defaults."""
        enrollment = Enrollment.from_dict({
            "studentID": "s",
            "totalPaid": float("nan"),
            "plannedLessons": float("inf"),
            "durationMinutes": float("-inf"),
            "pricePerLesson": 250.0,
        })

        assert enrollment.total_paid == 0
        assert enrollment.planned_lessons == 12
        assert enrollment.duration_minutes == 120
        assert enrollment.price_per_lesson == 250

    def test_from_dict_accepts_timestamp_dates(self):
        """Test dates written as timestamps keep their calendar day."""
        enrollment = Enrollment.from_dict({
            "studentID": "s",
            "startDate": "2026-03-01T00:00:00",
            "endDate": "2026-03-10",
        })

        assert enrollment.start_date == date(2026, 3, 1)
        assert enrollment.end_date == date(2026, 3, 10)


class TestSession:
    """Test cases for Session."""

    def test_end_at(self):
        """Test end timestamp derives from duration."""
        session = Session(student_id="s", start_at=datetime(2026, 1, 23, 23, 0), duration_minutes=120)

        assert session.end_at == datetime(2026, 1, 24, 1, 0)
        assert session.end_at - session.start_at == timedelta(hours=2)

    def test_from_dict_requires_start(self):
        """Test sessions without a readable start are rejected."""
        assert Session.from_dict({"studentID": "s"}) is None
        assert Session.from_dict({"studentID": "s", "startAt": "tomorrow"}) is None

    def test_from_dict_unknown_status(self):
        """Test unknown status values fall back to planned."""
        session = Session.from_dict({"studentID": "s", "startAt": "2026-01-23T18:30:00", "status": "late"})

        assert session.status == SessionStatus.PLANNED


class TestSettingsAndState:
    """Test cases for AppSettings and AppState."""

    def test_settings_defaults(self):
        """Test settings defaults."""
        settings = AppSettings()

        assert settings.currency_code == "CNY"
        assert settings.skip_holidays_by_default
        assert settings.app_language == AppLanguage.ZH_HANS
        assert not settings.export_enabled
        assert settings.holiday_ranges == []

    def test_settings_from_dict(self):
        """Test language and holiday decoding."""
        settings = AppSettings.from_dict({
            "appLanguage": "klingon",
            "exportEnabled": True,
            "holidayRanges": [
                {"name": "H", "start": "2026-10-01", "end": "2026-10-07"},
                {"name": "bad"},
            ],
        })

        assert settings.app_language == AppLanguage.ZH_HANS
        assert settings.export_enabled
        assert [h.name for h in settings.holiday_ranges] == ["H"]

    def test_holiday_contains_is_inclusive(self):
        """Test both bounds are inside the range."""
        holiday = HolidayRange(name="H", start=date(2026, 10, 1), end=date(2026, 10, 7))

        assert holiday.contains(date(2026, 10, 1))
        assert holiday.contains(date(2026, 10, 7))
        assert not holiday.contains(date(2026, 10, 8))

    def test_state_round_trip_through_dict(self):
        """Test every collection survives conversion."""
        teacher = Teacher(display_name="T", contact="t@example.com")
        template = TermTemplate(
            title="Spring",
            time_options=["18:30–20:30"],
            weekday_availability=[WeekdayAvailability(weekday=2, time_ranges=["18:30–20:30"])],
        )
        state = AppState(teachers=[teacher], students=[Student(name="A", teacher_id=teacher.id)], templates=[template])

        restored = AppState.from_dict(state.to_dict())

        assert restored == state

    def test_empty_document(self):
        """Test an empty document is an empty roster."""
        state = AppState.from_dict({})

        assert state.students == []
        assert state.settings == AppSettings()

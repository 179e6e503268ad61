"""
Default roster used on first launch.

Seeds one teacher, the 2026 public-holiday calendar, two term templates
(a windowed winter break and a weekly spring term), and a demo student
with a winter enrollment.
"""

from ..models.entities import (
    AppState,
    DateWindow,
    Enrollment,
    HolidayRange,
    Student,
    Teacher,
    TermTemplate,
    WeekdayAvailability,
)
from ..utils.timeutils import make_date


WINTER_TIME_OPTIONS = [
    "08:30–10:30",
    "10:40–12:40",
    "13:30–15:30",
    "15:50–17:50",
    "18:30–20:30",
]


def default_holidays() -> list:
    return [
        HolidayRange(name="元旦", start=make_date(2026, 1, 1), end=make_date(2026, 1, 3)),
        HolidayRange(name="春节", start=make_date(2026, 2, 15), end=make_date(2026, 2, 23)),
        HolidayRange(name="清明节", start=make_date(2026, 4, 4), end=make_date(2026, 4, 6)),
        HolidayRange(name="劳动节", start=make_date(2026, 5, 1), end=make_date(2026, 5, 5)),
        HolidayRange(name="端午节", start=make_date(2026, 6, 19), end=make_date(2026, 6, 21)),
        HolidayRange(name="中秋节", start=make_date(2026, 9, 25), end=make_date(2026, 9, 27)),
        HolidayRange(name="国庆节", start=make_date(2026, 10, 1), end=make_date(2026, 10, 7)),
    ]


def winter_windows() -> list:
    return [
        DateWindow(name="一期", start=make_date(2026, 1, 23), end=make_date(2026, 1, 29)),
        DateWindow(name="二期", start=make_date(2026, 1, 31), end=make_date(2026, 2, 6)),
        DateWindow(name="三期", start=make_date(2026, 2, 8), end=make_date(2026, 2, 14)),
        DateWindow(name="四期", start=make_date(2026, 2, 22), end=make_date(2026, 2, 28)),
    ]


def make_default_state() -> AppState:
    """Build the first-launch aggregate."""
    state = AppState()

    teacher = Teacher(
        display_name="Lead Instructor",
        headline="TutorDesk · Lead Instructor",
        bio=(
            "Hello! This is your teacher profile.\n\n"
            "• 5+ years teaching experience\n"
            "• Math + Programming (OI / NOIP / GESP)\n"
            "• Online sessions + personalized plans\n\n"
            "Edit this section like a personal blog."
        ),
    )
    state.teachers = [teacher]
    state.settings.skip_holidays_by_default = True
    state.settings.currency_code = "CNY"
    state.settings.holiday_ranges = default_holidays()

    windows = winter_windows()

    winter = TermTemplate(
        title="Winter Break 2026",
        subtitle="4 windows · choose your time slot",
        windows=windows,
        time_options=list(WINTER_TIME_OPTIONS),
        suggested_lessons=7,
        suggested_price_per_lesson=220,
        suggested_duration_minutes=120,
    )

    spring = TermTemplate(
        title="Spring 2026",
        subtitle="weekly availability (start date TBD)",
        weekday_availability=[
            WeekdayAvailability(weekday=2, time_ranges=["18:30–20:30"], note="可灵活调整", status="暂时空闲"),
            WeekdayAvailability(weekday=3, time_ranges=["18:30–20:30"], note="可灵活调整", status="暂时空闲"),
            WeekdayAvailability(weekday=4, time_ranges=["18:30–20:30"], note="可灵活调整", status="暂时空闲"),
            WeekdayAvailability(
                weekday=1,
                time_ranges=["08:30–10:30", "18:30–20:30"],
                note="可灵活调整",
                status="暂时空闲",
            ),
        ],
        suggested_lessons=17,
        suggested_price_per_lesson=220,
        suggested_duration_minutes=120,
    )
    state.templates = [winter, spring]

    student = Student(
        name="Demo Student",
        grade="G8",
        notes="You can delete this.",
        teacher_id=teacher.id,
    )
    state.students = [student]

    state.enrollments = [
        Enrollment(
            student_id=student.id,
            teacher_id=teacher.id,
            title="Winter Break 2026",
            price_per_lesson=220,
            planned_lessons=7,
            total_paid=0,
            duration_minutes=120,
            windows=[DateWindow(name=w.name, start=w.start, end=w.end, id=w.id) for w in windows],
            time_hhmm="18:30",
            skip_holidays=True,
        )
    ]

    return state

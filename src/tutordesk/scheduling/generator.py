"""
Recurring session generator.

Expands an enrollment's scheduling rules into concrete dated lessons:

1. Sessions that already belong to the enrollment count toward the
   quota regardless of status (canceled slots are never refilled).
2. Candidate ranges are, in priority order: the selected window, all
   windows in stored order, the explicit start/end dates.
3. Each range is walked day by day; days outside the weekday filter or
   inside a holiday blackout are skipped.
4. Generation stops as soon as the quota is met.

The generator is pure: it never mutates its inputs and the caller
appends the returned sessions.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from ..models.entities import Enrollment, HolidayRange, Session, SessionStatus
from ..utils.timeutils import add_days, compose_datetime, weekday_number


logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    """
    Outcome of a generation run.

    Attributes:
        sessions: Newly materialized sessions, in date order per range
        exhausted: True when the configured ranges could not yield
            enough days to reach the planned lesson count, including
            when no date source is configured at all

    Examples:
        >>> created, exhausted = generate_sessions(enrollment, [], holidays)
    """

    sessions: List[Session] = field(default_factory=list)
    exhausted: bool = False

    @property
    def added(self) -> int:
        return len(self.sessions)

    def __iter__(self) -> Iterator:
        return iter((self.sessions, self.exhausted))


def is_holiday(day: date, holidays: Iterable[HolidayRange]) -> bool:
    """Whether a day falls inside any holiday range, bounds inclusive."""
    return any(h.start <= day <= h.end for h in holidays)


def candidate_ranges(enrollment: Enrollment) -> List[Tuple[date, date]]:
    """
    Date ranges the generator walks for an enrollment.

    Returns:
        List of inclusive (start, end) pairs; empty when no date source
        is configured
    """
    if enrollment.windows:
        selected = enrollment.resolved_window()
        if selected is not None:
            return [(selected.start, selected.end)]
        return [(w.start, w.end) for w in enrollment.windows]

    if enrollment.start_date is not None and enrollment.end_date is not None:
        return [(enrollment.start_date, enrollment.end_date)]

    return []


def generate_sessions(
    enrollment: Enrollment,
    existing_sessions: Sequence[Session],
    holidays: Sequence[HolidayRange],
    student_teacher_id: Optional[str] = None,
    selected_teacher_id: Optional[str] = None
) -> GenerationResult:
    """
    Generate the missing sessions of an enrollment.

    Args:
        enrollment: Enrollment whose rules are expanded
        existing_sessions: Sessions already belonging to the enrollment
        holidays: Holiday blackout calendar
        student_teacher_id: Teacher bound to the enrollment's student
        selected_teacher_id: Currently selected teacher, last fallback

    Returns:
        GenerationResult with the new sessions and the exhaustion flag
    """
    already = len(existing_sessions)
    if already >= enrollment.planned_lessons:
        return GenerationResult()

    ranges = candidate_ranges(enrollment)
    if not ranges:
        logger.info(f"Enrollment {enrollment.id} has no windows or dates to generate from")
        return GenerationResult(exhausted=True)

    teacher_id = enrollment.teacher_id or student_teacher_id or selected_teacher_id
    weekdays = set(enrollment.weekdays)
    need = enrollment.planned_lessons - already
    created: List[Session] = []

    for start, end in ranges:
        day = start
        while day <= end and need > 0:
            if weekdays and weekday_number(day) not in weekdays:
                day = add_days(day, 1)
                continue
            if enrollment.skip_holidays and is_holiday(day, holidays):
                day = add_days(day, 1)
                continue

            created.append(Session(
                student_id=enrollment.student_id,
                teacher_id=teacher_id,
                enrollment_id=enrollment.id,
                start_at=compose_datetime(day, enrollment.time_hhmm),
                duration_minutes=enrollment.duration_minutes,
                status=SessionStatus.PLANNED,
                meeting_link=enrollment.meeting_link,
            ))
            need -= 1
            day = add_days(day, 1)

        if need == 0:
            break

    logger.debug(
        f"Generated {len(created)} sessions for enrollment {enrollment.id} "
        f"(already={already}, remaining={need})"
    )
    return GenerationResult(sessions=created, exhausted=need > 0)

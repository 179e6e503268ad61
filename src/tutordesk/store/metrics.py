"""
Derived enrollment metrics.

Pure functions of an enrollment and its sessions; sessions belonging to
other enrollments are ignored, so callers may pass an unfiltered list.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List

from ..models.entities import Enrollment, Session, SessionStatus


def _own(enrollment: Enrollment, sessions: Iterable[Session]) -> List[Session]:
    return [s for s in sessions if s.enrollment_id == enrollment.id]


def used_lessons(enrollment: Enrollment, sessions: Iterable[Session]) -> int:
    """Lessons consumed: sessions marked attended."""
    return sum(1 for s in _own(enrollment, sessions) if s.status == SessionStatus.ATTENDED)


def planned_count(enrollment: Enrollment, sessions: Iterable[Session]) -> int:
    """Sessions on the calendar that are not canceled."""
    return sum(1 for s in _own(enrollment, sessions) if s.status != SessionStatus.CANCELED)


def remaining_lessons(enrollment: Enrollment, sessions: Iterable[Session]) -> int:
    return max(0, enrollment.planned_lessons - used_lessons(enrollment, sessions))


def total_price(enrollment: Enrollment) -> int:
    return enrollment.planned_lessons * enrollment.price_per_lesson


def remaining_amount(enrollment: Enrollment, sessions: Iterable[Session]) -> int:
    """Value of the lessons not yet consumed."""
    return max(0, remaining_lessons(enrollment, sessions) * enrollment.price_per_lesson)


def unpaid_amount(enrollment: Enrollment) -> int:
    return max(0, total_price(enrollment) - enrollment.total_paid)


@dataclass
class EnrollmentMetrics:
    """
    Snapshot of every derived figure for one enrollment.

    Examples:
        >>> m = EnrollmentMetrics.compute(enrollment, store.state.sessions)
        >>> print(f"{m.used_lessons}/{enrollment.planned_lessons} used, {m.unpaid_amount} due")
    """

    used_lessons: int
    planned_count: int
    remaining_lessons: int
    total_price: int
    remaining_amount: int
    unpaid_amount: int

    @classmethod
    def compute(cls, enrollment: Enrollment, sessions: Iterable[Session]) -> "EnrollmentMetrics":
        own = _own(enrollment, sessions)
        return cls(
            used_lessons=used_lessons(enrollment, own),
            planned_count=planned_count(enrollment, own),
            remaining_lessons=remaining_lessons(enrollment, own),
            total_price=total_price(enrollment),
            remaining_amount=remaining_amount(enrollment, own),
            unpaid_amount=unpaid_amount(enrollment),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "used_lessons": self.used_lessons,
            "planned_count": self.planned_count,
            "remaining_lessons": self.remaining_lessons,
            "total_price": self.total_price,
            "remaining_amount": self.remaining_amount,
            "unpaid_amount": self.unpaid_amount,
        }

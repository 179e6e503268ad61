"""
Shared fixtures for store tests.
"""

from datetime import date, datetime

import pytest

from tutordesk.models.entities import AppState, DateWindow, Enrollment, Session
from tutordesk.persistence.gateway import InMemoryPersistence
from tutordesk.store.app_store import AppStore


@pytest.fixture
def gateway():
    """In-memory gateway holding an empty roster."""
    return InMemoryPersistence(AppState().to_dict())


@pytest.fixture
def store(gateway):
    """Store over an empty roster with a long autosave delay."""
    store = AppStore(gateway, save_delay=60)
    yield store
    store.save()


@pytest.fixture
def winter_enrollment():
    """Seven lessons in a single window, Jan 23 to Jan 29 2026."""
    return Enrollment(
        student_id="student-1",
        title="Winter",
        planned_lessons=7,
        duration_minutes=120,
        time_hhmm="18:30",
        windows=[DateWindow(name="W1", start=date(2026, 1, 23), end=date(2026, 1, 29))],
        weekdays=set(),
        skip_holidays=False,
    )


def make_session(student_id, enrollment_id=None, start_at=None, **kwargs):
    return Session(
        student_id=student_id,
        enrollment_id=enrollment_id,
        start_at=start_at or datetime(2026, 1, 23, 18, 30),
        **kwargs
    )


def assert_selections_live(store):
    """Every selection is either empty or points at a live record."""
    s = store.state
    pairs = [
        (store.selected_teacher_id, {t.id for t in s.teachers}),
        (store.selected_student_id, {st.id for st in s.students}),
        (store.selected_enrollment_id, {e.id for e in s.enrollments}),
        (store.selected_session_id, {ss.id for ss in s.sessions}),
    ]
    for selected, live in pairs:
        assert selected is None or selected in live

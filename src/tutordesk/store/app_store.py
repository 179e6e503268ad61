"""
Domain store for the tutor roster.

AppStore owns the single AppState plus the UI's current selections
(teacher, student, enrollment, session) and the active section. Every
mutation:
- keeps foreign keys consistent (deleting a student removes its
  enrollments and sessions; deleting an enrollment removes its sessions)
- leaves each selection either empty or pointing at a live record,
  moving it to the nearest neighbour when the selected record is deleted
- notifies subscribers once and schedules a debounced save
"""

import copy
import functools
import logging
import threading
from datetime import date, datetime
from pathlib import Path
from typing import Callable, List, Optional, Sequence, TypeVar

from ..models.entities import (
    AppSettings,
    AppState,
    DateWindow,
    Enrollment,
    Session,
    SessionStatus,
    SidebarItem,
    Student,
    Teacher,
    TermTemplate,
)
from ..models.result import Result
from ..persistence.export import export_sessions_csv
from ..persistence.gateway import PersistenceGateway
from ..persistence.seed import make_default_state
from ..scheduling.generator import GenerationResult, generate_sessions, is_holiday
from ..utils.timeutils import (
    DEFAULT_HHMM,
    add_days,
    as_date,
    compose_datetime,
    duration_from_range,
    parse_time_range_option,
    range_option_start,
    start_of_day,
)
from ..validation import EnrollmentValidator, ValidationResult
from .debounce import Debouncer
from .metrics import EnrollmentMetrics
from . import metrics


logger = logging.getLogger(__name__)

DEFAULT_SAVE_DELAY = 0.45  # seconds

Subscriber = Callable[["AppStore"], None]
F = TypeVar("F", bound=Callable)


def mutation(method: F) -> F:
    """
    Mark a public store operation that changes persisted state.

    Nested operations (toggle_attendance calling upsert_session) notify
    and schedule a save only once, when the outermost call returns.
    """
    @functools.wraps(method)
    def wrapper(self: "AppStore", *args, **kwargs):
        with self._lock:
            self._depth += 1
            try:
                result = method(self, *args, **kwargs)
            finally:
                self._depth -= 1
            outermost = self._depth == 0

        if outermost:
            self._changed(persist=True)
        return result

    return wrapper  # type: ignore[return-value]


def enrollment_sort_key(enrollment: Enrollment):
    """Display order of enrollments: title, then identity to break ties."""
    return enrollment.title, enrollment.id


def ordered_enrollments(enrollments: Sequence[Enrollment]) -> List[Enrollment]:
    return sorted(enrollments, key=enrollment_sort_key)


def _index_of(items: Sequence, item_id: str) -> Optional[int]:
    for idx, item in enumerate(items):
        if item.id == item_id:
            return idx
    return None


def _nearest(items: Sequence, old_index: Optional[int]) -> Optional[str]:
    """
    Identity to select after the selected item was removed.

    Args:
        items: Remaining items, in display order
        old_index: Position of the removed item before deletion
    """
    if not items:
        return None
    if old_index is None:
        return items[0].id
    return items[min(old_index, len(items) - 1)].id


def _replace_or_append(items: List, record) -> None:
    idx = _index_of(items, record.id)
    if idx is None:
        items.append(record)
    else:
        items[idx] = record


class AppStore:
    """
    In-memory roster store with selection tracking and autosave.

    Attributes:
        gateway: Persistence used at startup and by the autosave
        state: Current aggregate (read-only for callers; mutate through
            the store's operations)

    Examples:
        >>> store = AppStore(JsonFilePersistence(config.data_file))
        >>> unsubscribe = store.subscribe(lambda s: view.refresh())
        >>> student = store.add_student("Alice")
        >>> enrollment = store.add_enrollment(student.id, store.state.templates[0])
        >>> result = store.generate_sessions(enrollment.id)
        >>> if result.exhausted:
        ...     print("Not enough days in the selected windows")
        >>> store.close()
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        save_delay: float = DEFAULT_SAVE_DELAY
    ):
        """
        Initialize the store and load persisted state.

        Args:
            gateway: Persistence gateway
            save_delay: Autosave quiet period in seconds
        """
        self.gateway = gateway

        self._state = AppState()
        self._sidebar = SidebarItem.SCHEDULE
        self._selected_teacher_id: Optional[str] = None
        self._selected_student_id: Optional[str] = None
        self._selected_enrollment_id: Optional[str] = None
        self._selected_session_id: Optional[str] = None

        self._subscribers: List[Subscriber] = []
        self._lock = threading.RLock()
        self._depth = 0
        self._autosave = Debouncer(save_delay, self._save_latest)

        self.load()

    # State and selections

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def sidebar(self) -> SidebarItem:
        return self._sidebar

    @sidebar.setter
    def sidebar(self, item: SidebarItem):
        self._sidebar = item
        self._changed(persist=False)

    @property
    def selected_teacher_id(self) -> Optional[str]:
        return self._selected_teacher_id

    @property
    def selected_student_id(self) -> Optional[str]:
        return self._selected_student_id

    @property
    def selected_enrollment_id(self) -> Optional[str]:
        return self._selected_enrollment_id

    @property
    def selected_session_id(self) -> Optional[str]:
        return self._selected_session_id

    def select_teacher(self, teacher_id: Optional[str]) -> bool:
        """Select a teacher (None clears). Unknown ids are ignored."""
        return self._select("_selected_teacher_id", teacher_id, self.teacher)

    def select_student(self, student_id: Optional[str]) -> bool:
        return self._select("_selected_student_id", student_id, self.student)

    def select_enrollment(self, enrollment_id: Optional[str]) -> bool:
        return self._select("_selected_enrollment_id", enrollment_id, self.enrollment)

    def select_session(self, session_id: Optional[str]) -> bool:
        return self._select("_selected_session_id", session_id, self.session)

    def _select(self, attr: str, record_id: Optional[str], lookup: Callable) -> bool:
        if record_id is not None and lookup(record_id) is None:
            logger.debug(f"Ignoring selection of unknown record {record_id}")
            return False
        setattr(self, attr, record_id)
        self._changed(persist=False)
        return True

    # Observers

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Register a change callback.

        Args:
            callback: Called with the store after every change

        Returns:
            Function that removes the callback
        """
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _changed(self, persist: bool):
        for callback in list(self._subscribers):
            try:
                callback(self)
            except Exception as e:
                logger.error(f"Store subscriber {callback!r} failed: {e}", exc_info=True)

        if persist:
            self._autosave.trigger()

    # Persistence

    def load(self):
        """
        Load persisted state, seeding and saving a default when absent.

        A gateway that raises is treated the same as one with no saved
        roster.
        """
        try:
            loaded = self.gateway.load()
        except Exception as e:
            logger.error(f"Loading roster failed: {e}", exc_info=True)
            loaded = None

        if loaded is not None:
            self._state = loaded
            logger.info(
                f"Loaded roster: {len(loaded.students)} students, "
                f"{len(loaded.enrollments)} enrollments, {len(loaded.sessions)} sessions"
            )
            self._normalize_selections()
        else:
            logger.info("No saved roster found, seeding defaults")
            self._state = make_default_state()
            self._normalize_selections()
            self.save()

    def save(self) -> Result[Optional[Path]]:
        """Save immediately, superseding any pending autosave."""
        self._autosave.cancel()
        return self._write()

    def close(self):
        """Write any pending autosave before shutdown."""
        self._autosave.flush()

    @property
    def has_pending_save(self) -> bool:
        return self._autosave.is_pending

    def _save_latest(self):
        self._write()

    def _write(self) -> Result[Optional[Path]]:
        # Snapshot at write time; the autosave runs on a timer thread
        with self._lock:
            snapshot = copy.deepcopy(self._state)

        try:
            result = self.gateway.save(snapshot)
        except Exception as e:
            logger.error(f"Saving roster failed: {e}", exc_info=True)
            return Result.failure("Saving roster failed", e)

        if result.is_failure:
            logger.warning(f"Roster not saved: {result.message}")
        return result

    def _normalize_selections(self):
        s = self._state
        for attr, items in (
            ("_selected_teacher_id", s.teachers),
            ("_selected_student_id", s.students),
            ("_selected_enrollment_id", s.enrollments),
            ("_selected_session_id", s.sessions),
        ):
            current = getattr(self, attr)
            if current is None or _index_of(items, current) is None:
                setattr(self, attr, items[0].id if items else None)

    # Lookups

    def teacher(self, teacher_id: Optional[str]) -> Optional[Teacher]:
        return self._find(self._state.teachers, teacher_id)

    def student(self, student_id: Optional[str]) -> Optional[Student]:
        return self._find(self._state.students, student_id)

    def enrollment(self, enrollment_id: Optional[str]) -> Optional[Enrollment]:
        return self._find(self._state.enrollments, enrollment_id)

    def session(self, session_id: Optional[str]) -> Optional[Session]:
        return self._find(self._state.sessions, session_id)

    @staticmethod
    def _find(items: Sequence, record_id: Optional[str]):
        if record_id is None:
            return None
        idx = _index_of(items, record_id)
        return items[idx] if idx is not None else None

    def sessions_for_student(self, student_id: str) -> List[Session]:
        return sorted(
            (s for s in self._state.sessions if s.student_id == student_id),
            key=lambda s: s.start_at
        )

    def sessions_for_enrollment(self, enrollment_id: str) -> List[Session]:
        return sorted(
            (s for s in self._state.sessions if s.enrollment_id == enrollment_id),
            key=lambda s: s.start_at
        )

    def sessions_on(self, day: date) -> List[Session]:
        """Sessions starting on a calendar day, in start order."""
        d0 = start_of_day(day)
        d1 = start_of_day(add_days(as_date(day), 1))
        return sorted(
            (s for s in self._state.sessions if d0 <= s.start_at < d1),
            key=lambda s: s.start_at
        )

    def ordered_enrollments(self) -> List[Enrollment]:
        """Enrollments in display order (title, then identity)."""
        return ordered_enrollments(self._state.enrollments)

    # Derived metrics

    def used_lessons(self, enrollment_id: str) -> int:
        e = self.enrollment(enrollment_id)
        return metrics.used_lessons(e, self._state.sessions) if e else 0

    def planned_count(self, enrollment_id: str) -> int:
        e = self.enrollment(enrollment_id)
        return metrics.planned_count(e, self._state.sessions) if e else 0

    def remaining_lessons(self, enrollment: Enrollment) -> int:
        return metrics.remaining_lessons(enrollment, self._state.sessions)

    def total_price(self, enrollment: Enrollment) -> int:
        return metrics.total_price(enrollment)

    def remaining_amount(self, enrollment: Enrollment) -> int:
        return metrics.remaining_amount(enrollment, self._state.sessions)

    def unpaid_amount(self, enrollment: Enrollment) -> int:
        return metrics.unpaid_amount(enrollment)

    def enrollment_metrics(self, enrollment: Enrollment) -> EnrollmentMetrics:
        return EnrollmentMetrics.compute(enrollment, self._state.sessions)

    # Teachers

    @mutation
    def upsert_teacher(self, teacher: Teacher):
        """Insert or replace a teacher and select it."""
        _replace_or_append(self._state.teachers, teacher)
        self._selected_teacher_id = teacher.id

    # Students

    @mutation
    def add_student(self, name: str) -> Student:
        """
        Create a student bound to the selected teacher and select it.

        Also switches the active section to students.
        """
        student = Student(name=name, teacher_id=self._selected_teacher_id)
        self._state.students.append(student)
        self._selected_student_id = student.id
        self._sidebar = SidebarItem.STUDENTS
        logger.debug(f"Added student {student.id}")
        return student

    @mutation
    def upsert_student(self, student: Student):
        _replace_or_append(self._state.students, student)

    @mutation
    def delete_student(self, student_id: str):
        """
        Delete a student with its enrollments and sessions.

        A selected student moves to the one now at its former position
        (or the new last one); selected enrollments and sessions that
        were removed move to the first remaining one of the newly
        selected student, else the first overall.
        """
        s = self._state
        old_index = _index_of(s.students, student_id)

        removed_enrollments = {e.id for e in s.enrollments if e.student_id == student_id}
        removed_sessions = {ss.id for ss in s.sessions if ss.student_id == student_id}

        s.students = [st for st in s.students if st.id != student_id]
        s.enrollments = [e for e in s.enrollments if e.student_id != student_id]
        s.sessions = [ss for ss in s.sessions if ss.student_id != student_id]

        if self._selected_student_id == student_id:
            self._selected_student_id = _nearest(s.students, old_index)

        sid = self._selected_student_id

        if self._selected_enrollment_id in removed_enrollments:
            self._selected_enrollment_id = self._first_id(
                s.enrollments, lambda e: e.student_id == sid
            )

        if self._selected_session_id in removed_sessions:
            self._selected_session_id = self._first_id(
                s.sessions, lambda ss: ss.student_id == sid
            )

        if not s.students:
            self._selected_student_id = None
            self._selected_enrollment_id = None
            self._selected_session_id = None

        logger.debug(
            f"Deleted student {student_id} "
            f"({len(removed_enrollments)} enrollments, {len(removed_sessions)} sessions)"
        )

    @staticmethod
    def _first_id(items: Sequence, preferred: Callable) -> Optional[str]:
        """First item matching preferred, else the first item, else None."""
        for item in items:
            if preferred(item):
                return item.id
        return items[0].id if items else None

    # Enrollments

    @mutation
    def add_enrollment(
        self,
        student_id: str,
        template: Optional[TermTemplate] = None
    ) -> Optional[Enrollment]:
        """
        Create an enrollment for a student, optionally from a template.

        The new enrollment and its student become the selection and the
        active section switches to booking.

        Returns:
            The new enrollment, or None if the student does not exist
        """
        student = self.student(student_id)
        if student is None:
            logger.warning(f"Cannot add enrollment for unknown student {student_id}")
            return None

        enrollment = Enrollment(
            student_id=student_id,
            teacher_id=student.teacher_id or self._selected_teacher_id,
        )
        if template is not None:
            self._apply_template(enrollment, template)

        self._state.enrollments.append(enrollment)
        self._selected_student_id = student_id
        self._selected_enrollment_id = enrollment.id
        self._sidebar = SidebarItem.BOOKING
        return enrollment

    def _apply_template(self, enrollment: Enrollment, template: TermTemplate):
        enrollment.title = template.title
        enrollment.price_per_lesson = template.suggested_price_per_lesson
        enrollment.planned_lessons = template.suggested_lessons
        enrollment.duration_minutes = template.suggested_duration_minutes
        enrollment.windows = [
            DateWindow(name=w.name, start=w.start, end=w.end, id=w.id) for w in template.windows
        ]
        enrollment.skip_holidays = self._state.settings.skip_holidays_by_default
        enrollment.selected_window_id = None

        if not template.time_options:
            enrollment.time_hhmm = DEFAULT_HHMM
            return

        first = template.time_options[0]
        time_range = parse_time_range_option(first)
        if time_range is not None:
            start, end = time_range
            enrollment.time_hhmm = start
            enrollment.duration_minutes = duration_from_range(start, end, 30, 300, 10)
        else:
            enrollment.time_hhmm = range_option_start(first)

    @mutation
    def upsert_enrollment(self, enrollment: Enrollment):
        _replace_or_append(self._state.enrollments, enrollment)

    @mutation
    def delete_enrollment(self, enrollment_id: str):
        """
        Delete an enrollment and its sessions.

        The nearest-neighbour choice uses the display order
        (title, identity) captured before deletion, so the selection
        lands on the row visually adjacent to the deleted one. The
        student selection then follows the selected enrollment.
        """
        s = self._state
        old_index = _index_of(ordered_enrollments(s.enrollments), enrollment_id)
        removed_sessions = {ss.id for ss in s.sessions if ss.enrollment_id == enrollment_id}

        s.enrollments = [e for e in s.enrollments if e.id != enrollment_id]
        s.sessions = [ss for ss in s.sessions if ss.enrollment_id != enrollment_id]

        if self._selected_enrollment_id == enrollment_id:
            self._selected_enrollment_id = _nearest(ordered_enrollments(s.enrollments), old_index)

        selected = self.enrollment(self._selected_enrollment_id)
        if selected is not None:
            self._selected_student_id = selected.student_id

        if self._selected_session_id in removed_sessions:
            eid = self._selected_enrollment_id
            self._selected_session_id = self._first_id(
                s.sessions, lambda ss: eid is not None and ss.enrollment_id == eid
            )

        if not s.sessions:
            self._selected_session_id = None

        logger.debug(f"Deleted enrollment {enrollment_id} ({len(removed_sessions)} sessions)")

    # Sessions

    @mutation
    def add_session(
        self,
        student_id: str,
        enrollment_id: Optional[str],
        day: date,
        hhmm: str,
        duration: int
    ) -> Optional[Session]:
        """
        Add a single manual session and select it.

        Returns:
            The new session, or None if the student does not exist
        """
        student = self.student(student_id)
        if student is None:
            logger.warning(f"Cannot add session for unknown student {student_id}")
            return None

        enrollment = self.enrollment(enrollment_id)
        session = Session(
            student_id=student_id,
            teacher_id=(
                (enrollment.teacher_id if enrollment else None)
                or student.teacher_id
                or self._selected_teacher_id
            ),
            enrollment_id=enrollment.id if enrollment else None,
            start_at=compose_datetime(day, hhmm),
            duration_minutes=duration,
            status=SessionStatus.PLANNED,
            meeting_link=enrollment.meeting_link if enrollment else "",
        )
        self._state.sessions.append(session)
        self._selected_session_id = session.id
        return session

    @mutation
    def upsert_session(self, session: Session):
        _replace_or_append(self._state.sessions, session)

    @mutation
    def delete_session(self, session_id: str):
        s = self._state
        s.sessions = [ss for ss in s.sessions if ss.id != session_id]
        if self._selected_session_id == session_id or not s.sessions:
            self._selected_session_id = s.sessions[0].id if s.sessions else None

    @mutation
    def toggle_attendance(self, session_id: str):
        """Flip a session between attended and planned; missed and canceled stay as they are."""
        current = self.session(session_id)
        if current is None:
            return

        if current.status == SessionStatus.ATTENDED:
            status = SessionStatus.PLANNED
        elif current.status == SessionStatus.PLANNED:
            status = SessionStatus.ATTENDED
        else:
            return

        updated = Session(
            id=current.id,
            student_id=current.student_id,
            teacher_id=current.teacher_id,
            enrollment_id=current.enrollment_id,
            start_at=current.start_at,
            duration_minutes=current.duration_minutes,
            status=status,
            meeting_link=current.meeting_link,
            notes=current.notes,
        )
        self.upsert_session(updated)

    # Scheduling

    def is_holiday_blocked(self, day: date) -> bool:
        return is_holiday(as_date(day), self._state.settings.holiday_ranges)

    @mutation
    def generate_sessions(self, enrollment_id: str) -> GenerationResult:
        """
        Generate the missing sessions of an enrollment and append them.

        Returns:
            GenerationResult; an unknown enrollment reports exhausted
        """
        enrollment = self.enrollment(enrollment_id)
        if enrollment is None:
            return GenerationResult(exhausted=True)

        student = self.student(enrollment.student_id)
        result = generate_sessions(
            enrollment,
            self.sessions_for_enrollment(enrollment_id),
            self._state.settings.holiday_ranges,
            student_teacher_id=student.teacher_id if student else None,
            selected_teacher_id=self._selected_teacher_id,
        )
        self._state.sessions.extend(result.sessions)

        logger.info(
            f"Generated {result.added} sessions for '{enrollment.title}'"
            + (" (quota not reached)" if result.exhausted else "")
        )
        return result

    # Settings

    @mutation
    def update_settings(self, settings: AppSettings):
        self._state.settings = settings

    def validate_enrollment(self, enrollment_id: str) -> ValidationResult:
        enrollment = self.enrollment(enrollment_id)
        if enrollment is None:
            return ValidationResult().add_error(f"Unknown enrollment: {enrollment_id}")
        return EnrollmentValidator().validate(enrollment)

    def export_sessions(self, path: Path, student_id: Optional[str] = None) -> Result[Path]:
        """Export the schedule to CSV when exporting is enabled in settings."""
        if not self._state.settings.export_enabled:
            return Result.failure("Export is disabled in settings")
        return export_sessions_csv(self._state, path, student_id)

    # Quick actions

    def quick_add_student(self) -> Student:
        return self.add_student("New Student")

    def quick_add_session_for_selection(self) -> Optional[Session]:
        """
        Add an 18:30, two-hour session today for the selected student.

        Without a selected student, switches to the students section.
        """
        if self._selected_student_id is None:
            self.sidebar = SidebarItem.STUDENTS
            return None

        session = self.add_session(
            self._selected_student_id,
            self._selected_enrollment_id,
            datetime.now().date(),
            DEFAULT_HHMM,
            120,
        )
        self.sidebar = SidebarItem.BOOKING
        return session

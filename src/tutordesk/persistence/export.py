"""
Schedule export to CSV.

Flattens sessions into one row per lesson with resolved student,
teacher and enrollment names, sorted by start time.
"""

import logging
from pathlib import Path
from typing import Optional

import pandas as pd

from ..models.entities import AppState
from ..models.result import Result
from ..utils.file_utils import save_csv
from ..utils.timeutils import time_range_string


logger = logging.getLogger(__name__)


EXPORT_COLUMNS = [
    "date",
    "time",
    "student",
    "teacher",
    "enrollment",
    "status",
    "duration_minutes",
    "meeting_link",
    "notes",
]


def sessions_frame(state: AppState, student_id: Optional[str] = None) -> pd.DataFrame:
    """
    Build the export table.

    Args:
        state: Aggregate to export
        student_id: Restrict to one student's sessions

    Returns:
        DataFrame with EXPORT_COLUMNS, sorted by start time
    """
    students = {s.id: s.name for s in state.students}
    teachers = {t.id: t.display_name for t in state.teachers}
    enrollments = {e.id: e.title for e in state.enrollments}

    sessions = [
        s for s in state.sessions
        if student_id is None or s.student_id == student_id
    ]
    sessions.sort(key=lambda s: s.start_at)

    rows = [
        {
            "date": s.start_at.date().isoformat(),
            "time": time_range_string(s.start_at.strftime("%H:%M"), s.duration_minutes),
            "student": students.get(s.student_id, ""),
            "teacher": teachers.get(s.teacher_id, "") if s.teacher_id else "",
            "enrollment": enrollments.get(s.enrollment_id, "") if s.enrollment_id else "",
            "status": s.status.value,
            "duration_minutes": s.duration_minutes,
            "meeting_link": s.meeting_link,
            "notes": s.notes,
        }
        for s in sessions
    ]
    return pd.DataFrame(rows, columns=EXPORT_COLUMNS)


def export_sessions_csv(
    state: AppState,
    path: Path,
    student_id: Optional[str] = None
) -> Result[Path]:
    """
    Write the schedule to a CSV file.

    Returns:
        Result with the written path on success
    """
    df = sessions_frame(state, student_id)
    if not save_csv(df, Path(path)):
        return Result.failure(f"Failed to export schedule to {path}")

    logger.info(f"Exported {len(df)} sessions to {path}")
    return Result.success(Path(path), f"Exported {len(df)} sessions")

"""
Unit tests for the JSON document gateway and file helpers.
"""

import json
from datetime import date, datetime

from tutordesk.models.entities import (
    AppState,
    DateWindow,
    Enrollment,
    Session,
    SessionStatus,
    Student,
)
from tutordesk.persistence.gateway import InMemoryPersistence, JsonFilePersistence
from tutordesk.persistence.seed import default_holidays, make_default_state
from tutordesk.store.app_store import AppStore
from tutordesk.utils.file_utils import load_json, save_json


def sample_state() -> AppState:
    student = Student(name="张三", grade="G8")
    enrollment = Enrollment(
        student_id=student.id,
        title="Winter",
        windows=[DateWindow(name="一期", start=date(2026, 1, 23), end=date(2026, 1, 29))],
        weekdays={7, 1},
    )
    session = Session(
        student_id=student.id,
        enrollment_id=enrollment.id,
        start_at=datetime(2026, 1, 23, 18, 30),
        status=SessionStatus.ATTENDED,
    )
    return AppState(students=[student], enrollments=[enrollment], sessions=[session])


class TestJsonFilePersistence:
    """Test cases for JsonFilePersistence."""

    def test_save_then_load(self, tmp_path):
        """Test a saved aggregate loads back equal."""
        gateway = JsonFilePersistence(tmp_path / "data.json")
        state = sample_state()

        result = gateway.save(state)
        loaded = gateway.load()

        assert result.is_success
        assert result.value == tmp_path / "data.json"
        assert loaded.to_dict() == state.to_dict()
        assert loaded.enrollments[0].weekdays == {1, 7}

    def test_document_keys_and_formats(self, tmp_path):
        """Test camelCase keys, ISO dates and readable unicode."""
        path = tmp_path / "data.json"
        JsonFilePersistence(path).save(sample_state())

        text = path.read_text(encoding="utf-8")
        document = json.loads(text)
        enrollment = document["enrollments"][0]
        session = document["sessions"][0]

        assert "张三" in text
        assert enrollment["studentID"] == document["students"][0]["id"]
        assert enrollment["windows"][0]["start"] == "2026-01-23"
        assert enrollment["weekdays"] == [1, 7]
        assert enrollment["timeHHmm"] == "18:30"
        assert session["startAt"] == "2026-01-23T18:30:00"
        assert session["status"] == "attended"

    def test_keys_are_sorted(self, tmp_path):
        """Test successive saves produce stable key order."""
        path = tmp_path / "data.json"
        JsonFilePersistence(path).save(sample_state())

        document = json.loads(path.read_text(encoding="utf-8"))

        assert list(document) == sorted(document)
        assert list(document["settings"]) == sorted(document["settings"])

    def test_missing_file_loads_none(self, tmp_path):
        """Test an absent document means no prior state."""
        assert JsonFilePersistence(tmp_path / "nope.json").load() is None

    def test_corrupt_file_loads_none(self, tmp_path):
        """Test invalid JSON reads as no prior state."""
        path = tmp_path / "data.json"
        path.write_text("{not json", encoding="utf-8")

        assert JsonFilePersistence(path).load() is None

    def test_non_object_document_loads_none(self, tmp_path):
        """Test a JSON array is rejected."""
        path = tmp_path / "data.json"
        path.write_text("[1, 2]", encoding="utf-8")

        assert JsonFilePersistence(path).load() is None

    def test_unknown_and_missing_keys_tolerated(self, tmp_path):
        """Test partial documents decode with defaults."""
        path = tmp_path / "data.json"
        path.write_text(json.dumps({
            "students": [{"id": "s1", "name": "A", "favouriteColour": "blue"}],
            "sessions": [
                {"id": "x", "studentID": "s1", "startAt": "2026-01-23T18:30:00", "status": "???"},
                {"id": "y", "studentID": "s1"},
            ],
            "version": 3,
        }), encoding="utf-8")

        state = JsonFilePersistence(path).load()

        assert state.students[0].name == "A"
        assert [s.id for s in state.sessions] == ["x"]
        assert state.sessions[0].status == SessionStatus.PLANNED
        assert state.settings.currency_code == "CNY"

    def test_non_finite_numbers_fall_back_to_defaults(self, tmp_path):
        """Test NaN and Infinity in numeric fields do not discard the document."""
        path = tmp_path / "data.json"
        path.write_text(
            '{"students": [{"id": "s1", "name": "Keep me"}],'
            ' "enrollments": [{"id": "e1", "studentID": "s1",'
            ' "totalPaid": NaN, "plannedLessons": Infinity, "pricePerLesson": -Infinity}]}',
            encoding="utf-8"
        )

        state = JsonFilePersistence(path).load()

        assert [s.name for s in state.students] == ["Keep me"]
        enrollment = state.enrollments[0]
        assert enrollment.total_paid == 0
        assert enrollment.planned_lessons == 12
        assert enrollment.price_per_lesson == 220

    def test_save_leaves_no_temp_files(self, tmp_path):
        """Test the atomic write cleans up after itself."""
        gateway = JsonFilePersistence(tmp_path / "data.json")

        gateway.save(sample_state())
        gateway.save(sample_state())

        assert [p.name for p in tmp_path.iterdir()] == ["data.json"]

    def test_save_failure_is_reported(self, tmp_path):
        """Test an unwritable target returns a failure instead of raising."""
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")

        result = JsonFilePersistence(blocker / "data.json").save(sample_state())

        assert result.is_failure

    def test_failed_save_keeps_previous_document(self, tmp_path):
        """Test an encode failure does not touch the existing file."""
        path = tmp_path / "data.json"
        assert save_json({"a": 1}, path)

        assert not save_json({"a": object()}, path)
        assert load_json(path) == {"a": 1}
        assert [p.name for p in tmp_path.iterdir()] == ["data.json"]


class TestStoreOnDisk:
    """Test cases for a store backed by a file."""

    def test_first_launch_writes_seed(self, tmp_path):
        """Test a missing file is seeded and written."""
        path = tmp_path / "nested" / "data.json"

        store = AppStore(JsonFilePersistence(path), save_delay=60)

        assert path.exists()
        assert load_json(path)["students"][0]["name"] == "Demo Student"
        assert store.state.students[0].name == "Demo Student"

    def test_non_finite_field_does_not_overwrite_roster(self, tmp_path):
        """Test one bad numeric field keeps the user's students on disk."""
        path = tmp_path / "data.json"
        path.write_text(
            '{"students": [{"id": "s1", "name": "Keep me"}],'
            ' "enrollments": [{"id": "e1", "studentID": "s1", "totalPaid": NaN}]}',
            encoding="utf-8"
        )

        store = AppStore(JsonFilePersistence(path), save_delay=60)
        store.save()

        assert [s.name for s in store.state.students] == ["Keep me"]
        assert [s["name"] for s in load_json(path)["students"]] == ["Keep me"]

    def test_out_of_range_timestamp_drops_only_that_session(self, tmp_path):
        """Test an unrepresentable startAt loses the session, not the roster."""
        path = tmp_path / "data.json"
        path.write_text(json.dumps({
            "students": [{"id": "s1", "name": "Keep me"}],
            "sessions": [
                {"id": "bad", "studentID": "s1", "startAt": "0001-01-01T00:00:00+23:59"},
                {"id": "ok", "studentID": "s1", "startAt": "2026-01-23T18:30:00"},
            ],
        }), encoding="utf-8")

        store = AppStore(JsonFilePersistence(path), save_delay=60)

        assert [s.name for s in store.state.students] == ["Keep me"]
        assert [s.id for s in store.state.sessions] == ["ok"]

    def test_state_survives_restart(self, tmp_path):
        """Test changes saved on close are loaded by the next store."""
        path = tmp_path / "data.json"
        store = AppStore(JsonFilePersistence(path), save_delay=60)
        student = store.add_student("Bob")
        store.close()

        reopened = AppStore(JsonFilePersistence(path), save_delay=60)

        assert reopened.student(student.id).name == "Bob"
        assert reopened.selected_student_id == reopened.state.students[0].id


class TestInMemoryPersistence:
    """Test cases for InMemoryPersistence."""

    def test_empty(self):
        """Test no document loads as None."""
        assert InMemoryPersistence().load() is None

    def test_load_returns_fresh_objects(self):
        """Test loads do not share objects with the saved state."""
        gateway = InMemoryPersistence()
        state = sample_state()
        gateway.save(state)

        loaded = gateway.load()
        loaded.students[0].name = "changed"

        assert gateway.load().students[0].name == "张三"
        assert gateway.save_count == 1


class TestSeed:
    """Test cases for the first-launch roster."""

    def test_default_state(self):
        """Test the seed contents."""
        state = make_default_state()

        teacher = state.teachers[0]
        enrollment = state.enrollments[0]
        winter = state.templates[0]

        assert state.students[0].teacher_id == teacher.id
        assert enrollment.student_id == state.students[0].id
        assert enrollment.planned_lessons == 7
        assert [w.id for w in enrollment.windows] == [w.id for w in winter.windows]
        assert enrollment.windows[0] is not winter.windows[0]
        assert len(winter.time_options) == 5
        assert state.settings.skip_holidays_by_default

    def test_holidays_are_ordered_ranges(self):
        """Test every seeded holiday is a forward range."""
        for holiday in default_holidays():
            assert holiday.start <= holiday.end

from __future__ import annotations

import copy
import random
from datetime import date, datetime, time

import pytest

from src.geo_attendance.geo_attendance.attendance.engine import AttendanceEngine
from src.geo_attendance.geo_attendance.core.enums import AttendanceStatus, Role, SessionState
from src.geo_attendance.geo_attendance.core.exceptions import AuthorizationError, StoreUnavailable, ValidationError
from src.geo_attendance.geo_attendance.geo.distance import DistanceCalculator
from src.geo_attendance.geo_attendance.sessions.codes import SessionCodeGenerator
from src.geo_attendance.geo_attendance.store.merge import MergeByIdPolicy, clean_document
from src.geo_attendance.geo_attendance.users.model import Principal

NOW = datetime(2026, 3, 2, 9, 30, 15)
DOC = "doc-1"


class InMemoryStore:
    def __init__(self, document=None):
        self.documents = {DOC: clean_document(copy.deepcopy(document or {}))}
        self.writes: list[dict] = []
        self.fail_writes = False

    def fetch_document(self, document_id):
        return clean_document(copy.deepcopy(self.documents[document_id]))

    def merge_write(self, document_id, partial):
        if self.fail_writes:
            raise StoreUnavailable("store is down")
        merged = MergeByIdPolicy().merge(self.fetch_document(document_id), partial)
        self.documents[document_id] = merged
        self.writes.append(copy.deepcopy(dict(partial)))
        return merged

    def create_document(self, initial):
        raise NotImplementedError


def _session_dict(**overrides):
    data = {
        "id": "session_1",
        "code": "ABC123",
        "teacherId": "t1",
        "className": "Physics",
        "date": "2026-03-02",
        "startTime": "09:00",
        "endTime": "10:00",
        "allowedDistance": 50,
        "latitude": 10.0,
        "longitude": 20.0,
        "active": True,
    }
    data.update(overrides)
    return data


STUDENT = Principal(user_id="u-student", name="Lan Nguyen", role=Role.STUDENT, student_id="S-042")
TEACHER = Principal(user_id="u-teacher", name="Mr. Binh", role=Role.TEACHER, teacher_id="T-007")


def _engine(store: InMemoryStore, **kwargs) -> AttendanceEngine:
    kwargs.setdefault("distance", DistanceCalculator(rng=random.Random(0)))
    engine = AttendanceEngine(store, DOC, clock_fn=lambda: NOW, **kwargs)
    engine.hydrate()
    return engine


def _stored_records(store: InMemoryStore):
    return store.documents[DOC]["attendanceRecords"]


# ----- mark_attendance -----


def test_face_match_within_range_is_present():
    store = InMemoryStore({"sessions": [_session_dict()]})
    engine = _engine(store)

    result = engine.mark_attendance(STUDENT, "ABC123", True, 30.0, 10.0, 20.0)

    assert result.success is True
    assert result.message == "Attendance marked as present"
    assert result.record.status == AttendanceStatus.PRESENT
    assert result.record.attempted_from_outside is False
    assert result.record.student_id == "S-042"
    assert result.record.student_name == "Lan Nguyen"
    assert result.record.date == "2026-03-02"
    assert result.record.time == "09:30:15"
    assert _stored_records(store) == [result.record.to_dict()]


def test_out_of_range_is_recorded_absent():
    store = InMemoryStore({"sessions": [_session_dict()]})
    engine = _engine(store)

    result = engine.mark_attendance(STUDENT, "ABC123", True, 80.4, 10.0, 20.0)

    assert result.success is False
    assert result.record.status == AttendanceStatus.ABSENT
    assert result.record.attempted_from_outside is True
    assert result.message == "Marked as absent. Reason: You are too far from the classroom (80m away)"
    assert len(_stored_records(store)) == 1


def test_face_mismatch_is_recorded_absent():
    store = InMemoryStore({"sessions": [_session_dict()]})
    engine = _engine(store)

    result = engine.mark_attendance(STUDENT, "ABC123", False, 10.0, 10.0, 20.0)

    assert result.success is False
    assert result.record.status == AttendanceStatus.ABSENT
    assert result.record.attempted_from_outside is False
    assert result.message == "Marked as absent. Reason: Face recognition failed"


def test_face_mismatch_is_reported_before_distance():
    store = InMemoryStore({"sessions": [_session_dict()]})
    engine = _engine(store)

    result = engine.mark_attendance(STUDENT, "ABC123", False, 500.0, 10.0, 20.0)

    assert result.record.attempted_from_outside is True
    assert "Face recognition failed" in result.message


def test_distance_equal_to_allowed_is_inside():
    store = InMemoryStore({"sessions": [_session_dict()]})
    engine = _engine(store)

    result = engine.mark_attendance(STUDENT, "ABC123", True, 50.0, 10.0, 20.0)

    assert result.success is True


def test_unknown_code_creates_no_record():
    store = InMemoryStore({"sessions": [_session_dict()]})
    engine = _engine(store)

    result = engine.mark_attendance(STUDENT, "ZZZZZZ", True, 10.0, 10.0, 20.0)

    assert result.success is False
    assert result.message == "Invalid session code"
    assert result.record is None
    assert store.writes == []
    assert engine.attendance_records == []


def test_closed_window_creates_no_record():
    store = InMemoryStore({"sessions": [_session_dict(startTime="11:00", endTime="12:00")]})
    engine = _engine(store)

    result = engine.mark_attendance(STUDENT, "ABC123", True, 10.0, 10.0, 20.0)

    assert result.success is False
    assert result.message == "Attendance window is closed or not yet open"
    assert result.record is None
    assert store.writes == []


def test_window_uses_attempt_time_not_active_flag():
    store = InMemoryStore({"sessions": [_session_dict(active=False)]})
    engine = _engine(store)

    assert engine.mark_attendance(STUDENT, "ABC123", True, 10.0, 10.0, 20.0).success is True
    late = engine.mark_attendance(STUDENT, "ABC123", True, 10.0, 10.0, 20.0, now=datetime(2026, 3, 2, 10, 1))
    assert late.message == "Attendance window is closed or not yet open"


@pytest.mark.parametrize(
    "principal",
    [
        None,
        TEACHER,
        Principal(user_id="u9", name="No Id", role=Role.STUDENT, student_id=None),
    ],
)
def test_only_students_with_student_id_can_mark(principal):
    store = InMemoryStore({"sessions": [_session_dict()]})
    engine = _engine(store)

    result = engine.mark_attendance(principal, "ABC123", True, 10.0, 10.0, 20.0)

    assert result.success is False
    assert result.message == "You must be logged in as a student to mark attendance"
    assert store.writes == []


def test_store_failure_propagates_and_rolls_back_cache():
    store = InMemoryStore({"sessions": [_session_dict()]})
    engine = _engine(store)
    store.fail_writes = True

    with pytest.raises(StoreUnavailable):
        engine.mark_attendance(STUDENT, "ABC123", True, 10.0, 10.0, 20.0)

    assert engine.attendance_records == []


# ----- check_in (distance measured from coordinates) -----


def test_check_in_at_session_center_is_present():
    store = InMemoryStore({"sessions": [_session_dict()]})
    engine = _engine(store)

    result = engine.check_in(STUDENT, "ABC123", face_matched=True, latitude=10.0, longitude=20.0)

    assert result.success is True
    assert 1.0 <= result.record.gps_distance < 10.0


def test_check_in_applies_distance_correction_band():
    store = InMemoryStore({"sessions": [_session_dict()]})
    corrected = _engine(store)
    raw = _engine(InMemoryStore({"sessions": [_session_dict()]}), distance=DistanceCalculator(apply_correction=False))

    # ~845m north of the center
    near = corrected.check_in(STUDENT, "ABC123", face_matched=True, latitude=10.0076, longitude=20.0)
    far = raw.check_in(STUDENT, "ABC123", face_matched=True, latitude=10.0076, longitude=20.0)

    assert near.record.status == AttendanceStatus.PRESENT
    assert far.record.status == AttendanceStatus.ABSENT
    assert far.record.attempted_from_outside is True


def test_check_in_with_unknown_code_skips_measurement():
    store = InMemoryStore({"sessions": [_session_dict()]})
    engine = _engine(store)

    result = engine.check_in(STUDENT, "NOPE00", face_matched=True, latitude=10.0, longitude=20.0)

    assert result.message == "Invalid session code"
    assert store.writes == []


# ----- sessions -----


def test_teacher_creates_and_persists_session():
    store = InMemoryStore()
    engine = _engine(store, code_generator=SessionCodeGenerator(rng=random.Random(5)))

    created = engine.create_session(
        TEACHER,
        class_name="Chemistry",
        session_date="2026-03-02",
        start_time="13:00",
        end_time="14:30",
        allowed_distance=75,
        latitude=10.5,
        longitude=106.7,
    )

    assert created.teacher_id == "u-teacher"
    assert len(created.code) == 6
    assert created.session_date == date(2026, 3, 2)
    assert created.start_time == time(13, 0)
    assert engine.sessions == [created]
    assert store.documents[DOC]["sessions"] == [created.to_dict()]


def test_student_cannot_create_session():
    engine = _engine(InMemoryStore())

    with pytest.raises(AuthorizationError):
        engine.create_session(
            STUDENT,
            class_name="Chemistry",
            session_date="2026-03-02",
            start_time="13:00",
            end_time="14:00",
            allowed_distance=75,
            latitude=10.5,
            longitude=106.7,
        )


@pytest.mark.parametrize(
    "overrides",
    [
        {"class_name": "  "},
        {"end_time": "12:00"},
        {"allowed_distance": 0},
        {"session_date": "02/03/2026"},
        {"latitude": 91},
    ],
)
def test_create_session_validates_input(overrides):
    engine = _engine(InMemoryStore())
    fields = dict(
        class_name="Chemistry",
        session_date="2026-03-02",
        start_time="13:00",
        end_time="14:00",
        allowed_distance=75,
        latitude=10.5,
        longitude=106.7,
    )
    fields.update(overrides)

    with pytest.raises(ValidationError):
        engine.create_session(TEACHER, **fields)


def test_create_session_rolls_back_on_store_failure():
    store = InMemoryStore()
    engine = _engine(store)
    store.fail_writes = True

    with pytest.raises(StoreUnavailable):
        engine.create_session(
            TEACHER,
            class_name="Chemistry",
            session_date="2026-03-02",
            start_time="13:00",
            end_time="14:00",
            allowed_distance=75,
            latitude=10.5,
            longitude=106.7,
        )

    assert engine.sessions == []


def test_active_previous_and_status_queries():
    store = InMemoryStore(
        {
            "sessions": [
                _session_dict(id="old", code="OLD111", date="2026-03-01"),
                _session_dict(id="now", code="NOW222"),
                _session_dict(id="later", code="LAT333", startTime="15:00", endTime="16:00"),
            ]
        }
    )
    engine = _engine(store)

    assert engine.get_active_session().session_id == "now"
    assert [s.session_id for s in engine.get_previous_sessions()] == ["old"]
    assert [s.session_id for s in engine.get_current_sessions()] == ["now", "later"]
    assert engine.session_status("LAT333") == SessionState.NOT_STARTED
    assert engine.session_status("XXXXXX") == SessionState.NOT_FOUND


def test_hydrate_skips_malformed_entries():
    store = InMemoryStore(
        {
            "sessions": [_session_dict(), None, {"id": "broken"}],
            "attendanceRecords": [{"id": "r1", "studentId": "S-1", "status": "late", "sessionCode": "ABC123"}],
        }
    )

    engine = _engine(store)

    assert [s.session_id for s in engine.sessions] == ["session_1"]
    assert engine.attendance_records == []


# ----- records -----


def _record_dict(record_id, student_id, code, status="present"):
    return {
        "id": record_id,
        "studentId": student_id,
        "studentName": student_id.lower(),
        "date": "2026-03-02",
        "time": "09:10:00",
        "status": status,
        "gpsDistance": 12.5,
        "attemptedFromOutside": False,
        "sessionCode": code,
    }


def test_record_queries_filter_the_cache():
    store = InMemoryStore(
        {
            "sessions": [_session_dict(), _session_dict(id="session_2", code="XYZ789")],
            "attendanceRecords": [
                _record_dict("r1", "S-1", "ABC123"),
                _record_dict("r2", "S-2", "ABC123"),
                _record_dict("r3", "S-1", "XYZ789"),
            ],
        }
    )
    engine = _engine(store)

    assert [r.record_id for r in engine.get_student_attendance("S-1")] == ["r1", "r3"]
    assert [r.record_id for r in engine.get_session_attendance("session_1")] == ["r1", "r2"]
    assert engine.get_session_attendance("missing") == []


def test_manual_override_updates_cache_and_store():
    store = InMemoryStore({"sessions": [_session_dict()], "attendanceRecords": [_record_dict("r1", "S-1", "ABC123")]})
    engine = _engine(store)

    updated = engine.manually_update_attendance(TEACHER, "r1", "absent")

    assert updated.status == AttendanceStatus.ABSENT
    assert engine.get_student_attendance("S-1")[0].status == AttendanceStatus.ABSENT
    assert _stored_records(store)[0]["status"] == "absent"
    assert len(_stored_records(store)) == 1


def test_manual_override_requires_teacher_and_known_record():
    store = InMemoryStore({"attendanceRecords": [_record_dict("r1", "S-1", "ABC123")]})
    engine = _engine(store)

    with pytest.raises(AuthorizationError):
        engine.manually_update_attendance(STUDENT, "r1", "present")
    with pytest.raises(ValidationError):
        engine.manually_update_attendance(TEACHER, "missing", "present")
    with pytest.raises(ValidationError):
        engine.manually_update_attendance(TEACHER, "r1", "excused")


def test_manual_override_rolls_back_on_store_failure():
    store = InMemoryStore({"attendanceRecords": [_record_dict("r1", "S-1", "ABC123")]})
    engine = _engine(store)
    store.fail_writes = True

    with pytest.raises(StoreUnavailable):
        engine.manually_update_attendance(TEACHER, "r1", "absent")

    assert engine.attendance_records[0].status == AttendanceStatus.PRESENT


def test_export_attendance_for_session():
    store = InMemoryStore({"sessions": [_session_dict()], "attendanceRecords": [_record_dict("r1", "S-1", "ABC123")]})
    engine = _engine(store)

    export = engine.export_attendance("session_1")

    assert export.filename == "attendance_ABC123.csv"
    assert export.content.splitlines() == [
        "Student ID,Student Name,Date,Time,Status,GPS Distance,Attempted From Outside",
        "S-1,s-1,2026-03-02,09:10:00,present,12.5,No",
    ]
    with pytest.raises(ValidationError):
        engine.export_attendance("missing")


@pytest.mark.parametrize("flag", ["false", "true", 1, 0, None])
def test_face_flag_must_be_boolean(flag):
    store = InMemoryStore({"sessions": [_session_dict()]})
    engine = _engine(store)

    with pytest.raises(ValidationError):
        engine.mark_attendance(STUDENT, "ABC123", flag, 10.0, 10.0, 20.0)
    with pytest.raises(ValidationError):
        engine.check_in(STUDENT, "ABC123", face_matched=flag, latitude=10.0, longitude=20.0)

    assert store.writes == []
    assert engine.attendance_records == []


# ----- refresh vs. local writes -----


class StaleReadStore(InMemoryStore):
    """Runs `during_fetch` once after taking the snapshot it returns."""

    def __init__(self, document=None):
        super().__init__(document)
        self.during_fetch = None

    def fetch_document(self, document_id):
        snapshot = super().fetch_document(document_id)
        hook, self.during_fetch = self.during_fetch, None
        if hook is not None:
            hook()
        return snapshot


def test_refresh_keeps_record_written_while_fetching():
    store = StaleReadStore({"sessions": [_session_dict()]})
    engine = _engine(store)
    results = []
    store.during_fetch = lambda: results.append(engine.mark_attendance(STUDENT, "ABC123", True, 10.0, 10.0, 20.0))

    engine.refresh()

    assert [r.record_id for r in engine.attendance_records] == [results[0].record.record_id]


def test_refresh_keeps_session_created_while_fetching():
    store = StaleReadStore()
    engine = _engine(store)
    created = []
    store.during_fetch = lambda: created.append(
        engine.create_session(
            TEACHER,
            class_name="Chemistry",
            session_date="2026-03-02",
            start_time="09:00",
            end_time="10:00",
            allowed_distance=75,
            latitude=10.0,
            longitude=20.0,
        )
    )

    engine.refresh()

    assert engine.find_session_by_code(created[0].code) == created[0]
    assert engine.mark_attendance(STUDENT, created[0].code, True, 10.0, 10.0, 20.0).success is True


def test_refresh_keeps_override_written_while_fetching():
    store = StaleReadStore({"attendanceRecords": [_record_dict("r1", "S-1", "ABC123")]})
    engine = _engine(store)
    store.during_fetch = lambda: engine.manually_update_attendance(TEACHER, "r1", "absent")

    engine.refresh()

    assert [r.status for r in engine.attendance_records] == [AttendanceStatus.ABSENT]


def test_settled_write_follows_the_store_on_later_refresh():
    store = StaleReadStore({"sessions": [_session_dict()]})
    engine = _engine(store)
    engine.mark_attendance(STUDENT, "ABC123", True, 10.0, 10.0, 20.0)

    store.documents[DOC]["attendanceRecords"] = []
    engine.refresh()

    assert engine.attendance_records == []

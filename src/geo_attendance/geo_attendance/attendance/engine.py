from __future__ import annotations

import logging
import threading
import uuid
from datetime import date, datetime, time
from typing import Any, Callable, Iterable, Optional, TypeVar, Union

from ..common.datetime_utils import now_local
from ..common.validators import (
    require_clock_time,
    require_coordinate,
    require_date,
    require_flag,
    require_non_empty,
    require_number,
    require_positive,
)
from ..core.enums import AttendanceStatus, Role, SessionState
from ..core.exceptions import AuthorizationError, StoreUnavailable, ValidationError
from ..geo.distance import DistanceCalculator
from ..sessions import clock
from ..sessions.codes import SessionCodeGenerator
from ..sessions.model import Session
from ..store.repository import DocumentStore
from ..users.model import Principal
from .export import ExportFile, export_filename, records_to_csv
from .factory import EligibilityStrategyFactory
from .model import AttendanceRecord, MarkResult

logger = logging.getLogger(__name__)

T = TypeVar("T")

NOT_A_STUDENT_MESSAGE = "You must be logged in as a student to mark attendance"
INVALID_CODE_MESSAGE = "Invalid session code"
WINDOW_CLOSED_MESSAGE = "Attendance window is closed or not yet open"


def _parse_all(entries: Iterable[Any], parse: Callable[[Any], T], kind: str) -> list[T]:
    out = []
    for raw in entries:
        try:
            out.append(parse(raw))
        except (AttributeError, KeyError, TypeError, ValueError):
            logger.warning("Skipping malformed %s entry: %r", kind, raw)
    return out


def _overlay(fetched: list[T], pending: dict, since: int, key: Callable[[T], str]) -> list[T]:
    fresh = {k: entity for k, (seq, entity) in pending.items() if seq is None or seq > since}
    out = [fresh.pop(key(e), e) for e in fetched]
    out.extend(fresh.values())
    return out


def _prune(pending: dict, since: int) -> None:
    for k in [k for k, (seq, _) in pending.items() if seq is not None and seq <= since]:
        del pending[k]


class AttendanceEngine:
    """Sessions, check-in eligibility and attendance records.

    The engine keeps an in-memory mirror of the `sessions` and
    `attendanceRecords` collections. Reads are served from the mirror; writes
    are applied locally first and then merge-written to the store. A failed
    store write rolls the local change back and propagates StoreUnavailable,
    although the remote document may already hold the change.
    """

    def __init__(
        self,
        store: DocumentStore,
        document_id: str,
        *,
        distance: Optional[DistanceCalculator] = None,
        code_generator: Optional[SessionCodeGenerator] = None,
        strategy_factory: Optional[EligibilityStrategyFactory] = None,
        clock_fn: Callable[[], datetime] = now_local,
    ):
        self._store = store
        self._document_id = document_id
        self._distance = distance or DistanceCalculator()
        self._codes = code_generator or SessionCodeGenerator()
        self._factory = strategy_factory or EligibilityStrategyFactory()
        self._clock = clock_fn

        self._lock = threading.RLock()
        self._sessions: list[Session] = []
        self._records: list[AttendanceRecord] = []

        # id -> (settle sequence or None while the store write is in flight, entity)
        self._pending_sessions: dict[str, tuple[Optional[int], Session]] = {}
        self._pending_records: dict[str, tuple[Optional[int], AttendanceRecord]] = {}
        self._write_seq = 0

    # ----- cache -----

    @property
    def sessions(self) -> list[Session]:
        with self._lock:
            return list(self._sessions)

    @property
    def attendance_records(self) -> list[AttendanceRecord]:
        with self._lock:
            return list(self._records)

    def hydrate(self) -> None:
        self.refresh()
        logger.info("Loaded %d sessions and %d attendance records", len(self.sessions), len(self.attendance_records))

    def refresh(self) -> None:
        """Replace the mirror with the remote document.

        Local writes still in flight, or settled after the fetch started, are
        laid over the fetched snapshot so a slow poll cannot drop them.
        """

        with self._lock:
            since = self._write_seq
        document = self._store.fetch_document(self._document_id)
        sessions = _parse_all(document["sessions"], Session.from_dict, "session")
        records = _parse_all(document["attendanceRecords"], AttendanceRecord.from_dict, "attendance record")
        with self._lock:
            self._sessions = _overlay(sessions, self._pending_sessions, since, lambda s: s.session_id)
            self._records = _overlay(records, self._pending_records, since, lambda r: r.record_id)
            _prune(self._pending_sessions, since)
            _prune(self._pending_records, since)

    def _stage(self, pending: dict, key: str, entity: Any) -> None:
        pending[key] = (None, entity)

    def _settle(self, pending: dict, key: str, entity: Any) -> None:
        with self._lock:
            self._write_seq += 1
            pending[key] = (self._write_seq, entity)

    def _now(self, now: Optional[datetime]) -> datetime:
        return now or self._clock()

    def find_session(self, session_id: str) -> Optional[Session]:
        with self._lock:
            return next((s for s in self._sessions if s.session_id == session_id), None)

    def find_session_by_code(self, code: str) -> Optional[Session]:
        code = (code or "").strip()
        with self._lock:
            return next((s for s in self._sessions if s.code == code), None)

    # ----- sessions -----

    def create_session(
        self,
        current_user: Optional[Principal],
        *,
        class_name: str,
        session_date: Union[date, str],
        start_time: Union[time, str],
        end_time: Union[time, str],
        allowed_distance: float,
        latitude: float,
        longitude: float,
    ) -> Session:
        if current_user is None or current_user.role != Role.TEACHER:
            raise AuthorizationError("Only teachers can create sessions")

        class_name = require_non_empty(class_name, "Class name")
        day = require_date(session_date, "Date")
        start = require_clock_time(start_time, "Start time")
        end = require_clock_time(end_time, "End time")
        if end <= start:
            raise ValidationError("End time must be after start time")

        session = Session(
            session_id=f"session_{uuid.uuid4().hex}",
            code=self._codes.generate({s.code for s in self.sessions}),
            teacher_id=current_user.user_id,
            class_name=class_name,
            session_date=day,
            start_time=start,
            end_time=end,
            allowed_distance=require_positive(allowed_distance, "Allowed distance"),
            latitude=require_coordinate(latitude, "Latitude", 90),
            longitude=require_coordinate(longitude, "Longitude", 180),
            active=True,
        )

        with self._lock:
            self._sessions.append(session)
            self._stage(self._pending_sessions, session.session_id, session)
        try:
            self._store.merge_write(self._document_id, {"sessions": [session.to_dict()]})
        except StoreUnavailable:
            with self._lock:
                self._sessions = [s for s in self._sessions if s.session_id != session.session_id]
                self._pending_sessions.pop(session.session_id, None)
            raise
        self._settle(self._pending_sessions, session.session_id, session)

        logger.info("Teacher %s created session %s (%s)", current_user.user_id, session.code, session.class_name)
        return session

    def get_active_session(self, *, now: Optional[datetime] = None) -> Optional[Session]:
        now = self._now(now)
        return next((s for s in self.sessions if clock.is_active(s, now)), None)

    def get_previous_sessions(self, *, now: Optional[datetime] = None) -> list[Session]:
        return clock.classify(self.sessions, self._now(now)).previous

    def get_current_sessions(self, *, now: Optional[datetime] = None) -> list[Session]:
        return clock.classify(self.sessions, self._now(now)).current

    def session_status(self, code: str, *, now: Optional[datetime] = None) -> SessionState:
        return clock.status_label(self.find_session_by_code(code), self._now(now))

    # ----- check-in -----

    def _precheck(self, current_user: Optional[Principal], session_code: str, now: datetime):
        if current_user is None or current_user.role != Role.STUDENT or not current_user.student_id:
            return None, MarkResult(success=False, message=NOT_A_STUDENT_MESSAGE)

        session = self.find_session_by_code(session_code)
        if session is None:
            return None, MarkResult(success=False, message=INVALID_CODE_MESSAGE)

        if not clock.is_active(session, now):
            return None, MarkResult(success=False, message=WINDOW_CLOSED_MESSAGE)

        return session, None

    def mark_attendance(
        self,
        current_user: Optional[Principal],
        session_code: str,
        face_matched: bool,
        gps_distance: float,
        latitude: float,
        longitude: float,
        *,
        now: Optional[datetime] = None,
    ) -> MarkResult:
        now = self._now(now)
        session, rejected = self._precheck(current_user, session_code, now)
        if rejected:
            return rejected

        face_matched = require_flag(face_matched, "faceMatched")
        gps_distance = require_number(gps_distance, "GPS distance")
        logger.debug("Check-in for %s from (%s, %s)", session.code, latitude, longitude)
        return self._record_attempt(current_user, session, face_matched, gps_distance, now)

    def check_in(
        self,
        current_user: Optional[Principal],
        session_code: str,
        *,
        face_matched: bool,
        latitude: float,
        longitude: float,
        now: Optional[datetime] = None,
    ) -> MarkResult:
        """Measure the distance to the session center, then record the attempt."""

        now = self._now(now)
        session, rejected = self._precheck(current_user, session_code, now)
        if rejected:
            return rejected

        face_matched = require_flag(face_matched, "faceMatched")
        lat = require_coordinate(latitude, "Latitude", 90)
        lon = require_coordinate(longitude, "Longitude", 180)
        gps_distance = self._distance.measure(lat, lon, session.latitude, session.longitude)
        return self._record_attempt(current_user, session, face_matched, gps_distance, now)

    def _record_attempt(
        self,
        current_user: Principal,
        session: Session,
        face_matched: bool,
        gps_distance: float,
        now: datetime,
    ) -> MarkResult:
        attempted_from_outside = gps_distance > session.allowed_distance
        strategy = self._factory.for_attempt(face_matched=face_matched, attempted_from_outside=attempted_from_outside)
        decision = strategy.decide(session=session, gps_distance=gps_distance)

        record = AttendanceRecord(
            record_id=f"attendance_{uuid.uuid4().hex}",
            student_id=str(current_user.student_id),
            student_name=current_user.name,
            date=now.strftime("%Y-%m-%d"),
            time=now.strftime("%H:%M:%S"),
            status=decision.status,
            attempted_from_outside=attempted_from_outside,
            session_code=session.code,
            gps_distance=gps_distance,
        )

        with self._lock:
            self._records.append(record)
            self._stage(self._pending_records, record.record_id, record)
        try:
            self._store.merge_write(self._document_id, {"attendanceRecords": [record.to_dict()]})
        except StoreUnavailable:
            with self._lock:
                self._records = [r for r in self._records if r.record_id != record.record_id]
                self._pending_records.pop(record.record_id, None)
            raise
        self._settle(self._pending_records, record.record_id, record)

        logger.info(
            "Student %s marked %s for %s (%.1fm, outside=%s)",
            record.student_id,
            record.status.value,
            session.code,
            gps_distance,
            attempted_from_outside,
        )
        return MarkResult(success=decision.is_present, message=decision.message, record=record)

    # ----- records -----

    def get_student_attendance(self, student_id: str) -> list[AttendanceRecord]:
        return [r for r in self.attendance_records if r.student_id == student_id]

    def get_session_attendance(self, session_id: str) -> list[AttendanceRecord]:
        session = self.find_session(session_id)
        if session is None:
            return []
        return [r for r in self.attendance_records if r.session_code == session.code]

    def manually_update_attendance(
        self,
        current_user: Optional[Principal],
        record_id: str,
        status: Union[AttendanceStatus, str],
    ) -> AttendanceRecord:
        if current_user is None or current_user.role != Role.TEACHER:
            raise AuthorizationError("Only teachers can update attendance")

        try:
            new_status = AttendanceStatus(status)
        except ValueError:
            raise ValidationError(f"Unknown attendance status: {status}")

        with self._lock:
            index = next((i for i, r in enumerate(self._records) if r.record_id == record_id), None)
            if index is None:
                raise ValidationError("Attendance record not found")
            previous = self._records[index]
            updated = previous.with_status(new_status)
            self._records[index] = updated
            self._stage(self._pending_records, record_id, updated)

        try:
            self._store.merge_write(self._document_id, {"attendanceRecords": [updated.to_dict()]})
        except StoreUnavailable:
            with self._lock:
                self._records = [previous if r.record_id == record_id else r for r in self._records]
                self._pending_records.pop(record_id, None)
            raise
        self._settle(self._pending_records, record_id, updated)

        logger.info(
            "Teacher %s changed record %s from %s to %s",
            current_user.user_id,
            record_id,
            previous.status.value,
            new_status.value,
        )
        return updated

    def export_attendance(self, session_id: str) -> ExportFile:
        session = self.find_session(session_id)
        if session is None:
            raise ValidationError("Session not found")
        records = self.get_session_attendance(session_id)
        return ExportFile(filename=export_filename(session.code), content=records_to_csv(records))

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Mapping, Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one recorded check-in attempt."""

    record_id: str
    student_id: str
    student_name: str
    date: str
    time: str
    status: AttendanceStatus
    attempted_from_outside: bool
    session_code: str
    gps_distance: Optional[float] = None

    def with_status(self, status: AttendanceStatus) -> "AttendanceRecord":
        return replace(self, status=status)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.record_id,
            "studentId": self.student_id,
            "studentName": self.student_name,
            "date": self.date,
            "time": self.time,
            "status": self.status.value,
            "attemptedFromOutside": self.attempted_from_outside,
            "sessionCode": self.session_code,
        }
        if self.gps_distance is not None:
            data["gpsDistance"] = self.gps_distance
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AttendanceRecord":
        distance = data.get("gpsDistance")
        return cls(
            record_id=str(data["id"]),
            student_id=str(data["studentId"]),
            student_name=str(data.get("studentName") or ""),
            date=str(data.get("date") or ""),
            time=str(data.get("time") or ""),
            status=AttendanceStatus(data["status"]),
            attempted_from_outside=bool(data.get("attemptedFromOutside", False)),
            session_code=str(data["sessionCode"]),
            gps_distance=float(distance) if distance is not None else None,
        )


@dataclass(frozen=True)
class MarkResult:
    """Outcome of a check-in attempt.

    `success` is False both for rejected attempts (no record) and for attempts
    recorded as absent (record present).
    """

    success: bool
    message: str
    record: Optional[AttendanceRecord] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "record": self.record.to_dict() if self.record else None,
        }

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from typing import Any, Mapping

from ..common.datetime_utils import format_clock_time, parse_clock_time, parse_iso_date


@dataclass(frozen=True)
class Session:
    """Domain entity: a time- and location-bounded attendance window.

    `active` is informational only; whether check-ins are accepted is derived
    from the date and clock times (see `sessions.clock`).
    """

    session_id: str
    code: str
    teacher_id: str
    class_name: str
    session_date: date
    start_time: time
    end_time: time
    allowed_distance: float
    latitude: float
    longitude: float
    active: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.session_id,
            "code": self.code,
            "teacherId": self.teacher_id,
            "className": self.class_name,
            "date": self.session_date.strftime("%Y-%m-%d"),
            "startTime": format_clock_time(self.start_time),
            "endTime": format_clock_time(self.end_time),
            "allowedDistance": self.allowed_distance,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "active": self.active,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Session":
        return cls(
            session_id=str(data["id"]),
            code=str(data["code"]),
            teacher_id=str(data.get("teacherId") or ""),
            class_name=str(data.get("className") or ""),
            session_date=parse_iso_date(str(data["date"])),
            start_time=parse_clock_time(str(data["startTime"])),
            end_time=parse_clock_time(str(data["endTime"])),
            allowed_distance=float(data["allowedDistance"]),
            latitude=float(data["latitude"]),
            longitude=float(data["longitude"]),
            active=bool(data.get("active", True)),
        )

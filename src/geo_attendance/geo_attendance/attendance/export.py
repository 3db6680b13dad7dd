from __future__ import annotations

import csv
import io
from dataclasses import dataclass
from typing import Iterable

from ..core.constants import CSV_HEADER
from .model import AttendanceRecord


@dataclass(frozen=True)
class ExportFile:
    filename: str
    content: str

    def encode(self) -> bytes:
        return self.content.encode("utf-8")


def export_filename(session_code: str) -> str:
    return f"attendance_{session_code}.csv"


def _distance_cell(record: AttendanceRecord) -> str:
    if record.gps_distance is None:
        return "N/A"
    return str(record.gps_distance)


def records_to_csv(records: Iterable[AttendanceRecord]) -> str:
    """Header row plus one comma-separated row per record."""

    out = io.StringIO()
    writer = csv.writer(out, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for r in records:
        writer.writerow(
            [
                r.student_id,
                r.student_name,
                r.date,
                r.time,
                r.status.value,
                _distance_cell(r),
                "Yes" if r.attempted_from_outside else "No",
            ]
        )
    return out.getvalue()

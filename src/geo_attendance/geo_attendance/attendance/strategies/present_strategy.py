from __future__ import annotations

from ...core.enums import AttendanceStatus
from ...sessions.model import Session
from .base import EligibilityStrategy, StatusDecision


class PresentStrategy(EligibilityStrategy):
    """Face matched and within the allowed distance."""

    def decide(self, *, session: Session, gps_distance: float) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT, message="Attendance marked as present")

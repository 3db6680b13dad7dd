from __future__ import annotations

from ...core.enums import AttendanceStatus
from ...sessions.model import Session
from .base import EligibilityStrategy, StatusDecision


class FaceMismatchStrategy(EligibilityStrategy):
    """Captured face did not match the stored profile."""

    def decide(self, *, session: Session, gps_distance: float) -> StatusDecision:
        return StatusDecision(
            status=AttendanceStatus.ABSENT,
            message="Marked as absent. Reason: Face recognition failed",
        )

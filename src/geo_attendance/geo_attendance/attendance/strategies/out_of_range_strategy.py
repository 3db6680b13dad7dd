from __future__ import annotations

import math

from ...core.enums import AttendanceStatus
from ...sessions.model import Session
from .base import EligibilityStrategy, StatusDecision


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class OutOfRangeStrategy(EligibilityStrategy):
    """Face matched but the student is farther than the session allows."""

    def decide(self, *, session: Session, gps_distance: float) -> StatusDecision:
        meters = round_half_up(gps_distance)
        return StatusDecision(
            status=AttendanceStatus.ABSENT,
            message=f"Marked as absent. Reason: You are too far from the classroom ({meters}m away)",
        )

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ...core.enums import AttendanceStatus
from ...sessions.model import Session


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus
    message: str

    @property
    def is_present(self) -> bool:
        return self.status == AttendanceStatus.PRESENT


class EligibilityStrategy(ABC):
    """Strategy Pattern: encapsulate how a check-in attempt is classified."""

    @abstractmethod
    def decide(self, *, session: Session, gps_distance: float) -> StatusDecision:
        raise NotImplementedError

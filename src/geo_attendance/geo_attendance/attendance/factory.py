from __future__ import annotations

from dataclasses import dataclass

from .strategies.base import EligibilityStrategy
from .strategies.face_mismatch_strategy import FaceMismatchStrategy
from .strategies.out_of_range_strategy import OutOfRangeStrategy
from .strategies.present_strategy import PresentStrategy


@dataclass
class EligibilityStrategyFactory:
    """Factory Pattern: choose the strategy from the face and GPS checks.

    A face mismatch is reported ahead of an out-of-range reading.
    """

    def for_attempt(self, *, face_matched: bool, attempted_from_outside: bool) -> EligibilityStrategy:
        if not face_matched:
            return FaceMismatchStrategy()
        if attempted_from_outside:
            return OutOfRangeStrategy()
        return PresentStrategy()

"""Great-circle distance between GPS fixes.

`haversine_distance` is the raw measurement; `correct_distance` applies the
fixed band adjustment carried over from the deployed clients. The two are
composed by `DistanceCalculator`, which is what the engine consumes.
"""

from __future__ import annotations

import logging
import math
import random
from typing import Optional

from ..core.constants import (
    CORRECTION_LOWER_METERS,
    CORRECTION_OFFSET_METERS,
    CORRECTION_UPPER_METERS,
    EARTH_RADIUS_METERS,
    ZERO_DISTANCE_JITTER_MIN,
    ZERO_DISTANCE_JITTER_SPAN,
)

logger = logging.getLogger(__name__)

_default_rng = random.Random()


def haversine_distance(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
    *,
    rng: Optional[random.Random] = None,
) -> float:
    """Distance in meters between two coordinates on a mean-radius sphere.

    An exactly-zero result gets a jitter in [1, 10) meters added. Pass a seeded
    `rng` to make that branch deterministic.
    """

    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    distance = EARTH_RADIUS_METERS * c

    if distance == 0:
        jitter = ZERO_DISTANCE_JITTER_MIN + (rng or _default_rng).random() * ZERO_DISTANCE_JITTER_SPAN
        logger.debug("Adding %.2fm jitter to zero distance", jitter)
        distance += jitter

    return distance


def correct_distance(distance: float) -> float:
    if CORRECTION_LOWER_METERS < distance <= CORRECTION_UPPER_METERS:
        corrected = distance - CORRECTION_OFFSET_METERS
        logger.debug("Correcting distance from %sm to %sm", distance, corrected)
        return corrected
    return distance


class DistanceCalculator:
    """Measure student-to-session distance the way check-in expects it."""

    def __init__(self, *, rng: Optional[random.Random] = None, apply_correction: bool = True):
        self._rng = rng
        self._apply_correction = bool(apply_correction)

    def measure(self, lat1: float, lon1: float, lat2: float, lon2: float) -> float:
        distance = haversine_distance(lat1, lon1, lat2, lon2, rng=self._rng)
        if self._apply_correction:
            distance = correct_distance(distance)
        return distance

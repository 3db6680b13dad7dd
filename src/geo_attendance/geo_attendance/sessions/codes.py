from __future__ import annotations

import random
from typing import Collection, Optional

from ..core.constants import SESSION_CODE_ALPHABET, SESSION_CODE_LENGTH, SESSION_CODE_MAX_ATTEMPTS
from ..core.exceptions import ValidationError


class SessionCodeGenerator:
    """Draw short uppercase alphanumeric codes that students type in.

    Codes are re-drawn while they collide with `taken`; the store itself does
    not enforce uniqueness.
    """

    def __init__(
        self,
        *,
        rng: Optional[random.Random] = None,
        length: int = SESSION_CODE_LENGTH,
        max_attempts: int = SESSION_CODE_MAX_ATTEMPTS,
    ):
        self._rng = rng or random.SystemRandom()
        self._length = int(length)
        self._max_attempts = int(max_attempts)

    def draw(self) -> str:
        return "".join(self._rng.choice(SESSION_CODE_ALPHABET) for _ in range(self._length))

    def generate(self, taken: Collection[str] = ()) -> str:
        for _ in range(self._max_attempts):
            code = self.draw()
            if code not in taken:
                return code
        raise ValidationError("Could not generate a unique session code, please try again")

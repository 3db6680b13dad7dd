import random

import pytest

from src.geo_attendance.geo_attendance.core.constants import SESSION_CODE_ALPHABET
from src.geo_attendance.geo_attendance.core.exceptions import ValidationError
from src.geo_attendance.geo_attendance.sessions.codes import SessionCodeGenerator


class ScriptedCodes(SessionCodeGenerator):
    def __init__(self, codes, **kwargs):
        super().__init__(**kwargs)
        self._script = iter(codes)

    def draw(self) -> str:
        return next(self._script)


def test_codes_are_six_uppercase_alphanumerics():
    gen = SessionCodeGenerator(rng=random.Random(3))
    for _ in range(50):
        code = gen.generate()
        assert len(code) == 6
        assert all(ch in SESSION_CODE_ALPHABET for ch in code)


def test_generate_redraws_on_collision():
    gen = ScriptedCodes(["AAAAAA", "AAAAAA", "BBBBBB"])
    assert gen.generate({"AAAAAA"}) == "BBBBBB"


def test_generate_gives_up_after_max_attempts():
    gen = ScriptedCodes(["AAAAAA"] * 3, max_attempts=3)
    with pytest.raises(ValidationError):
        gen.generate({"AAAAAA"})

from datetime import date, time

from src.geo_attendance.geo_attendance.attendance.factory import EligibilityStrategyFactory
from src.geo_attendance.geo_attendance.attendance.strategies.face_mismatch_strategy import FaceMismatchStrategy
from src.geo_attendance.geo_attendance.attendance.strategies.out_of_range_strategy import (
    OutOfRangeStrategy,
    round_half_up,
)
from src.geo_attendance.geo_attendance.attendance.strategies.present_strategy import PresentStrategy
from src.geo_attendance.geo_attendance.core.enums import AttendanceStatus
from src.geo_attendance.geo_attendance.sessions.model import Session


def _session():
    return Session(
        session_id="s1",
        code="ABC123",
        teacher_id="t1",
        class_name="Physics",
        session_date=date(2026, 3, 2),
        start_time=time(9, 0),
        end_time=time(10, 0),
        allowed_distance=50,
        latitude=10.0,
        longitude=20.0,
    )


def test_factory_face_and_range_ok_is_present():
    factory = EligibilityStrategyFactory()
    strategy = factory.for_attempt(face_matched=True, attempted_from_outside=False)

    assert isinstance(strategy, PresentStrategy)
    assert strategy.decide(session=_session(), gps_distance=12.0).is_present


def test_factory_outside_range():
    factory = EligibilityStrategyFactory()
    strategy = factory.for_attempt(face_matched=True, attempted_from_outside=True)

    assert isinstance(strategy, OutOfRangeStrategy)
    decision = strategy.decide(session=_session(), gps_distance=120.5)
    assert decision.status == AttendanceStatus.ABSENT
    assert decision.message.endswith("(121m away)")


def test_factory_face_mismatch_wins_over_range():
    factory = EligibilityStrategyFactory()

    assert isinstance(factory.for_attempt(face_matched=False, attempted_from_outside=True), FaceMismatchStrategy)
    assert isinstance(factory.for_attempt(face_matched=False, attempted_from_outside=False), FaceMismatchStrategy)


def test_round_half_up():
    assert round_half_up(80.4) == 80
    assert round_half_up(80.5) == 81
    assert round_half_up(2.5) == 3

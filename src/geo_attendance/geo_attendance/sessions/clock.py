"""Active-window evaluation for sessions.

All functions are pure: "now" is always passed in. Comparisons happen at
HH:MM granularity, so a session ending at 10:00 still accepts 10:00:59.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional

from ..common.datetime_utils import minute_of
from ..core.enums import SessionState
from .model import Session


@dataclass(frozen=True)
class SessionBuckets:
    current: list[Session] = field(default_factory=list)
    previous: list[Session] = field(default_factory=list)


def is_active(session: Session, now: datetime) -> bool:
    if session.session_date != now.date():
        return False
    clock = minute_of(now)
    return session.start_time <= clock <= session.end_time


def is_previous(session: Session, now: datetime) -> bool:
    today = now.date()
    if session.session_date < today:
        return True
    return session.session_date == today and session.end_time < minute_of(now)


def classify(sessions: Iterable[Session], now: datetime) -> SessionBuckets:
    buckets = SessionBuckets()
    for s in sessions:
        if is_previous(s, now):
            buckets.previous.append(s)
        else:
            buckets.current.append(s)
    return buckets


def status_label(session: Optional[Session], now: datetime) -> SessionState:
    if session is None:
        return SessionState.NOT_FOUND
    if session.session_date != now.date():
        return SessionState.DIFFERENT_DATE

    clock = minute_of(now)
    if clock < session.start_time:
        return SessionState.NOT_STARTED
    if clock > session.end_time:
        return SessionState.ENDED
    return SessionState.ACTIVE

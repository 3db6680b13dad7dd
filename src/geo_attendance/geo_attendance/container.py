from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from .attendance.engine import AttendanceEngine
from .attendance.factory import EligibilityStrategyFactory
from .common.datetime_utils import now_local
from .geo.distance import DistanceCalculator
from .sessions.codes import SessionCodeGenerator
from .store.connection import StoreConfig, StoreConnection
from .store.jsonblob_store import JsonBlobStore
from .store.repository import DocumentStore
from .users.service import AuthService
from .users.store_user_repository import StoreUserRepository


@dataclass(frozen=True)
class Container:
    store: DocumentStore
    document_id: str

    users_repo: StoreUserRepository

    auth_service: AuthService
    attendance_engine: AttendanceEngine


def build_container(
    *,
    store_config: dict,
    store: Optional[DocumentStore] = None,
    apply_distance_correction: bool = True,
    rng: Optional[random.Random] = None,
    clock_fn: Callable[[], datetime] = now_local,
) -> Container:
    config = StoreConfig.from_dict(store_config)
    if store is None:
        store = JsonBlobStore(StoreConnection.get_instance(config))

    users_repo = StoreUserRepository(store, config.document_id)
    auth_service = AuthService(users_repo)
    attendance_engine = AttendanceEngine(
        store,
        config.document_id,
        distance=DistanceCalculator(rng=rng, apply_correction=apply_distance_correction),
        code_generator=SessionCodeGenerator(rng=rng),
        strategy_factory=EligibilityStrategyFactory(),
        clock_fn=clock_fn,
    )

    return Container(
        store=store,
        document_id=config.document_id,
        users_repo=users_repo,
        auth_service=auth_service,
        attendance_engine=attendance_engine,
    )

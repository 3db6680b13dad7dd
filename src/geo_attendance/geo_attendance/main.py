from __future__ import annotations

import atexit
import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .attendance.poller import AttendancePoller
from .container import Container, build_container
from .core.exceptions import StoreUnavailable
from .store.bootstrap import create_document, ensure_demo_users
from .store.connection import StoreConfig, StoreConnection
from .store.jsonblob_store import JsonBlobStore
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, str(level).upper(), logging.INFO), format=LOG_FORMAT)


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    store_config = dict(getattr(settings, "STORE_CONFIG"))
    logger.info("settings=%s store=%s/%s", settings_module, store_config.get("base_url"), store_config.get("document_id"))

    if container is None:
        if bool(getattr(settings, "AUTO_INIT_STORE", False)) and not store_config.get("document_id"):
            store = JsonBlobStore(StoreConnection.get_instance(StoreConfig.from_dict(store_config)))
            store_config["document_id"] = create_document(store)
            logger.warning("Created store document %s; set STORE_DOCUMENT_ID to reuse it", store_config["document_id"])

        container = build_container(
            store_config=store_config,
            apply_distance_correction=bool(getattr(settings, "APPLY_DISTANCE_CORRECTION", True)),
        )
        if bool(getattr(settings, "AUTO_SEED_STORE", False)):
            ensure_demo_users(container.store, container.document_id)

    try:
        container.attendance_engine.hydrate()
    except StoreUnavailable as e:
        # Start with an empty cache; the poller fills it once the store answers.
        logger.error("Initial load failed, starting empty: %s", e)

    app.extensions["geo_attendance"] = container

    register_users(app, container)
    register_attendance(app, container)

    interval = float(getattr(settings, "POLL_INTERVAL_SECONDS", 0) or 0)
    if interval > 0 and not app.config["TESTING"]:
        poller = AttendancePoller(container.attendance_engine.refresh, interval_seconds=interval)
        poller.start()
        atexit.register(poller.stop)
        app.extensions["geo_attendance_poller"] = poller

    return app

"""Example: use the engine directly (without Flask).

Goal: show that controllers are a thin layer; the business rules live in the engine.
"""

import importlib

from config import get_settings_module

from src.geo_attendance.geo_attendance.container import build_container


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(store_config=settings.STORE_CONFIG)
    engine = container.attendance_engine
    engine.hydrate()

    active = engine.get_active_session()
    print("Active session:", active.to_dict() if active else None)
    for s in engine.get_previous_sessions()[:5]:
        print(s.code, s.class_name, len(engine.get_session_attendance(s.session_id)), "records")


if __name__ == "__main__":
    main()

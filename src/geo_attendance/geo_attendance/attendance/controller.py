from __future__ import annotations

import io
import logging
from functools import wraps

import qrcode
from flask import Flask, g, jsonify, request, send_file

from ..core.enums import Role
from ..core.exceptions import AuthorizationError, CapabilityError, StoreUnavailable, ValidationError
from ..container import Container
from ..users.controller import current_principal

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    engine = container.attendance_engine

    def role_required(*roles: Role):
        def decorator(view):
            @wraps(view)
            def wrapper(*args, **kwargs):
                principal = current_principal()
                if principal is None:
                    return jsonify({"success": False, "message": "Please log in to continue"}), 401
                if roles and principal.role not in roles:
                    return jsonify({"success": False, "message": "You do not have permission"}), 403
                g.principal = principal
                return view(*args, **kwargs)

            return wrapper

        return decorator

    def handle_errors(view):
        """Map domain errors to JSON responses."""

        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                return view(*args, **kwargs)
            except AuthorizationError as e:
                return jsonify({"success": False, "message": str(e)}), 403
            except (ValidationError, CapabilityError) as e:
                return jsonify({"success": False, "message": str(e)}), 400
            except StoreUnavailable as e:
                return jsonify({"success": False, "message": str(e)}), 503
            except Exception:
                logger.exception("Unhandled error in %s", view.__name__)
                return jsonify({"success": False, "message": "System error"}), 500

        return wrapper

    def _read_position(data: dict) -> tuple[float, float]:
        lat = data.get("latitude")
        lon = data.get("longitude")
        if lat is None or lon is None:
            raise CapabilityError(data.get("locationError") or "Location is required before marking attendance")
        return lat, lon

    def _sessions_json(sessions):
        return jsonify({"success": True, "sessions": [s.to_dict() for s in sessions]})

    # ===== SESSIONS =====

    @app.route("/api/sessions", methods=["POST"], endpoint="create_session")
    @role_required(Role.TEACHER)
    @handle_errors
    def create_session():
        data = request.get_json(silent=True) or {}
        created = engine.create_session(
            g.principal,
            class_name=data.get("className", ""),
            session_date=data.get("date", ""),
            start_time=data.get("startTime", ""),
            end_time=data.get("endTime", ""),
            allowed_distance=data.get("allowedDistance"),
            latitude=data.get("latitude"),
            longitude=data.get("longitude"),
        )
        return jsonify({"success": True, "session": created.to_dict()}), 201

    @app.route("/api/sessions/current", methods=["GET"], endpoint="current_sessions")
    @role_required()
    def current_sessions():
        return _sessions_json(engine.get_current_sessions())

    @app.route("/api/sessions/previous", methods=["GET"], endpoint="previous_sessions")
    @role_required()
    def previous_sessions():
        return _sessions_json(engine.get_previous_sessions())

    @app.route("/api/sessions/active", methods=["GET"], endpoint="active_session")
    @role_required()
    def active_session():
        active = engine.get_active_session()
        return jsonify({"success": True, "session": active.to_dict() if active else None})

    @app.route("/api/sessions/status", methods=["GET"], endpoint="session_status")
    @role_required()
    def session_status():
        state = engine.session_status(request.args.get("code", ""))
        return jsonify({"success": True, "status": state.value})

    @app.route("/api/sessions/<session_id>/attendance", methods=["GET"], endpoint="session_attendance")
    @role_required(Role.TEACHER)
    def session_attendance(session_id: str):
        if engine.find_session(session_id) is None:
            return jsonify({"success": False, "message": "Session not found"}), 404
        records = engine.get_session_attendance(session_id)
        return jsonify({"success": True, "records": [r.to_dict() for r in records]})

    @app.route("/api/sessions/<session_id>/attendance.csv", methods=["GET"], endpoint="session_attendance_csv")
    @role_required(Role.TEACHER)
    @handle_errors
    def session_attendance_csv(session_id: str):
        if engine.find_session(session_id) is None:
            return jsonify({"success": False, "message": "Session not found"}), 404
        export = engine.export_attendance(session_id)
        return app.response_class(
            export.encode(),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={export.filename}"},
        )

    @app.route("/api/sessions/<session_id>/qr", methods=["GET"], endpoint="session_qr")
    @role_required(Role.TEACHER)
    def session_qr(session_id: str):
        """PNG QR code of the session code, for projecting in class."""
        target = engine.find_session(session_id)
        if target is None:
            return jsonify({"success": False, "message": "Session not found"}), 404

        qr = qrcode.QRCode(
            version=1,
            error_correction=qrcode.constants.ERROR_CORRECT_L,
            box_size=10,
            border=2,
        )
        qr.add_data(target.code)
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")

        buf = io.BytesIO()
        img.save(buf, format="PNG")
        buf.seek(0)

        return send_file(buf, mimetype="image/png")

    # ===== ATTENDANCE =====

    @app.route("/api/attendance/check-in", methods=["POST"], endpoint="check_in")
    @role_required(Role.STUDENT)
    @handle_errors
    def check_in():
        data = request.get_json(silent=True) or {}
        lat, lon = _read_position(data)
        if "faceMatched" not in data:
            raise CapabilityError(data.get("faceError") or "Face verification is required before marking attendance")
        if not isinstance(data["faceMatched"], bool):
            raise ValidationError("faceMatched must be true or false")

        result = engine.check_in(
            g.principal,
            str(data.get("sessionCode", "")),
            face_matched=data["faceMatched"],
            latitude=lat,
            longitude=lon,
        )
        return jsonify(result.to_dict())

    @app.route("/api/me/attendance", methods=["GET"], endpoint="my_attendance")
    @role_required(Role.STUDENT)
    def my_attendance():
        records = engine.get_student_attendance(g.principal.student_id or "")
        return jsonify({"success": True, "records": [r.to_dict() for r in records]})

    @app.route("/api/attendance/<record_id>/status", methods=["POST"], endpoint="update_attendance_status")
    @role_required(Role.TEACHER)
    @handle_errors
    def update_attendance_status(record_id: str):
        data = request.get_json(silent=True) or {}
        updated = engine.manually_update_attendance(g.principal, record_id, data.get("status", ""))
        return jsonify({"success": True, "record": updated.to_dict()})

from __future__ import annotations

import logging

from flask import Flask, jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import AuthenticationError, StoreUnavailable, ValidationError
from ..container import Container
from .model import Principal

logger = logging.getLogger(__name__)


def current_principal():
    data = session.get("principal")
    if not data:
        return None
    try:
        return Principal.from_session(data)
    except (KeyError, ValueError):
        session.clear()
        return None


def register(app: Flask, container: Container) -> None:
    def _login(principal: Principal):
        session.clear()
        session["principal"] = principal.to_session()
        return jsonify({"success": True, "user": principal.to_session()})

    @app.route("/api/auth/signup", methods=["POST"], endpoint="signup")
    def signup():
        data = request.get_json(silent=True) or {}
        try:
            try:
                role = Role(data.get("role", Role.STUDENT.value))
            except ValueError:
                raise ValidationError("Invalid account type")

            principal = container.auth_service.signup(
                email=data.get("email", ""),
                name=data.get("name", ""),
                password=data.get("password", ""),
                role=role,
                student_id=data.get("studentId"),
                teacher_id=data.get("teacherId"),
                face_image=data.get("faceImage"),
            )
            return _login(principal)
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e)}), 400
        except StoreUnavailable as e:
            return jsonify({"success": False, "message": str(e)}), 503
        except Exception:
            logger.exception("Signup failed")
            return jsonify({"success": False, "message": "System error during signup"}), 500

    @app.route("/api/auth/login", methods=["POST"], endpoint="login")
    def login():
        data = request.get_json(silent=True) or {}
        try:
            principal = container.auth_service.authenticate(data.get("email", ""), data.get("password", ""))
            return _login(principal)
        except AuthenticationError as e:
            return jsonify({"success": False, "message": str(e)}), 401
        except StoreUnavailable as e:
            return jsonify({"success": False, "message": str(e)}), 503
        except Exception as e:
            logger.exception("Login failed")
            if bool(app.config.get("DEBUG", False)):
                return jsonify({"success": False, "message": f"System error during login: {e}"}), 500
            return jsonify({"success": False, "message": "System error during login"}), 500

    @app.route("/api/auth/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return jsonify({"success": True})

    @app.route("/api/auth/me", methods=["GET"], endpoint="me")
    def me():
        principal = current_principal()
        if principal is None:
            return jsonify({"success": False, "message": "Please log in to continue"}), 401
        try:
            user = container.auth_service.get_user(principal.user_id)
        except StoreUnavailable as e:
            return jsonify({"success": False, "message": str(e)}), 503

        # Account removed from the shared document since login
        if user is None:
            session.clear()
            return jsonify({"success": False, "message": "Please log in to continue"}), 401

        fresh = Principal.of(user)
        session["principal"] = fresh.to_session()
        return jsonify({"success": True, "user": {**fresh.to_session(), "email": user.email}})

from __future__ import annotations

import uuid
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import require_min_length, require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, ValidationError
from .model import Principal, User
from .repository import UserRepository


class AuthService:
    """Use case: sign up and authenticate users."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, email: str, password: str) -> Principal:
        user = self._users.find_by_email(email)
        if not user:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # e.g. legacy entries without a hash or with an unknown scheme
            ok = False

        if not ok:
            raise AuthenticationError("Invalid email or password")

        return Principal.of(user)

    def signup(
        self,
        *,
        email: str,
        name: str,
        password: str,
        role: Role,
        student_id: Optional[str] = None,
        teacher_id: Optional[str] = None,
        face_image: Optional[str] = None,
    ) -> Principal:
        email = require_non_empty(email, "Email")
        name = require_non_empty(name, "Name")
        require_min_length(password, "Password", 6)

        if role == Role.STUDENT:
            student_id = require_non_empty(student_id or "", "Student ID")
        if self._users.find_by_email(email):
            raise ValidationError("Email already exists")

        user = User(
            user_id=uuid.uuid4().hex,
            email=email,
            name=name,
            role=role,
            password_hash=generate_password_hash(password),
            student_id=student_id if role == Role.STUDENT else None,
            teacher_id=teacher_id if role == Role.TEACHER else None,
            face_image=face_image if role == Role.STUDENT else None,
        )
        self._users.create_user(user)
        return Principal.of(user)

    def get_user(self, user_id: str) -> Optional[User]:
        return self._users.get_by_id(user_id)

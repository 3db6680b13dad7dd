from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: an account stored in the `users` collection.

    Note: a plain data object; reading and writing the store happens in the repository.
    """

    user_id: str
    email: str
    name: str
    role: Role
    password_hash: str = ""
    student_id: Optional[str] = None
    teacher_id: Optional[str] = None
    face_image: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.user_id,
            "email": self.email,
            "name": self.name,
            "role": self.role.value,
            "passwordHash": self.password_hash,
        }
        if self.student_id is not None:
            data["studentId"] = self.student_id
        if self.teacher_id is not None:
            data["teacherId"] = self.teacher_id
        if self.face_image is not None:
            data["faceImage"] = self.face_image
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "User":
        return cls(
            user_id=str(data["id"]),
            email=str(data["email"]),
            name=str(data.get("name") or ""),
            role=Role(data["role"]),
            password_hash=str(data.get("passwordHash") or ""),
            student_id=data.get("studentId"),
            teacher_id=data.get("teacherId"),
            face_image=data.get("faceImage"),
        )


@dataclass(frozen=True)
class Principal:
    """The authenticated user as the engine sees it (stored in the Flask session)."""

    user_id: str
    name: str
    role: Role
    student_id: Optional[str] = None
    teacher_id: Optional[str] = None

    @classmethod
    def of(cls, user: User) -> "Principal":
        return cls(
            user_id=user.user_id,
            name=user.name,
            role=user.role,
            student_id=user.student_id,
            teacher_id=user.teacher_id,
        )

    def to_session(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "name": self.name,
            "role": self.role.value,
            "student_id": self.student_id,
            "teacher_id": self.teacher_id,
        }

    @classmethod
    def from_session(cls, data: Mapping[str, Any]) -> "Principal":
        return cls(
            user_id=str(data["user_id"]),
            name=str(data.get("name") or ""),
            role=Role(data["role"]),
            student_id=data.get("student_id"),
            teacher_id=data.get("teacher_id"),
        )

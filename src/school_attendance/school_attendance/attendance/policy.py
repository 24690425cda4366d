from __future__ import annotations

from ..core.enums import Role
from ..users.model import User


class AttendanceAccessPolicy:
    """Who may record or read attendance for a class/subject."""

    def can_manage(self, actor: User, *, class_label: str, subject: str) -> bool:
        if actor.is_admin:
            return True
        if actor.role != Role.FACULTY:
            return False
        return subject in actor.subjects or class_label in actor.assigned_classes

    def can_view_student(self, actor: User, *, student: User | None, student_id: str) -> bool:
        if actor.role in (Role.ADMIN, Role.FACULTY):
            return True
        if actor.user_id == student_id:
            return True
        return actor.role == Role.PARENT and student is not None and student.parent_id == actor.user_id

    def can_correct(self, actor: User, *, marked_by: str) -> bool:
        if actor.is_admin:
            return True
        return actor.role == Role.FACULTY and actor.user_id == marked_by

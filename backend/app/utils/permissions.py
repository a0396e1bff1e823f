"""Permissions 관련 공용 유틸리티 헬퍼입니다."""

from typing import Optional

from app.models.user import User
from app.services.content_errors import UnauthorizedError


ADMIN = "admin"
EDITOR = "editor"
VIEWER = "viewer"

ALL_ROLES = (ADMIN, EDITOR, VIEWER)


def is_admin(user: Optional[User]) -> bool:
    return bool(user is not None and getattr(user, "is_active", True) and user.role == ADMIN)


def ensure_admin(user: Optional[User]) -> None:
    # 관리자 판정 실패 시 어떤 I/O도 하기 전에 중단한다.
    if not is_admin(user):
        raise UnauthorizedError()

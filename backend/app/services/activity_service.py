"""관리자 활동 로그(append-only) 기록 서비스입니다.

계획 실행/되돌리기 서비스에 주입해서 사용한다. 테스트에서는 NullActivitySink로 대체한다.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.models.activity_log import AdminActivityLog


class ActivitySink:
    def record(
        self,
        action: str,
        *,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        user_id: Optional[int] = None,
    ) -> None:
        raise NotImplementedError


class NullActivitySink(ActivitySink):
    def record(self, action: str, **kwargs) -> None:
        return None


class DatabaseActivitySink(ActivitySink):
    """같은 세션에 로그 행을 추가한다. commit은 호출 서비스의 트랜잭션을 따른다."""

    def __init__(self, db: Session):
        self.db = db

    def record(
        self,
        action: str,
        *,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        user_id: Optional[int] = None,
    ) -> None:
        self.db.add(
            AdminActivityLog(
                action=action,
                entity_type=entity_type,
                entity_id=entity_id,
                details=details,
                user_id=user_id,
            )
        )


def list_activity(db: Session, limit: int = 50, action: Optional[str] = None) -> List[AdminActivityLog]:
    q = db.query(AdminActivityLog)
    if action:
        q = q.filter(AdminActivityLog.action == action)
    return q.order_by(AdminActivityLog.created_at.desc(), AdminActivityLog.log_id.desc()).limit(limit).all()

"""실행된 action의 이전/이후 스냅샷을 변경 이력(Change)으로 저장/조회하는 도메인 서비스입니다."""

import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.content_plan import ContentChange
from app.services.action_executor import ActionResult
from app.services.content_errors import HistoryIntegrityError, NotFoundError

logger = logging.getLogger(__name__)

_EXPECTED_SNAPSHOTS = {
    # action_type: (previous_data 필요, new_data 필요)
    "create": (False, True),
    "update": (True, True),
    "delete": (True, False),
}


def record_change(
    db: Session,
    *,
    plan_id: str,
    sequence: int,
    result: ActionResult,
) -> ContentChange:
    expected = _EXPECTED_SNAPSHOTS.get(result.action_type)
    has_previous = result.previous_data is not None
    has_new = result.new_data is not None
    if expected is None or expected != (has_previous, has_new):
        raise HistoryIntegrityError(
            f"변경 이력 스냅샷이 action 유형({result.action_type})과 맞지 않습니다."
        )

    row = ContentChange(
        plan_id=plan_id,
        sequence=sequence,
        table_name=result.table.value,
        record_id=result.record_id,
        action_type=result.action_type,
        previous_data=result.previous_data,
        new_data=result.new_data,
        reverted=False,
    )
    try:
        db.add(row)
        db.flush()
    except SQLAlchemyError as exc:
        logger.error(
            "[content-hub] failed to record change plan=%s seq=%s table=%s record=%s: %s",
            plan_id, sequence, row.table_name, row.record_id, exc,
        )
        raise HistoryIntegrityError("변경 이력을 저장하지 못했습니다. 계획 실행을 중단합니다.") from exc
    return row


def get_change(db: Session, change_id: str) -> ContentChange:
    row = db.query(ContentChange).filter(ContentChange.id == change_id).first()
    if not row:
        raise NotFoundError("변경 이력을 찾을 수 없습니다.")
    return row


def list_plan_changes(db: Session, plan_id: str, *, active_only: bool = False) -> List[ContentChange]:
    q = db.query(ContentChange).filter(ContentChange.plan_id == plan_id)
    if active_only:
        q = q.filter(ContentChange.reverted == False)  # noqa: E712
    return q.order_by(ContentChange.sequence.asc()).all()


def list_recent_changes(db: Session, limit: int = 50, table_name: Optional[str] = None) -> List[ContentChange]:
    q = db.query(ContentChange)
    if table_name:
        q = q.filter(ContentChange.table_name == table_name)
    return (
        q.order_by(ContentChange.created_at.desc(), ContentChange.sequence.desc())
        .limit(limit)
        .all()
    )

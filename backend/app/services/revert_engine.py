"""변경 이력(Change) 단위/계획 단위 되돌리기를 담당하는 도메인 서비스입니다."""

import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.content_plan import ContentChange, ContentPlan
from app.models.user import User
from app.schemas.content_hub import PlanRevertResult, SkippedChange
from app.services import diff_recorder
from app.services.activity_service import ActivitySink, NullActivitySink
from app.services.content_errors import (
    ContentHubError,
    NotFoundError,
    PlanStateError,
    RevertConflictError,
)
from app.services.content_store import ContentStore
from app.services.plan_engine import EXECUTED, PROPOSED, REVERTED
from app.utils.content_tables import resolve_table
from app.utils.helpers import utcnow
from app.utils.permissions import ensure_admin

logger = logging.getLogger(__name__)


class RevertEngine:
    def __init__(
        self,
        db: Session,
        activity: Optional[ActivitySink] = None,
        store: Optional[ContentStore] = None,
    ):
        self.db = db
        self.activity = activity or NullActivitySink()
        self.store = store or ContentStore(db)

    def _get_plan(self, plan_id: str) -> ContentPlan:
        plan = self.db.query(ContentPlan).filter(ContentPlan.id == plan_id).first()
        if not plan:
            raise NotFoundError("콘텐츠 계획을 찾을 수 없습니다.")
        return plan

    def _apply_inverse(self, change: ContentChange) -> None:
        try:
            table = resolve_table(change.table_name)
        except ContentHubError as exc:
            raise RevertConflictError(exc.detail)

        if change.action_type == "create":
            # 생성 취소: 만든 레코드를 삭제한다.
            if not self.store.delete(table, change.record_id):
                raise RevertConflictError(
                    f"{change.table_name} 레코드({change.record_id})가 이미 삭제되어 생성을 취소할 수 없습니다."
                )
        elif change.action_type == "update":
            if change.previous_data is None:
                raise RevertConflictError("이전 스냅샷이 없어 수정을 되돌릴 수 없습니다.")
            restored = self.store.update(table, change.record_id, change.previous_data, restore=True)
            if restored is None:
                raise RevertConflictError(
                    f"{change.table_name} 레코드({change.record_id})가 이후 삭제되어 수정을 되돌릴 수 없습니다."
                )
        elif change.action_type == "delete":
            if change.previous_data is None:
                raise RevertConflictError("이전 스냅샷이 없어 삭제를 되돌릴 수 없습니다.")
            restored = self.store.insert(table, change.previous_data, restore=True)
            if restored["id"] != change.record_id:
                logger.info(
                    "[content-hub][revert] %s record %s restored under new id %s",
                    change.table_name, change.record_id, restored["id"],
                )
        else:
            raise RevertConflictError(f"알 수 없는 action 유형입니다: {change.action_type}")

    def _revert_one(self, change: ContentChange, actor: User) -> None:
        change_id = change.id
        try:
            self._apply_inverse(change)
            change.reverted = True
            change.reverted_at = utcnow()
            self.activity.record(
                "change_reverted",
                entity_type=change.table_name,
                entity_id=change.record_id,
                details={"change_id": change_id, "plan_id": change.plan_id, "action_type": change.action_type},
                user_id=actor.user_id,
            )
            self.db.commit()
        except RevertConflictError:
            self.db.rollback()
            raise
        except ContentHubError as exc:
            self.db.rollback()
            raise RevertConflictError(exc.detail) from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.warning("[content-hub][revert] store rejected inverse of change=%s: %s", change_id, exc)
            raise RevertConflictError("현재 데이터 상태와 충돌하여 변경을 되돌릴 수 없습니다.") from exc

    def _mark_reverted(self, plan_id: str, actor: User, details: Optional[dict] = None) -> None:
        plan = self._get_plan(plan_id)
        plan.status = REVERTED
        plan.reverted_at = utcnow()
        self.activity.record(
            "plan_reverted",
            entity_type="content_plan",
            entity_id=plan_id,
            details={"title": plan.title, **(details or {})},
            user_id=actor.user_id,
        )
        self.db.commit()
        logger.info("[content-hub][revert] plan reverted id=%s", plan_id)

    def _close_plan_if_done(self, plan_id: str, actor: User) -> None:
        if self._get_plan(plan_id).status != EXECUTED:
            return
        if diff_recorder.list_plan_changes(self.db, plan_id, active_only=True):
            return
        self._mark_reverted(plan_id, actor)

    def revert_change(self, actor: User, change_id: str) -> ContentChange:
        ensure_admin(actor)
        change = diff_recorder.get_change(self.db, change_id)
        if change.reverted:
            return change
        plan_id = change.plan_id
        self._revert_one(change, actor)
        self._close_plan_if_done(plan_id, actor)
        return diff_recorder.get_change(self.db, change_id)

    def revert_plan(self, actor: User, plan_id: str) -> PlanRevertResult:
        ensure_admin(actor)
        plan = self._get_plan(plan_id)
        if plan.status == PROPOSED:
            raise PlanStateError("아직 실행되지 않은 계획은 되돌릴 수 없습니다.")
        if plan.status == REVERTED:
            return PlanRevertResult(
                plan_id=plan_id, status=REVERTED, outcome="noop", reverted_count=0,
                message="이미 되돌린 계획입니다.",
            )

        # 가장 최근 변경부터 스택처럼 되돌린다.
        changes: List[ContentChange] = list(
            reversed(diff_recorder.list_plan_changes(self.db, plan_id, active_only=True))
        )
        reverted_count = 0
        skipped: List[SkippedChange] = []
        for change in changes:
            snapshot = SkippedChange(
                change_id=change.id,
                table_name=change.table_name,
                record_id=change.record_id,
                action_type=change.action_type,
                detail="",
            )
            try:
                self._revert_one(change, actor)
                reverted_count += 1
            except RevertConflictError as exc:
                logger.warning(
                    "[content-hub][revert] skipped change=%s plan=%s: %s",
                    snapshot.change_id, plan_id, exc.detail,
                )
                snapshot.detail = exc.detail
                skipped.append(snapshot)

        # 건너뛴 변경은 reverted=False로 남아 revert_change로 개별 재시도할 수 있다.
        self._mark_reverted(
            plan_id,
            actor,
            details={"reverted": reverted_count, "skipped": [s.change_id for s in skipped]},
        )
        if not skipped:
            return PlanRevertResult(
                plan_id=plan_id,
                status=REVERTED,
                outcome="reverted",
                reverted_count=reverted_count,
                message=f"{reverted_count}개 변경을 되돌렸습니다.",
            )
        return PlanRevertResult(
            plan_id=plan_id,
            status=REVERTED,
            outcome="partial",
            reverted_count=reverted_count,
            skipped=skipped,
            message=f"{reverted_count}개 변경을 되돌렸고 {len(skipped)}개는 충돌로 건너뛰었습니다.",
        )

"""콘텐츠 계획의 생명주기(proposed → executed → reverted)와 순차 실행을 담당하는 도메인 서비스입니다.

각 action은 ActionExecutor로 적용되고, 성공한 action은 같은 트랜잭션 안에서
변경 이력(Change)으로 기록된 뒤 commit된다. 개별 action 실패는 수집만 하고 다음
action으로 넘어간다. 이력 기록 실패는 되돌릴 수 없는 변경을 남기므로 즉시 중단한다.
"""

import logging
import re
from typing import Any, Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.content_plan import ContentChange, ContentPlan
from app.models.user import User
from app.schemas.content_hub import (
    ContentAction,
    ContentPlanCreate,
    ContentPlanUpdate,
    FailedAction,
    PlanExecutionResult,
)
from app.services import diff_recorder
from app.services.action_executor import ActionExecutor
from app.services.activity_service import ActivitySink, NullActivitySink
from app.services.content_errors import (
    ContentHubError,
    HistoryIntegrityError,
    NotFoundError,
    PlanStateError,
    ValidationError,
)
from app.services.content_store import ContentStore
from app.utils.helpers import utcnow
from app.utils.permissions import ensure_admin

logger = logging.getLogger(__name__)

PROPOSED = "proposed"
EXECUTED = "executed"
REVERTED = "reverted"

# 같은 계획 안에서 앞선 create action이 만든 id를 가리키는 자리표시자 ($ref:0 등)
REF_PATTERN = re.compile(r"^\$ref:(\d+)$")


class PlanEngine:
    def __init__(
        self,
        db: Session,
        activity: Optional[ActivitySink] = None,
        executor: Optional[ActionExecutor] = None,
    ):
        self.db = db
        self.activity = activity or NullActivitySink()
        self.executor = executor or ActionExecutor(ContentStore(db))

    def _get_plan(self, plan_id: str) -> ContentPlan:
        plan = self.db.query(ContentPlan).filter(ContentPlan.id == plan_id).first()
        if not plan:
            raise NotFoundError("콘텐츠 계획을 찾을 수 없습니다.")
        return plan

    def _require_proposed(self, plan: ContentPlan, verb: str) -> None:
        if plan.status != PROPOSED:
            raise PlanStateError(f"'{plan.status}' 상태의 계획은 {verb}할 수 없습니다.")

    def _dump_actions(self, actions: List[ContentAction]) -> List[Dict[str, Any]]:
        return [a.model_dump() for a in actions]

    # ------------------------------------------------------------------ 조회/저장

    def get_plan(self, actor: User, plan_id: str) -> ContentPlan:
        ensure_admin(actor)
        return self._get_plan(plan_id)

    def list_plans(self, actor: User, status: Optional[str] = None, limit: int = 20) -> List[ContentPlan]:
        ensure_admin(actor)
        q = self.db.query(ContentPlan)
        if status:
            statuses = [s.strip() for s in status.split(",") if s.strip()]
            q = q.filter(ContentPlan.status.in_(statuses))
        return q.order_by(ContentPlan.created_at.desc(), ContentPlan.id.desc()).limit(limit).all()

    def list_history(self, actor: User, limit: int = 20) -> List[ContentPlan]:
        # 변경 이력은 ContentPlan.changes(sequence 순)로 함께 응답한다.
        return self.list_plans(actor, status=f"{EXECUTED},{REVERTED}", limit=limit)

    def save_plan(self, actor: User, payload: ContentPlanCreate) -> ContentPlan:
        ensure_admin(actor)
        plan = ContentPlan(
            title=payload.title,
            summary=payload.summary,
            actions=self._dump_actions(payload.actions),
            status=PROPOSED,
            conversation_id=payload.conversation_id,
            created_by=actor.user_id,
        )
        self.db.add(plan)
        self.db.flush()
        self.activity.record(
            "plan_saved",
            entity_type="content_plan",
            entity_id=plan.id,
            details={"title": plan.title, "action_count": len(payload.actions)},
            user_id=actor.user_id,
        )
        self.db.commit()
        self.db.refresh(plan)
        logger.info("[content-hub] plan saved id=%s actions=%d", plan.id, len(payload.actions))
        return plan

    def update_plan(self, actor: User, plan_id: str, payload: ContentPlanUpdate) -> ContentPlan:
        ensure_admin(actor)
        plan = self._get_plan(plan_id)
        self._require_proposed(plan, "수정")
        if plan.executed_at is not None:
            raise PlanStateError("실행이 시작된 계획은 수정할 수 없습니다.")
        if payload.title is not None:
            plan.title = payload.title
        if payload.summary is not None:
            plan.summary = payload.summary
        if payload.actions is not None:
            plan.actions = self._dump_actions(payload.actions)
        self.db.commit()
        self.db.refresh(plan)
        return plan

    def discard_plan(self, actor: User, plan_id: str) -> None:
        ensure_admin(actor)
        plan = self._get_plan(plan_id)
        self._require_proposed(plan, "삭제")
        if self._has_changes(plan.id):
            raise PlanStateError("실행 이력이 남아 있는 계획은 삭제할 수 없습니다. 먼저 정리해주세요.")
        self.activity.record(
            "plan_discarded",
            entity_type="content_plan",
            entity_id=plan.id,
            details={"title": plan.title},
            user_id=actor.user_id,
        )
        self.db.delete(plan)
        self.db.commit()

    def _has_changes(self, plan_id: str) -> bool:
        return (
            self.db.query(ContentChange.id)
            .filter(ContentChange.plan_id == plan_id)
            .first()
            is not None
        )

    def _claim(self, plan_id: str) -> bool:
        # executed_at을 실행 선점 표시로 쓴다. 이미 선점된 계획은 0행이 갱신된다.
        claimed = (
            self.db.query(ContentPlan)
            .filter(
                ContentPlan.id == plan_id,
                ContentPlan.status == PROPOSED,
                ContentPlan.executed_at.is_(None),
            )
            .update({ContentPlan.executed_at: utcnow()}, synchronize_session=False)
        )
        self.db.commit()
        return claimed == 1

    def find_orphaned_plans(self, actor: User) -> List[ContentPlan]:
        """실행이 시작됐지만(선점 또는 변경 이력 존재) 상태가 proposed에 머문 계획 목록."""
        ensure_admin(actor)
        return (
            self.db.query(ContentPlan)
            .filter(ContentPlan.status == PROPOSED)
            .filter(or_(ContentPlan.executed_at.isnot(None), ContentPlan.changes.any()))
            .order_by(ContentPlan.created_at.desc())
            .all()
        )

    # ------------------------------------------------------------------ 실행

    def _resolve_value(self, value: Any, index: int, created_ids: Dict[int, str]) -> Any:
        if not isinstance(value, str):
            return value
        match = REF_PATTERN.match(value.strip())
        if not match:
            return value
        ref = int(match.group(1))
        if ref >= index:
            raise ValidationError(f"{index}번 action은 이후 action({ref})의 결과를 참조할 수 없습니다.")
        if ref not in created_ids:
            raise ValidationError(f"{ref}번 action이 생성한 레코드가 없어 참조를 해석할 수 없습니다.")
        return created_ids[ref]

    def _resolve_refs(self, index: int, action: ContentAction, created_ids: Dict[int, str]) -> ContentAction:
        data = action.data
        if data:
            data = {k: self._resolve_value(v, index, created_ids) for k, v in data.items()}
        return action.model_copy(
            update={
                "record_id": self._resolve_value(action.record_id, index, created_ids),
                "data": data,
            }
        )

    def _failure(self, index: int, action: ContentAction, error: str, detail: str, missing=None) -> FailedAction:
        return FailedAction(
            index=index,
            type=action.type,
            table=action.table,
            record_id=action.record_id,
            description=action.description,
            error=error,
            detail=detail,
            missing_fields=list(missing or []),
        )

    def execute_plan(self, actor: User, plan_id: str) -> PlanExecutionResult:
        ensure_admin(actor)
        plan = self._get_plan(plan_id)
        self._require_proposed(plan, "실행")
        actions = [ContentAction.model_validate(a) for a in (plan.actions or [])]
        if not actions:
            raise ValidationError("실행할 action이 없는 계획입니다.")
        if self._has_changes(plan.id):
            raise PlanStateError("이전 실행이 중단된 계획입니다. 변경 이력을 확인한 뒤 수동으로 정리해주세요.")

        plan_id = plan.id
        if not self._claim(plan_id):
            raise PlanStateError("이미 실행 중이거나 실행이 중단된 계획입니다.")
        created_ids: Dict[int, str] = {}
        failed: List[FailedAction] = []
        change_ids: List[str] = []

        for index, action in enumerate(actions):
            try:
                resolved = self._resolve_refs(index, action, created_ids)
                result = self.executor.execute(resolved)
            except ContentHubError as exc:
                self.db.rollback()
                logger.warning(
                    "[content-hub] action %d failed plan=%s type=%s table=%s: %s",
                    index, plan_id, action.type, action.table, exc.detail,
                )
                failed.append(
                    self._failure(
                        index, action, type(exc).__name__, exc.detail,
                        getattr(exc, "missing_fields", None),
                    )
                )
                continue
            except SQLAlchemyError as exc:
                self.db.rollback()
                logger.warning(
                    "[content-hub] action %d rejected by store plan=%s table=%s: %s",
                    index, plan_id, action.table, exc,
                )
                failed.append(self._failure(index, action, "StoreError", "저장소가 변경을 거부했습니다."))
                continue

            try:
                change = diff_recorder.record_change(
                    self.db, plan_id=plan_id, sequence=index, result=result,
                )
                self.db.commit()
            except (HistoryIntegrityError, SQLAlchemyError) as exc:
                self.db.rollback()
                logger.error(
                    "[content-hub] aborting plan=%s at action %d, change could not be recorded: %s",
                    plan_id, index, exc,
                )
                if isinstance(exc, HistoryIntegrityError):
                    raise
                raise HistoryIntegrityError("변경 이력을 저장하지 못했습니다. 계획 실행을 중단합니다.") from exc

            if result.action_type == "create":
                created_ids[index] = result.record_id
            change_ids.append(change.id)

        total = len(actions)
        succeeded = total - len(failed)
        try:
            plan = self._get_plan(plan_id)
            plan.status = EXECUTED
            plan.executed_at = utcnow()
            self.activity.record(
                "plan_executed",
                entity_type="content_plan",
                entity_id=plan_id,
                details={
                    "title": plan.title,
                    "succeeded": succeeded,
                    "total": total,
                    "failed_indexes": [f.index for f in failed],
                },
                user_id=actor.user_id,
            )
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("[content-hub] failed to mark plan=%s executed: %s", plan_id, exc)
            raise HistoryIntegrityError("계획 상태를 저장하지 못했습니다. 변경 이력을 확인해주세요.") from exc

        logger.info("[content-hub] plan executed id=%s applied=%d/%d", plan_id, succeeded, total)
        return PlanExecutionResult(
            plan_id=plan_id,
            status=EXECUTED,
            outcome="applied" if not failed else "partial",
            succeeded_count=succeeded,
            total_count=total,
            failed_actions=failed,
            change_ids=change_ids,
            message=f"{total}개 중 {succeeded}개 action을 적용했습니다.",
        )

"""Content Hub API 라우터입니다. AI 대화, 계획 저장/실행, 변경 이력 되돌리기를 제공합니다."""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.middleware.auth_middleware import get_current_user
from app.models.user import User
from app.schemas.content_hub import (
    ActivityOut,
    ChatRequest,
    ChatResponse,
    ContentChangeOut,
    ContentPlanCreate,
    ContentPlanDetail,
    ContentPlanOut,
    ContentPlanUpdate,
    ConversationOut,
    ConversationSummary,
    PlanExecutionResult,
    PlanRevertResult,
)
from app.services import activity_service, conversation_service, diff_recorder
from app.services.activity_service import DatabaseActivitySink
from app.services.content_errors import ContentHubError, UpstreamServiceError
from app.services.plan_engine import PlanEngine
from app.services.plan_proposer import ContentPlanProposer
from app.services.revert_engine import RevertEngine
from app.services.snapshot_service import build_site_snapshot
from app.utils.permissions import ensure_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/content-hub", tags=["content-hub"])


def get_plan_proposer() -> ContentPlanProposer:
    return ContentPlanProposer()


def _http_error(exc: ContentHubError) -> HTTPException:
    if isinstance(exc, UpstreamServiceError):
        return HTTPException(
            status_code=exc.status_code,
            detail={"reason": exc.reason, "message": exc.detail},
        )
    return HTTPException(status_code=exc.status_code, detail=exc.detail)


def _require_admin(current_user: User) -> None:
    try:
        ensure_admin(current_user)
    except ContentHubError as exc:
        raise _http_error(exc)


def _plan_engine(db: Session) -> PlanEngine:
    return PlanEngine(db, DatabaseActivitySink(db))


def _revert_engine(db: Session) -> RevertEngine:
    return RevertEngine(db, DatabaseActivitySink(db))


# ---------------------------------------------------------------------- chat


@router.post("/chat", response_model=ChatResponse)
def chat(
    req: ChatRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    proposer: ContentPlanProposer = Depends(get_plan_proposer),
):
    try:
        return conversation_service.chat(
            db, current_user, req.message, req.conversation_id, proposer=proposer,
        )
    except ContentHubError as exc:
        raise _http_error(exc)
    except Exception as e:
        logger.warning("[content-hub] chat failed: %s", e)
        raise HTTPException(status_code=503, detail=f"AI 서비스 오류: {str(e)}")


@router.get("/conversations", response_model=List[ConversationSummary])
def list_conversations(
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _require_admin(current_user)
    return conversation_service.list_conversations(db, limit=limit)


@router.get("/conversations/{conversation_id}", response_model=ConversationOut)
def get_conversation(
    conversation_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _require_admin(current_user)
    try:
        return conversation_service.get_conversation(db, conversation_id)
    except ContentHubError as exc:
        raise _http_error(exc)


@router.get("/snapshot", response_model=Dict[str, Any])
def get_snapshot(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _require_admin(current_user)
    return build_site_snapshot(db)


# ---------------------------------------------------------------------- plans


@router.post("/plans", response_model=ContentPlanOut)
def save_plan(
    data: ContentPlanCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        return _plan_engine(db).save_plan(current_user, data)
    except ContentHubError as exc:
        raise _http_error(exc)


@router.get("/plans", response_model=List[ContentPlanOut])
def list_plans(
    status: Optional[str] = None,
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        return _plan_engine(db).list_plans(current_user, status=status, limit=limit)
    except ContentHubError as exc:
        raise _http_error(exc)


@router.get("/plans/orphaned", response_model=List[ContentPlanOut])
def list_orphaned_plans(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        return _plan_engine(db).find_orphaned_plans(current_user)
    except ContentHubError as exc:
        raise _http_error(exc)


@router.get("/plans/{plan_id}", response_model=ContentPlanDetail)
def get_plan(
    plan_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        return _plan_engine(db).get_plan(current_user, plan_id)
    except ContentHubError as exc:
        raise _http_error(exc)


@router.put("/plans/{plan_id}", response_model=ContentPlanOut)
def update_plan(
    plan_id: str,
    data: ContentPlanUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        return _plan_engine(db).update_plan(current_user, plan_id, data)
    except ContentHubError as exc:
        raise _http_error(exc)


@router.delete("/plans/{plan_id}")
def discard_plan(
    plan_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        _plan_engine(db).discard_plan(current_user, plan_id)
    except ContentHubError as exc:
        raise _http_error(exc)
    return {"message": "삭제되었습니다."}


@router.post("/plans/{plan_id}/execute", response_model=PlanExecutionResult)
def execute_plan(
    plan_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        return _plan_engine(db).execute_plan(current_user, plan_id)
    except ContentHubError as exc:
        raise _http_error(exc)


@router.post("/plans/{plan_id}/revert", response_model=PlanRevertResult)
def revert_plan(
    plan_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        return _revert_engine(db).revert_plan(current_user, plan_id)
    except ContentHubError as exc:
        raise _http_error(exc)


# ---------------------------------------------------------------------- history


@router.get("/history", response_model=List[ContentPlanDetail])
def list_history(
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        return _plan_engine(db).list_history(current_user, limit=limit)
    except ContentHubError as exc:
        raise _http_error(exc)


@router.get("/changes", response_model=List[ContentChangeOut])
def list_changes(
    table: Optional[str] = None,
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _require_admin(current_user)
    return diff_recorder.list_recent_changes(db, limit=limit, table_name=table)


@router.post("/changes/{change_id}/revert", response_model=ContentChangeOut)
def revert_change(
    change_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        return _revert_engine(db).revert_change(current_user, change_id)
    except ContentHubError as exc:
        raise _http_error(exc)


@router.get("/activity", response_model=List[ActivityOut])
def list_activity(
    action: Optional[str] = None,
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _require_admin(current_user)
    return activity_service.list_activity(db, limit=limit, action=action)

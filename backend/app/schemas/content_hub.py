"""Content Hub(계획/변경 이력/대화) 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

ActionType = Literal["create", "update", "delete"]
PlanStatus = Literal["proposed", "executed", "reverted"]


class ContentAction(BaseModel):
    type: ActionType
    table: str
    record_id: Optional[str] = None
    data: Optional[Dict[str, Any]] = None
    description: str = ""


class CandidatePlan(BaseModel):
    title: str
    summary: str = ""
    actions: List[ContentAction] = []


class ContentPlanCreate(CandidatePlan):
    conversation_id: Optional[str] = None


class ContentPlanUpdate(BaseModel):
    title: Optional[str] = None
    summary: Optional[str] = None
    actions: Optional[List[ContentAction]] = None


class ContentChangeOut(BaseModel):
    id: str
    plan_id: str
    sequence: int
    table_name: str
    record_id: str
    action_type: str
    previous_data: Optional[Dict[str, Any]] = None
    new_data: Optional[Dict[str, Any]] = None
    reverted: bool
    reverted_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ContentPlanOut(BaseModel):
    id: str
    title: str
    summary: Optional[str] = None
    actions: List[ContentAction]
    status: PlanStatus
    conversation_id: Optional[str] = None
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    executed_at: Optional[datetime] = None
    reverted_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ContentPlanDetail(ContentPlanOut):
    changes: List[ContentChangeOut] = []


class FailedAction(BaseModel):
    index: int
    type: str
    table: str
    record_id: Optional[str] = None
    description: str = ""
    error: str
    detail: str
    missing_fields: List[str] = []


class PlanExecutionResult(BaseModel):
    plan_id: str
    status: PlanStatus
    outcome: Literal["applied", "partial"]
    succeeded_count: int
    total_count: int
    failed_actions: List[FailedAction] = []
    change_ids: List[str] = []
    message: str = ""


class SkippedChange(BaseModel):
    change_id: str
    table_name: str
    record_id: str
    action_type: str
    detail: str


class PlanRevertResult(BaseModel):
    plan_id: str
    status: PlanStatus
    outcome: Literal["reverted", "partial", "noop"]
    reverted_count: int
    skipped: List[SkippedChange] = []
    message: str = ""


class ProposalResult(BaseModel):
    kind: Literal["plan", "reply"]
    reply: str = ""
    plans: List[CandidatePlan] = []


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str
    timestamp: Optional[str] = None
    plans: Optional[List[CandidatePlan]] = None


class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1)
    conversation_id: Optional[str] = None


class ChatResponse(BaseModel):
    conversation_id: str
    kind: Literal["plan", "reply"]
    reply: str
    plans: List[CandidatePlan] = []


class ConversationSummary(BaseModel):
    id: str
    title: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ConversationOut(ConversationSummary):
    messages: List[ChatMessage] = []


class ActivityOut(BaseModel):
    log_id: int
    action: str
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    user_id: Optional[int] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

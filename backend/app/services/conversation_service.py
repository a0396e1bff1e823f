"""Content Hub 대화 저장/조회와 채팅 한 턴 처리를 담당합니다."""

from typing import List, Optional

from sqlalchemy.orm import Session

from app.models.conversation import AIConversation
from app.models.user import User
from app.schemas.content_hub import ChatResponse
from app.services.content_errors import NotFoundError
from app.services.plan_proposer import ContentPlanProposer
from app.services.snapshot_service import build_site_snapshot
from app.utils.helpers import utcnow
from app.utils.permissions import ensure_admin

TITLE_LIMIT = 60


def get_conversation(db: Session, conversation_id: str) -> AIConversation:
    row = db.query(AIConversation).filter(AIConversation.id == conversation_id).first()
    if not row:
        raise NotFoundError("대화를 찾을 수 없습니다.")
    return row


def list_conversations(db: Session, limit: int = 20) -> List[AIConversation]:
    return (
        db.query(AIConversation)
        .order_by(AIConversation.updated_at.desc(), AIConversation.created_at.desc())
        .limit(limit)
        .all()
    )


def chat(
    db: Session,
    actor: User,
    message: str,
    conversation_id: Optional[str] = None,
    proposer: Optional[ContentPlanProposer] = None,
) -> ChatResponse:
    ensure_admin(actor)
    conversation = get_conversation(db, conversation_id) if conversation_id else None
    history = list(conversation.messages or []) if conversation else []
    history.append({"role": "user", "content": message, "timestamp": utcnow().isoformat()})

    result = (proposer or ContentPlanProposer()).propose(actor, history, build_site_snapshot(db))

    assistant = {"role": "assistant", "content": result.reply, "timestamp": utcnow().isoformat()}
    if result.plans:
        assistant["plans"] = [p.model_dump() for p in result.plans]
    history.append(assistant)

    if conversation is None:
        conversation = AIConversation(
            title=message.strip()[:TITLE_LIMIT] or "New Conversation",
            messages=history,
            created_by=actor.user_id,
        )
        db.add(conversation)
    else:
        conversation.messages = history
        conversation.updated_at = utcnow()
    db.commit()
    db.refresh(conversation)

    return ChatResponse(
        conversation_id=conversation.id,
        kind=result.kind,
        reply=result.reply,
        plans=result.plans,
    )

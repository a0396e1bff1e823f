"""AI 콘텐츠 변경 계획과 실행 이력(Change)을 저장하는 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, JSON, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base
from app.utils.helpers import new_uuid


class ContentPlan(Base):
    __tablename__ = "content_plan"

    id = Column(String(36), primary_key=True, default=new_uuid)
    title = Column(String(300), nullable=False)
    summary = Column(Text)
    actions = Column(JSON, nullable=False)  # [{type, table, record_id, data, description}]
    status = Column(String(20), nullable=False, default="proposed")  # proposed/executed/reverted
    conversation_id = Column(String(36), ForeignKey("ai_conversation.id", ondelete="SET NULL"), nullable=True)
    created_by = Column(Integer, ForeignKey("users.user_id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    executed_at = Column(DateTime, nullable=True)
    reverted_at = Column(DateTime, nullable=True)

    changes = relationship(
        "ContentChange",
        back_populates="plan",
        order_by="ContentChange.sequence",
    )

    __table_args__ = (
        Index("idx_content_plan_status", "status", "created_at"),
    )


class ContentChange(Base):
    __tablename__ = "content_change"

    id = Column(String(36), primary_key=True, default=new_uuid)
    plan_id = Column(String(36), ForeignKey("content_plan.id"), nullable=False)
    sequence = Column(Integer, nullable=False)  # 계획 내 action 순번
    table_name = Column(String(50), nullable=False)
    record_id = Column(String(36), nullable=False)
    action_type = Column(String(10), nullable=False)  # create/update/delete
    previous_data = Column(JSON, nullable=True)
    new_data = Column(JSON, nullable=True)
    reverted = Column(Boolean, nullable=False, default=False)
    reverted_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    plan = relationship("ContentPlan", back_populates="changes")

    __table_args__ = (
        Index("idx_content_change_plan", "plan_id", "reverted", "sequence"),
        Index("idx_content_change_record", "table_name", "record_id"),
    )

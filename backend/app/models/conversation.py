"""Content Hub 대화 기록 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, String, DateTime, JSON, ForeignKey
from sqlalchemy.sql import func

from app.database import Base
from app.utils.helpers import new_uuid


class AIConversation(Base):
    __tablename__ = "ai_conversation"

    id = Column(String(36), primary_key=True, default=new_uuid)
    title = Column(String(100), nullable=False)
    messages = Column(JSON, nullable=False)  # [{role, content, timestamp, plans}]
    created_by = Column(Integer, ForeignKey("users.user_id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

"""글/업데이트 콘텐츠 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, String, Text, DateTime, Boolean, Integer, JSON
from sqlalchemy.sql import func

from app.database import Base
from app.utils.helpers import new_uuid


class Article(Base):
    __tablename__ = "articles"

    id = Column(String(36), primary_key=True, default=new_uuid)
    title = Column(String(300), nullable=False)
    slug = Column(String(300), unique=True, nullable=False)
    category = Column(String(30), nullable=False)  # philosophy/narrative/cultural/ux_review/research/metaphysics
    content = Column(Text)
    excerpt = Column(Text)
    featured_image = Column(Text)
    tags = Column(JSON)
    reading_time_minutes = Column(Integer)
    published = Column(Boolean, default=False)
    review_status = Column(String(20))  # draft/pending_review/approved/published/rejected
    reviewer_notes = Column(Text)
    admin_notes = Column(Text)
    scheduled_at = Column(DateTime)
    next_steps = Column(Text)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class Update(Base):
    __tablename__ = "updates"

    id = Column(String(36), primary_key=True, default=new_uuid)
    title = Column(String(300), nullable=False)
    slug = Column(String(300), nullable=False)
    content = Column(Text)
    published = Column(Boolean, default=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

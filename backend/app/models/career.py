"""경력/자격/기술/타임라인/학습 목표 콘텐츠 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, String, Text, DateTime, Boolean, Integer, Float, JSON
from sqlalchemy.sql import func

from app.database import Base
from app.utils.helpers import new_uuid


class Experience(Base):
    __tablename__ = "experiences"

    id = Column(String(36), primary_key=True, default=new_uuid)
    title = Column(String(300), nullable=False)
    slug = Column(String(300), nullable=False)
    category = Column(String(100), nullable=False)
    subcategory = Column(String(100))
    description = Column(Text)
    long_description = Column(Text)
    image_url = Column(Text)
    start_date = Column(String(20))
    end_date = Column(String(20))
    is_ongoing = Column(Boolean)
    skills_used = Column(JSON)
    key_achievements = Column(JSON)
    order_index = Column(Integer)
    published = Column(Boolean, default=False)
    admin_notes = Column(Text)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class Certification(Base):
    __tablename__ = "certifications"

    id = Column(String(36), primary_key=True, default=new_uuid)
    name = Column(String(300), nullable=False)
    issuer = Column(String(200), nullable=False)
    description = Column(Text)
    category = Column(String(100))
    status = Column(String(20))
    earned_date = Column(String(20))
    expiration_date = Column(String(20))
    credential_id = Column(String(200))
    credential_url = Column(Text)
    image_url = Column(Text)
    skills = Column(JSON)
    order_index = Column(Integer)
    estimated_cost = Column(Float)
    funded_amount = Column(Float)
    admin_notes = Column(Text)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class Skill(Base):
    __tablename__ = "skills"

    id = Column(String(36), primary_key=True, default=new_uuid)
    name = Column(String(200), nullable=False)
    category = Column(String(100), nullable=False)
    proficiency = Column(Integer)  # 0-100
    icon_name = Column(String(100))
    created_at = Column(DateTime, server_default=func.now())


class LifePeriod(Base):
    __tablename__ = "life_periods"

    id = Column(String(36), primary_key=True, default=new_uuid)
    title = Column(String(300), nullable=False)
    start_date = Column(String(20), nullable=False)  # YYYY-MM-DD
    end_date = Column(String(20))
    description = Column(Text)
    detailed_content = Column(Text)
    themes = Column(JSON)
    image_url = Column(Text)
    is_current = Column(Boolean)
    key_works = Column(JSON)
    order_index = Column(Integer)
    created_at = Column(DateTime, server_default=func.now())


class LearningGoal(Base):
    __tablename__ = "learning_goals"

    id = Column(String(36), primary_key=True, default=new_uuid)
    title = Column(String(300), nullable=False)
    description = Column(Text)
    progress_percent = Column(Integer)
    target_amount = Column(Float)
    raised_amount = Column(Float)
    created_at = Column(DateTime, server_default=func.now())

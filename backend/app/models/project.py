"""개인 프로젝트/클라이언트 작업 콘텐츠 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, String, Text, DateTime, Boolean, Float, JSON
from sqlalchemy.sql import func

from app.database import Base
from app.utils.helpers import new_uuid


class Project(Base):
    __tablename__ = "projects"

    id = Column(String(36), primary_key=True, default=new_uuid)
    title = Column(String(300), nullable=False)
    slug = Column(String(300), nullable=False)
    description = Column(Text)
    long_description = Column(Text)
    image_url = Column(Text)
    logo_url = Column(Text)
    external_url = Column(Text)
    github_url = Column(Text)
    tech_stack = Column(JSON)
    features = Column(JSON)
    screenshots = Column(JSON)
    status = Column(String(20), nullable=False, default="in_progress")  # in_progress/completed/on_hold/archived/concept
    published = Column(Boolean, default=False)
    review_status = Column(String(20))
    reviewer_notes = Column(Text)
    admin_notes = Column(Text)
    scheduled_at = Column(DateTime)
    next_steps = Column(Text)
    start_date = Column(String(20))
    end_date = Column(String(20))
    problem_statement = Column(Text)
    solution_summary = Column(Text)
    case_study = Column(Text)
    results_metrics = Column(JSON)
    funding_goal = Column(Float)
    funding_raised = Column(Float)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class ClientProject(Base):
    __tablename__ = "client_projects"

    id = Column(String(36), primary_key=True, default=new_uuid)
    project_name = Column(String(300), nullable=False)
    client_name = Column(String(200), nullable=False)
    slug = Column(String(300), nullable=False)
    status = Column(String(20), nullable=False, default="active")
    description = Column(Text)
    long_description = Column(Text)
    image_url = Column(Text)
    screenshots = Column(JSON)
    tech_stack = Column(JSON)
    features = Column(JSON)
    start_date = Column(String(20))
    end_date = Column(String(20))
    testimonial = Column(Text)
    testimonial_author = Column(String(200))
    is_public = Column(Boolean, default=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

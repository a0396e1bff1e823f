"""작품/실험/취향/영감 콘텐츠 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, String, Text, DateTime, Boolean, Integer, Float, JSON
from sqlalchemy.sql import func

from app.database import Base
from app.utils.helpers import new_uuid


class Artwork(Base):
    __tablename__ = "artwork"

    id = Column(String(36), primary_key=True, default=new_uuid)
    title = Column(String(300), nullable=False)
    image_url = Column(Text, nullable=False)
    description = Column(Text)
    category = Column(String(100))
    admin_notes = Column(Text)
    created_at = Column(DateTime, server_default=func.now())


class Experiment(Base):
    __tablename__ = "experiments"

    id = Column(String(36), primary_key=True, default=new_uuid)
    name = Column(String(300), nullable=False)
    slug = Column(String(300), nullable=False)
    platform = Column(String(100), nullable=False)
    status = Column(String(20), nullable=False, default="active")
    description = Column(Text)
    long_description = Column(Text)
    image_url = Column(Text)
    screenshots = Column(JSON)
    start_date = Column(String(20))
    end_date = Column(String(20))
    revenue = Column(Float)
    costs = Column(Float)
    profit = Column(Float)
    products_sold = Column(Integer)
    skills_demonstrated = Column(JSON)
    lessons_learned = Column(JSON)
    case_study = Column(Text)
    published = Column(Boolean, default=False)
    review_status = Column(String(20))
    admin_notes = Column(Text)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class Favorite(Base):
    __tablename__ = "favorites"

    id = Column(String(36), primary_key=True, default=new_uuid)
    title = Column(String(300), nullable=False)
    type = Column(String(30), nullable=False)  # music/film/tv_show/book/podcast/game/creator/place/food
    description = Column(Text)
    image_url = Column(Text)
    source_url = Column(Text)
    tags = Column(JSON)
    creator_name = Column(String(200))
    release_year = Column(Integer)
    is_current = Column(Boolean)
    impact_statement = Column(Text)
    created_at = Column(DateTime, server_default=func.now())


class Inspiration(Base):
    __tablename__ = "inspirations"

    id = Column(String(36), primary_key=True, default=new_uuid)
    title = Column(String(300), nullable=False)
    category = Column(String(100), nullable=False)
    description = Column(Text)
    detailed_content = Column(Text)
    image_url = Column(Text)
    images = Column(JSON)
    influence_areas = Column(JSON)
    related_links = Column(JSON)
    order_index = Column(Integer)
    created_at = Column(DateTime, server_default=func.now())

"""상품/리뷰/후원 캠페인/장비 콘텐츠 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, String, Text, DateTime, Boolean, Integer, Float, JSON, ForeignKey
from sqlalchemy.sql import func

from app.database import Base
from app.utils.helpers import new_uuid


class Product(Base):
    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=new_uuid)
    name = Column(String(300), nullable=False)
    slug = Column(String(300), nullable=False)
    price = Column(Float, nullable=False, default=0)
    compare_at_price = Column(Float)
    description = Column(Text)
    long_description = Column(Text)
    category = Column(String(100))
    images = Column(JSON)
    tags = Column(JSON)
    status = Column(String(20))
    inventory_count = Column(Integer)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class ProductReview(Base):
    __tablename__ = "product_reviews"

    id = Column(String(36), primary_key=True, default=new_uuid)
    product_name = Column(String(300), nullable=False)
    company = Column(String(200), nullable=False)
    slug = Column(String(300), nullable=False)
    category = Column(String(100), default="general")
    content = Column(Text)
    summary = Column(Text)
    featured_image = Column(Text)
    overall_rating = Column(Float)
    strengths = Column(JSON)
    pain_points = Column(JSON)
    published = Column(Boolean, default=False)
    review_status = Column(String(20))
    admin_notes = Column(Text)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class FundingCampaign(Base):
    __tablename__ = "funding_campaigns"

    id = Column(String(36), primary_key=True, default=new_uuid)
    title = Column(String(300), nullable=False)
    campaign_type = Column(String(50), nullable=False)
    target_amount = Column(Float, default=0)
    raised_amount = Column(Float, default=0)
    description = Column(Text)
    status = Column(String(20), default="active")
    project_id = Column(String(36), ForeignKey("projects.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class SupplyNeeded(Base):
    __tablename__ = "supplies_needed"

    id = Column(String(36), primary_key=True, default=new_uuid)
    name = Column(String(300), nullable=False)
    price = Column(Float, nullable=False, default=0)
    priority = Column(String(20), nullable=False, default="medium")  # low/medium/high/critical
    category = Column(String(100), nullable=False, default="Equipment")
    status = Column(String(20), nullable=False, default="needed")  # needed/funded/purchased
    description = Column(Text)
    image_url = Column(Text)
    product_url = Column(Text)
    funded_amount = Column(Float, default=0)
    created_at = Column(DateTime, server_default=func.now())

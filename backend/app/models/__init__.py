"""SQLAlchemy 모델 패키지 초기화 모듈입니다."""

from app.models.user import User
from app.models.article import Article, Update
from app.models.project import Project, ClientProject
from app.models.creative import Artwork, Experiment, Favorite, Inspiration
from app.models.career import Experience, Certification, Skill, LifePeriod, LearningGoal
from app.models.commerce import Product, ProductReview, FundingCampaign, SupplyNeeded
from app.models.conversation import AIConversation
from app.models.content_plan import ContentPlan, ContentChange
from app.models.activity_log import AdminActivityLog

__all__ = [
    "User",
    "Article", "Update",
    "Project", "ClientProject",
    "Artwork", "Experiment", "Favorite", "Inspiration",
    "Experience", "Certification", "Skill", "LifePeriod", "LearningGoal",
    "Product", "ProductReview", "FundingCampaign", "SupplyNeeded",
    "AIConversation",
    "ContentPlan", "ContentChange",
    "AdminActivityLog",
]

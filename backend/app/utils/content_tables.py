"""콘텐츠 테이블 허용 목록과 테이블별 필수 필드/상태 필드 레지스트리입니다."""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple, Type

from app.models.article import Article, Update
from app.models.career import Certification, Experience, LearningGoal, LifePeriod, Skill
from app.models.commerce import FundingCampaign, Product, ProductReview, SupplyNeeded
from app.models.creative import Artwork, Experiment, Favorite, Inspiration
from app.models.project import ClientProject, Project
from app.services.content_errors import ForbiddenTableError


class ContentTable(str, Enum):
    ARTICLES = "articles"
    UPDATES = "updates"
    PROJECTS = "projects"
    ARTWORK = "artwork"
    EXPERIMENTS = "experiments"
    FAVORITES = "favorites"
    INSPIRATIONS = "inspirations"
    EXPERIENCES = "experiences"
    CERTIFICATIONS = "certifications"
    CLIENT_PROJECTS = "client_projects"
    SKILLS = "skills"
    PRODUCTS = "products"
    PRODUCT_REVIEWS = "product_reviews"
    LIFE_PERIODS = "life_periods"
    LEARNING_GOALS = "learning_goals"
    FUNDING_CAMPAIGNS = "funding_campaigns"
    SUPPLIES_NEEDED = "supplies_needed"


@dataclass(frozen=True)
class TableSchema:
    model: Type
    required_fields: Tuple[str, ...]
    status_field: Optional[str] = None


TABLE_SCHEMAS: Dict[ContentTable, TableSchema] = {
    ContentTable.ARTICLES: TableSchema(Article, ("title", "slug", "category"), "published"),
    ContentTable.UPDATES: TableSchema(Update, ("title", "slug"), "published"),
    ContentTable.PROJECTS: TableSchema(Project, ("title", "slug"), "published"),
    ContentTable.ARTWORK: TableSchema(Artwork, ("title", "image_url")),
    ContentTable.EXPERIMENTS: TableSchema(Experiment, ("name", "slug", "platform"), "published"),
    ContentTable.FAVORITES: TableSchema(Favorite, ("title", "type")),
    ContentTable.INSPIRATIONS: TableSchema(Inspiration, ("title", "category")),
    ContentTable.EXPERIENCES: TableSchema(Experience, ("title", "slug", "category"), "published"),
    ContentTable.CERTIFICATIONS: TableSchema(Certification, ("name", "issuer"), "status"),
    ContentTable.CLIENT_PROJECTS: TableSchema(ClientProject, ("project_name", "client_name", "slug"), "status"),
    ContentTable.SKILLS: TableSchema(Skill, ("name", "category")),
    ContentTable.PRODUCTS: TableSchema(Product, ("name", "slug"), "status"),
    ContentTable.PRODUCT_REVIEWS: TableSchema(ProductReview, ("product_name", "company", "slug"), "published"),
    ContentTable.LIFE_PERIODS: TableSchema(LifePeriod, ("title", "start_date")),
    ContentTable.LEARNING_GOALS: TableSchema(LearningGoal, ("title",)),
    ContentTable.FUNDING_CAMPAIGNS: TableSchema(FundingCampaign, ("title", "campaign_type"), "status"),
    ContentTable.SUPPLIES_NEEDED: TableSchema(SupplyNeeded, ("name",), "status"),
}

ALLOWED_TABLES = tuple(t.value for t in ContentTable)


def resolve_table(name: str) -> ContentTable:
    try:
        return ContentTable(str(name or "").strip())
    except ValueError:
        raise ForbiddenTableError(str(name))


def get_schema(table: ContentTable) -> TableSchema:
    return TABLE_SCHEMAS[table]


def missing_required_fields(table: ContentTable, data: dict) -> list:
    missing = []
    for field in TABLE_SCHEMAS[table].required_fields:
        value = data.get(field)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(field)
    return missing

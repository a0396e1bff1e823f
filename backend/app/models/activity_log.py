from sqlalchemy import Column, Integer, String, DateTime, JSON, ForeignKey, Index
from sqlalchemy.sql import func

from app.database import Base


class AdminActivityLog(Base):
    __tablename__ = "admin_activity_log"

    log_id = Column(Integer, primary_key=True, autoincrement=True)
    action = Column(String(50), nullable=False)  # plan_saved/plan_executed/change_reverted/...
    entity_type = Column(String(50))
    entity_id = Column(String(36))
    details = Column(JSON)
    user_id = Column(Integer, ForeignKey("users.user_id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    __table_args__ = (
        Index("idx_activity_created", "created_at"),
    )

"""AI 프롬프트와 관리자 화면에 제공할 사이트 콘텐츠 현황 스냅샷을 만듭니다."""

from datetime import timedelta
from typing import Any, Dict

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.config import settings
from app.services import diff_recorder
from app.services.content_store import ContentStore
from app.utils.content_tables import ContentTable, get_schema
from app.utils.helpers import to_jsonable, truncate, utcnow

SUMMARY_FIELDS = ("title", "name", "project_name", "product_name", "slug", "status", "published", "review_status", "category")


def _summarize(record: Dict[str, Any]) -> Dict[str, Any]:
    summary: Dict[str, Any] = {"id": record.get("id")}
    for key in SUMMARY_FIELDS:
        if record.get(key) is not None:
            summary[key] = record[key]
    if record.get("description"):
        summary["description"] = truncate(record["description"], 100)
    return summary


def _table_stats(db: Session, store: ContentStore, table: ContentTable, stale_before) -> Dict[str, Any]:
    schema = get_schema(table)
    model = schema.model
    stats: Dict[str, Any] = {"count": store.count(table)}

    if schema.status_field == "published":
        published = store.count(table, published=True)
        stats["published"] = published
        stats["draft"] = stats["count"] - published
    elif schema.status_field:
        column = getattr(model, schema.status_field)
        rows = db.query(column, func.count()).group_by(column).all()
        stats["status_counts"] = {str(value): int(n) for value, n in rows}

    touched = model.updated_at if hasattr(model, "updated_at") else model.created_at
    stats["stale"] = db.query(model).filter(touched < stale_before).count()
    stats["recent"] = [
        _summarize(r) for r in store.list_recent(table, limit=settings.CONTENT_HUB_RECENT_LIMIT)
    ]
    return stats


def build_site_snapshot(db: Session) -> Dict[str, Any]:
    store = ContentStore(db)
    stale_before = utcnow() - timedelta(days=settings.CONTENT_HUB_STALE_DAYS)
    tables = {table.value: _table_stats(db, store, table, stale_before) for table in ContentTable}
    recent_changes = [
        {
            "table": row.table_name,
            "action": row.action_type,
            "record_id": row.record_id,
            "plan_id": row.plan_id,
            "reverted": bool(row.reverted),
            "created_at": to_jsonable(row.created_at),
        }
        for row in diff_recorder.list_recent_changes(db, limit=settings.CONTENT_HUB_RECENT_CHANGES_LIMIT)
    ]
    return {
        "generated_at": utcnow().isoformat(),
        "tables": tables,
        "recent_ai_changes": recent_changes,
    }

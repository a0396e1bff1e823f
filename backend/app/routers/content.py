"""콘텐츠 테이블 조회 API 라우터입니다. 허용 목록 테이블만 조회할 수 있습니다."""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.middleware.auth_middleware import require_roles
from app.models.user import User
from app.services.content_errors import ContentHubError
from app.services.content_store import ContentStore
from app.utils.content_tables import ContentTable, resolve_table
from app.utils.permissions import ALL_ROLES

router = APIRouter(prefix="/api/content", tags=["content"])


def _table_or_400(table: str) -> ContentTable:
    try:
        return resolve_table(table)
    except ContentHubError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail)


@router.get("/{table}", response_model=List[Dict[str, Any]])
def list_records(
    table: str,
    limit: int = Query(20, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*ALL_ROLES)),
):
    return ContentStore(db).list_recent(_table_or_400(table), limit=limit, offset=offset)


@router.get("/{table}/{record_id}", response_model=Dict[str, Any])
def get_record(
    table: str,
    record_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*ALL_ROLES)),
):
    record = ContentStore(db).get(_table_or_400(table), record_id)
    if record is None:
        raise HTTPException(status_code=404, detail="레코드를 찾을 수 없습니다.")
    return record

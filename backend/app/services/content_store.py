"""허용 목록 콘텐츠 테이블에 대한 id 기반 조회/생성/수정/삭제를 제공하는 저장소 계층입니다.

레코드는 JSON 직렬화가 가능한 dict로 주고받는다. 쓰기 연산은 flush까지만 수행하며
commit은 호출자(계획 실행/되돌리기 서비스)가 책임진다.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import Boolean, DateTime, Float, Integer, inspect
from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import flag_modified

from app.services.content_errors import ValidationError
from app.utils.content_tables import ContentTable, get_schema
from app.utils.helpers import new_uuid, parse_datetime, to_jsonable

# 스토어가 관리하는 컬럼은 action data로 덮어쓰지 않는다.
MANAGED_FIELDS = ("id", "created_at", "updated_at")


class ContentStore:
    def __init__(self, db: Session):
        self.db = db

    def _model(self, table: ContentTable):
        return get_schema(table).model

    def _columns(self, table: ContentTable) -> Dict[str, Any]:
        return {col.key: col for col in inspect(self._model(table)).columns}

    def to_dict(self, table: ContentTable, row) -> Dict[str, Any]:
        return {key: to_jsonable(getattr(row, key)) for key in self._columns(table)}

    def _coerce(self, column, value: Any) -> Any:
        if value is None:
            return None
        col_type = column.type
        try:
            if isinstance(col_type, DateTime):
                return parse_datetime(value)
            if isinstance(col_type, Boolean):
                if isinstance(value, str):
                    return value.strip().lower() in ("true", "1", "yes", "y")
                return bool(value)
            if isinstance(col_type, Integer):
                if isinstance(value, float) and not value.is_integer():
                    raise ValueError(value)
                return int(value)
            if isinstance(col_type, Float):
                return float(value)
        except (TypeError, ValueError):
            raise ValidationError(f"'{column.key}' 필드 값 형식이 올바르지 않습니다: {value!r}")
        return value

    def _prepare(self, table: ContentTable, data: Dict[str, Any], keep_managed: bool = False) -> Dict[str, Any]:
        columns = self._columns(table)
        unknown = sorted(k for k in data if k not in columns)
        if unknown:
            raise ValidationError(
                f"{table.value} 테이블에 없는 필드입니다: {', '.join(unknown)}"
            )
        prepared = {}
        for key, value in data.items():
            if key in MANAGED_FIELDS and not keep_managed:
                continue
            prepared[key] = self._coerce(columns[key], value)
        return prepared

    def _load(self, table: ContentTable, record_id: str):
        if not record_id:
            return None
        return self.db.get(self._model(table), str(record_id))

    def get(self, table: ContentTable, record_id: str) -> Optional[Dict[str, Any]]:
        row = self._load(table, record_id)
        if row is None:
            return None
        return self.to_dict(table, row)

    def exists(self, table: ContentTable, record_id: str) -> bool:
        return self._load(table, record_id) is not None

    def insert(self, table: ContentTable, data: Dict[str, Any], *, restore: bool = False) -> Dict[str, Any]:
        # restore=True면 스냅샷의 id/created_at을 그대로 사용한다.
        fields = self._prepare(table, data, keep_managed=restore)
        if restore:
            if not fields.get("id") or self.exists(table, fields["id"]):
                fields["id"] = new_uuid()
        row = self._model(table)(**fields)
        self.db.add(row)
        self.db.flush()
        self.db.refresh(row)
        return self.to_dict(table, row)

    def update(
        self,
        table: ContentTable,
        record_id: str,
        data: Dict[str, Any],
        *,
        restore: bool = False,
    ) -> Optional[Dict[str, Any]]:
        row = self._load(table, record_id)
        if row is None:
            return None
        fields = self._prepare(table, data, keep_managed=restore)
        fields.pop("id", None)
        for key, value in fields.items():
            setattr(row, key, value)
        if restore and "updated_at" in fields:
            # 값이 같아도 SET 절에 포함시켜 onupdate 기본값이 덮어쓰지 않게 한다.
            flag_modified(row, "updated_at")
        self.db.flush()
        self.db.refresh(row)
        return self.to_dict(table, row)

    def delete(self, table: ContentTable, record_id: str) -> bool:
        row = self._load(table, record_id)
        if row is None:
            return False
        self.db.delete(row)
        self.db.flush()
        return True

    def count(self, table: ContentTable, **filters) -> int:
        q = self.db.query(self._model(table))
        if filters:
            q = q.filter_by(**filters)
        return q.count()

    def list_recent(self, table: ContentTable, limit: int = 20, offset: int = 0) -> List[Dict[str, Any]]:
        model = self._model(table)
        rows = (
            self.db.query(model)
            .order_by(model.created_at.desc(), model.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return [self.to_dict(table, row) for row in rows]

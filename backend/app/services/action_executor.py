"""단일 콘텐츠 action(create/update/delete)을 허용 목록 테이블에 적용합니다.

변경 이력(Change)은 기록하지 않는다. 이력 저장은 계획 실행 서비스의 책임이다.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from app.schemas.content_hub import ContentAction
from app.services.content_errors import NotFoundError, ValidationError
from app.services.content_store import MANAGED_FIELDS, ContentStore
from app.utils.content_tables import ContentTable, missing_required_fields, resolve_table


@dataclass
class ActionResult:
    action_type: str
    table: ContentTable
    record_id: str
    previous_data: Optional[Dict[str, Any]]
    new_data: Optional[Dict[str, Any]]


class ActionExecutor:
    def __init__(self, store: ContentStore):
        self.store = store

    def execute(self, action: ContentAction) -> ActionResult:
        # 허용 목록 검사는 어떤 I/O보다 먼저 수행한다.
        table = resolve_table(action.table)
        data = dict(action.data or {})

        if action.type == "create":
            return self._create(table, data)
        if action.type == "update":
            return self._update(table, self._require_record_id(action), data)
        if action.type == "delete":
            return self._delete(table, self._require_record_id(action))
        raise ValidationError(f"지원하지 않는 action 유형입니다: {action.type}")

    def _require_record_id(self, action: ContentAction) -> str:
        record_id = str(action.record_id or "").strip()
        if not record_id:
            raise ValidationError(f"{action.type} action에는 record_id가 필요합니다.")
        return record_id

    def _create(self, table: ContentTable, data: Dict[str, Any]) -> ActionResult:
        missing = missing_required_fields(table, data)
        if missing:
            raise ValidationError(
                f"{table.value} 생성에 필요한 필드가 없습니다: {', '.join(missing)}",
                missing_fields=missing,
            )
        created = self.store.insert(table, data)
        return ActionResult("create", table, created["id"], None, created)

    def _update(self, table: ContentTable, record_id: str, data: Dict[str, Any]) -> ActionResult:
        # id/created_at/updated_at만 담긴 data는 실제로 아무것도 바꾸지 않는다.
        if not any(key not in MANAGED_FIELDS for key in data):
            raise ValidationError("변경할 필드가 없습니다.")
        previous = self.store.get(table, record_id)
        if previous is None:
            raise NotFoundError(f"{table.value} 레코드를 찾을 수 없습니다: {record_id}")
        updated = self.store.update(table, record_id, data)
        return ActionResult("update", table, record_id, previous, updated)

    def _delete(self, table: ContentTable, record_id: str) -> ActionResult:
        previous = self.store.get(table, record_id)
        if previous is None:
            raise NotFoundError(f"{table.value} 레코드를 찾을 수 없습니다: {record_id}")
        self.store.delete(table, record_id)
        return ActionResult("delete", table, record_id, previous, None)

"""기존 DB에 콘텐츠/이력 테이블의 누락 컬럼과 인덱스를 보충하는 런타임 스키마 동기화."""

from __future__ import annotations

import logging
from typing import List

from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.schema import CreateColumn, CreateIndex, MetaData, Table

logger = logging.getLogger(__name__)


def _names(rows) -> set:
    return {str(row.get("name")) for row in rows if row.get("name")}


def _missing_columns(table: Table, existing: set) -> list:
    return [column for column in table.columns if column.name not in existing]


def _missing_indexes(table: Table, existing: set) -> list:
    return [index for index in table.indexes if index.name and index.name not in existing]


def sync_missing_schema_objects(engine: Engine, metadata: MetaData) -> List[str]:
    """모델 메타데이터에는 있고 DB에는 없는 컬럼/인덱스를 추가하고, 추가한 객체 이름을 돌려준다.

    테이블 자체가 없으면 건너뛴다(create_all 담당). 컬럼 타입 변경이나 삭제는 하지 않는다.
    """
    inspector = inspect(engine)
    existing_tables = set(inspector.get_table_names())
    preparer = engine.dialect.identifier_preparer
    added: List[str] = []

    with engine.begin() as conn:
        for table in metadata.sorted_tables:
            if table.name not in existing_tables:
                continue
            table_sql = preparer.format_table(table)

            for column in _missing_columns(table, _names(inspector.get_columns(table.name))):
                column_sql = str(CreateColumn(column).compile(dialect=engine.dialect)).strip()
                conn.execute(text(f"ALTER TABLE {table_sql} ADD COLUMN {column_sql}"))
                added.append(f"{table.name}.{column.name}")

            for index in _missing_indexes(table, _names(inspector.get_indexes(table.name))):
                conn.execute(CreateIndex(index))
                added.append(f"{table.name}:{index.name}")

    if added:
        logger.info("[schema-sync] added %d schema objects: %s", len(added), ", ".join(added))
    return added

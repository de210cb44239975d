"""In-process backend with the same contract as the REST store."""

from __future__ import annotations

import copy
import uuid
from typing import Any, Sequence

from learnpath.exceptions import PersistenceError, RecordNotFoundError
from learnpath.persistence.base import Filters, Row, Table

_DEFAULTS: dict[Table, Row] = {
    Table.PATHS: {
        "subtitle": "",
        "tags": [],
        "is_public": False,
        "clones": 0,
        "likes": 0,
        "cloned_from": None,
        "user_id": None,
    },
    Table.COLUMNS: {"parent_item_id": None, "title": "", "order_index": 0},
    Table.ITEMS: {"title": "", "order_index": 0},
    Table.SECTIONS: {"content": None, "order_index": 0},
}

_REQUIRED: dict[Table, tuple[str, ...]] = {
    Table.PATHS: ("title",),
    Table.COLUMNS: ("path_id", "type"),
    Table.ITEMS: ("column_id",),
    Table.SECTIONS: ("column_id", "type"),
}


class MemoryBackend:
    """Dictionary-backed tables with foreign-key checks and cascading deletes.

    Every call is appended to ``calls`` as ``(operation, table)`` so callers can
    assert how many reads and writes an operation performed.
    """

    def __init__(self) -> None:
        self.tables: dict[Table, dict[str, Row]] = {table: {} for table in Table}
        self.calls: list[tuple[str, str]] = []

    # ------------------------------------------------------------------
    # Introspection helpers
    # ------------------------------------------------------------------

    def rows(self, table: Table) -> list[Row]:
        return [copy.deepcopy(row) for row in self.tables[table].values()]

    def writes(self) -> list[tuple[str, str]]:
        return [call for call in self.calls if call[0] != "select"]

    def reset_calls(self) -> None:
        self.calls.clear()

    # ------------------------------------------------------------------
    # PersistenceBackend
    # ------------------------------------------------------------------

    async def select(
        self,
        table: Table,
        *,
        filters: Filters | None = None,
        order_by: str | None = None,
        single: bool = False,
    ) -> Any:
        self.calls.append(("select", table.value))
        matches = [row for row in self.tables[table].values() if _matches(row, filters)]
        if order_by:
            matches.sort(key=lambda row: (row.get(order_by) is None, row.get(order_by)))
        result = [copy.deepcopy(row) for row in matches]
        if single:
            return result[0] if result else None
        return result

    async def insert(self, table: Table, rows: Sequence[Row]) -> list[Row]:
        self.calls.append(("insert", table.value))
        stored: list[Row] = []
        for row in rows:
            record = {**copy.deepcopy(_DEFAULTS[table]), **copy.deepcopy(dict(row))}
            record["id"] = record.get("id") or str(uuid.uuid4())
            if record["id"] in self.tables[table]:
                raise PersistenceError(f"Duplicate key {record['id']} in {table.value}")
            missing = [name for name in _REQUIRED[table] if record.get(name) is None]
            if missing:
                raise PersistenceError(f"Missing {', '.join(missing)} for {table.value}")
            self._check_references(table, record)
            stored.append(record)
        for record in stored:
            self.tables[table][record["id"]] = record
        return [copy.deepcopy(record) for record in stored]

    async def update(self, table: Table, row_id: str, values: Row) -> None:
        self.calls.append(("update", table.value))
        record = self.tables[table].get(row_id)
        if record is None:
            raise RecordNotFoundError(f"No row {row_id} in {table.value}")
        updated = {**record, **copy.deepcopy(dict(values)), "id": row_id}
        self._check_references(table, updated)
        self.tables[table][row_id] = updated

    async def upsert(self, table: Table, rows: Sequence[Row]) -> list[Row]:
        self.calls.append(("upsert", table.value))
        result: list[Row] = []
        for row in rows:
            row_id = row.get("id")
            if row_id and row_id in self.tables[table]:
                merged = {**self.tables[table][row_id], **copy.deepcopy(dict(row))}
                self._check_references(table, merged)
                self.tables[table][row_id] = merged
            else:
                merged = {**copy.deepcopy(_DEFAULTS[table]), **copy.deepcopy(dict(row))}
                merged["id"] = row_id or str(uuid.uuid4())
                self._check_references(table, merged)
                self.tables[table][merged["id"]] = merged
            result.append(copy.deepcopy(merged))
        return result

    async def delete(self, table: Table, *, filters: Filters) -> int:
        self.calls.append(("delete", table.value))
        doomed = [row["id"] for row in self.tables[table].values() if _matches(row, filters)]
        for row_id in doomed:
            self._cascade_delete(table, row_id)
        return len(doomed)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _check_references(self, table: Table, record: Row) -> None:
        if table is Table.COLUMNS:
            if record["path_id"] not in self.tables[Table.PATHS]:
                raise PersistenceError(f"Unknown path {record['path_id']}")
            parent = record.get("parent_item_id")
            if parent is not None and parent not in self.tables[Table.ITEMS]:
                raise PersistenceError(f"Unknown parent item {parent}")
        elif table in (Table.ITEMS, Table.SECTIONS):
            if record["column_id"] not in self.tables[Table.COLUMNS]:
                raise PersistenceError(f"Unknown column {record['column_id']}")
        elif table is Table.PATHS:
            source = record.get("cloned_from")
            if source is not None and source not in self.tables[Table.PATHS]:
                raise PersistenceError(f"Unknown source path {source}")

    def _cascade_delete(self, table: Table, row_id: str) -> None:
        if self.tables[table].pop(row_id, None) is None:
            return
        if table is Table.PATHS:
            for column_id in self._ids_where(Table.COLUMNS, "path_id", row_id):
                self._cascade_delete(Table.COLUMNS, column_id)
            for path in self.tables[Table.PATHS].values():
                if path.get("cloned_from") == row_id:
                    path["cloned_from"] = None
        elif table is Table.COLUMNS:
            for item_id in self._ids_where(Table.ITEMS, "column_id", row_id):
                self._cascade_delete(Table.ITEMS, item_id)
            for section_id in self._ids_where(Table.SECTIONS, "column_id", row_id):
                self._cascade_delete(Table.SECTIONS, section_id)
        elif table is Table.ITEMS:
            for column_id in self._ids_where(Table.COLUMNS, "parent_item_id", row_id):
                self._cascade_delete(Table.COLUMNS, column_id)

    def _ids_where(self, table: Table, field: str, value: str) -> list[str]:
        return [row["id"] for row in self.tables[table].values() if row.get(field) == value]


def _matches(row: Row, filters: Filters | None) -> bool:
    if not filters:
        return True
    return all(row.get(key) == value for key, value in filters.items())

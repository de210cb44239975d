"""Interface of the relational store that editor state is saved to."""

from __future__ import annotations

from enum import Enum
from typing import Any, Mapping, Protocol, Sequence

Row = dict[str, Any]
Filters = Mapping[str, Any]


class Table(str, Enum):
    """Logical tables of a learning path."""

    PATHS = "learning_paths"
    COLUMNS = "columns"
    ITEMS = "column_items"
    SECTIONS = "content_sections"


class PersistenceBackend(Protocol):
    """Generic relational persistence API.

    Filters are equality matches; a ``None`` value matches SQL NULL. Inserts
    return the stored rows in submission order. Deleting a path, column or item
    is expected to cascade to the rows it owns.
    """

    async def select(
        self,
        table: Table,
        *,
        filters: Filters | None = None,
        order_by: str | None = None,
        single: bool = False,
    ) -> Any:
        """Return matching rows, or one row / ``None`` when ``single`` is set."""
        ...

    async def insert(self, table: Table, rows: Sequence[Row]) -> list[Row]: ...

    async def update(self, table: Table, row_id: str, values: Row) -> None: ...

    async def upsert(self, table: Table, rows: Sequence[Row]) -> list[Row]: ...

    async def delete(self, table: Table, *, filters: Filters) -> int: ...

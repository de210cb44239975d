"""In-memory editor state for one learning path.

The document keeps every loaded or locally created entity in an arena keyed by
identity, plus one ordered list of child ids per column. The list is the only
source of ordering: ``order_index`` is rewritten from list positions whenever
a list changes, and the ids whose index moved are returned so the caller can
record them as updated.

Columns are kept in the order they became known. A column is only ever added
after the item that anchors it, so that order is parent-before-child.
"""

from __future__ import annotations

import logging
from typing import Iterator, Sequence, TypeVar

from learnpath.changes import ChangeTracker, EntityKind
from learnpath.exceptions import PersistenceError
from learnpath.persistence import PersistenceBackend, Table
from learnpath.schemas import (
    Column,
    ColumnItem,
    ColumnType,
    ContentSection,
    EntityId,
    PathRecord,
    Persisted,
    Unsaved,
    parse_entity_id,
)

logger = logging.getLogger(__name__)

_Ordered = TypeVar("_Ordered", ColumnItem, ContentSection)


class PathDocument:
    """Tree of columns, items and sections for the path being edited.

    With a tracker, rows queued for delete are left out when fetched again.
    """

    def __init__(self, backend: PersistenceBackend, tracker: ChangeTracker | None = None) -> None:
        self._backend = backend
        self._tracker = tracker
        self.path: PathRecord | None = None
        self._columns: dict[EntityId, Column] = {}
        self._items: dict[EntityId, ColumnItem] = {}
        self._sections: dict[EntityId, ContentSection] = {}
        self._item_index: dict[EntityId, list[EntityId]] = {}
        self._section_index: dict[EntityId, list[EntityId]] = {}
        self.active_column_ids: list[EntityId] = []

    # ------------------------------------------------------------------
    # Read views
    # ------------------------------------------------------------------

    @property
    def columns(self) -> list[Column]:
        return list(self._columns.values())

    @property
    def items(self) -> dict[EntityId, list[ColumnItem]]:
        return {column_id: self.items_for(column_id) for column_id in self._item_index}

    @property
    def sections(self) -> list[ContentSection]:
        result: list[ContentSection] = []
        for column_id in self._section_index:
            result.extend(self.sections_for(column_id))
        return result

    @property
    def active_columns(self) -> list[Column]:
        return [self._columns[column_id] for column_id in self.active_column_ids if column_id in self._columns]

    def get_column(self, column_id: EntityId | str) -> Column | None:
        return self._columns.get(parse_entity_id(column_id))

    def get_item(self, item_id: EntityId | str) -> ColumnItem | None:
        return self._items.get(parse_entity_id(item_id))

    def get_section(self, section_id: EntityId | str) -> ContentSection | None:
        return self._sections.get(parse_entity_id(section_id))

    def items_for(self, column_id: EntityId | str) -> list[ColumnItem]:
        ids = self._item_index.get(parse_entity_id(column_id), [])
        return [self._items[item_id] for item_id in ids]

    def sections_for(self, column_id: EntityId | str) -> list[ContentSection]:
        ids = self._section_index.get(parse_entity_id(column_id), [])
        return [self._sections[section_id] for section_id in ids]

    def child_columns(self, item_id: EntityId | str) -> list[Column]:
        """Columns anchored on an item (normally zero or one)."""
        key = parse_entity_id(item_id)
        return [column for column in self._columns.values() if column.parent_item_id == key]

    def child_column(self, item_id: EntityId | str) -> Column | None:
        children = self.child_columns(item_id)
        return children[0] if children else None

    def column_of_item(self, item_id: EntityId | str) -> Column | None:
        item = self.get_item(item_id)
        if item is None:
            return None
        return self._columns.get(item.column_id)

    def depth_of(self, column_id: EntityId | str) -> int:
        """Number of columns from the root down to ``column_id`` (root is 1)."""
        depth = 0
        column = self.get_column(column_id)
        while column is not None:
            depth += 1
            if column.parent_item_id is None:
                break
            column = self.column_of_item(column.parent_item_id)
        return depth

    def iter_ids(self) -> Iterator[EntityId]:
        """Every identity held by the document, including references."""
        for column in self._columns.values():
            yield column.id
            if column.parent_item_id is not None:
                yield column.parent_item_id
        for item in self._items.values():
            yield item.id
            yield item.column_id
        for section in self._sections.values():
            yield section.id
            yield section.column_id

    # ------------------------------------------------------------------
    # Arena writes (used by the mutation handlers)
    # ------------------------------------------------------------------

    def put_column(self, column: Column) -> None:
        self._columns[column.id] = column
        if column.type is ColumnType.BRANCH:
            self._item_index.setdefault(column.id, [])
        else:
            self._section_index.setdefault(column.id, [])

    def append_item(self, item: ColumnItem) -> None:
        siblings = self._item_index.setdefault(item.column_id, [])
        item.order_index = len(siblings)
        siblings.append(item.id)
        self._items[item.id] = item

    def append_section(self, section: ContentSection) -> None:
        siblings = self._section_index.setdefault(section.column_id, [])
        section.order_index = len(siblings)
        siblings.append(section.id)
        self._sections[section.id] = section

    def remove_column(self, column_id: EntityId) -> Column | None:
        """Drop a column and its child lists. Items and sections are not cascaded here."""
        column = self._columns.pop(column_id, None)
        self._item_index.pop(column_id, None)
        self._section_index.pop(column_id, None)
        if column_id in self.active_column_ids:
            self.close_column(column_id)
        return column

    def remove_item(self, item_id: EntityId) -> tuple[ColumnItem | None, list[ColumnItem]]:
        """Remove an item. Returns it and the siblings whose index moved."""
        item = self._items.pop(item_id, None)
        if item is None:
            return None, []
        siblings = self._item_index.get(item.column_id, [])
        if item_id in siblings:
            siblings.remove(item_id)
        return item, _renumber(siblings, self._items)

    def remove_section(self, section_id: EntityId) -> tuple[ContentSection | None, list[ContentSection]]:
        """Remove a section. Returns it and the siblings whose index moved."""
        section = self._sections.pop(section_id, None)
        if section is None:
            return None, []
        siblings = self._section_index.get(section.column_id, [])
        if section_id in siblings:
            siblings.remove(section_id)
        return section, _renumber(siblings, self._sections)

    def reorder_sections(self, column_id: EntityId, order: Sequence[EntityId]) -> list[ContentSection]:
        """Put a column's sections in ``order``, which must be a permutation.

        Raises:
            ValueError: If ``order`` does not name exactly the column's sections.
        """
        if column_id not in self._section_index:
            raise ValueError(f"Column {column_id} holds no sections")
        current = self._section_index[column_id]
        if sorted(map(str, order)) != sorted(map(str, current)) or len(set(order)) != len(order):
            raise ValueError(f"New order does not match the sections of column {column_id}")
        self._section_index[column_id] = list(order)
        return _renumber(self._section_index[column_id], self._sections)

    def open_column(self, column_id: EntityId) -> None:
        """Show a column after the column holding its anchor item."""
        column = self._columns.get(column_id)
        if column is None or column_id in self.active_column_ids:
            return
        if column.parent_item_id is not None:
            parent = self.column_of_item(column.parent_item_id)
            if parent is not None and parent.id in self.active_column_ids:
                del self.active_column_ids[self.active_column_ids.index(parent.id) + 1 :]
        self.active_column_ids.append(column_id)

    def close_column(self, column_id: EntityId | str) -> None:
        """Hide a column and every column opened after it. Editor state is untouched."""
        key = parse_entity_id(column_id)
        if key in self.active_column_ids:
            del self.active_column_ids[self.active_column_ids.index(key) :]

    def clear(self) -> None:
        self.path = None
        self._columns.clear()
        self._items.clear()
        self._sections.clear()
        self._item_index.clear()
        self._section_index.clear()
        self.active_column_ids.clear()

    def _queued_for_delete(self, kind: EntityKind, entity_id: EntityId) -> bool:
        return self._tracker is not None and entity_id in self._tracker.deleted_ids(kind)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load(self, path_id: str) -> PathRecord | None:
        """Load a path and its root column.

        Fetch failures are logged and leave the previous state in place.
        Returns the path, or ``None`` if it could not be loaded.
        """
        try:
            row = await self._backend.select(Table.PATHS, filters={"id": path_id}, single=True)
        except PersistenceError as exc:
            logger.error("Error fetching path %s: %s", path_id, exc)
            return None
        if row is None:
            logger.warning("Path %s not found", path_id)
            return None

        self.clear()
        self.path = PathRecord.model_validate(row)

        try:
            root_row = await self._backend.select(
                Table.COLUMNS,
                filters={"path_id": path_id, "parent_item_id": None},
                order_by="order_index",
                single=True,
            )
        except PersistenceError as exc:
            logger.error("Error fetching root column of %s: %s", path_id, exc)
            return self.path

        if root_row is not None:
            root = Column.from_row(root_row)
            self.put_column(root)
            self.active_column_ids = [root.id]
            await self.fetch_column_contents(root.id)
        return self.path

    async def reload(self) -> PathRecord | None:
        if self.path is None:
            return None
        return await self.load(self.path.id)

    async def fetch_column_contents(self, column_id: EntityId | str) -> None:
        """Replace a persisted column's items or sections with the stored rows."""
        key = parse_entity_id(column_id)
        column = self._columns.get(key)
        if column is None or not isinstance(key, Persisted):
            return

        if column.type is ColumnType.BRANCH:
            try:
                rows = await self._backend.select(
                    Table.ITEMS, filters={"column_id": key.id}, order_by="order_index"
                )
            except PersistenceError as exc:
                logger.error("Error fetching items for column %s: %s", key, exc)
                return
            for old_id in self._item_index.get(key, []):
                self._items.pop(old_id, None)
            loaded = [
                item
                for item in map(ColumnItem.from_row, rows)
                if not self._queued_for_delete(EntityKind.ITEM, item.id)
            ]
            self._items.update((item.id, item) for item in loaded)
            self._item_index[key] = [item.id for item in loaded]
        else:
            try:
                rows = await self._backend.select(
                    Table.SECTIONS, filters={"column_id": key.id}, order_by="order_index"
                )
            except PersistenceError as exc:
                logger.error("Error fetching sections for column %s: %s", key, exc)
                return
            for old_id in self._section_index.get(key, []):
                self._sections.pop(old_id, None)
            loaded_sections = [
                section
                for section in map(ContentSection.from_row, rows)
                if not self._queued_for_delete(EntityKind.SECTION, section.id)
            ]
            self._sections.update((section.id, section) for section in loaded_sections)
            self._section_index[key] = [section.id for section in loaded_sections]

    async def fetch_child_column(self, item_id: EntityId | str) -> Column | None:
        """Return the column anchored on ``item_id``, loading it if needed.

        An unsaved item cannot have a stored child, so for a temporary id only
        local state is consulted and no request is made. A stored column that
        is queued for delete counts as no child.
        """
        key = parse_entity_id(item_id)
        cached = self.child_column(key)
        if cached is not None:
            self.open_column(cached.id)
            return cached
        if isinstance(key, Unsaved):
            return None

        try:
            row = await self._backend.select(
                Table.COLUMNS, filters={"parent_item_id": key.id}, order_by="order_index", single=True
            )
        except PersistenceError as exc:
            logger.error("Error fetching child column for item %s: %s", key, exc)
            return None
        if row is None:
            return None

        column = Column.from_row(row)
        if self._queued_for_delete(EntityKind.COLUMN, column.id):
            logger.debug("Child column %s of item %s is queued for delete", column.id, key)
            return None
        self.put_column(column)
        self.open_column(column.id)
        await self.fetch_column_contents(column.id)
        return column


def _renumber(ids: list[EntityId], arena: dict[EntityId, _Ordered]) -> list[_Ordered]:
    """Set ``order_index`` from list position; return the entities that changed."""
    changed: list[_Ordered] = []
    for position, entity_id in enumerate(ids):
        entity = arena[entity_id]
        if entity.order_index != position:
            entity.order_index = position
            changed.append(entity)
    return changed

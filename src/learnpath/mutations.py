"""Local edit operations on a PathDocument.

Handlers are synchronous and touch only the document and the change tracker.
Unknown ids are logged and ignored rather than raised, since every caller is an
interactive editor acting on what it just displayed.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

from learnpath.changes import ChangeTracker, EntityKind
from learnpath.config import LEARNPATH_MAX_DEPTH
from learnpath.document import PathDocument
from learnpath.schemas import (
    Column,
    ColumnItem,
    ColumnType,
    ContentSection,
    EntityId,
    default_section_content,
    new_unsaved_id,
    parse_entity_id,
)

logger = logging.getLogger(__name__)

DEFAULT_ITEM_TITLE = "New Item"
DEFAULT_BRANCH_TITLE = "New Branch"
DEFAULT_CONTENT_TITLE = "Content"


def _column_type(value: ColumnType | str) -> ColumnType:
    if value == "dynamic":
        return ColumnType.CONTENT
    return ColumnType(value)


class MutationHandlers:
    """Add, edit and delete operations for columns, items and sections."""

    def __init__(self, document: PathDocument, tracker: ChangeTracker) -> None:
        self.document = document
        self.tracker = tracker

    # ------------------------------------------------------------------
    # Path
    # ------------------------------------------------------------------

    def update_path(self, *, title: str | None = None, subtitle: str | None = None) -> None:
        path = self.document.path
        if path is None:
            logger.warning("No path loaded; ignoring path update")
            return
        if title is not None:
            path.title = title
        if subtitle is not None:
            path.subtitle = subtitle
        self.tracker.record_update(EntityKind.PATH)

    # ------------------------------------------------------------------
    # Columns
    # ------------------------------------------------------------------

    def add_column(self, parent_item_id: EntityId | str | None, column_type: ColumnType | str) -> Column | None:
        """Attach a new column under an item, or create the root column.

        An item anchors at most one column: if it already has one, that column
        is returned and nothing is created. The same holds for the root.
        """
        path = self.document.path
        if path is None:
            logger.warning("No path loaded; cannot add a column")
            return None

        kind = _column_type(column_type)
        parent_key = parse_entity_id(parent_item_id) if parent_item_id is not None else None

        if parent_key is None:
            existing = next((c for c in self.document.columns if c.is_root), None)
            title = DEFAULT_BRANCH_TITLE if kind is ColumnType.BRANCH else DEFAULT_CONTENT_TITLE
        else:
            parent_item = self.document.get_item(parent_key)
            if parent_item is None:
                logger.warning("Cannot add column under unknown item %s", parent_key)
                return None
            existing = self.document.child_column(parent_key)
            # The column shows under its item's name; both titles move together.
            title = parent_item.title

        if existing is not None:
            logger.info("Item %s already anchors column %s", parent_key, existing.id)
            self.document.open_column(existing.id)
            return existing

        column = Column(
            id=new_unsaved_id(),
            path_id=path.id,
            parent_item_id=parent_key,
            type=kind,
            title=title,
            order_index=0,
        )
        self.document.put_column(column)
        self.document.open_column(column.id)
        self.tracker.record_insert(EntityKind.COLUMN, column.id)

        depth = self.document.depth_of(column.id)
        if depth > LEARNPATH_MAX_DEPTH:
            logger.warning("Column %s is nested %d deep (limit %d)", column.id, depth, LEARNPATH_MAX_DEPTH)
        return column

    def rename_column(self, column_id: EntityId | str, title: str) -> None:
        """Rename a column and the item it hangs from."""
        column = self.document.get_column(column_id)
        if column is None:
            logger.warning("Cannot rename unknown column %s", column_id)
            return
        column.title = title
        self.tracker.record_update(EntityKind.COLUMN, column.id)

        if column.parent_item_id is not None:
            item = self.document.get_item(column.parent_item_id)
            if item is not None:
                item.title = title
                self.tracker.record_update(EntityKind.ITEM, item.id)

    def delete_column(self, column_id: EntityId | str) -> None:
        """Delete a column together with everything below it."""
        column = self.document.get_column(column_id)
        if column is None:
            logger.warning("Cannot delete unknown column %s", column_id)
            return
        self._drop_column_subtree(column)
        self.tracker.mark_dirty()

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    def add_item(self, column_id: EntityId | str, title: str = DEFAULT_ITEM_TITLE) -> ColumnItem | None:
        column = self.document.get_column(column_id)
        if column is None or column.type is not ColumnType.BRANCH:
            logger.warning("Cannot add an item to %s: not a branch column", column_id)
            return None
        item = ColumnItem(id=new_unsaved_id(), column_id=column.id, title=title)
        self.document.append_item(item)
        self.tracker.record_insert(EntityKind.ITEM, item.id)
        return item

    def edit_item(self, item_id: EntityId | str, title: str) -> None:
        """Retitle an item and any column anchored on it."""
        item = self.document.get_item(item_id)
        if item is None:
            logger.warning("Cannot edit unknown item %s", item_id)
            return
        item.title = title
        self.tracker.record_update(EntityKind.ITEM, item.id)
        for child in self.document.child_columns(item.id):
            child.title = title
            self.tracker.record_update(EntityKind.COLUMN, child.id)

    def delete_item(self, item_id: EntityId | str) -> None:
        """Delete an item and the subtree of any column it anchors."""
        key = parse_entity_id(item_id)
        if self.document.get_item(key) is None:
            logger.warning("Cannot delete unknown item %s", key)
            return
        self._drop_item(key, renumber=True)
        self.tracker.mark_dirty()

    # ------------------------------------------------------------------
    # Sections
    # ------------------------------------------------------------------

    def add_section(
        self,
        column_id: EntityId | str,
        section_type: str,
        content: Any = None,
    ) -> ContentSection | None:
        column = self.document.get_column(column_id)
        if column is None or column.type is not ColumnType.CONTENT:
            logger.warning("Cannot add a section to %s: not a content column", column_id)
            return None
        section = ContentSection(
            id=new_unsaved_id(),
            column_id=column.id,
            type=section_type,
            content=content if content is not None else default_section_content(section_type),
        )
        self.document.append_section(section)
        self.tracker.record_insert(EntityKind.SECTION, section.id)
        return section

    def update_section(self, section_id: EntityId | str, content: Any) -> None:
        section = self.document.get_section(section_id)
        if section is None:
            logger.warning("Cannot update unknown section %s", section_id)
            return
        section.content = content
        self.tracker.record_update(EntityKind.SECTION, section.id)

    def delete_section(self, section_id: EntityId | str) -> None:
        key = parse_entity_id(section_id)
        section, moved = self.document.remove_section(key)
        if section is None:
            logger.warning("Cannot delete unknown section %s", key)
            return
        self.tracker.record_delete(EntityKind.SECTION, key)
        for sibling in moved:
            self.tracker.record_update(EntityKind.SECTION, sibling.id)

    def reorder_sections(self, column_id: EntityId | str, new_order: Sequence[EntityId | str]) -> None:
        """Reorder a content column's sections and renumber their indexes."""
        column = self.document.get_column(column_id)
        if column is None or column.type is not ColumnType.CONTENT:
            logger.warning("Cannot reorder sections of %s: not a content column", column_id)
            return
        try:
            moved = self.document.reorder_sections(column.id, [parse_entity_id(s) for s in new_order])
        except ValueError as exc:
            logger.warning("Ignoring stale section order: %s", exc)
            return
        for section in moved:
            self.tracker.record_update(EntityKind.SECTION, section.id)
        self.tracker.mark_dirty()

    # ------------------------------------------------------------------
    # Cascades
    # ------------------------------------------------------------------

    def _drop_item(self, item_id: EntityId, *, renumber: bool) -> None:
        for child in self.document.child_columns(item_id):
            self._drop_column_subtree(child)
        item, moved = self.document.remove_item(item_id)
        if item is None:
            return
        self.tracker.record_delete(EntityKind.ITEM, item_id)
        if renumber:
            for sibling in moved:
                self.tracker.record_update(EntityKind.ITEM, sibling.id)

    def _drop_column_subtree(self, column: Column) -> None:
        for item in self.document.items_for(column.id):
            self._drop_item(item.id, renumber=False)
        for section in self.document.sections_for(column.id):
            self.document.remove_section(section.id)
            self.tracker.record_delete(EntityKind.SECTION, section.id)
        self.document.remove_column(column.id)
        self.tracker.record_delete(EntityKind.COLUMN, column.id)

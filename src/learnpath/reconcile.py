"""Save protocol: push editor changes to the backing store.

The save runs four phases in order:

  1) Delete: columns, then sections, then items. The store cascades a column
     delete to its items and sections; unsaved ids are never sent.
  2) Path: title and subtitle, when edited.
  3) Tree: walk columns parent-before-child. New columns are inserted with
     their parent item id resolved through the ids assigned earlier in the
     same walk; new items of a column are inserted in one batch and matched to
     the returned rows by position; edited items and sections are upserted.
  4) Cleanup: clear the change log and reload the document from the store, so
     no temporary id survives anywhere in editor state.

A failure stops the save where it happened. Rows written by earlier phases
stay written and the change log is kept for a retry. The save is not
transactional, and a retry may insert rows again.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from learnpath.changes import ChangeTracker, EntityKind
from learnpath.document import PathDocument
from learnpath.exceptions import PersistenceError, SaveError
from learnpath.persistence import PersistenceBackend, Row, Table
from learnpath.schemas import (
    Column,
    ColumnItem,
    ColumnType,
    ContentSection,
    EntityId,
    Unsaved,
    is_unsaved,
    row_id,
)

logger = logging.getLogger(__name__)


@dataclass
class SaveReport:
    """What a save wrote.

    Attributes:
        inserted: Rows inserted per entity kind.
        updated: Rows updated per entity kind (the path counts once).
        deleted: Delete requests sent per entity kind.
        column_ids: Temporary column id -> stored id.
        item_ids: Temporary item id -> stored id.
        section_ids: Temporary section id -> stored id.
    """

    inserted: dict[EntityKind, int] = field(default_factory=dict)
    updated: dict[EntityKind, int] = field(default_factory=dict)
    deleted: dict[EntityKind, int] = field(default_factory=dict)
    column_ids: dict[Unsaved, str] = field(default_factory=dict)
    item_ids: dict[Unsaved, str] = field(default_factory=dict)
    section_ids: dict[Unsaved, str] = field(default_factory=dict)

    @property
    def writes(self) -> int:
        return sum(self.inserted.values()) + sum(self.updated.values()) + sum(self.deleted.values())

    def tally(self, bucket: dict[EntityKind, int], kind: EntityKind, count: int = 1) -> None:
        bucket[kind] = bucket.get(kind, 0) + count


async def save_document(
    backend: PersistenceBackend,
    document: PathDocument,
    tracker: ChangeTracker,
) -> SaveReport:
    """Run the save protocol for ``document``.

    Args:
        backend: Store to write to.
        document: Editor state; reloaded from the store after a successful save.
        tracker: Changes since the last save; cleared only on success.

    Returns:
        Counts of what was written and the temporary-to-stored id mappings.

    Raises:
        SaveError: If no path is loaded or any write fails. Earlier writes are
            not rolled back.
    """
    path = document.path
    if path is None:
        raise SaveError("No path loaded")

    report = SaveReport()
    try:
        await _delete_phase(backend, tracker, report)
        if tracker.path_updated:
            await backend.update(Table.PATHS, path.id, {"title": path.title, "subtitle": path.subtitle})
            report.tally(report.updated, EntityKind.PATH)
        for column in document.columns:
            await _save_column(backend, document, tracker, column, report)
    except SaveError as exc:
        logger.error("Save of path %s failed after %d write(s): %s", path.id, report.writes, exc)
        raise
    except PersistenceError as exc:
        logger.error("Save of path %s failed after %d write(s): %s", path.id, report.writes, exc)
        raise SaveError(f"Failed to save path {path.id}: {exc}") from exc

    open_anchors = [
        _resolve_item(column.parent_item_id, report)
        for column in document.active_columns
        if column.parent_item_id is not None
    ]
    tracker.clear()
    await document.reload()
    for anchor in open_anchors:
        if anchor is None or await document.fetch_child_column(anchor) is None:
            break

    logger.info(
        "Saved path %s: %d inserted, %d updated, %d deleted",
        path.id,
        sum(report.inserted.values()),
        sum(report.updated.values()),
        sum(report.deleted.values()),
    )
    return report


async def _delete_phase(backend: PersistenceBackend, tracker: ChangeTracker, report: SaveReport) -> None:
    # Columns first: their cascade takes items and sections with them.
    for kind, table in (
        (EntityKind.COLUMN, Table.COLUMNS),
        (EntityKind.SECTION, Table.SECTIONS),
        (EntityKind.ITEM, Table.ITEMS),
    ):
        for entity_id in tracker.ordered_deletes(kind):
            if is_unsaved(entity_id):
                continue
            await backend.delete(table, filters={"id": row_id(entity_id)})
            report.tally(report.deleted, kind)


async def _save_column(
    backend: PersistenceBackend,
    document: PathDocument,
    tracker: ChangeTracker,
    column: Column,
    report: SaveReport,
) -> None:
    parent_id = _resolve_parent(column, report)

    if column.id in tracker.new_columns:
        rows = await backend.insert(Table.COLUMNS, [_column_row(column, parent_id)])
        if not rows:
            raise SaveError(f"Insert of column {column.id} returned no row")
        real_column_id = rows[0]["id"]
        report.column_ids[column.id] = real_column_id
        report.tally(report.inserted, EntityKind.COLUMN)
    elif not is_unsaved(column.id):
        real_column_id = row_id(column.id)
        if column.id in tracker.updated_ids(EntityKind.COLUMN):
            await backend.update(Table.COLUMNS, real_column_id, {"title": column.title})
            report.tally(report.updated, EntityKind.COLUMN)
    else:
        raise SaveError(f"Column {column.id} is neither stored nor queued for insert")

    if column.type is ColumnType.BRANCH:
        await _save_items(backend, tracker, document.items_for(column.id), real_column_id, report)
    else:
        await _save_sections(backend, tracker, document.sections_for(column.id), real_column_id, report)


async def _save_items(
    backend: PersistenceBackend,
    tracker: ChangeTracker,
    items: list[ColumnItem],
    real_column_id: str,
    report: SaveReport,
) -> None:
    new_ids = tracker.new_items
    updated_ids = tracker.updated_ids(EntityKind.ITEM)
    to_insert = [item for item in items if item.id in new_ids]
    to_update = [item for item in items if item.id in updated_ids and not is_unsaved(item.id)]

    if to_insert:
        payload = [
            {"column_id": real_column_id, "title": item.title, "order_index": item.order_index}
            for item in to_insert
        ]
        inserted = await backend.insert(Table.ITEMS, payload)
        if len(inserted) != len(to_insert):
            raise SaveError(
                f"Inserted {len(inserted)} item row(s) for {len(to_insert)} new item(s) in column {real_column_id}"
            )
        # The i-th returned row belongs to the i-th submitted item.
        for item, row in zip(to_insert, inserted):
            report.item_ids[item.id] = row["id"]
        report.tally(report.inserted, EntityKind.ITEM, len(inserted))

    if to_update:
        await backend.upsert(
            Table.ITEMS,
            [
                {
                    "id": row_id(item.id),
                    "column_id": real_column_id,
                    "title": item.title,
                    "order_index": item.order_index,
                }
                for item in to_update
            ],
        )
        report.tally(report.updated, EntityKind.ITEM, len(to_update))


async def _save_sections(
    backend: PersistenceBackend,
    tracker: ChangeTracker,
    sections: list[ContentSection],
    real_column_id: str,
    report: SaveReport,
) -> None:
    new_ids = tracker.new_sections
    updated_ids = tracker.updated_ids(EntityKind.SECTION)
    to_insert = [section for section in sections if section.id in new_ids]
    to_update = [s for s in sections if s.id in updated_ids and not is_unsaved(s.id)]

    if to_insert:
        inserted = await backend.insert(
            Table.SECTIONS, [_section_row(section, real_column_id) for section in to_insert]
        )
        if len(inserted) != len(to_insert):
            raise SaveError(
                f"Inserted {len(inserted)} section row(s) for {len(to_insert)} new section(s) in column {real_column_id}"
            )
        for section, row in zip(to_insert, inserted):
            report.section_ids[section.id] = row["id"]
        report.tally(report.inserted, EntityKind.SECTION, len(inserted))

    if to_update:
        await backend.upsert(
            Table.SECTIONS,
            [{"id": row_id(section.id), **_section_row(section, real_column_id)} for section in to_update],
        )
        report.tally(report.updated, EntityKind.SECTION, len(to_update))


def _resolve_parent(column: Column, report: SaveReport) -> str | None:
    parent = column.parent_item_id
    if parent is None:
        return None
    if not is_unsaved(parent):
        return row_id(parent)
    try:
        return report.item_ids[parent]
    except KeyError:
        raise SaveError(f"Parent item {parent} of column {column.id} was not saved") from None


def _resolve_item(item_id: EntityId, report: SaveReport) -> str | None:
    if not is_unsaved(item_id):
        return row_id(item_id)
    return report.item_ids.get(item_id)


def _column_row(column: Column, parent_id: str | None) -> Row:
    return {
        "path_id": column.path_id,
        "parent_item_id": parent_id,
        "type": column.type.value,
        "title": column.title,
        "order_index": column.order_index,
    }


def _section_row(section: ContentSection, real_column_id: str) -> Row:
    return {
        "column_id": real_column_id,
        "type": section.type,
        "content": section.content,
        "order_index": section.order_index,
    }



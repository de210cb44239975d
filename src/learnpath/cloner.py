"""Deep copy of a stored learning path into a new path."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import NamedTuple

from learnpath.config import LEARNPATH_CLONE_TITLE_SUFFIX
from learnpath.exceptions import CloneError, PersistenceError, RecordNotFoundError
from learnpath.persistence import PersistenceBackend, Row, Table
from learnpath.schemas import Column, ColumnType

logger = logging.getLogger(__name__)


class IdPair(NamedTuple):
    """Source row id and the id of its copy."""

    old: str
    new: str


@dataclass
class CloneResult:
    """Outcome of a clone.

    Attributes:
        path_id: Id of the new path.
        source_path_id: Id of the path that was copied.
        columns: Source column id -> copied column id.
        items: Source item id -> copied item id.
        sections: Source section id -> copied section id.
    """

    path_id: str
    source_path_id: str
    columns: dict[str, str] = field(default_factory=dict)
    items: dict[str, str] = field(default_factory=dict)
    sections: dict[str, str] = field(default_factory=dict)

    def record(self, bucket: dict[str, str], pair: IdPair) -> IdPair:
        bucket[pair.old] = pair.new
        return pair


async def clone_path(
    backend: PersistenceBackend,
    source_path_id: str,
    *,
    owner_id: str | None = None,
) -> CloneResult:
    """Copy a path and its whole column tree.

    The copy is private, starts with zero clones and points back at its source.
    Every column, item and section is copied with references rewritten to the
    new rows. The source's clone counter is incremented at the end.

    Args:
        backend: Store holding the source path.
        source_path_id: Path to copy.
        owner_id: Owner of the copy; defaults to the source owner.

    Returns:
        The new path id and the old -> new id mappings.

    Raises:
        RecordNotFoundError: If the source path does not exist.
        CloneError: If any step fails. Rows already copied are left in place.
    """
    source = await backend.select(Table.PATHS, filters={"id": source_path_id}, single=True)
    if source is None:
        raise RecordNotFoundError(f"Path {source_path_id} not found")

    new_path_id: str | None = None
    try:
        inserted = await backend.insert(
            Table.PATHS,
            [
                {
                    "title": f"{source['title']}{LEARNPATH_CLONE_TITLE_SUFFIX}",
                    "subtitle": source.get("subtitle") or "",
                    "tags": list(source.get("tags") or []),
                    "is_public": False,
                    "clones": 0,
                    "cloned_from": source_path_id,
                    "user_id": owner_id if owner_id is not None else source.get("user_id"),
                }
            ],
        )
        new_path_id = inserted[0]["id"]
        result = CloneResult(path_id=new_path_id, source_path_id=source_path_id)

        roots = await backend.select(
            Table.COLUMNS,
            filters={"path_id": source_path_id, "parent_item_id": None},
            order_by="order_index",
        )
        for root in roots:
            await _clone_column(backend, root["id"], new_path_id, None, result)

        current = await backend.select(Table.PATHS, filters={"id": source_path_id}, single=True)
        clones = (current or source).get("clones") or 0
        await backend.update(Table.PATHS, source_path_id, {"clones": clones + 1})
    except (PersistenceError, CloneError) as exc:
        logger.error(
            "Clone of path %s failed; partial copy %s left in place: %s",
            source_path_id,
            new_path_id,
            exc,
        )
        if isinstance(exc, CloneError):
            raise
        raise CloneError(f"Failed to clone path {source_path_id}: {exc}") from exc

    logger.info(
        "Cloned path %s into %s (%d columns, %d items, %d sections)",
        source_path_id,
        new_path_id,
        len(result.columns),
        len(result.items),
        len(result.sections),
    )
    return result


async def _clone_column(
    backend: PersistenceBackend,
    source_column_id: str,
    dest_path_id: str,
    dest_parent_item_id: str | None,
    result: CloneResult,
) -> IdPair:
    row = await backend.select(Table.COLUMNS, filters={"id": source_column_id}, single=True)
    if row is None:
        raise CloneError(f"Column {source_column_id} disappeared during clone")
    source = Column.from_row(row)

    inserted = await backend.insert(
        Table.COLUMNS,
        [
            {
                "path_id": dest_path_id,
                "parent_item_id": dest_parent_item_id,
                "type": source.type.value,
                "title": source.title,
                "order_index": source.order_index,
            }
        ],
    )
    pair = result.record(result.columns, IdPair(source_column_id, inserted[0]["id"]))

    if source.type is ColumnType.BRANCH:
        items = await backend.select(
            Table.ITEMS, filters={"column_id": source_column_id}, order_by="order_index"
        )
        for item in items:
            await _clone_item(backend, item, pair.new, dest_path_id, result)
    else:
        await _clone_sections(backend, source_column_id, pair.new, result)
    return pair


async def _clone_item(
    backend: PersistenceBackend,
    item: Row,
    dest_column_id: str,
    dest_path_id: str,
    result: CloneResult,
) -> IdPair:
    inserted = await backend.insert(
        Table.ITEMS,
        [{"column_id": dest_column_id, "title": item["title"], "order_index": item["order_index"]}],
    )
    pair = result.record(result.items, IdPair(item["id"], inserted[0]["id"]))

    # Columns hanging from the source item are re-attached to its copy.
    children = await backend.select(
        Table.COLUMNS, filters={"parent_item_id": pair.old}, order_by="order_index"
    )
    for child in children:
        await _clone_column(backend, child["id"], dest_path_id, pair.new, result)
    return pair


async def _clone_sections(
    backend: PersistenceBackend,
    source_column_id: str,
    dest_column_id: str,
    result: CloneResult,
) -> list[IdPair]:
    sections = await backend.select(
        Table.SECTIONS, filters={"column_id": source_column_id}, order_by="order_index"
    )
    if not sections:
        return []
    inserted = await backend.insert(
        Table.SECTIONS,
        [
            {
                "column_id": dest_column_id,
                "type": section["type"],
                "content": section.get("content"),
                "order_index": section["order_index"],
            }
            for section in sections
        ],
    )
    if len(inserted) != len(sections):
        raise CloneError(
            f"Copied {len(inserted)} of {len(sections)} sections of column {source_column_id}"
        )
    return [
        result.record(result.sections, IdPair(section["id"], row["id"]))
        for section, row in zip(sections, inserted)
    ]

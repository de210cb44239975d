"""Creating, reading, listing and deleting stored paths."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from learnpath.exceptions import RecordNotFoundError
from learnpath.persistence import PersistenceBackend, Table
from learnpath.schemas import ColumnType, PathRecord

logger = logging.getLogger(__name__)

DEFAULT_PATH_TITLE = "Untitled Path"
DEFAULT_PATH_SUBTITLE = "Add a description"
ROOT_COLUMN_TITLE = "Main Column"


@dataclass
class PublicPathPage:
    """One page of the explore listing."""

    paths: list[PathRecord] = field(default_factory=list)
    total: int = 0
    has_more: bool = False


async def create_path(
    backend: PersistenceBackend,
    title: str = "",
    *,
    owner_id: str | None = None,
    subtitle: str = DEFAULT_PATH_SUBTITLE,
) -> PathRecord:
    """Create a path with its root branch column."""
    rows = await backend.insert(
        Table.PATHS,
        [{"user_id": owner_id, "title": title.strip() or DEFAULT_PATH_TITLE, "subtitle": subtitle}],
    )
    path = PathRecord.model_validate(rows[0])
    await backend.insert(
        Table.COLUMNS,
        [
            {
                "path_id": path.id,
                "parent_item_id": None,
                "type": ColumnType.BRANCH.value,
                "title": ROOT_COLUMN_TITLE,
                "order_index": 0,
            }
        ],
    )
    logger.info("Created path %s", path.id)
    return path


async def get_path(backend: PersistenceBackend, path_id: str) -> PathRecord | None:
    row = await backend.select(Table.PATHS, filters={"id": path_id}, single=True)
    return PathRecord.model_validate(row) if row is not None else None


async def delete_path(backend: PersistenceBackend, path_id: str, *, owner_id: str | None = None) -> None:
    """Delete a path; the store removes its columns, items and sections.

    Raises:
        RecordNotFoundError: If no matching path (for ``owner_id``, when given) exists.
    """
    filters: dict[str, str] = {"id": path_id}
    if owner_id is not None:
        filters["user_id"] = owner_id
    removed = await backend.delete(Table.PATHS, filters=filters)
    if not removed:
        raise RecordNotFoundError(f"Path {path_id} not found")
    logger.info("Deleted path %s", path_id)


async def list_public_paths(
    backend: PersistenceBackend,
    *,
    query: str | None = None,
    tag: str | None = None,
    page: int = 0,
    limit: int = 12,
) -> PublicPathPage:
    """Public paths, most liked first, optionally searched by title or tag."""
    rows = await backend.select(Table.PATHS, filters={"is_public": True})
    paths = [PathRecord.model_validate(row) for row in rows]
    if query:
        needle = query.lower()
        paths = [path for path in paths if needle in path.title.lower()]
    if tag:
        paths = [path for path in paths if tag in path.tags]
    paths.sort(key=lambda path: path.likes, reverse=True)

    offset = page * limit
    return PublicPathPage(
        paths=paths[offset : offset + limit],
        total=len(paths),
        has_more=offset + limit < len(paths),
    )

"""Applying generated edits through the same paths as hand edits."""

from __future__ import annotations

import logging
from typing import Any

from learnpath.exceptions import PersistenceError, PlanError
from learnpath.mutations import MutationHandlers
from learnpath.paths import create_path
from learnpath.persistence import PersistenceBackend, Table
from learnpath.schemas import (
    ColumnType,
    CreateItemAction,
    CreateSectionAction,
    EditPlan,
    GeneratedPath,
    GeneratedSection,
)

logger = logging.getLogger(__name__)


def execute_plan(handlers: MutationHandlers, plan: EditPlan | dict[str, Any]) -> int:
    """Apply a plan to the last open column. Returns the number of actions applied.

    ``create_item`` only applies to a branch column and ``create_section`` only
    to a content column; mismatched actions are skipped.
    """
    if not isinstance(plan, EditPlan):
        plan = EditPlan.model_validate(plan)

    active = handlers.document.active_columns
    if not active:
        raise PlanError("No open column to apply the plan to")
    column = active[-1]

    applied = 0
    for action in plan.actions:
        if isinstance(action, CreateItemAction) and column.type is ColumnType.BRANCH:
            handlers.add_item(column.id, action.title)
            applied += 1
        elif isinstance(action, CreateSectionAction) and column.type is ColumnType.CONTENT:
            handlers.add_section(column.id, action.section_type, action.content)
            applied += 1
        else:
            logger.info("Skipping %s action on %s column %s", action.type, column.type.value, column.id)
    return applied


def format_section_content(section: GeneratedSection) -> dict[str, Any]:
    """Shape generated text into the content structure of its section type."""
    if section.type == "code":
        return {"code": section.content, "language": "javascript"}
    if section.type == "list":
        items = section.content if isinstance(section.content, list) else [section.content]
        return {"items": items}
    return {"text": section.content}


async def save_generated_path(
    backend: PersistenceBackend,
    generated: GeneratedPath | dict[str, Any],
    *,
    owner_id: str | None = None,
) -> str:
    """Write a generated outline to the store and return the new path id.

    The root column lists one item per branch; each branch item anchors a
    branch column with the branch's items, and an item with sections anchors a
    content column holding them. A row that fails to insert is logged and
    skipped along with everything under it.

    Raises:
        PlanError: If the path or its root column cannot be created.
    """
    if not isinstance(generated, GeneratedPath):
        generated = GeneratedPath.model_validate(generated)

    try:
        path = await create_path(
            backend, generated.path.title, owner_id=owner_id, subtitle=generated.path.subtitle
        )
        root = await backend.select(
            Table.COLUMNS, filters={"path_id": path.id, "parent_item_id": None}, single=True
        )
    except PersistenceError as exc:
        raise PlanError(f"Failed to create path: {exc}") from exc
    if root is None:
        raise PlanError(f"Path {path.id} has no root column")

    for branch_index, branch in enumerate(generated.branches):
        try:
            branch_column_id = await _insert_anchored_column(
                backend, path.id, root["id"], branch.title, branch_index, ColumnType.BRANCH
            )
        except PersistenceError as exc:
            logger.error("Error creating branch %r: %s", branch.title, exc)
            continue

        for item_index, item in enumerate(branch.items):
            if not item.sections:
                try:
                    await backend.insert(
                        Table.ITEMS,
                        [{"column_id": branch_column_id, "title": item.title, "order_index": item_index}],
                    )
                except PersistenceError as exc:
                    logger.error("Error creating item %r: %s", item.title, exc)
                continue
            try:
                content_column_id = await _insert_anchored_column(
                    backend, path.id, branch_column_id, item.title, item_index, ColumnType.CONTENT
                )
            except PersistenceError as exc:
                logger.error("Error creating item %r: %s", item.title, exc)
                continue

            for section_index, section in enumerate(item.sections):
                try:
                    await backend.insert(
                        Table.SECTIONS,
                        [
                            {
                                "column_id": content_column_id,
                                "type": section.type,
                                "content": format_section_content(section),
                                "order_index": section_index,
                            }
                        ],
                    )
                except PersistenceError as exc:
                    logger.error("Error creating section %d of %r: %s", section_index, item.title, exc)

    return path.id


async def _insert_anchored_column(
    backend: PersistenceBackend,
    path_id: str,
    parent_column_id: str,
    title: str,
    order_index: int,
    column_type: ColumnType,
) -> str:
    """Insert an item into ``parent_column_id`` and a column hanging from it."""
    item_rows = await backend.insert(
        Table.ITEMS,
        [{"column_id": parent_column_id, "title": title, "order_index": order_index}],
    )
    column_rows = await backend.insert(
        Table.COLUMNS,
        [
            {
                "path_id": path_id,
                "parent_item_id": item_rows[0]["id"],
                "type": column_type.value,
                "title": title,
                "order_index": 0,
            }
        ],
    )
    return column_rows[0]["id"]

"""Shared schemas for learnpath."""

from learnpath.schemas.entities import (
    Column,
    ColumnItem,
    ColumnType,
    ContentSection,
    PathRecord,
    default_section_content,
    row_id,
)
from learnpath.schemas.identity import (
    EntityId,
    Persisted,
    Unsaved,
    is_unsaved,
    new_unsaved_id,
    parse_entity_id,
)
from learnpath.schemas.plans import (
    CreateItemAction,
    CreateSectionAction,
    EditPlan,
    GeneratedBranch,
    GeneratedItem,
    GeneratedPath,
    GeneratedPathInfo,
    GeneratedSection,
)

__all__ = [
    "Column",
    "ColumnItem",
    "ColumnType",
    "ContentSection",
    "CreateItemAction",
    "CreateSectionAction",
    "EditPlan",
    "EntityId",
    "GeneratedBranch",
    "GeneratedItem",
    "GeneratedPath",
    "GeneratedPathInfo",
    "GeneratedSection",
    "PathRecord",
    "Persisted",
    "Unsaved",
    "default_section_content",
    "is_unsaved",
    "new_unsaved_id",
    "parse_entity_id",
    "row_id",
]

"""Models for the four entity types of a learning path."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

from learnpath.schemas.identity import EntityId, Persisted, parse_entity_id

TEXT_SECTION_TYPES = ("heading", "subheading", "paragraph")


class ColumnType(str, Enum):
    """Kind of children a column owns."""

    BRANCH = "branch"
    CONTENT = "content"


def _coerce_id(value: Any) -> Any:
    if isinstance(value, str):
        return parse_entity_id(value)
    return value


class PathRecord(BaseModel):
    """A learning path row.

    Attributes:
        id: Row id.
        title: Display title.
        subtitle: Short description shown under the title.
        tags: Free-form tags used by the explore listing.
        is_public: Whether the path appears in the explore listing.
        clones: Number of times the path has been cloned.
        likes: Like counter used to rank public paths.
        cloned_from: Id of the path this one was cloned from.
        user_id: Owner id.
    """

    id: str
    title: str
    subtitle: str = ""
    tags: list[str] = Field(default_factory=list)
    is_public: bool = False
    clones: int = 0
    likes: int = 0
    cloned_from: str | None = None
    user_id: str | None = None

    @field_validator("subtitle", mode="before")
    @classmethod
    def _none_subtitle(cls, v: str | None) -> str:
        return v or ""

    @field_validator("tags", mode="before")
    @classmethod
    def _none_tags(cls, v: list[str] | None) -> list[str]:
        return list(v or [])

    @field_validator("clones", "likes", mode="before")
    @classmethod
    def _none_counter(cls, v: int | None) -> int:
        return v or 0


class Column(BaseModel):
    """A column in the path tree: a choice menu or a content page."""

    id: EntityId
    path_id: str
    parent_item_id: EntityId | None = None
    type: ColumnType
    title: str = ""
    order_index: int = 0

    @field_validator("id", "parent_item_id", mode="before")
    @classmethod
    def _parse_ids(cls, v: Any) -> Any:
        return _coerce_id(v)

    @field_validator("type", mode="before")
    @classmethod
    def _legacy_dynamic(cls, v: Any) -> Any:
        # Older rows used "dynamic" for content pages.
        if v == "dynamic":
            return ColumnType.CONTENT
        return v

    @property
    def is_root(self) -> bool:
        return self.parent_item_id is None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> Column:
        return cls.model_validate(row)


class ColumnItem(BaseModel):
    """A choice inside a branch column."""

    id: EntityId
    column_id: EntityId
    title: str = ""
    order_index: int = 0

    @field_validator("id", "column_id", mode="before")
    @classmethod
    def _parse_ids(cls, v: Any) -> Any:
        return _coerce_id(v)

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> ColumnItem:
        return cls.model_validate(row)


class ContentSection(BaseModel):
    """A block of content inside a content column. ``content`` is opaque."""

    id: EntityId
    column_id: EntityId
    type: str
    content: Any = None
    order_index: int = 0

    @field_validator("id", "column_id", mode="before")
    @classmethod
    def _parse_ids(cls, v: Any) -> Any:
        return _coerce_id(v)

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> ContentSection:
        return cls.model_validate(row)


def default_section_content(section_type: str) -> dict[str, Any]:
    """Initial content for a freshly added section."""
    if section_type in TEXT_SECTION_TYPES:
        return {"text": ""}
    return {"url": ""}


def row_id(entity_id: EntityId) -> str:
    """Return the store id of a persisted entity.

    Raises:
        ValueError: If the identity is unsaved.
    """
    if isinstance(entity_id, Persisted):
        return entity_id.id
    raise ValueError(f"{entity_id} has no row in the backing store")

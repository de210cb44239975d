"""Entity identities: persisted rows versus local, not-yet-saved entities."""

from __future__ import annotations

import uuid
from typing import Union

from pydantic import BaseModel, ConfigDict

from learnpath.config import TEMP_ID_PREFIX, UNSAVED_ID_PREFIXES


class Persisted(BaseModel):
    """Identity of a row that exists in the backing store."""

    model_config = ConfigDict(frozen=True)

    id: str

    def __str__(self) -> str:
        return self.id


class Unsaved(BaseModel):
    """Identity of an entity created in the editor and not yet saved.

    Rendered with the ``temp-`` prefix so it is never mistaken for a row id.
    """

    model_config = ConfigDict(frozen=True)

    local_id: str

    def __str__(self) -> str:
        if self.local_id.startswith(UNSAVED_ID_PREFIXES):
            return self.local_id
        return f"{TEMP_ID_PREFIX}{self.local_id}"


EntityId = Union[Persisted, Unsaved]


def new_unsaved_id() -> Unsaved:
    """Create a fresh local identity."""
    return Unsaved(local_id=uuid.uuid4().hex[:12])


def parse_entity_id(value: EntityId | str) -> EntityId:
    """Turn a raw id string into a tagged identity.

    Strings carrying one of the local prefixes (``temp-``, ``ai-item-``) are
    unsaved; anything else is taken to be a persisted row id.
    """
    if isinstance(value, (Persisted, Unsaved)):
        return value
    if value.startswith(TEMP_ID_PREFIX):
        return Unsaved(local_id=value[len(TEMP_ID_PREFIX):])
    if value.startswith(UNSAVED_ID_PREFIXES):
        return Unsaved(local_id=value)
    return Persisted(id=value)


def is_unsaved(value: EntityId | str | None) -> bool:
    if value is None:
        return False
    return isinstance(parse_entity_id(value), Unsaved)

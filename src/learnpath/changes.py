"""Change tracking for the editor: what to insert, update and delete on save."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from learnpath.schemas import EntityId, Unsaved


class ChangeKind(str, Enum):
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


class EntityKind(str, Enum):
    PATH = "path"
    COLUMN = "column"
    ITEM = "item"
    SECTION = "section"


@dataclass(frozen=True)
class Change:
    """One recorded edit."""

    kind: ChangeKind
    entity: EntityKind
    entity_id: EntityId | None = None


class ChangeTracker:
    """Ordered log of edits since the last successful save.

    The new/deleted sets used by the save protocol are derived from the log.
    Updates are only logged for persisted entities; an unsaved entity is
    written in full when it is inserted.
    """

    def __init__(self) -> None:
        self._log: list[Change] = []
        self.has_unsaved_changes = False

    @property
    def log(self) -> tuple[Change, ...]:
        return tuple(self._log)

    def mark_dirty(self) -> None:
        self.has_unsaved_changes = True

    def record_insert(self, entity: EntityKind, entity_id: EntityId) -> None:
        self._log.append(Change(ChangeKind.INSERT, entity, entity_id))
        self.mark_dirty()

    def record_update(self, entity: EntityKind, entity_id: EntityId | None = None) -> None:
        if isinstance(entity_id, Unsaved):
            self.mark_dirty()
            return
        change = Change(ChangeKind.UPDATE, entity, entity_id)
        if change not in self._log:
            self._log.append(change)
        self.mark_dirty()

    def record_delete(self, entity: EntityKind, entity_id: EntityId) -> None:
        """Discard an unsaved entity, or queue a persisted one for removal."""
        if entity_id in self.new_ids(entity):
            self._log = [
                change
                for change in self._log
                if not (change.entity is entity and change.entity_id == entity_id)
            ]
        elif isinstance(entity_id, Unsaved):
            pass
        elif entity_id not in self.deleted_ids(entity):
            self._log.append(Change(ChangeKind.DELETE, entity, entity_id))
        self.mark_dirty()

    def _ids(self, kind: ChangeKind, entity: EntityKind) -> set[EntityId]:
        return {
            change.entity_id
            for change in self._log
            if change.kind is kind and change.entity is entity and change.entity_id is not None
        }

    def new_ids(self, entity: EntityKind) -> set[EntityId]:
        return self._ids(ChangeKind.INSERT, entity)

    def deleted_ids(self, entity: EntityKind) -> set[EntityId]:
        return self._ids(ChangeKind.DELETE, entity)

    def updated_ids(self, entity: EntityKind) -> set[EntityId]:
        return self._ids(ChangeKind.UPDATE, entity) - self.deleted_ids(entity)

    def ordered_deletes(self, entity: EntityKind) -> list[EntityId]:
        """Deleted ids of one kind in the order they were recorded."""
        return [
            change.entity_id
            for change in self._log
            if change.kind is ChangeKind.DELETE and change.entity is entity and change.entity_id is not None
        ]

    @property
    def path_updated(self) -> bool:
        return any(
            change.kind is ChangeKind.UPDATE and change.entity is EntityKind.PATH for change in self._log
        )

    @property
    def new_columns(self) -> set[EntityId]:
        return self.new_ids(EntityKind.COLUMN)

    @property
    def new_items(self) -> set[EntityId]:
        return self.new_ids(EntityKind.ITEM)

    @property
    def new_sections(self) -> set[EntityId]:
        return self.new_ids(EntityKind.SECTION)

    @property
    def deleted_columns(self) -> set[EntityId]:
        return self.deleted_ids(EntityKind.COLUMN)

    @property
    def deleted_items(self) -> set[EntityId]:
        return self.deleted_ids(EntityKind.ITEM)

    @property
    def deleted_sections(self) -> set[EntityId]:
        return self.deleted_ids(EntityKind.SECTION)

    def clear(self) -> None:
        self._log.clear()
        self.has_unsaved_changes = False

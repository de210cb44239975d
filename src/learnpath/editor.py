"""Editor session: one path, its local edits, and the save entry point."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Literal

from learnpath.changes import ChangeTracker
from learnpath.document import PathDocument
from learnpath.exceptions import LearnPathError
from learnpath.mutations import MutationHandlers
from learnpath.persistence import PersistenceBackend
from learnpath.reconcile import SaveReport, save_document
from learnpath.schemas import (
    Column,
    ColumnItem,
    ContentSection,
    EntityId,
    PathRecord,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notice:
    """A short-lived message for the person editing."""

    level: Literal["success", "error"]
    title: str
    description: str = ""


@dataclass
class SaveOutcome:
    ok: bool
    report: SaveReport | None = None
    error: str | None = None


class PathEditor(MutationHandlers):
    """Edits one learning path locally and saves it on request.

    Example::

        editor = PathEditor(backend)
        await editor.open(path_id)
        item = editor.add_item(editor.columns[0].id, "Linear Equations")
        column = editor.add_column(item.id, "content")
        editor.add_section(column.id, "heading")
        outcome = await editor.save()
    """

    def __init__(
        self,
        backend: PersistenceBackend,
        *,
        notify: Callable[[Notice], None] | None = None,
    ) -> None:
        tracker = ChangeTracker()
        super().__init__(PathDocument(backend, tracker), tracker)
        self.backend = backend
        self.notify = notify
        self.saving = False

    @property
    def path(self) -> PathRecord | None:
        return self.document.path

    @property
    def columns(self) -> list[Column]:
        return self.document.columns

    @property
    def items(self) -> dict[EntityId, list[ColumnItem]]:
        return self.document.items

    @property
    def sections(self) -> list[ContentSection]:
        return self.document.sections

    @property
    def active_columns(self) -> list[Column]:
        return self.document.active_columns

    @property
    def has_unsaved_changes(self) -> bool:
        return self.tracker.has_unsaved_changes

    async def open(self, path_id: str) -> bool:
        """Load a path for editing. Returns False if it could not be found."""
        self.tracker.clear()
        return await self.document.load(path_id) is not None

    async def fetch_child_column(self, item_id: EntityId | str) -> Column | None:
        return await self.document.fetch_child_column(item_id)

    def close_column(self, column_id: EntityId | str) -> None:
        self.document.close_column(column_id)

    async def save(self) -> SaveOutcome:
        """Save local edits.

        Never raises: a failure is logged, reported through ``notify`` and
        returned. Unsaved changes are kept so the save can be retried.
        """
        if not self.tracker.has_unsaved_changes:
            return SaveOutcome(ok=True, report=SaveReport())

        self.saving = True
        try:
            report = await save_document(self.backend, self.document, self.tracker)
        except LearnPathError as exc:
            logger.error("Save error: %s", exc)
            self._notify(Notice("error", "Failed to save", "Please try again."))
            return SaveOutcome(ok=False, error=str(exc))
        finally:
            self.saving = False

        self._notify(Notice("success", "Saved successfully!"))
        return SaveOutcome(ok=True, report=report)

    def _notify(self, notice: Notice) -> None:
        if self.notify is not None:
            self.notify(notice)

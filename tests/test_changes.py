"""Tests for the change tracker."""

from __future__ import annotations

from learnpath.changes import ChangeKind, ChangeTracker, EntityKind
from learnpath.schemas import Persisted, new_unsaved_id


class TestChangeTracker:
    """Tests for ChangeTracker bookkeeping."""

    def test_starts_clean(self) -> None:
        tracker = ChangeTracker()
        assert not tracker.has_unsaved_changes
        assert tracker.log == ()

    def test_insert_marks_new_and_dirty(self) -> None:
        tracker = ChangeTracker()
        local = new_unsaved_id()

        tracker.record_insert(EntityKind.ITEM, local)

        assert tracker.new_items == {local}
        assert tracker.has_unsaved_changes

    def test_deleting_unsaved_entity_discards_it(self) -> None:
        tracker = ChangeTracker()
        local = new_unsaved_id()
        tracker.record_insert(EntityKind.SECTION, local)

        tracker.record_delete(EntityKind.SECTION, local)

        assert tracker.new_sections == set()
        assert tracker.deleted_sections == set()
        assert tracker.log == ()

    def test_deleting_persisted_entity_queues_delete(self) -> None:
        tracker = ChangeTracker()
        stored = Persisted(id="col-1")

        tracker.record_delete(EntityKind.COLUMN, stored)
        tracker.record_delete(EntityKind.COLUMN, stored)

        assert tracker.deleted_columns == {stored}
        assert tracker.ordered_deletes(EntityKind.COLUMN) == [stored]

    def test_unknown_unsaved_delete_is_never_queued(self) -> None:
        tracker = ChangeTracker()
        tracker.record_delete(EntityKind.ITEM, new_unsaved_id())
        assert tracker.deleted_items == set()

    def test_updates_only_logged_for_persisted_entities(self) -> None:
        tracker = ChangeTracker()
        stored = Persisted(id="item-1")

        tracker.record_update(EntityKind.ITEM, new_unsaved_id())
        tracker.record_update(EntityKind.ITEM, stored)
        tracker.record_update(EntityKind.ITEM, stored)

        assert tracker.updated_ids(EntityKind.ITEM) == {stored}
        assert [change.kind for change in tracker.log] == [ChangeKind.UPDATE]

    def test_deleted_entity_is_not_reported_as_updated(self) -> None:
        tracker = ChangeTracker()
        stored = Persisted(id="item-1")
        tracker.record_update(EntityKind.ITEM, stored)
        tracker.record_delete(EntityKind.ITEM, stored)
        assert tracker.updated_ids(EntityKind.ITEM) == set()

    def test_path_updates(self) -> None:
        tracker = ChangeTracker()
        assert not tracker.path_updated
        tracker.record_update(EntityKind.PATH)
        assert tracker.path_updated

    def test_clear(self) -> None:
        tracker = ChangeTracker()
        tracker.record_insert(EntityKind.COLUMN, new_unsaved_id())
        tracker.record_delete(EntityKind.ITEM, Persisted(id="item-1"))

        tracker.clear()

        assert not tracker.has_unsaved_changes
        assert tracker.new_columns == set()
        assert tracker.deleted_items == set()

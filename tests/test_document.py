"""Tests for PathDocument loading and navigation."""

from __future__ import annotations

import pytest

from conftest import SeededTree
from learnpath.changes import ChangeTracker, EntityKind
from learnpath.document import PathDocument
from learnpath.exceptions import PersistenceError
from learnpath.persistence import MemoryBackend, Table
from learnpath.schemas import ColumnItem, Persisted, new_unsaved_id


class TestLoad:
    """Tests for loading a path."""

    @pytest.mark.asyncio
    async def test_loads_path_and_root_column(self, backend: MemoryBackend, tree: SeededTree) -> None:
        document = PathDocument(backend)

        path = await document.load(tree.path)

        assert path is not None
        assert path.title == "Algebra"
        assert [c.id for c in document.columns] == [Persisted(id=tree.root)]
        assert document.active_column_ids == [Persisted(id=tree.root)]
        titles = [item.title for item in document.items_for(tree.root)]
        assert titles == ["Linear Equations", "Quadratics", "Extras"]

    @pytest.mark.asyncio
    async def test_missing_path_returns_none(self, backend: MemoryBackend) -> None:
        document = PathDocument(backend)
        assert await document.load("nope") is None
        assert document.path is None

    @pytest.mark.asyncio
    async def test_fetch_failure_keeps_previous_state(self, backend: MemoryBackend, tree: SeededTree) -> None:
        document = PathDocument(backend)
        await document.load(tree.path)

        class BrokenBackend(MemoryBackend):
            async def select(self, *args, **kwargs):
                raise PersistenceError("connection reset")

        document._backend = BrokenBackend()
        assert await document.load(tree.path) is None
        assert document.path is not None
        assert document.path.id == tree.path


class TestChildColumns:
    """Tests for lazily loading columns anchored on items."""

    @pytest.mark.asyncio
    async def test_fetches_and_opens_child_column(self, backend: MemoryBackend, tree: SeededTree) -> None:
        document = PathDocument(backend)
        await document.load(tree.path)

        column = await document.fetch_child_column(tree.linear)

        assert column is not None
        assert column.id == Persisted(id=tree.content)
        assert [c.id.id for c in document.active_columns] == [tree.root, tree.content]
        assert [s.type for s in document.sections_for(tree.content)] == ["heading", "paragraph", "code"]

    @pytest.mark.asyncio
    async def test_item_without_child_returns_none(self, backend: MemoryBackend, tree: SeededTree) -> None:
        document = PathDocument(backend)
        await document.load(tree.path)
        assert await document.fetch_child_column(tree.extras) is None

    @pytest.mark.asyncio
    async def test_unsaved_item_makes_no_request(self, backend: MemoryBackend, tree: SeededTree) -> None:
        document = PathDocument(backend)
        await document.load(tree.path)
        backend.reset_calls()

        assert await document.fetch_child_column(new_unsaved_id()) is None
        assert backend.calls == []

    @pytest.mark.asyncio
    async def test_cached_column_is_not_fetched_again(self, backend: MemoryBackend, tree: SeededTree) -> None:
        document = PathDocument(backend)
        await document.load(tree.path)
        await document.fetch_child_column(tree.linear)
        backend.reset_calls()

        await document.fetch_child_column(tree.linear)

        assert backend.calls == []

    @pytest.mark.asyncio
    async def test_opening_sibling_truncates_later_columns(self, backend: MemoryBackend, tree: SeededTree) -> None:
        document = PathDocument(backend)
        await document.load(tree.path)
        await document.fetch_child_column(tree.linear)

        await document.fetch_child_column(tree.quadratics)

        assert [c.id.id for c in document.active_columns] == [tree.root, tree.sub_branch]

    @pytest.mark.asyncio
    async def test_close_column_hides_it_and_later_columns(self, backend: MemoryBackend, tree: SeededTree) -> None:
        document = PathDocument(backend)
        await document.load(tree.path)
        await document.fetch_child_column(tree.quadratics)

        document.close_column(tree.sub_branch)

        assert [c.id.id for c in document.active_columns] == [tree.root]
        assert document.get_column(tree.sub_branch) is not None


class TestOrdering:
    """Tests for order_index maintenance."""

    @pytest.mark.asyncio
    async def test_remove_item_renumbers_siblings(self, backend: MemoryBackend, tree: SeededTree) -> None:
        document = PathDocument(backend)
        await document.load(tree.path)

        removed, moved = document.remove_item(Persisted(id=tree.linear))

        assert removed is not None
        assert [item.order_index for item in document.items_for(tree.root)] == [0, 1]
        assert {item.id.id for item in moved} == {tree.quadratics, tree.extras}

    def test_append_assigns_next_position(self, backend: MemoryBackend) -> None:
        document = PathDocument(backend)
        column_id = Persisted(id="col-1")
        first = ColumnItem(id=new_unsaved_id(), column_id=column_id)
        second = ColumnItem(id=new_unsaved_id(), column_id=column_id)

        document.append_item(first)
        document.append_item(second)

        assert (first.order_index, second.order_index) == (0, 1)

    @pytest.mark.asyncio
    async def test_reorder_rejects_non_permutation(self, backend: MemoryBackend, tree: SeededTree) -> None:
        document = PathDocument(backend)
        await document.load(tree.path)
        await document.fetch_child_column(tree.linear)

        with pytest.raises(ValueError, match="does not match"):
            document.reorder_sections(Persisted(id=tree.content), [Persisted(id=tree.sections[0])])


@pytest.mark.asyncio
async def test_root_lookup_filters_on_null_parent(backend: MemoryBackend, tree: SeededTree) -> None:
    document = PathDocument(backend)
    backend.tables[Table.COLUMNS][tree.content]["order_index"] = -1

    await document.load(tree.path)

    assert document.columns[0].id == Persisted(id=tree.root)


@pytest.mark.asyncio
async def test_rows_queued_for_delete_are_not_reloaded(backend: MemoryBackend, tree: SeededTree) -> None:
    tracker = ChangeTracker()
    document = PathDocument(backend, tracker)
    await document.load(tree.path)
    tracker.record_delete(EntityKind.SECTION, Persisted(id=tree.sections[0]))
    tracker.record_delete(EntityKind.COLUMN, Persisted(id=tree.sub_branch))

    content = await document.fetch_child_column(tree.linear)
    sub_branch = await document.fetch_child_column(tree.quadratics)

    assert content is not None
    assert [s.id.id for s in document.sections_for(tree.content)] == list(tree.sections[1:])
    assert sub_branch is None
    assert document.get_item(tree.factoring) is None

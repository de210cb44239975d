"""Tests for path-level operations."""

from __future__ import annotations

import pytest

from conftest import SeededTree
from learnpath.exceptions import RecordNotFoundError
from learnpath.paths import (
    DEFAULT_PATH_TITLE,
    ROOT_COLUMN_TITLE,
    create_path,
    delete_path,
    get_path,
    list_public_paths,
)
from learnpath.persistence import MemoryBackend, Table


def _add_public(backend: MemoryBackend, path_id: str, title: str, likes: int, tags: list[str]) -> None:
    backend.tables[Table.PATHS][path_id] = {
        "id": path_id,
        "title": title,
        "subtitle": "",
        "tags": tags,
        "is_public": True,
        "clones": 0,
        "likes": likes,
        "cloned_from": None,
        "user_id": None,
    }


class TestCreatePath:
    """Tests for create_path."""

    @pytest.mark.asyncio
    async def test_creates_root_branch_column(self, backend: MemoryBackend) -> None:
        path = await create_path(backend, "Geometry", owner_id="u1")

        columns = backend.rows(Table.COLUMNS)
        assert len(columns) == 1
        assert columns[0]["path_id"] == path.id
        assert columns[0]["parent_item_id"] is None
        assert columns[0]["type"] == "branch"
        assert columns[0]["title"] == ROOT_COLUMN_TITLE
        assert path.user_id == "u1"
        assert not path.is_public

    @pytest.mark.asyncio
    async def test_blank_title_gets_default(self, backend: MemoryBackend) -> None:
        path = await create_path(backend, "   ")
        assert path.title == DEFAULT_PATH_TITLE


class TestGetAndDelete:
    """Tests for get_path and delete_path."""

    @pytest.mark.asyncio
    async def test_get_path(self, backend: MemoryBackend, tree: SeededTree) -> None:
        path = await get_path(backend, tree.path)
        assert path is not None
        assert path.tags == ["math"]
        assert await get_path(backend, "missing") is None

    @pytest.mark.asyncio
    async def test_delete_cascades(self, backend: MemoryBackend, tree: SeededTree) -> None:
        await delete_path(backend, tree.path)

        for table in Table:
            assert backend.rows(table) == []

    @pytest.mark.asyncio
    async def test_delete_checks_owner(self, backend: MemoryBackend, tree: SeededTree) -> None:
        with pytest.raises(RecordNotFoundError):
            await delete_path(backend, tree.path, owner_id="someone-else")
        assert tree.path in backend.tables[Table.PATHS]

        await delete_path(backend, tree.path, owner_id="teacher-1")
        assert tree.path not in backend.tables[Table.PATHS]


class TestListPublicPaths:
    """Tests for the explore listing."""

    @pytest.fixture
    def listing_backend(self, backend: MemoryBackend) -> MemoryBackend:
        _add_public(backend, "p1", "Intro to Python", 3, ["code"])
        _add_public(backend, "p2", "Advanced Python", 10, ["code", "advanced"])
        _add_public(backend, "p3", "Watercolor", 7, ["art"])
        backend.tables[Table.PATHS]["p4"] = {"id": "p4", "title": "Private Python", "is_public": False}
        return backend

    @pytest.mark.asyncio
    async def test_sorted_by_likes(self, listing_backend: MemoryBackend) -> None:
        page = await list_public_paths(listing_backend)
        assert [p.id for p in page.paths] == ["p2", "p3", "p1"]
        assert page.total == 3
        assert not page.has_more

    @pytest.mark.asyncio
    async def test_query_and_tag(self, listing_backend: MemoryBackend) -> None:
        by_query = await list_public_paths(listing_backend, query="python")
        by_tag = await list_public_paths(listing_backend, tag="art")

        assert [p.id for p in by_query.paths] == ["p2", "p1"]
        assert [p.id for p in by_tag.paths] == ["p3"]

    @pytest.mark.asyncio
    async def test_pagination(self, listing_backend: MemoryBackend) -> None:
        first = await list_public_paths(listing_backend, limit=2)
        second = await list_public_paths(listing_backend, page=1, limit=2)

        assert [p.id for p in first.paths] == ["p2", "p3"]
        assert first.has_more
        assert [p.id for p in second.paths] == ["p1"]
        assert not second.has_more

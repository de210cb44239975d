"""Test setup for learnpath."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from learnpath.persistence import MemoryBackend, Table  # noqa: E402


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for pytest.

    This allows running integration tests selectively:
        pytest -m integration       # run only integration tests
        pytest -m "not integration" # skip integration tests
    """
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (talk to a real PostgREST endpoint)",
    )


@dataclass
class SeededTree:
    """Ids of the rows in the seeded path.

    Layout::

        root (branch "Main Column")
          linear      -> content (3 sections)
          quadratics  -> sub_branch (branch)
                           factoring
                           formula
          extras
    """

    path: str = "path-algebra"
    root: str = "col-root"
    linear: str = "item-linear"
    quadratics: str = "item-quadratics"
    extras: str = "item-extras"
    content: str = "col-content"
    sub_branch: str = "col-sub"
    factoring: str = "item-factoring"
    formula: str = "item-formula"
    sections: tuple[str, ...] = ("sec-heading", "sec-paragraph", "sec-code")


def _put(backend: MemoryBackend, table: Table, row: dict) -> None:
    backend.tables[table][row["id"]] = row


def seed_tree(backend: MemoryBackend, tree: SeededTree | None = None) -> SeededTree:
    """Write the seeded path straight into the backend tables."""
    tree = tree or SeededTree()
    _put(
        backend,
        Table.PATHS,
        {
            "id": tree.path,
            "title": "Algebra",
            "subtitle": "From equations to functions",
            "tags": ["math"],
            "is_public": True,
            "clones": 2,
            "likes": 5,
            "cloned_from": None,
            "user_id": "teacher-1",
        },
    )
    for column_id, parent, kind, title in (
        (tree.root, None, "branch", "Main Column"),
        (tree.content, tree.linear, "content", "Linear Equations"),
        (tree.sub_branch, tree.quadratics, "branch", "Quadratics"),
    ):
        _put(
            backend,
            Table.COLUMNS,
            {
                "id": column_id,
                "path_id": tree.path,
                "parent_item_id": parent,
                "type": kind,
                "title": title,
                "order_index": 0,
            },
        )
    for index, (item_id, column_id, title) in enumerate(
        (
            (tree.linear, tree.root, "Linear Equations"),
            (tree.quadratics, tree.root, "Quadratics"),
            (tree.extras, tree.root, "Extras"),
        )
    ):
        _put(
            backend,
            Table.ITEMS,
            {"id": item_id, "column_id": column_id, "title": title, "order_index": index},
        )
    for index, (item_id, title) in enumerate(((tree.factoring, "Factoring"), (tree.formula, "Formula"))):
        _put(
            backend,
            Table.ITEMS,
            {"id": item_id, "column_id": tree.sub_branch, "title": title, "order_index": index},
        )
    for index, (section_id, kind, content) in enumerate(
        zip(
            tree.sections,
            ("heading", "paragraph", "code"),
            ({"text": "Lines"}, {"text": "y = mx + b"}, {"code": "solve(x)", "language": "python"}),
        )
    ):
        _put(
            backend,
            Table.SECTIONS,
            {
                "id": section_id,
                "column_id": tree.content,
                "type": kind,
                "content": content,
                "order_index": index,
            },
        )
    return tree


@pytest.fixture
def backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture
def tree(backend: MemoryBackend) -> SeededTree:
    return seed_tree(backend)

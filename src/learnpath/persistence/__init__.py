"""Backends implementing the relational persistence API."""

from learnpath.persistence.base import Filters, PersistenceBackend, Row, Table
from learnpath.persistence.memory import MemoryBackend
from learnpath.persistence.postgrest import PostgrestBackend

__all__ = [
    "Filters",
    "MemoryBackend",
    "PersistenceBackend",
    "PostgrestBackend",
    "Row",
    "Table",
]

"""learnpath: edit, save and clone nested learning paths."""

from learnpath.changes import Change, ChangeKind, ChangeTracker, EntityKind
from learnpath.cloner import CloneResult, clone_path
from learnpath.document import PathDocument
from learnpath.editor import Notice, PathEditor, SaveOutcome
from learnpath.exceptions import (
    CloneError,
    LearnPathError,
    PersistenceError,
    PlanError,
    RecordNotFoundError,
    SaveError,
)
from learnpath.mutations import MutationHandlers
from learnpath.paths import PublicPathPage, create_path, delete_path, get_path, list_public_paths
from learnpath.persistence import MemoryBackend, PersistenceBackend, PostgrestBackend, Table
from learnpath.plans import execute_plan, save_generated_path
from learnpath.reconcile import SaveReport, save_document

__all__ = [
    "Change",
    "ChangeKind",
    "ChangeTracker",
    "CloneError",
    "CloneResult",
    "EntityKind",
    "LearnPathError",
    "MemoryBackend",
    "MutationHandlers",
    "Notice",
    "PathDocument",
    "PathEditor",
    "PersistenceBackend",
    "PersistenceError",
    "PlanError",
    "PostgrestBackend",
    "PublicPathPage",
    "RecordNotFoundError",
    "SaveError",
    "SaveOutcome",
    "SaveReport",
    "Table",
    "clone_path",
    "create_path",
    "delete_path",
    "execute_plan",
    "get_path",
    "list_public_paths",
    "save_document",
    "save_generated_path",
]

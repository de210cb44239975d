"""Custom exceptions for learnpath."""


class LearnPathError(Exception):
    """Base exception for learnpath operations."""


class PersistenceError(LearnPathError):
    """Error reported by the backing store."""


class RecordNotFoundError(PersistenceError):
    """A row expected to exist was not found."""


class SaveError(LearnPathError):
    """Error while reconciling editor state with the backing store."""


class CloneError(LearnPathError):
    """Error while cloning a path."""


class PlanError(LearnPathError):
    """A generated plan or outline could not be applied."""

"""Request dependencies."""

from fastapi import Request

from learnpath.persistence import PersistenceBackend


def get_backend(request: Request) -> PersistenceBackend:
    """Return the backend opened by the application lifespan."""
    return request.app.state.backend

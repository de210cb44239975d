"""Path endpoints for the API."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from learnpath.cloner import clone_path
from learnpath.exceptions import CloneError, PersistenceError, PlanError, RecordNotFoundError
from learnpath.paths import DEFAULT_PATH_SUBTITLE, create_path, delete_path, get_path, list_public_paths
from learnpath.persistence import PersistenceBackend
from learnpath.plans import save_generated_path
from learnpath.utils.logging_config import get_logger
from server.dependencies import get_backend
from server.models import (
    ClonePathRequest,
    CloneResponse,
    CreatedResponse,
    CreatePathRequest,
    ErrorResponse,
    ExploreResponse,
    GeneratedPathRequest,
    PathResponse,
)
from server.server_config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

logger = get_logger(__name__)

router = APIRouter(prefix="/api")

COMMON_RESPONSES = {
    status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
    status.HTTP_502_BAD_GATEWAY: {"model": ErrorResponse},
}


def _edit_url(path_id: str) -> str:
    return f"/path/{path_id}/edit"


def _store_failure(exc: Exception) -> HTTPException:
    logger.error("Backing store request failed", extra={"error": str(exc)})
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))


@router.post("/paths", status_code=status.HTTP_201_CREATED, responses=COMMON_RESPONSES)
async def api_create_path(
    create_request: CreatePathRequest,
    backend: PersistenceBackend = Depends(get_backend),
) -> CreatedResponse:
    """Create a path with its root column.

    **Returns**

    - **CreatedResponse**: id of the new path and where to edit it

    """
    try:
        path = await create_path(
            backend,
            create_request.title,
            owner_id=create_request.user_id,
            subtitle=create_request.subtitle or DEFAULT_PATH_SUBTITLE,
        )
    except PersistenceError as exc:
        raise _store_failure(exc) from exc
    return CreatedResponse(path_id=path.id, edit_url=_edit_url(path.id))


@router.post("/paths/generated", status_code=status.HTTP_201_CREATED, responses=COMMON_RESPONSES)
async def api_save_generated_path(
    generated_request: GeneratedPathRequest,
    backend: PersistenceBackend = Depends(get_backend),
) -> CreatedResponse:
    """Store a generated outline as a new path."""
    try:
        path_id = await save_generated_path(
            backend, generated_request.outline, owner_id=generated_request.user_id
        )
    except PlanError as exc:
        raise _store_failure(exc) from exc
    return CreatedResponse(path_id=path_id, edit_url=_edit_url(path_id))


@router.get("/paths/{path_id}", responses=COMMON_RESPONSES)
async def api_get_path(
    path_id: str,
    backend: PersistenceBackend = Depends(get_backend),
) -> PathResponse:
    """Return one path."""
    try:
        path = await get_path(backend, path_id)
    except PersistenceError as exc:
        raise _store_failure(exc) from exc
    if path is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Path {path_id!r} not found")
    return PathResponse(path=path)


@router.delete("/paths/{path_id}", status_code=status.HTTP_204_NO_CONTENT, responses=COMMON_RESPONSES)
async def api_delete_path(
    path_id: str,
    user_id: str | None = None,
    backend: PersistenceBackend = Depends(get_backend),
) -> None:
    """Delete a path and everything in it.

    **Query Parameters**
    - **user_id** (`str`, optional): only delete if the path belongs to this owner
    """
    try:
        await delete_path(backend, path_id, owner_id=user_id)
    except RecordNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except PersistenceError as exc:
        raise _store_failure(exc) from exc


@router.post("/paths/{path_id}/clone", status_code=status.HTTP_201_CREATED, responses=COMMON_RESPONSES)
async def api_clone_path(
    path_id: str,
    clone_request: ClonePathRequest | None = None,
    backend: PersistenceBackend = Depends(get_backend),
) -> CloneResponse:
    """Copy a path, its columns, items and sections into a new private path."""
    owner_id = clone_request.user_id if clone_request else None
    try:
        result = await clone_path(backend, path_id, owner_id=owner_id)
    except RecordNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except (CloneError, PersistenceError) as exc:
        raise _store_failure(exc) from exc

    logger.info("Path cloned", extra={"source_path_id": path_id, "path_id": result.path_id})
    return CloneResponse(
        path_id=result.path_id,
        edit_url=_edit_url(result.path_id),
        source_path_id=path_id,
        columns=len(result.columns),
        items=len(result.items),
        sections=len(result.sections),
    )


@router.get("/explore", responses=COMMON_RESPONSES)
async def api_explore(
    query: str | None = None,
    tag: str | None = None,
    page: int = Query(default=0, ge=0),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    backend: PersistenceBackend = Depends(get_backend),
) -> ExploreResponse:
    """List public paths, most liked first."""
    try:
        listing = await list_public_paths(backend, query=query, tag=tag, page=page, limit=limit)
    except PersistenceError as exc:
        raise _store_failure(exc) from exc
    return ExploreResponse(paths=listing.paths, total=listing.total, has_more=listing.has_more)

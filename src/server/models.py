"""Pydantic models for the API."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from learnpath.schemas import GeneratedPath, PathRecord


class CreatePathRequest(BaseModel):
    """Request model for ``POST /api/paths``.

    Attributes
    ----------
    title : str
        Title of the new path; blank titles become "Untitled Path".
    subtitle : str | None
        Optional description.
    user_id : str | None
        Owner of the path.

    """

    title: str = Field(default="", description="Path title")
    subtitle: str | None = Field(default=None, description="Path description")
    user_id: str | None = Field(default=None, description="Owner id")

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        """Strip surrounding whitespace from ``title``."""
        return v.strip()


class ClonePathRequest(BaseModel):
    """Request model for ``POST /api/paths/{path_id}/clone``."""

    user_id: str | None = Field(default=None, description="Owner of the copy")


class GeneratedPathRequest(BaseModel):
    """Request model for ``POST /api/paths/generated``."""

    user_id: str | None = Field(default=None, description="Owner id")
    outline: GeneratedPath


class PathResponse(BaseModel):
    """Response model carrying one path."""

    path: PathRecord


class CreatedResponse(BaseModel):
    """Response model for endpoints that create a path."""

    path_id: str = Field(..., description="Id of the created path")
    edit_url: str = Field(..., description="Editor location for the new path")


class CloneResponse(CreatedResponse):
    """Response model for ``POST /api/paths/{path_id}/clone``.

    Attributes
    ----------
    source_path_id : str
        The path that was copied.
    columns : int
        Number of copied columns.
    items : int
        Number of copied items.
    sections : int
        Number of copied sections.

    """

    source_path_id: str
    columns: int
    items: int
    sections: int


class ExploreResponse(BaseModel):
    """Response model for ``GET /api/explore``."""

    paths: list[PathRecord]
    total: int
    has_more: bool


class ErrorResponse(BaseModel):
    """Error response model."""

    error: str = Field(..., description="Error message")

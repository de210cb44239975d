"""Models for generated edit plans and generated path outlines."""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field


class CreateItemAction(BaseModel):
    """Add an item to the active branch column."""

    type: Literal["create_item"] = "create_item"
    title: str


class CreateSectionAction(BaseModel):
    """Add a section to the active content column."""

    type: Literal["create_section"] = "create_section"
    section_type: str = Field(alias="sectionType")
    content: Any = None

    model_config = {"populate_by_name": True}


PlanAction = Annotated[
    Union[CreateItemAction, CreateSectionAction],
    Field(discriminator="type"),
]


class EditPlan(BaseModel):
    """A batch of edits proposed for the open editor."""

    actions: list[PlanAction] = Field(default_factory=list)


class GeneratedSection(BaseModel):
    type: str
    content: str | list[str]


class GeneratedItem(BaseModel):
    title: str
    sections: list[GeneratedSection] = Field(default_factory=list)


class GeneratedBranch(BaseModel):
    title: str
    items: list[GeneratedItem] = Field(default_factory=list)


class GeneratedPathInfo(BaseModel):
    title: str
    subtitle: str = ""


class GeneratedPath(BaseModel):
    """A complete outline to be written straight to the backing store."""

    path: GeneratedPathInfo
    branches: list[GeneratedBranch] = Field(default_factory=list)

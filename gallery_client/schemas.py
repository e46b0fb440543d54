"""Sidebar API schemas - procedure categories and their procedures."""

from pydantic import BaseModel, ConfigDict, Field


class SidebarProcedure(BaseModel):
    """Procedure entry under a sidebar category."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    slug_name: str | None = Field(alias="slugName", default=None)
    ids: list[int] = []
    total_case: int = Field(alias="totalCase", default=0)
    nudity: bool = False
    description: str | None = None


class SidebarCategory(BaseModel):
    """Top-level sidebar category."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    slug_name: str | None = Field(alias="slugName", default=None)
    description: str | None = None
    procedures: list[SidebarProcedure] = []


class SidebarResponse(BaseModel):
    """POST /api/plugin/combine/sidebar response."""

    success: bool = False
    data: list[SidebarCategory] = []

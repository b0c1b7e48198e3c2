"""Content-authoring assistance schemas."""

from pydantic import BaseModel, ConfigDict, Field


class SummaryRequest(BaseModel):
    """Summarise article markdown."""

    content: str = Field(min_length=1)
    model_key: str | None = None


class SummaryResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    summary: str


class TagsRequest(BaseModel):
    """Suggest tags for an article."""

    title: str = Field(min_length=1)
    content: str = ""
    existing_tags: list[str] = Field(default_factory=list)
    model_key: str | None = None


class TagsResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    tags: list[str]


class IconRequest(BaseModel):
    """Pick or draw an icon for a project."""

    title: str = Field(min_length=1)
    description: str = ""
    available_icons: list[str] = Field(
        default_factory=list,
        description="Icon names to choose from; empty means the preset set",
    )
    model_key: str | None = None


class IconResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    icon: str | None


class IconArtResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    svg: str

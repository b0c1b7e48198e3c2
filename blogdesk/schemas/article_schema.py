"""Article schemas."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from blogdesk.schemas.field_types import UtcDatetime


class Article(BaseModel):
    """Blog article as seen by the rest of the application."""

    id: str = Field(min_length=1, max_length=64)
    title: str = Field(max_length=255)
    summary: str = ""
    content: str = ""
    created_at: UtcDatetime
    updated_at: UtcDatetime
    is_published: bool = False
    tags: list[str] = Field(default_factory=list)


class ArticleUpsertRequest(BaseModel):
    """Create or overwrite the mutable fields of an article."""

    title: str = Field(min_length=1, max_length=255)
    summary: str = ""
    content: str = ""
    is_published: bool = False
    tags: list[str] = Field(default_factory=list)

    @field_validator("tags")
    @classmethod
    def strip_tags(cls, v: list[str]) -> list[str]:
        return [tag.strip() for tag in v if tag.strip()]


class ArticleSummary(BaseModel):
    """Article without its body, used for lists and attachments."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str
    title: str
    summary: str
    created_at: UtcDatetime
    updated_at: UtcDatetime
    is_published: bool
    tags: list[str]

"""Link-directory project schemas."""

from typing import Literal

from pydantic import BaseModel, Field, model_validator

IconType = Literal["auto", "preset", "generated"]

PRESET_ICONS = [
    "Globe", "Layout", "Box", "Star", "Code", "Terminal", "Database", "Server",
    "Cloud", "Cpu", "Github", "BookOpen", "PenTool", "Camera", "Music", "Film",
    "Gamepad2", "ShoppingCart", "MessageCircle", "Mail", "Calendar", "Map",
    "Compass", "Heart", "Zap", "Shield", "Lock", "Rocket", "Sparkles", "Bot",
]


class Project(BaseModel):
    """Link-directory entry.

    Only the icon field matching ``icon_type`` is kept: ``preset`` keeps
    ``preset_icon``, ``generated`` keeps ``custom_svg`` and ``auto`` keeps the
    fetched favicon in ``image_base64``.
    """

    id: str = Field(min_length=1, max_length=64)
    title: str = Field(max_length=255)
    description: str = ""
    url: str = ""
    icon_type: IconType = "auto"
    preset_icon: str | None = None
    image_base64: str | None = None
    custom_svg: str | None = None

    @model_validator(mode="after")
    def keep_matching_icon(self) -> "Project":
        if self.icon_type == "preset":
            if not self.preset_icon:
                raise ValueError("preset_icon is required when icon_type is 'preset'")
            self.image_base64 = None
            self.custom_svg = None
        elif self.icon_type == "generated":
            if not self.custom_svg:
                raise ValueError("custom_svg is required when icon_type is 'generated'")
            self.preset_icon = None
            self.image_base64 = None
        else:
            self.preset_icon = None
            self.custom_svg = None
        return self


class ProjectUpsertRequest(BaseModel):
    """Create or overwrite a project; icon rules are applied on conversion."""

    title: str = Field(min_length=1, max_length=255)
    description: str = ""
    url: str = Field(min_length=1)
    icon_type: IconType = "auto"
    preset_icon: str | None = None
    image_base64: str | None = None
    custom_svg: str | None = None

    @model_validator(mode="after")
    def require_selected_icon(self) -> "ProjectUpsertRequest":
        if self.icon_type == "preset" and not self.preset_icon:
            raise ValueError("preset_icon is required when icon_type is 'preset'")
        if self.icon_type == "generated" and not self.custom_svg:
            raise ValueError("custom_svg is required when icon_type is 'generated'")
        return self

"""Setting schemas."""

from pydantic import BaseModel


class AIModelSettings(BaseModel):
    """Default model per authoring task."""

    general_model: str
    svg_model: str

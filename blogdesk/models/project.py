"""Link-directory project database model."""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from blogdesk.core.database import Base


class ProjectRecord(Base):
    """Link-directory entry with one icon representation."""

    __tablename__ = "projects"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    url: Mapped[str] = mapped_column(Text, nullable=False, default="")
    icon_type: Mapped[str] = mapped_column(String(20), nullable=False, default="auto")
    preset_icon: Mapped[str | None] = mapped_column(String(100), nullable=True)
    image_base64: Mapped[str | None] = mapped_column(Text, nullable=True)
    custom_svg: Mapped[str | None] = mapped_column(Text, nullable=True)

"""Key/value setting database model."""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from blogdesk.core.database import Base


class SettingRecord(Base):
    """Global admin-configurable value."""

    __tablename__ = "settings"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False, default="")

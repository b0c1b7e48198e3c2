"""ORM models for the remote store."""

from blogdesk.models.article import ArticleRecord
from blogdesk.models.chat_message import ChatMessageRecord
from blogdesk.models.chat_session import ChatSessionRecord
from blogdesk.models.project import ProjectRecord
from blogdesk.models.setting import SettingRecord

__all__ = [
    "ArticleRecord",
    "ChatMessageRecord",
    "ChatSessionRecord",
    "ProjectRecord",
    "SettingRecord",
]

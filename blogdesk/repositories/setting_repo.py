"""Setting repository for database operations."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from blogdesk.models.setting import SettingRecord


class SettingRepository:
    """Encapsulates key/value setting queries."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_all(self) -> dict[str, str]:
        result = await self._session.execute(select(SettingRecord))
        return {record.key: record.value for record in result.scalars().all()}

    async def upsert(self, key: str, value: str) -> None:
        record = await self._session.get(SettingRecord, key)
        if record is None:
            self._session.add(SettingRecord(key=key, value=value))
        else:
            record.value = value
        await self._session.flush()

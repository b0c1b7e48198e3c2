"""Project repository for database operations."""

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from blogdesk.models.project import ProjectRecord
from blogdesk.schemas.project_schema import Project


def to_project(record: ProjectRecord) -> Project:
    return Project(
        id=record.id,
        title=record.title,
        description=record.description,
        url=record.url,
        icon_type=record.icon_type,  # type: ignore[arg-type]
        preset_icon=record.preset_icon,
        image_base64=record.image_base64,
        custom_svg=record.custom_svg,
    )


class ProjectRepository:
    """Encapsulates link-directory queries."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_all(self) -> list[Project]:
        """Newest first; timestamp ids compare by length, then digit by digit."""
        result = await self._session.execute(
            select(ProjectRecord).order_by(
                func.length(ProjectRecord.id).desc(), ProjectRecord.id.desc()
            )
        )
        return [to_project(record) for record in result.scalars().all()]

    async def find_by_id(self, project_id: str) -> Project | None:
        record = await self._session.get(ProjectRecord, project_id)
        return to_project(record) if record else None

    async def upsert(self, project: Project) -> None:
        record = await self._session.get(ProjectRecord, project.id)
        if record is None:
            record = ProjectRecord(id=project.id)
            self._session.add(record)
        record.title = project.title
        record.description = project.description
        record.url = project.url
        record.icon_type = project.icon_type
        record.preset_icon = project.preset_icon
        record.image_base64 = project.image_base64
        record.custom_svg = project.custom_svg
        await self._session.flush()

    async def delete(self, project_id: str) -> None:
        await self._session.execute(
            delete(ProjectRecord).where(ProjectRecord.id == project_id)
        )

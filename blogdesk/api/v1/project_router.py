"""Link-directory project endpoints."""

import time
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from blogdesk.core.exceptions import ProjectNotFoundError
from blogdesk.dependencies import get_gateway, require_admin
from blogdesk.schemas.project_schema import Project, ProjectUpsertRequest
from blogdesk.schemas.response_schema import (
    ApiResponse,
    success_response,
    write_response,
)
from blogdesk.services.persistence_gateway import PersistenceGateway

router = APIRouter(prefix="/api/v1/projects", tags=["projects"])

GatewayDep = Annotated[PersistenceGateway, Depends(get_gateway)]

_last_project_id = 0


def new_project_id() -> str:
    """Millisecond timestamp, so listing by id desc lists newest first.

    Bumped past the previous id when two creates land in the same millisecond.
    """
    global _last_project_id  # noqa: PLW0603
    _last_project_id = max(time.time_ns() // 1_000_000, _last_project_id + 1)
    return str(_last_project_id)


@router.get("", response_model=ApiResponse[list[Project]])
async def list_projects(
    gateway: GatewayDep, force_refresh: bool = Query(default=False)
) -> dict:
    return success_response(await gateway.get_projects(force_refresh=force_refresh))


@router.post(
    "",
    response_model=ApiResponse[Project],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_project(body: ProjectUpsertRequest, gateway: GatewayDep) -> dict:
    """Create a project; icon fields not matching ``icon_type`` are dropped."""
    project = Project(id=new_project_id(), **body.model_dump())
    saved = await gateway.save_project(project)
    return write_response(project, saved, status=201)


@router.put(
    "/{project_id}",
    response_model=ApiResponse[Project],
    dependencies=[Depends(require_admin)],
)
async def update_project(
    project_id: str, body: ProjectUpsertRequest, gateway: GatewayDep
) -> dict:
    if await gateway.get_project_by_id(project_id) is None:
        raise ProjectNotFoundError
    project = Project(id=project_id, **body.model_dump())
    saved = await gateway.save_project(project)
    return write_response(project, saved)


@router.delete(
    "/{project_id}",
    response_model=ApiResponse[dict],
    dependencies=[Depends(require_admin)],
)
async def delete_project(project_id: str, gateway: GatewayDep) -> dict:
    deleted = await gateway.delete_project(project_id)
    return write_response({"id": project_id, "deleted": deleted}, deleted)

"""Admin settings endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends

from blogdesk.core.exceptions import UnknownModelError
from blogdesk.dependencies import get_gateway, require_admin
from blogdesk.schemas.response_schema import ApiResponse, success_response
from blogdesk.schemas.setting_schema import AIModelSettings
from blogdesk.services.model_catalogue import MODEL_CATALOGUE
from blogdesk.services.persistence_gateway import PersistenceGateway

router = APIRouter(
    prefix="/api/v1/settings",
    tags=["settings"],
    dependencies=[Depends(require_admin)],
)

GatewayDep = Annotated[PersistenceGateway, Depends(get_gateway)]


@router.get("/ai-models", response_model=ApiResponse[AIModelSettings])
async def get_ai_models(gateway: GatewayDep) -> dict:
    """Default models for general authoring and SVG icon generation."""
    return success_response(
        AIModelSettings(
            general_model=await gateway.get_general_model(),
            svg_model=await gateway.get_svg_model(),
        )
    )


@router.put("/ai-models", response_model=ApiResponse[AIModelSettings])
async def update_ai_models(body: AIModelSettings, gateway: GatewayDep) -> dict:
    for key in (body.general_model, body.svg_model):
        if key not in MODEL_CATALOGUE:
            raise UnknownModelError(key)
    saved = await gateway.save_general_model(body.general_model)
    saved = await gateway.save_svg_model(body.svg_model) and saved
    return success_response(
        body, message="Success" if saved else "Store unavailable, change not saved"
    )

"""Admin session endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response

from blogdesk.core.config import settings
from blogdesk.core.session_flag import SESSION_KEY, AuthContext
from blogdesk.dependencies import get_auth_context, get_auth_service, get_session_markers
from blogdesk.schemas.auth_schema import (
    AuthStatusResponse,
    LoginRequest,
    LoginResponse,
    MessageResponse,
)
from blogdesk.schemas.response_schema import ApiResponse, success_response
from blogdesk.services.auth_service import AuthService

router = APIRouter(prefix="/api/auth", tags=["auth"])

AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]


@router.post("/login", response_model=ApiResponse[LoginResponse])
async def login(
    body: LoginRequest,
    response: Response,
    auth_service: AuthServiceDep,
) -> dict:
    """Check admin credentials and issue a session marker.

    With ``remember_me`` the marker is also set as a persistent cookie;
    otherwise the client keeps it for the tab and sends it as a bearer token.
    """
    result = auth_service.login(body)
    if result.scope == "persistent":
        response.set_cookie(
            SESSION_KEY,
            result.session_token,
            max_age=result.expires_in,
            httponly=True,
            samesite="lax",
            secure=not settings.is_development,
        )
    return success_response(result)


@router.post("/logout", response_model=ApiResponse[MessageResponse])
async def logout(
    response: Response,
    auth_service: AuthServiceDep,
    markers: list[str] = Depends(get_session_markers),
) -> dict:
    """Revoke the presented markers and clear the persistent cookie."""
    result = await auth_service.logout(markers)
    response.delete_cookie(SESSION_KEY)
    return success_response(result)


@router.get("/status", response_model=ApiResponse[AuthStatusResponse])
async def status(auth: AuthContext = Depends(get_auth_context)) -> dict:
    return success_response(
        AuthStatusResponse(
            is_authenticated=auth.is_authenticated,
            client_id=auth.client_id,
            site_name=settings.branding.site_name,
        )
    )

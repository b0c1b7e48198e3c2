"""Global dependencies for the application."""

from functools import lru_cache

from fastapi import Depends, FastAPI, Request

from blogdesk.core.config import settings
from blogdesk.core.database import async_session_factory
from blogdesk.core.exceptions import AuthenticationError
from blogdesk.core.redis import current_redis
from blogdesk.core.session_flag import AuthContext
from blogdesk.services.auth_service import AuthService
from blogdesk.services.chat_session_manager import ChatManagerRegistry, ChatSessionManager
from blogdesk.services.completion_client import CompletionClient
from blogdesk.services.llm_providers import build_providers
from blogdesk.services.persistence_gateway import PersistenceGateway
from blogdesk.services.search_service import SearchService
from blogdesk.services.token_service import TokenService

# --- Application-scoped services ---


@lru_cache
def get_completion_client() -> CompletionClient:
    """Completion client over every configured provider."""
    return CompletionClient(build_providers(settings.llm))


def configure_services(app: FastAPI) -> None:
    """Build the gateway and chat registry once Redis is (or is not) connected."""
    gateway = PersistenceGateway(
        async_session_factory,
        redis_client=current_redis(),
        guest_prefix=settings.redis.guest_prefix,
    )
    app.state.gateway = gateway
    app.state.chat_registry = ChatManagerRegistry(gateway, get_completion_client())


def get_gateway(request: Request) -> PersistenceGateway:
    return request.app.state.gateway  # type: ignore[no-any-return]


def get_chat_registry(request: Request) -> ChatManagerRegistry:
    return request.app.state.chat_registry  # type: ignore[no-any-return]


def get_search_service(
    gateway: PersistenceGateway = Depends(get_gateway),
) -> SearchService:
    return SearchService(gateway)


# --- Auth dependencies ---


def get_token_service() -> TokenService:
    """Get TokenService backed by the active Redis client."""
    return TokenService(current_redis())


def get_auth_service(
    token_service: TokenService = Depends(get_token_service),
) -> AuthService:
    return AuthService(token_service)


def get_auth_context(request: Request) -> AuthContext:
    """AuthContext resolved by SessionMiddleware for this request."""
    auth = getattr(request.state, "auth", None)
    if auth is None:
        raise AuthenticationError(message="Session context unavailable")
    return auth  # type: ignore[no-any-return]


def require_admin(auth: AuthContext = Depends(get_auth_context)) -> AuthContext:
    """Reject callers without an active admin session."""
    if not auth.is_authenticated:
        raise AuthenticationError(message="Admin session required")
    return auth


def get_session_markers(request: Request) -> list[str]:
    return list(getattr(request.state, "session_markers", []))


def get_chat_manager(
    auth: AuthContext = Depends(get_auth_context),
    registry: ChatManagerRegistry = Depends(get_chat_registry),
) -> ChatSessionManager:
    """The calling client's chat state machine."""
    return registry.get(auth)

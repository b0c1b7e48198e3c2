"""ASGI middleware deriving the per-request AuthContext."""

import uuid

import structlog
from starlette.requests import cookie_parser
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from blogdesk.core import redis as redis_state
from blogdesk.core.session_flag import SESSION_KEY, derive_auth_context
from blogdesk.services.token_service import TokenService

logger = structlog.get_logger()

CLIENT_ID_HEADER = b"x-client-id"
CLIENT_ID_COOKIE = "client_id"
CLIENT_ID_MAX_AGE = 365 * 86400


class SessionMiddleware:
    """Pure ASGI middleware (SSE-compatible) that never rejects a request.

    Guests are first-class callers, so this only resolves the client id and
    the session flag and stores them in ``scope["state"]["auth"]``; routes
    that need an admin enforce it through a dependency.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers", []))
        cookies = cookie_parser(headers.get(b"cookie", b"").decode("latin-1"))

        client_id = headers.get(CLIENT_ID_HEADER, b"").decode("latin-1").strip()
        if not client_id:
            client_id = cookies.get(CLIENT_ID_COOKIE, "")
        issue_cookie = not client_id
        if issue_cookie:
            client_id = uuid.uuid4().hex

        tab_scope: dict[str, str] = {}
        auth_header = headers.get(b"authorization", b"").decode("latin-1")
        if auth_header.startswith("Bearer "):
            tab_scope[SESSION_KEY] = auth_header[7:]

        persistent_scope: dict[str, str] = {}
        if SESSION_KEY in cookies:
            persistent_scope[SESSION_KEY] = cookies[SESSION_KEY]

        verifier = TokenService(redis_state.current_redis())
        auth = await derive_auth_context(
            tab_scope, persistent_scope, client_id, verifier
        )

        scope.setdefault("state", {})
        scope["state"]["auth"] = auth
        scope["state"]["session_markers"] = [
            marker
            for marker in (tab_scope.get(SESSION_KEY), persistent_scope.get(SESSION_KEY))
            if marker
        ]

        if not issue_cookie:
            await self.app(scope, receive, send)
            return

        cookie = (
            f"{CLIENT_ID_COOKIE}={client_id}; Path=/; Max-Age={CLIENT_ID_MAX_AGE}; "
            "HttpOnly; SameSite=Lax"
        ).encode()

        async def send_with_cookie(message: Message) -> None:
            if message["type"] == "http.response.start":
                message.setdefault("headers", [])
                message["headers"] = [*message["headers"], (b"set-cookie", cookie)]
            await send(message)

        await self.app(scope, receive, send_with_cookie)

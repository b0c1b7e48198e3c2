"""Admin session flag derived from the session marker scopes.

The flag is computed once per request and handed to every component that
needs it as an explicit :class:`AuthContext`; nothing else re-reads the
marker.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol

SESSION_KEY = "my_session"
SESSION_SENTINEL = "active"


class MarkerVerifier(Protocol):
    """Checks a marker value and reports whether it carries the sentinel."""

    async def is_active_marker(self, value: str) -> bool: ...


@dataclass(frozen=True)
class AuthContext:
    """Who is calling: admin or guest, and from which client."""

    is_authenticated: bool
    client_id: str

    @classmethod
    def guest(cls, client_id: str) -> "AuthContext":
        return cls(is_authenticated=False, client_id=client_id)

    @classmethod
    def admin(cls, client_id: str) -> "AuthContext":
        return cls(is_authenticated=True, client_id=client_id)


async def derive_auth_context(
    tab_scope: Mapping[str, str],
    persistent_scope: Mapping[str, str],
    client_id: str,
    verifier: MarkerVerifier,
) -> AuthContext:
    """True if either scope holds an active marker under SESSION_KEY."""
    for scope in (tab_scope, persistent_scope):
        value = scope.get(SESSION_KEY)
        if value and await verifier.is_active_marker(value):
            return AuthContext.admin(client_id)
    return AuthContext.guest(client_id)

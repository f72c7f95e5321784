"""Request dependencies shared by the API routes.

The store, session verifier and assignment engine live on
``app.state`` (set up by ``create_app``) so tests can build an app
around their own store.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional

from fastapi import Depends, Request

from ..auth import AuthContext, SessionVerifier, authenticate
from ..core.errors import Forbidden, InvalidArgument
from ..core.models import Role
from ..papers import AssignmentEngine
from ..store import DocumentStore


def get_store(request: Request) -> DocumentStore:
    return request.app.state.store


def get_verifier(request: Request) -> SessionVerifier:
    return request.app.state.verifier


def get_engine(request: Request) -> AssignmentEngine:
    return request.app.state.engine


def get_credential(request: Request) -> Optional[str]:
    """Session token from the session cookie, else from a Bearer header."""
    token = request.cookies.get(request.app.state.settings.session_cookie_name)
    if token:
        return token
    header = request.headers.get("Authorization", "")
    scheme, _, value = header.partition(" ")
    if scheme.lower() == "bearer" and value.strip():
        return value.strip()
    return None


def current_user(
    store: DocumentStore = Depends(get_store),
    verifier: SessionVerifier = Depends(get_verifier),
    credential: Optional[str] = Depends(get_credential),
) -> AuthContext:
    return authenticate(store, verifier, credential)


def require_roles(*roles: Role) -> Callable[..., AuthContext]:
    """Dependency that only lets callers holding one of ``roles`` through."""

    def dependency(ctx: AuthContext = Depends(current_user)) -> AuthContext:
        if ctx.role not in roles:
            raise Forbidden()
        return ctx

    return dependency


async def read_json_object(request: Request, message: str) -> Dict[str, Any]:
    """Parse the request body as a JSON object or raise ``InvalidArgument``."""
    try:
        body = await request.json()
    except ValueError as exc:
        raise InvalidArgument(message) from exc
    if not isinstance(body, dict):
        raise InvalidArgument(message)
    return body

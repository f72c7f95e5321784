"""Authorization gate.

Resolves a request's verified identity to a user profile and role and
enforces role allow-lists.  It is called once at the entry of every
write or scoped read and keeps no state between requests.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from ..core.errors import Forbidden, ProfileNotFound, RoleNotSupported
from ..core.models import Role, User
from ..store import USERS, DocumentStore
from ..utils.logging import get_logger
from .sessions import SessionVerifier

logger = get_logger(__name__)


@dataclass(frozen=True)
class AuthContext:
    """Identity and role of the caller of one request."""

    uid: str
    role: Role
    profile: User


def authenticate(
    store: DocumentStore,
    verifier: SessionVerifier,
    credential: Optional[str],
    allowed_roles: Optional[Iterable[Role]] = None,
) -> AuthContext:
    """Resolve ``credential`` to an ``AuthContext``.

    Checks run in order: the credential must verify
    (``Unauthenticated``), the identity must have a profile
    (``ProfileNotFound``), the profile's role must be a known role
    (``RoleNotSupported``) and, when ``allowed_roles`` is given, the
    role must be one of them (``Forbidden``).
    """
    uid = verifier.verify(credential)

    snapshot = store.get(USERS, uid)
    if not snapshot.exists:
        logger.warning("Authenticated identity has no profile", extra={"uid": uid})
        raise ProfileNotFound()

    profile = User.from_snapshot(snapshot)
    role = profile.known_role
    if role is None:
        logger.warning("Profile has an unsupported role", extra={"uid": uid, "role": profile.role})
        raise RoleNotSupported()

    if allowed_roles is not None and role not in set(allowed_roles):
        raise Forbidden()

    return AuthContext(uid=uid, role=role, profile=profile)

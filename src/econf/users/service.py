"""User profile operations."""

from typing import List, Optional

from ..core.errors import InvalidArgument, ProfileNotFound
from ..core.models import Role, User, parse_role
from ..papers.listing import NamedRef
from ..store import USERS, DocumentStore
from ..utils.logging import get_logger

logger = get_logger(__name__)


def get_profile(store: DocumentStore, uid: str) -> User:
    snapshot = store.get(USERS, uid)
    if not snapshot.exists:
        raise ProfileNotFound()
    return User.from_snapshot(snapshot)


def update_profile(
    store: DocumentStore,
    uid: str,
    name: Optional[str] = None,
    role: Optional[str] = None,
) -> User:
    """Change the caller's own name and/or role.

    A role change is not checked against the papers the user is
    already assigned to or has authored.
    """
    fields = {}
    if name is not None:
        name = name.strip()
        if not name:
            raise InvalidArgument("Invalid user data.")
        fields["name"] = name
    if role is not None:
        parsed = parse_role(role)
        if parsed is None:
            raise InvalidArgument("Invalid user data.")
        fields["role"] = parsed.value

    profile = get_profile(store, uid)
    if fields:
        store.update(USERS, uid, fields)
        logger.info(f"Profile {uid} updated", extra={"fields": sorted(fields)})
        profile = profile.model_copy(update=fields)
    return profile


def list_reviewers(store: DocumentStore) -> List[NamedRef]:
    """Reviewer directory sorted by name."""
    reviewers = []
    for snapshot in store.where(USERS, "role", "==", Role.REVIEWER.value):
        name = snapshot.get("name")
        reviewers.append(NamedRef(id=snapshot.id, name=name if isinstance(name, str) and name.strip() else "Reviewer"))
    reviewers.sort(key=lambda r: (r.name.casefold(), r.id))
    return reviewers

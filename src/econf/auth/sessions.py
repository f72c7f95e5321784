"""Session token verification.

Session cookies are issued by the external identity provider as HS256
JWTs signed with a secret shared with this service.  The service only
verifies them and extracts the user id; it never issues sessions for
real users.  ``issue_session_token`` mints a token the same way and is
meant for tests and local development.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from ..config.settings import settings
from ..core.errors import Unauthenticated
from ..utils.logging import get_logger

logger = get_logger(__name__)


class SessionVerifier:
    """Verify session tokens and return the user id they carry."""

    def __init__(self, secret: str, algorithm: str = "HS256") -> None:
        self.secret = secret
        self.algorithm = algorithm

    def verify(self, token: Optional[str]) -> str:
        """Decode ``token`` and return its user id.

        Raises:
            Unauthenticated: if the token is missing, malformed, expired,
                badly signed or carries no user id.
        """
        if not token:
            raise Unauthenticated()
        try:
            claims = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["exp"]},
            )
        except jwt.PyJWTError as exc:
            logger.warning(f"Rejected session token: {exc}")
            raise Unauthenticated() from exc
        uid = claims.get("uid") or claims.get("sub")
        if not isinstance(uid, str) or not uid:
            logger.warning("Session token carries no user id")
            raise Unauthenticated()
        return uid


def issue_session_token(
    uid: str,
    secret: str,
    max_age: Optional[timedelta] = None,
    algorithm: str = "HS256",
) -> str:
    """Mint a session token for ``uid`` valid for ``max_age``.

    ``max_age`` defaults to ``session_max_age_days`` from settings.
    """
    if max_age is None:
        max_age = timedelta(days=settings.session_max_age_days)
    now = datetime.now(timezone.utc)
    claims = {"sub": uid, "uid": uid, "iat": now, "exp": now + max_age}
    return jwt.encode(claims, secret, algorithm=algorithm)

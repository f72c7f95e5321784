"""Authentication and role-based authorization."""

from .gate import AuthContext, authenticate  # noqa: F401
from .sessions import SessionVerifier, issue_session_token  # noqa: F401

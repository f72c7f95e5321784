"""User profiles and the reviewer directory."""

from .service import get_profile, list_reviewers, update_profile  # noqa: F401

"""Paper submission, reviewer assignment and paper listings."""

from .assignment import AssignmentEngine, pick_random_sample  # noqa: F401
from .listing import list_author_papers, list_reviewer_papers  # noqa: F401

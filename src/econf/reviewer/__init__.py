"""Reviewer decisions.

Defines the ``Decision`` enumeration and the helpers that normalize,
summarize and count decisions read from stored paper documents.
"""

from .status import (  # noqa: F401
    DEFAULT_DECISION,
    FEEDBACK_MAX_LENGTH,
    Decision,
    StatusTally,
    clean_feedback,
    decision_label,
    extract_feedback,
    extract_statuses,
    normalize_decision,
    summarize,
    tally,
)

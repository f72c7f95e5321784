"""Per-role dashboard statistics."""

from .summary import (  # noqa: F401
    AuthorStats,
    DashboardSummary,
    GeneralStats,
    OrganizerStats,
    ReviewerStats,
    build_summary,
    general_stats,
)

"""Dashboard statistics.

Everything here is computed from the store on each call and never
persisted.  "Latest" fields compare fixed-width ISO timestamps as
strings with a strict ``>``, so on a tie the first item seen wins.
"""

from __future__ import annotations

from typing import Iterable, List, Literal, Optional, Set, Tuple, Union

from ..config.settings import settings
from ..core.errors import RoleNotSupported
from ..core.models import CamelModel, Conference, Paper, Role
from ..papers.listing import papers_for_conferences
from ..reviewer.status import StatusTally, tally
from ..store import CONFERENCES, PAPERS, USERS, DocumentStore
from ..utils.logging import get_logger

logger = get_logger(__name__)


class GeneralStats(CamelModel):
    total_conferences: int = 0
    total_papers: int = 0
    total_reviewers: int = 0
    total_authors: int = 0
    total_organizers: int = 0
    total_users: int = 0


class OrganizerStats(CamelModel):
    role: Literal["organizer"] = "organizer"
    conference_count: int = 0
    paper_count: int = 0
    total_review_assignments: int = 0
    pending_decisions: int = 0
    accepted_decisions: int = 0
    declined_decisions: int = 0
    unique_reviewer_count: int = 0
    unique_author_count: int = 0
    latest_conference_name: Optional[str] = None
    latest_conference_start: Optional[str] = None
    latest_paper_title: Optional[str] = None
    latest_paper_created_at: Optional[str] = None


class AuthorStats(CamelModel):
    role: Literal["author"] = "author"
    paper_count: int = 0
    conference_participation_count: int = 0
    unique_reviewer_count: int = 0
    total_reviewer_assignments: int = 0
    pending_reviews: int = 0
    accepted_reviews: int = 0
    declined_reviews: int = 0
    latest_paper_title: Optional[str] = None
    latest_paper_created_at: Optional[str] = None


class ReviewerStats(CamelModel):
    role: Literal["reviewer"] = "reviewer"
    assigned_paper_count: int = 0
    pending_reviews: int = 0
    accepted_decisions: int = 0
    declined_decisions: int = 0
    completed_reviews: int = 0
    conferences_covered: int = 0
    distinct_authors: int = 0
    latest_assigned_paper_title: Optional[str] = None
    latest_assigned_paper_at: Optional[str] = None


RoleStats = Union[OrganizerStats, AuthorStats, ReviewerStats]


class DashboardSummary(CamelModel):
    general: GeneralStats
    role: RoleStats


def _latest_paper(papers: Iterable[Paper]) -> Optional[Paper]:
    latest: Optional[Paper] = None
    for paper in papers:
        if paper.created_at and (latest is None or paper.created_at > (latest.created_at or "")):
            latest = paper
    return latest


def _latest_conference(conferences: Iterable[Conference]) -> Optional[Conference]:
    """Most recently created conference.

    A conference without ``createdAt`` is ranked by its ``startDate``;
    one with neither date is only reported when no conference is dated.
    """
    latest: Optional[Conference] = None
    latest_key = ""
    for conference in conferences:
        key = conference.created_at or conference.start_date or ""
        if latest is None or key > latest_key:
            latest, latest_key = conference, key
    return latest


def _reviewer_tally(papers: List[Paper]) -> Tuple[StatusTally, Set[str]]:
    """Tally one decision per assigned reviewer across ``papers``."""
    counts = tally(status for paper in papers for status in paper.assigned_statuses())
    reviewers = {reviewer_id for paper in papers for reviewer_id in paper.reviewer_ids}
    return counts, reviewers


def general_stats(store: DocumentStore) -> GeneralStats:
    reviewers = store.count(USERS, "role", Role.REVIEWER.value)
    authors = store.count(USERS, "role", Role.AUTHOR.value)
    organizers = store.count(USERS, "role", Role.ORGANIZER.value)
    return GeneralStats(
        total_conferences=store.count(CONFERENCES),
        total_papers=store.count(PAPERS),
        total_reviewers=reviewers,
        total_authors=authors,
        total_organizers=organizers,
        total_users=reviewers + authors + organizers,
    )


def organizer_stats(store: DocumentStore, uid: str, chunk_size: Optional[int] = None) -> OrganizerStats:
    """Statistics over the conferences owned by ``uid`` and their papers."""
    conferences = store.where(CONFERENCES, "organizerId", "==", uid)
    stats = OrganizerStats(conference_count=len(conferences))

    latest_conference = _latest_conference(Conference.from_snapshot(s) for s in conferences)
    if latest_conference is not None:
        stats.latest_conference_name = latest_conference.name or None
        stats.latest_conference_start = latest_conference.start_date

    if not conferences:
        return stats

    papers: List[Paper] = papers_for_conferences(
        store, [s.id for s in conferences], chunk_size or settings.query_chunk_size
    )
    counts, reviewers = _reviewer_tally(papers)
    latest = _latest_paper(papers)

    stats.paper_count = len(papers)
    stats.total_review_assignments = counts.total
    stats.pending_decisions = counts.pending
    stats.accepted_decisions = counts.accepted
    stats.declined_decisions = counts.declined
    stats.unique_reviewer_count = len(reviewers)
    stats.unique_author_count = len({p.author_id for p in papers if p.author_id})
    if latest is not None:
        stats.latest_paper_title = latest.title
        stats.latest_paper_created_at = latest.created_at
    return stats


def author_stats(store: DocumentStore, uid: str) -> AuthorStats:
    papers = [Paper.from_snapshot(s) for s in store.where(PAPERS, "authorId", "==", uid)]
    counts, reviewers = _reviewer_tally(papers)
    latest = _latest_paper(papers)
    return AuthorStats(
        paper_count=len(papers),
        conference_participation_count=len({p.conference_id for p in papers if p.conference_id}),
        unique_reviewer_count=len(reviewers),
        total_reviewer_assignments=counts.total,
        pending_reviews=counts.pending,
        accepted_reviews=counts.accepted,
        declined_reviews=counts.declined,
        latest_paper_title=latest.title if latest else None,
        latest_paper_created_at=latest.created_at if latest else None,
    )


def reviewer_stats(store: DocumentStore, uid: str) -> ReviewerStats:
    """Statistics over the caller's own decisions on assigned papers."""
    papers = [Paper.from_snapshot(s) for s in store.where(PAPERS, "reviewerIds", "array_contains", uid)]
    counts = tally(paper.status_for(uid) for paper in papers)
    latest = _latest_paper(papers)
    return ReviewerStats(
        assigned_paper_count=len(papers),
        pending_reviews=counts.pending,
        accepted_decisions=counts.accepted,
        declined_decisions=counts.declined,
        completed_reviews=counts.completed,
        conferences_covered=len({p.conference_id for p in papers if p.conference_id}),
        distinct_authors=len({p.author_id for p in papers if p.author_id}),
        latest_assigned_paper_title=latest.title if latest else None,
        latest_assigned_paper_at=latest.created_at if latest else None,
    )


def role_stats(store: DocumentStore, uid: str, role: Role) -> RoleStats:
    if role == Role.ORGANIZER:
        return organizer_stats(store, uid)
    if role == Role.AUTHOR:
        return author_stats(store, uid)
    if role == Role.REVIEWER:
        return reviewer_stats(store, uid)
    raise RoleNotSupported()


def build_summary(store: DocumentStore, uid: str, role: Role) -> DashboardSummary:
    """General platform totals plus the statistics for the caller's role."""
    summary = DashboardSummary(general=general_stats(store), role=role_stats(store, uid, role))
    logger.debug(f"Dashboard summary built for {uid} ({role.value})")
    return summary

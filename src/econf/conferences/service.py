"""Conference creation, editing and organizer views.

A conference is owned by the organizer who created it; ownership and
the ``paperIds`` back-reference are never changed through these
operations (papers are added to ``paperIds`` by the assignment engine).
"""

from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional

from pydantic import Field, model_validator

from ..config.settings import settings
from ..core.errors import Forbidden, InvalidArgument, NotFound
from ..core.ids import to_iso_string, utc_now_iso
from ..core.models import CamelModel, Conference, Paper, Role
from ..papers.listing import NamedRef, ReviewerEntry, newest_first, papers_for_conferences
from ..store import CONFERENCES, DocumentStore
from ..users.service import list_reviewers
from ..utils.logging import get_logger

logger = get_logger(__name__)


class ConferenceForm(CamelModel):
    """Fields an organizer provides when creating a conference."""

    name: str = Field(..., min_length=3)
    description: str = Field(..., min_length=10)
    location: str = ""
    start_date: date
    end_date: date

    @model_validator(mode="after")
    def _check_dates(self) -> "ConferenceForm":
        if self.end_date < self.start_date:
            raise ValueError("endDate must not be before startDate")
        return self


class ConferenceChanges(CamelModel):
    """Partial update; omitted fields keep their stored value."""

    name: Optional[str] = Field(None, min_length=3)
    description: Optional[str] = Field(None, min_length=10)
    location: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class PaperSummary(CamelModel):
    id: str
    title: str
    created_at: Optional[str] = None
    reviewers: List[ReviewerEntry]


class ConferenceDetail(CamelModel):
    id: str
    name: str
    description: str
    location: str
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    papers: List[PaperSummary]


class OrganizerOverview(CamelModel):
    """An organizer's conferences with their papers, plus the reviewer directory."""

    conferences: List[ConferenceDetail]
    reviewers: List[NamedRef]


def latest_start_first(conferences: List[Conference]) -> List[Conference]:
    return sorted(conferences, key=lambda c: c.start_date or "", reverse=True)


def create_conference(store: DocumentStore, form: ConferenceForm, caller_id: str, caller_role: Role) -> Conference:
    if caller_role != Role.ORGANIZER:
        raise Forbidden("Only organizers can create conferences.")
    conference = Conference(
        id="pending",
        name=form.name.strip(),
        description=form.description.strip(),
        location=form.location.strip(),
        start_date=to_iso_string(form.start_date),
        end_date=to_iso_string(form.end_date),
        organizer_id=caller_id,
        paper_ids=[],
        created_at=utc_now_iso(),
    )
    conference_id = store.add(CONFERENCES, conference.to_document())
    logger.info(f"Conference {conference_id} created by {caller_id}")
    return conference.model_copy(update={"id": conference_id})


def get_conference(store: DocumentStore, conference_id: str) -> Conference:
    snapshot = store.get(CONFERENCES, conference_id)
    if not snapshot.exists:
        raise NotFound("Conference not found.")
    return Conference.from_snapshot(snapshot)


def update_conference(
    store: DocumentStore,
    conference_id: str,
    changes: ConferenceChanges,
    caller_id: str,
    caller_role: Role,
) -> Conference:
    """Apply ``changes`` to a conference owned by the caller."""
    if caller_role != Role.ORGANIZER:
        raise Forbidden("Only organizers can edit conferences.")
    conference = get_conference(store, conference_id)
    if conference.organizer_id != caller_id:
        raise Forbidden("You do not have permission to edit this conference.")

    fields: Dict[str, object] = {}
    for key, value in changes.model_dump(exclude_none=True).items():
        if isinstance(value, date):
            value = to_iso_string(value)
        elif isinstance(value, str):
            value = value.strip()
        fields[key] = value
    if not fields:
        return conference

    updated = conference.model_copy(update=fields)
    if updated.start_date and updated.end_date and updated.end_date < updated.start_date:
        raise InvalidArgument("Invalid conference payload.")
    store.update(CONFERENCES, conference_id, updated.model_dump(mode="json", by_alias=True, include=set(fields)))
    logger.info(f"Conference {conference_id} updated", extra={"fields": sorted(fields)})
    return updated


def list_conferences(store: DocumentStore) -> List[Conference]:
    """Every conference, latest start date first."""
    return latest_start_first([Conference.from_snapshot(s) for s in store.stream(CONFERENCES)])


def organizer_conferences(store: DocumentStore, uid: str) -> List[Conference]:
    return [Conference.from_snapshot(s) for s in store.where(CONFERENCES, "organizerId", "==", uid)]


def organizer_overview(store: DocumentStore, uid: str, chunk_size: Optional[int] = None) -> OrganizerOverview:
    """Build the organizer's management view.

    Papers are fetched for all owned conferences in chunked ``in``
    queries and grouped back under their conference, newest first.
    """
    reviewers = list_reviewers(store)
    reviewer_names = {r.id: r.name for r in reviewers}

    conferences = latest_start_first(organizer_conferences(store, uid))
    if not conferences:
        return OrganizerOverview(conferences=[], reviewers=reviewers)

    papers = papers_for_conferences(store, [c.id for c in conferences], chunk_size or settings.query_chunk_size)
    by_conference: Dict[str, List[Paper]] = {}
    for paper in papers:
        if paper.conference_id:
            by_conference.setdefault(paper.conference_id, []).append(paper)

    details = [
        ConferenceDetail(
            id=conference.id,
            name=conference.name,
            description=conference.description,
            location=conference.location,
            start_date=conference.start_date,
            end_date=conference.end_date,
            papers=[
                PaperSummary(
                    id=paper.id,
                    title=paper.title,
                    created_at=paper.created_at,
                    reviewers=[
                        ReviewerEntry(
                            id=reviewer_id,
                            name=reviewer_names.get(reviewer_id, "Reviewer"),
                            status=paper.status_for(reviewer_id),
                            feedback=paper.feedback_for(reviewer_id),
                        )
                        for reviewer_id in paper.reviewer_ids
                    ],
                )
                for paper in newest_first(by_conference.get(conference.id, []))
            ],
        )
        for conference in conferences
    ]
    return OrganizerOverview(conferences=details, reviewers=reviewers)

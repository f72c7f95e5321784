"""Denormalized paper listings for authors and reviewers.

Papers are read once, then the names of their authors, conferences and
reviewers are joined from one lookup per collection.  Missing
documents fall back to placeholder names rather than failing the list.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence

from ..core.ids import chunk_list
from ..core.models import CamelModel, Paper
from ..reviewer.status import Decision, summarize
from ..store import CONFERENCES, MAX_IN_VALUES, PAPERS, USERS, DocumentStore


class NamedRef(CamelModel):
    id: str
    name: str


class ReviewerEntry(CamelModel):
    id: str
    name: str
    status: Decision
    feedback: Optional[str] = None


class AuthorPaperItem(CamelModel):
    """A paper as its author sees it."""

    id: str
    title: str
    conference_id: Optional[str] = None
    conference: Optional[NamedRef] = None
    reviewers: List[ReviewerEntry]
    decision: Decision
    created_at: Optional[str] = None


class ReviewerPaperItem(CamelModel):
    """A paper as one of its reviewers sees it.

    ``status`` and ``feedback`` are the caller's own.
    """

    id: str
    title: str
    author: NamedRef
    conference: NamedRef
    status: Decision
    feedback: Optional[str] = None
    reviewers: List[ReviewerEntry]
    created_at: Optional[str] = None


def fetch_names(store: DocumentStore, collection: str, ids: Iterable[str]) -> Dict[str, str]:
    """Map each existing document ID to its non-empty ``name``."""
    names: Dict[str, str] = {}
    for snapshot in store.get_all(collection, sorted(set(ids))):
        name = snapshot.get("name")
        if snapshot.exists and isinstance(name, str) and name.strip():
            names[snapshot.id] = name
    return names


def newest_first(papers: List[Paper]) -> List[Paper]:
    """Sort by creation time, newest first; undated papers go last."""
    return sorted(papers, key=lambda p: p.created_at or "", reverse=True)


def _reviewer_entries(paper: Paper, reviewer_names: Dict[str, str]) -> List[ReviewerEntry]:
    return [
        ReviewerEntry(
            id=reviewer_id,
            name=reviewer_names.get(reviewer_id, "Reviewer"),
            status=paper.status_for(reviewer_id),
            feedback=paper.feedback_for(reviewer_id),
        )
        for reviewer_id in paper.reviewer_ids
    ]


def list_author_papers(store: DocumentStore, uid: str) -> List[AuthorPaperItem]:
    """Papers authored by ``uid`` with conference and reviewer details."""
    papers = newest_first([Paper.from_snapshot(s) for s in store.where(PAPERS, "authorId", "==", uid)])

    reviewer_names = fetch_names(store, USERS, (r for p in papers for r in p.reviewer_ids))
    conference_names = fetch_names(store, CONFERENCES, (p.conference_id for p in papers if p.conference_id))

    return [
        AuthorPaperItem(
            id=paper.id,
            title=paper.title,
            conference_id=paper.conference_id,
            conference=NamedRef(
                id=paper.conference_id,
                name=conference_names.get(paper.conference_id, "Conference"),
            )
            if paper.conference_id
            else None,
            reviewers=_reviewer_entries(paper, reviewer_names),
            decision=summarize(paper.assigned_statuses()),
            created_at=paper.created_at,
        )
        for paper in papers
    ]


def list_reviewer_papers(store: DocumentStore, uid: str) -> List[ReviewerPaperItem]:
    """Papers ``uid`` is assigned to review, with author and conference details."""
    papers = newest_first([Paper.from_snapshot(s) for s in store.where(PAPERS, "reviewerIds", "array_contains", uid)])

    author_names = fetch_names(store, USERS, (p.author_id for p in papers if p.author_id))
    reviewer_names = fetch_names(store, USERS, (r for p in papers for r in p.reviewer_ids))
    conference_names = fetch_names(store, CONFERENCES, (p.conference_id for p in papers if p.conference_id))

    items: List[ReviewerPaperItem] = []
    for paper in papers:
        author = (
            NamedRef(id=paper.author_id, name=author_names.get(paper.author_id, "Author"))
            if paper.author_id
            else NamedRef(id="unknown", name="Author")
        )
        conference = (
            NamedRef(id=paper.conference_id, name=conference_names.get(paper.conference_id, "Conference"))
            if paper.conference_id
            else NamedRef(id="unknown", name="Conference")
        )
        items.append(
            ReviewerPaperItem(
                id=paper.id,
                title=paper.title,
                author=author,
                conference=conference,
                status=paper.status_for(uid),
                feedback=paper.feedback_for(uid),
                reviewers=_reviewer_entries(paper, reviewer_names),
                created_at=paper.created_at,
            )
        )
    return items


def papers_for_conferences(
    store: DocumentStore,
    conference_ids: Sequence[str],
    chunk_size: int = MAX_IN_VALUES,
) -> List[Paper]:
    """Papers belonging to any of ``conference_ids``.

    The store caps ``in`` queries at ten values, so the IDs are queried
    in chunks and the results concatenated.
    """
    papers: List[Paper] = []
    for chunk in chunk_list(list(dict.fromkeys(conference_ids)), min(chunk_size, MAX_IN_VALUES)):
        papers.extend(Paper.from_snapshot(s) for s in store.where(PAPERS, "conferenceId", "in", chunk))
    return papers

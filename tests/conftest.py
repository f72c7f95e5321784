"""Shared fixtures: an in-memory store and a helper to seed it."""

from typing import Dict, List, Optional

import pytest

from econf.store import CONFERENCES, PAPERS, USERS, DocumentStore, MemoryStore


class Seeder:
    """Write user, conference and paper documents in their stored shape."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    def user(self, uid: str, role: str, name: Optional[str] = None) -> str:
        self.store.set(
            USERS,
            uid,
            {"name": name or uid.upper(), "email": f"{uid}@example.org", "role": role, "assignedPapers": []},
        )
        return uid

    def conference(
        self,
        conference_id: str,
        organizer_id: str = "org1",
        name: Optional[str] = None,
        start: str = "2025-06-01T00:00:00.000Z",
        created_at: str = "2025-01-01T00:00:00.000Z",
    ) -> str:
        self.store.set(
            CONFERENCES,
            conference_id,
            {
                "name": name or f"Conference {conference_id}",
                "description": "A conference for testing.",
                "location": "Online",
                "startDate": start,
                "endDate": start,
                "organizerId": organizer_id,
                "paperIds": [],
                "createdAt": created_at,
            },
        )
        return conference_id

    def paper(
        self,
        paper_id: str,
        author_id: str,
        conference_id: str,
        statuses: Dict[str, str],
        reviewer_ids: Optional[List[str]] = None,
        created_at: str = "2025-02-01T00:00:00.000Z",
        title: Optional[str] = None,
    ) -> str:
        self.store.set(
            PAPERS,
            paper_id,
            {
                "title": title or f"Paper {paper_id}",
                "authorId": author_id,
                "conferenceId": conference_id,
                "reviewerIds": list(statuses) if reviewer_ids is None else reviewer_ids,
                "reviewerStatuses": dict(statuses),
                "createdAt": created_at,
                "updatedAt": created_at,
            },
        )
        return paper_id


@pytest.fixture
def store():
    """Empty in-memory store."""
    return MemoryStore()


@pytest.fixture
def seed(store):
    return Seeder(store)


@pytest.fixture
def seeder_for():
    """Build a ``Seeder`` around a store the test constructs itself."""
    return Seeder

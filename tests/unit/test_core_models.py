"""Unit tests for domain records parsed from stored documents."""

from econf.core.models import Conference, Paper, Role, User, parse_role
from econf.reviewer.status import Decision
from econf.store import Snapshot


class TestRole:
    """Tests for role parsing."""

    def test_known_roles(self) -> None:
        assert parse_role("author") is Role.AUTHOR
        assert parse_role(Role.REVIEWER) is Role.REVIEWER

    def test_unknown_roles(self) -> None:
        assert parse_role("admin") is None
        assert parse_role("Author") is None
        assert parse_role(None) is None


class TestUser:
    """Tests for User parsing."""

    def test_unknown_role_survives(self) -> None:
        user = User.from_snapshot(Snapshot("u1", {"name": "Ann", "role": "admin"}))
        assert user.role == "admin"
        assert user.known_role is None

    def test_malformed_fields(self) -> None:
        user = User.from_snapshot(Snapshot("u1", {"name": 42, "assignedPapers": ["p1", 3, None]}))
        assert user.name == ""
        assert user.assigned_papers == ["p1"]


class TestPaper:
    """Tests for Paper parsing and status lookup."""

    def test_from_snapshot(self) -> None:
        paper = Paper.from_snapshot(
            Snapshot(
                "p1",
                {
                    "title": "Deep Things",
                    "authorId": "a1",
                    "conferenceId": "c1",
                    "reviewerIds": ["r1", "r2"],
                    "reviewerStatuses": {"r1": "accepted", "r2": "bogus"},
                    "createdAt": "2025-01-01T00:00:00.000Z",
                },
            )
        )
        assert paper.title == "Deep Things"
        assert paper.status_for("r1") is Decision.ACCEPTED
        assert paper.status_for("r2") is Decision.PENDING

    def test_missing_status_defaults_to_pending(self) -> None:
        paper = Paper.from_snapshot(Snapshot("p1", {"reviewerIds": ["r1", "r2"], "reviewerStatuses": {"r1": "declined"}}))
        assert paper.assigned_statuses() == [Decision.DECLINED, Decision.PENDING]

    def test_defaults_for_empty_document(self) -> None:
        paper = Paper.from_snapshot(Snapshot("p1", {"reviewerStatuses": "not a map"}))
        assert paper.title == "Untitled paper"
        assert paper.author_id is None
        assert paper.reviewer_ids == []
        assert paper.reviewer_statuses == {}

    def test_to_document_uses_stored_field_names(self) -> None:
        paper = Paper(id="p1", title="T", author_id="a1", reviewer_ids=["r1"], reviewer_statuses={"r1": Decision.PENDING})
        document = paper.to_document()
        assert "id" not in document
        assert document["authorId"] == "a1"
        assert document["reviewerIds"] == ["r1"]
        assert document["reviewerStatuses"] == {"r1": "pending"}


class TestConference:
    """Tests for Conference parsing."""

    def test_from_snapshot(self) -> None:
        conference = Conference.from_snapshot(
            Snapshot("c1", {"name": "ICML", "organizerId": "o1", "paperIds": ["p1"], "startDate": "2025-07-01"})
        )
        assert conference.organizer_id == "o1"
        assert conference.paper_ids == ["p1"]
        assert conference.start_date == "2025-07-01"
        assert conference.location == ""

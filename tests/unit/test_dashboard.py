"""Unit tests for dashboard statistics."""

import pytest

from econf.core.errors import RoleNotSupported
from econf.core.models import Role
from econf.dashboard import AuthorStats, OrganizerStats, ReviewerStats, build_summary, general_stats
from econf.dashboard.summary import author_stats, organizer_stats, reviewer_stats, role_stats
from econf.store import CONFERENCES


@pytest.fixture
def platform(seed):
    seed.user("o1", "organizer")
    seed.user("o2", "organizer")
    seed.user("a1", "author")
    seed.user("a2", "author")
    for reviewer_id in ("r1", "r2", "r3"):
        seed.user(reviewer_id, "reviewer")
    seed.user("x1", "admin")
    return seed


class TestGeneralStats:
    """Tests for platform-wide totals."""

    def test_counts(self, store, platform) -> None:
        platform.conference("c1", organizer_id="o1")
        platform.paper("p1", "a1", "c1", {"r1": "pending"})

        stats = general_stats(store)
        assert stats.total_conferences == 1
        assert stats.total_papers == 1
        assert stats.total_organizers == 2
        assert stats.total_authors == 2
        assert stats.total_reviewers == 3
        # Profiles with an unknown role are not counted
        assert stats.total_users == 7

    def test_empty_store(self, store) -> None:
        assert general_stats(store).total_users == 0

    def test_camel_case_output(self, store) -> None:
        dumped = general_stats(store).model_dump(by_alias=True)
        assert set(dumped) == {
            "totalConferences",
            "totalPapers",
            "totalReviewers",
            "totalAuthors",
            "totalOrganizers",
            "totalUsers",
        }


class TestAuthorStats:
    """Tests for an author's statistics."""

    def test_tallies_across_three_papers(self, store, platform) -> None:
        platform.conference("c1")
        platform.conference("c2")
        platform.paper("p1", "a1", "c1", {"r1": "accepted", "r2": "accepted"}, created_at="2025-03-01T00:00:00.000Z")
        platform.paper("p2", "a1", "c1", {"r1": "pending", "r3": "declined"}, created_at="2025-03-03T00:00:00.000Z")
        platform.paper("p3", "a1", "c2", {"r2": "accepted", "r3": "pending"}, created_at="2025-03-02T00:00:00.000Z")
        platform.paper("p4", "a2", "c2", {"r1": "declined"})

        stats = author_stats(store, "a1")
        assert stats.paper_count == 3
        assert stats.total_reviewer_assignments == 6
        assert stats.pending_reviews == 2
        assert stats.accepted_reviews == 3
        assert stats.declined_reviews == 1
        assert stats.unique_reviewer_count == 3
        assert stats.conference_participation_count == 2
        assert stats.latest_paper_title == "Paper p2"
        assert stats.latest_paper_created_at == "2025-03-03T00:00:00.000Z"

    def test_missing_status_counts_as_pending(self, store, platform) -> None:
        platform.conference("c1")
        platform.paper("p1", "a1", "c1", {"r1": "accepted"}, reviewer_ids=["r1", "r2"])

        stats = author_stats(store, "a1")
        assert stats.total_reviewer_assignments == 2
        assert stats.pending_reviews == 1

    def test_no_papers(self, store, platform) -> None:
        stats = author_stats(store, "a1")
        assert stats.paper_count == 0
        assert stats.latest_paper_title is None

    def test_latest_tie_keeps_first_seen(self, store, platform) -> None:
        platform.conference("c1")
        platform.paper("p1", "a1", "c1", {"r1": "pending"}, created_at="2025-03-01T00:00:00.000Z", title="First")
        platform.paper("p2", "a1", "c1", {"r1": "pending"}, created_at="2025-03-01T00:00:00.000Z", title="Second")
        assert author_stats(store, "a1").latest_paper_title == "First"


class TestReviewerStats:
    """Tests for a reviewer's statistics."""

    def test_counts_own_decisions_only(self, store, platform) -> None:
        platform.conference("c1")
        platform.conference("c2")
        platform.paper("p1", "a1", "c1", {"r1": "accepted", "r2": "declined"})
        platform.paper("p2", "a2", "c2", {"r1": "declined", "r2": "declined"})
        platform.paper("p3", "a1", "c1", {"r1": "pending", "r3": "accepted"}, created_at="2025-05-01T00:00:00.000Z")
        platform.paper("p4", "a1", "c1", {"r3": "accepted"})

        stats = reviewer_stats(store, "r1")
        assert stats.assigned_paper_count == 3
        assert stats.accepted_decisions == 1
        assert stats.declined_decisions == 1
        assert stats.pending_reviews == 1
        assert stats.completed_reviews == 2
        assert stats.conferences_covered == 2
        assert stats.distinct_authors == 2
        assert stats.latest_assigned_paper_title == "Paper p3"


class TestOrganizerStats:
    """Tests for an organizer's statistics."""

    def test_aggregates_owned_conferences(self, store, platform) -> None:
        platform.conference("c1", organizer_id="o1", name="Old", created_at="2024-01-01T00:00:00.000Z")
        platform.conference(
            "c2", organizer_id="o1", name="New", start="2026-01-10T00:00:00.000Z", created_at="2025-01-01T00:00:00.000Z"
        )
        platform.conference("c3", organizer_id="o2")
        platform.paper("p1", "a1", "c1", {"r1": "accepted", "r2": "pending"})
        platform.paper("p2", "a2", "c2", {"r2": "declined", "r3": "declined"}, created_at="2025-04-01T00:00:00.000Z")
        platform.paper("p3", "a1", "c3", {"r1": "accepted"})

        stats = organizer_stats(store, "o1")
        assert stats.conference_count == 2
        assert stats.paper_count == 2
        assert stats.total_review_assignments == 4
        assert (stats.pending_decisions, stats.accepted_decisions, stats.declined_decisions) == (1, 1, 2)
        assert stats.unique_reviewer_count == 3
        assert stats.unique_author_count == 2
        assert stats.latest_conference_name == "New"
        assert stats.latest_conference_start == "2026-01-10T00:00:00.000Z"
        assert stats.latest_paper_title == "Paper p2"

    def test_more_than_ten_conferences(self, store, platform) -> None:
        for i in range(25):
            platform.conference(f"c{i:02d}", organizer_id="o1")
            platform.paper(f"p{i:02d}", "a1", f"c{i:02d}", {"r1": "pending", "r2": "accepted"})

        stats = organizer_stats(store, "o1")
        assert stats.conference_count == 25
        assert stats.paper_count == 25
        assert stats.total_review_assignments == 50
        assert stats.accepted_decisions == 25

    def test_chunk_size_is_capped(self, store, platform) -> None:
        for i in range(12):
            platform.conference(f"c{i:02d}", organizer_id="o1")
            platform.paper(f"p{i:02d}", "a1", f"c{i:02d}", {"r1": "pending"})
        assert organizer_stats(store, "o1", chunk_size=50).paper_count == 12

    def test_latest_conference_without_created_at(self, store, platform) -> None:
        for conference_id, start in (("c1", "2025-05-01T00:00:00.000Z"), ("c2", "2025-09-01T00:00:00.000Z")):
            store.set(CONFERENCES, conference_id, {"name": f"Conf {conference_id}", "organizerId": "o1", "startDate": start})

        stats = organizer_stats(store, "o1")
        assert stats.conference_count == 2
        assert stats.latest_conference_name == "Conf c2"
        assert stats.latest_conference_start == "2025-09-01T00:00:00.000Z"

    def test_latest_conference_without_any_date(self, store, platform) -> None:
        store.set(CONFERENCES, "c1", {"name": "Undated", "organizerId": "o1"})
        assert organizer_stats(store, "o1").latest_conference_name == "Undated"

    def test_no_conferences(self, store, platform) -> None:
        stats = organizer_stats(store, "o1")
        assert stats.conference_count == 0
        assert stats.paper_count == 0
        assert stats.latest_conference_name is None


class TestSummary:
    """Tests for the combined summary."""

    @pytest.mark.parametrize(
        "uid, role, expected",
        [
            ("o1", Role.ORGANIZER, OrganizerStats),
            ("a1", Role.AUTHOR, AuthorStats),
            ("r1", Role.REVIEWER, ReviewerStats),
        ],
    )
    def test_role_dispatch(self, store, platform, uid, role, expected) -> None:
        summary = build_summary(store, uid, role)
        assert isinstance(summary.role, expected)
        assert summary.role.role == role.value
        assert summary.general.total_users == 7

    def test_unsupported_role(self, store) -> None:
        with pytest.raises(RoleNotSupported):
            role_stats(store, "x1", "admin")

"""Paper submission and reviewer assignment.

``AssignmentEngine`` owns every write that touches a paper's reviewer
set:

* ``create_paper`` stores a new paper with a random sample of
  reviewers, then records the back-references on the conference and on
  each reviewer in one batch.  If that batch fails the paper is deleted
  again, so a failed submission leaves nothing behind (unless the
  process dies between the two steps).
* ``update_status`` lets an assigned reviewer change their own
  decision and feedback and nobody else's.
* ``reassign`` lets an organizer replace a paper's reviewer set.  The
  change is applied as a diff: retained reviewers keep their decision,
  new reviewers start at ``pending`` and only the back-references of
  added or removed reviewers are touched.

Reassignment and status updates both work from a point-in-time read
with no version check, so the last concurrent writer wins.
"""

from __future__ import annotations

import random
from typing import Any, Dict, List, Optional, Sequence, TypeVar, Union

from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..config.settings import settings
from ..core.errors import Forbidden, InvalidArgument, NotFound, ServiceUnavailable
from ..core.ids import utc_now_iso
from ..core.models import Paper, Role, User
from ..reviewer.status import DEFAULT_DECISION, Decision, clean_feedback
from ..store import CONFERENCES, PAPERS, USERS, ArrayRemove, ArrayUnion, DocumentStore, StoreError
from ..utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

_DECISION_VALUES = {d.value for d in Decision}


def pick_random_sample(items: Sequence[T], count: int, rng: Optional[random.Random] = None) -> List[T]:
    """Return ``count`` items drawn uniformly without replacement.

    Fisher-Yates shuffle of a copy of ``items`` followed by taking the
    first ``count`` entries.
    """
    rng = rng or random.Random()
    buffer = list(items)
    for index in range(len(buffer) - 1, 0, -1):
        swap_index = rng.randint(0, index)
        buffer[index], buffer[swap_index] = buffer[swap_index], buffer[index]
    return buffer[:count]


def _coerce_decision(value: Union[Decision, str]) -> Decision:
    if isinstance(value, Decision):
        return value
    if isinstance(value, str) and value in _DECISION_VALUES:
        return Decision(value)
    raise InvalidArgument("Invalid update payload.")


class AssignmentEngine:
    """Create papers and mutate their reviewer assignments."""

    def __init__(
        self,
        store: DocumentStore,
        rng: Optional[random.Random] = None,
        reviewers_per_paper: Optional[int] = None,
        rollback_attempts: Optional[int] = None,
    ) -> None:
        self.store = store
        self.rng = rng or random.Random()
        self.reviewers_per_paper = reviewers_per_paper or settings.reviewers_per_paper
        self.rollback_attempts = rollback_attempts or settings.rollback_attempts

    def reviewer_pool(self, exclude: Optional[str] = None) -> List[str]:
        """IDs of every reviewer profile except ``exclude``."""
        snapshots = self.store.where(USERS, "role", "==", Role.REVIEWER.value)
        return [s.id for s in snapshots if s.id != exclude]

    def create_paper(self, title: str, conference_id: str, caller_id: str, caller_role: Role) -> Paper:
        """Submit a paper and assign reviewers to it.

        Raises:
            Forbidden: caller is not an author.
            InvalidArgument: the title is blank.
            NotFound: the conference does not exist.
            ServiceUnavailable: fewer eligible reviewers than required.
        """
        if caller_role != Role.AUTHOR:
            raise Forbidden("Only authors can submit papers.")

        title = (title or "").strip()
        if not title:
            raise InvalidArgument("Invalid paper payload.")

        if not self.store.get(CONFERENCES, conference_id).exists:
            raise NotFound("Selected conference does not exist.")

        # An author who also holds a reviewer profile never reviews their own paper
        pool = self.reviewer_pool(exclude=caller_id)
        if len(pool) < self.reviewers_per_paper:
            logger.warning(
                f"Reviewer pool too small: {len(pool)} eligible, {self.reviewers_per_paper} required",
                extra={"conference_id": conference_id},
            )
            raise ServiceUnavailable()

        reviewer_ids = pick_random_sample(pool, self.reviewers_per_paper, self.rng)
        statuses = {reviewer_id: DEFAULT_DECISION for reviewer_id in reviewer_ids}
        now = utc_now_iso()
        document = {
            "title": title,
            "authorId": caller_id,
            "conferenceId": conference_id,
            "reviewerIds": reviewer_ids,
            "reviewerStatuses": {k: v.value for k, v in statuses.items()},
            "reviewerFeedback": {},
            "createdAt": now,
            "updatedAt": now,
        }
        paper_id = self.store.add(PAPERS, document)

        try:
            batch = self.store.batch()
            batch.set(CONFERENCES, conference_id, {"paperIds": ArrayUnion(paper_id)}, merge=True)
            for reviewer_id in reviewer_ids:
                batch.set(USERS, reviewer_id, {"assignedPapers": ArrayUnion(paper_id)}, merge=True)
            batch.commit()
        except Exception:
            logger.error(f"Back-reference batch failed for paper {paper_id}; rolling back", exc_info=True)
            self._rollback_paper(paper_id)
            raise

        logger.info(
            f"Paper {paper_id} submitted to {conference_id}",
            extra={"paper_id": paper_id, "reviewer_ids": reviewer_ids},
        )
        return Paper(
            id=paper_id,
            title=title,
            author_id=caller_id,
            conference_id=conference_id,
            reviewer_ids=reviewer_ids,
            reviewer_statuses=statuses,
            created_at=now,
            updated_at=now,
        )

    def _rollback_paper(self, paper_id: str) -> None:
        # Deleting an already deleted paper is a no-op, so retrying is safe
        delete = retry(
            stop=stop_after_attempt(self.rollback_attempts),
            wait=wait_exponential(multiplier=0.05, max=1.0),
            retry=retry_if_exception_type(StoreError),
            reraise=True,
        )(self.store.delete)
        try:
            delete(PAPERS, paper_id)
        except StoreError:
            logger.exception(f"Rollback failed; paper {paper_id} is orphaned")

    def update_status(
        self,
        paper_id: str,
        new_status: Union[Decision, str],
        caller_id: str,
        caller_role: Role,
        feedback: Optional[str] = None,
    ) -> Paper:
        """Set the calling reviewer's decision on a paper.

        Only the caller's own entries in ``reviewerStatuses`` and
        ``reviewerFeedback`` change.  ``feedback`` is trimmed and
        truncated; ``None`` leaves stored feedback alone and a blank
        string clears it.
        """
        if caller_role != Role.REVIEWER:
            raise Forbidden("Only reviewers can update paper statuses.")
        status = _coerce_decision(new_status)

        snapshot = self.store.get(PAPERS, paper_id)
        if not snapshot.exists:
            raise NotFound("Paper not found.")
        paper = Paper.from_snapshot(snapshot)

        if caller_id not in paper.reviewer_ids:
            raise Forbidden("You are not assigned to this paper.")

        now = utc_now_iso()
        changes: Dict[str, Any] = {"reviewerStatuses": {caller_id: status.value}, "updatedAt": now}
        reviewer_feedback = dict(paper.reviewer_feedback)
        if feedback is not None:
            text = clean_feedback(feedback)
            # A blank entry reads back as "no feedback"
            changes["reviewerFeedback"] = {caller_id: text}
            if text:
                reviewer_feedback[caller_id] = text
            else:
                reviewer_feedback.pop(caller_id, None)
        self.store.set(PAPERS, paper_id, changes, merge=True)
        logger.info(f"Reviewer {caller_id} set paper {paper_id} to {status.value}")

        statuses = dict(paper.reviewer_statuses)
        statuses[caller_id] = status
        return paper.model_copy(
            update={"reviewer_statuses": statuses, "reviewer_feedback": reviewer_feedback, "updated_at": now}
        )

    def reassign(
        self,
        paper_id: str,
        reviewer_ids: Sequence[str],
        caller_id: str,
        caller_role: Role,
    ) -> Paper:
        """Replace a paper's reviewer set, preserving retained decisions.

        Retained reviewers keep their status and feedback; removed
        reviewers lose both.  Every requested id is validated before anything is written; the
        paper and all back-reference changes go out in one batch.
        """
        if caller_role != Role.ORGANIZER:
            raise Forbidden("Only organizers can update reviewer assignments.")

        unique_ids = list(dict.fromkeys(r for r in reviewer_ids if isinstance(r, str) and r))
        if not unique_ids:
            raise InvalidArgument("At least one reviewer must be selected.")

        snapshot = self.store.get(PAPERS, paper_id)
        if not snapshot.exists:
            raise NotFound("Paper not found.")
        paper = Paper.from_snapshot(snapshot)

        reviewers = self.store.get_all(USERS, unique_ids)
        missing = [s.id for s in reviewers if not s.exists]
        if missing:
            raise InvalidArgument("One or more reviewers were not found.")
        not_reviewers = [s.id for s in reviewers if User.from_snapshot(s).known_role != Role.REVIEWER]
        if not_reviewers:
            raise InvalidArgument("Invalid reviewer selection.")

        previous_ids = paper.reviewer_ids
        updated_statuses: Dict[str, Decision] = {
            reviewer_id: paper.reviewer_statuses.get(reviewer_id, DEFAULT_DECISION) for reviewer_id in unique_ids
        }
        retained_feedback = {r: text for r, text in paper.reviewer_feedback.items() if r in unique_ids}
        added = [r for r in unique_ids if r not in previous_ids]
        removed = [r for r in previous_ids if r not in unique_ids]

        now = utc_now_iso()
        batch = self.store.batch()
        batch.update(
            PAPERS,
            paper_id,
            {
                "reviewerIds": unique_ids,
                "reviewerStatuses": {k: v.value for k, v in updated_statuses.items()},
                "reviewerFeedback": retained_feedback,
                "updatedAt": now,
            },
        )
        for reviewer_id in added:
            batch.set(USERS, reviewer_id, {"assignedPapers": ArrayUnion(paper_id)}, merge=True)
        for reviewer_id in removed:
            batch.set(USERS, reviewer_id, {"assignedPapers": ArrayRemove(paper_id)}, merge=True)
        batch.commit()

        logger.info(
            f"Organizer {caller_id} reassigned paper {paper_id}",
            extra={"added": added, "removed": removed},
        )
        return paper.model_copy(
            update={
                "reviewer_ids": unique_ids,
                "reviewer_statuses": updated_statuses,
                "reviewer_feedback": retained_feedback,
                "updated_at": now,
            }
        )

"""Core domain records for users, conferences and papers.

Stored documents are loosely typed.  Each record is parsed once at the
store boundary through ``from_snapshot`` (which tolerates missing or
malformed fields) and written back with ``to_document``, which emits
the camelCase field names the stored documents use.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..reviewer.status import DEFAULT_DECISION, Decision, extract_feedback, extract_statuses
from ..store.base import Snapshot
from .ids import to_iso_string


class Role(str, Enum):
    """Roles a user profile can hold."""

    ORGANIZER = "organizer"
    AUTHOR = "author"
    REVIEWER = "reviewer"


KNOWN_ROLES = frozenset(r.value for r in Role)


def parse_role(value: Any) -> Optional[Role]:
    """Return the ``Role`` for ``value``, or ``None`` if it is not one."""
    if isinstance(value, Role):
        return value
    if isinstance(value, str) and value in KNOWN_ROLES:
        return Role(value)
    return None


def _text(value: Any, default: str = "") -> str:
    return value if isinstance(value, str) else default


def _optional_text(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def _id_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Record(CamelModel):
    """Base for stored entities."""

    id: str

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude={"id"})


class User(Record):
    """User profile.  ``role`` stays a raw string so unknown roles survive parsing."""

    name: str = ""
    email: str = ""
    role: str = ""
    assigned_papers: List[str] = Field(default_factory=list)

    @property
    def known_role(self) -> Optional[Role]:
        return parse_role(self.role)

    @classmethod
    def from_snapshot(cls, snapshot: Snapshot) -> "User":
        data = snapshot.data or {}
        return cls(
            id=snapshot.id,
            name=_text(data.get("name")),
            email=_text(data.get("email")),
            role=_text(data.get("role")),
            assigned_papers=_id_list(data.get("assignedPapers")),
        )


class Conference(Record):
    """Conference owned by exactly one organizer."""

    name: str = ""
    description: str = ""
    location: str = ""
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    organizer_id: Optional[str] = None
    paper_ids: List[str] = Field(default_factory=list)
    created_at: Optional[str] = None

    @classmethod
    def from_snapshot(cls, snapshot: Snapshot) -> "Conference":
        data = snapshot.data or {}
        return cls(
            id=snapshot.id,
            name=_text(data.get("name")),
            description=_text(data.get("description")),
            location=_text(data.get("location")),
            start_date=to_iso_string(data.get("startDate")),
            end_date=to_iso_string(data.get("endDate")),
            organizer_id=_optional_text(data.get("organizerId")),
            paper_ids=_id_list(data.get("paperIds")),
            created_at=to_iso_string(data.get("createdAt")),
        )


class Paper(Record):
    """Paper submitted by an author to a conference.

    ``reviewer_ids`` and ``reviewer_statuses`` are written in lockstep
    by the assignment engine; ``status_for`` reads a reviewer's decision
    and falls back to ``pending`` for an id missing from the map.
    ``reviewer_feedback`` only holds entries for reviewers who left
    non-blank feedback.
    """

    title: str = "Untitled paper"
    author_id: Optional[str] = None
    conference_id: Optional[str] = None
    reviewer_ids: List[str] = Field(default_factory=list)
    reviewer_statuses: Dict[str, Decision] = Field(default_factory=dict)
    reviewer_feedback: Dict[str, str] = Field(default_factory=dict)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def status_for(self, reviewer_id: str) -> Decision:
        return self.reviewer_statuses.get(reviewer_id, DEFAULT_DECISION)

    def feedback_for(self, reviewer_id: str) -> Optional[str]:
        return self.reviewer_feedback.get(reviewer_id)

    def assigned_statuses(self) -> List[Decision]:
        """One decision per assigned reviewer, in assignment order."""
        return [self.status_for(reviewer_id) for reviewer_id in self.reviewer_ids]

    @classmethod
    def from_snapshot(cls, snapshot: Snapshot) -> "Paper":
        data = snapshot.data or {}
        return cls(
            id=snapshot.id,
            title=_text(data.get("title"), "Untitled paper"),
            author_id=_optional_text(data.get("authorId")),
            conference_id=_optional_text(data.get("conferenceId")),
            reviewer_ids=_id_list(data.get("reviewerIds")),
            reviewer_statuses=extract_statuses(data.get("reviewerStatuses")),
            reviewer_feedback=extract_feedback(data.get("reviewerFeedback")),
            created_at=to_iso_string(data.get("createdAt")),
            updated_at=to_iso_string(data.get("updatedAt")),
        )

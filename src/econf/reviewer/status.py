"""Reviewer decision model.

Single source of truth for the three-state decision a reviewer renders
on a paper, and for reading decisions safely out of loosely typed
stored documents, along with the free-text feedback a reviewer may
leave next to it.  Everything here is pure: no I/O, no exceptions.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Iterable

from pydantic import BaseModel


class Decision(str, Enum):
    """A reviewer's verdict on a paper."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


DEFAULT_DECISION = Decision.PENDING

# Longer feedback is truncated, not rejected
FEEDBACK_MAX_LENGTH = 2000

_DECISION_VALUES = {d.value for d in Decision}

_DECISION_LABELS = {
    Decision.PENDING: "Pending",
    Decision.ACCEPTED: "Accepted",
    Decision.DECLINED: "Declined",
}


class StatusTally(BaseModel):
    """Counts of decisions per state."""

    pending: int = 0
    accepted: int = 0
    declined: int = 0

    @property
    def total(self) -> int:
        return self.pending + self.accepted + self.declined

    @property
    def completed(self) -> int:
        return self.accepted + self.declined

    def add(self, decision: Decision) -> None:
        if decision == Decision.ACCEPTED:
            self.accepted += 1
        elif decision == Decision.DECLINED:
            self.declined += 1
        else:
            self.pending += 1


def normalize_decision(value: Any) -> Decision:
    """Return ``value`` as a ``Decision`` if valid, else ``pending``."""
    if isinstance(value, Decision):
        return value
    if isinstance(value, str) and value in _DECISION_VALUES:
        return Decision(value)
    return DEFAULT_DECISION


def extract_statuses(raw: Any) -> Dict[str, Decision]:
    """Copy a stored status map, normalizing every value.

    Non-mapping input yields an empty map; non-string keys are skipped.
    """
    if not isinstance(raw, dict):
        return {}
    return {key: normalize_decision(value) for key, value in raw.items() if isinstance(key, str)}


def clean_feedback(value: Any) -> str:
    """Trim feedback text and cut it to ``FEEDBACK_MAX_LENGTH`` characters.

    Anything that is not a string reads as empty, which means "no feedback".
    """
    if not isinstance(value, str):
        return ""
    return value.strip()[:FEEDBACK_MAX_LENGTH]


def extract_feedback(raw: Any) -> Dict[str, str]:
    """Copy a stored feedback map, keeping only non-blank string entries."""
    if not isinstance(raw, dict):
        return {}
    result: Dict[str, str] = {}
    for key, value in raw.items():
        text = clean_feedback(value)
        if isinstance(key, str) and text:
            result[key] = text
    return result


def summarize(statuses: Iterable[Decision]) -> Decision:
    """Fold reviewer decisions into one overall decision.

    Unanimous ``accepted`` or unanimous ``declined`` is final; an empty
    set, any ``pending`` entry or a split between accept and decline all
    read as ``pending``.
    """
    seen = {normalize_decision(s) for s in statuses}
    if seen == {Decision.ACCEPTED}:
        return Decision.ACCEPTED
    if seen == {Decision.DECLINED}:
        return Decision.DECLINED
    return Decision.PENDING


def tally(statuses: Iterable[Decision]) -> StatusTally:
    result = StatusTally()
    for status in statuses:
        result.add(normalize_decision(status))
    return result


def decision_label(decision: Decision) -> str:
    return _DECISION_LABELS[normalize_decision(decision)]

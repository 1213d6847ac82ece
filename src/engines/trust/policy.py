"""
Trust scoring policy and synthesis rules.

The base reputation and score range are defined once here and shared by the
workspace view, the project view and the category breakdown.
"""

from dataclasses import dataclass
from typing import Dict, Optional

from src.kernel.models.activity import DocumentStatus, TaskStatus
from src.kernel.models.trust_ledger import LedgerAction


@dataclass(frozen=True)
class ScorePolicy:
    """Bounded reputation: a base that trust points adjust, kept inside a range."""

    base_reputation: int = 50
    floor: int = 0
    ceiling: int = 100

    def clamp(self, value: int) -> int:
        return max(self.floor, min(self.ceiling, value))

    def bounded(self, total_points: int) -> int:
        return self.clamp(self.base_reputation + total_points)


SCORE_POLICY = ScorePolicy()


@dataclass(frozen=True)
class EntryRule:
    """Action code and point value assigned to a record status."""

    action: LedgerAction
    points: int


TASK_RULES: Dict[str, EntryRule] = {
    TaskStatus.COMPLETED.value: EntryRule(LedgerAction.COMPLETED_TASK, 3),
    TaskStatus.REVIEW.value: EntryRule(LedgerAction.SUBMITTED_TASK_FOR_REVIEW, 2),
    TaskStatus.IN_PROGRESS.value: EntryRule(LedgerAction.STARTED_TASK, 1),
    TaskStatus.CANCELLED.value: EntryRule(LedgerAction.CANCELLED_TASK, -1),
}
DEFAULT_TASK_RULE = EntryRule(LedgerAction.UPDATED_TASK, 0)

DOCUMENT_RULES: Dict[str, EntryRule] = {
    DocumentStatus.APPROVED.value: EntryRule(LedgerAction.DOCUMENT_APPROVED, 2),
    DocumentStatus.PENDING.value: EntryRule(LedgerAction.DOCUMENT_UPLOADED, 1),
    DocumentStatus.REJECTED.value: EntryRule(LedgerAction.DOCUMENT_REJECTED, -1),
}

# Default points for manual actions when the caller does not specify any
MANUAL_DEFAULT_POINTS: Dict[LedgerAction, int] = {
    LedgerAction.PROJECT_CREATED: 5,
    LedgerAction.MANUAL_ADJUSTMENT: 0,
}

# Readable status prefixes for task descriptions
TASK_STATUS_TEXT: Dict[str, str] = {
    TaskStatus.TODO.value: "Created",
    TaskStatus.IN_PROGRESS.value: "Started",
    TaskStatus.REVIEW.value: "Submitted for review",
    TaskStatus.COMPLETED.value: "Completed",
    TaskStatus.CANCELLED.value: "Cancelled",
}

DOCUMENT_STATUS_TEXT: Dict[str, str] = {
    DocumentStatus.PENDING.value: "Uploaded",
    DocumentStatus.APPROVED.value: "Approved",
    DocumentStatus.REJECTED.value: "Rejected",
}


def task_rule(status: Optional[str]) -> EntryRule:
    """Rule for a task status; unknown statuses are plain updates."""
    return TASK_RULES.get((status or "").lower(), DEFAULT_TASK_RULE)


def document_rule(status: Optional[str]) -> EntryRule:
    """Rule for a document status; a missing status means pending."""
    key = (status or DocumentStatus.PENDING.value).lower()
    return DOCUMENT_RULES.get(key, DOCUMENT_RULES[DocumentStatus.PENDING.value])

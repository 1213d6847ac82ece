"""
Deterministic narrative text for ledger entries.

Everything here is built from the entry's action, typed metadata and the
actor's display name only, so it is always available when the text
collaborator is not.
"""

from typing import Dict, Literal

from src.engines.trust.metadata import (
    DocumentMetadata,
    ProjectMetadata,
    TaskMetadata,
    parse_metadata,
)
from src.engines.trust.synthesizer import describe_doc_type
from src.kernel.models.activity import DocumentStatus, TaskStatus
from src.kernel.models.trust_ledger import LedgerAction, TrustLedgerEntry

ActivityType = Literal["task", "document", "trust_entry"]

TASK_VERBS: Dict[str, str] = {
    LedgerAction.COMPLETED_TASK.value: "completed",
    LedgerAction.SUBMITTED_TASK_FOR_REVIEW.value: "submitted for review",
    LedgerAction.STARTED_TASK.value: "started",
    LedgerAction.CANCELLED_TASK.value: "cancelled",
    LedgerAction.UPDATED_TASK.value: "updated",
}

DOCUMENT_VERBS: Dict[str, str] = {
    LedgerAction.DOCUMENT_UPLOADED.value: "uploaded",
    LedgerAction.DOCUMENT_APPROVED.value: "received approval on",
    LedgerAction.DOCUMENT_REJECTED.value: "received rejection on",
}


def readable_action(action: str) -> str:
    """``completed_task`` -> ``completed task``."""
    return action.replace("_", " ")


def activity_type(entry: TrustLedgerEntry) -> ActivityType:
    match parse_metadata(entry.entry_metadata):
        case TaskMetadata():
            return "task"
        case DocumentMetadata():
            return "document"
        case _:
            return "trust_entry"


def fallback_title(entry: TrustLedgerEntry, actor: str) -> str:
    """
    Title used when no AI title is available.

    Examples:
        "Ada completed task - Design homepage"
        "Ada uploaded pitch deck: Series A"
    """
    match parse_metadata(entry.entry_metadata):
        case TaskMetadata(title=title):
            verb = TASK_VERBS.get(entry.action, "updated")
            return f"{actor} {verb} task - {title}"
        case DocumentMetadata(title=title, doc_type=doc_type):
            verb = DOCUMENT_VERBS.get(entry.action, "uploaded")
            return f"{actor} {verb} {describe_doc_type(doc_type)}: {title}"
        case ProjectMetadata(project_name=name) if entry.action == LedgerAction.PROJECT_CREATED.value:
            return f"{actor} created project - {name}"
        case _:
            return f"{actor} {readable_action(entry.action)} - {entry.description or 'activity'}"


def fallback_description(entry: TrustLedgerEntry) -> str:
    """Stored description, or one rebuilt from metadata."""
    if entry.description and entry.description.strip():
        return entry.description.strip()
    match parse_metadata(entry.entry_metadata):
        case TaskMetadata(title=title):
            return f"Task: {title}"
        case DocumentMetadata(title=title, doc_type=doc_type):
            return f"{describe_doc_type(doc_type).capitalize()}: {title}"
        case ProjectMetadata(project_name=name):
            return f"Project: {name}"
        case _:
            return "Trust activity"


def reached_terminal_state(entry: TrustLedgerEntry) -> bool:
    """
    Whether the entry's source record reached completed/approved.

    Entries without a task or document source are recorded directly on
    the ledger and count as verified.
    """
    match parse_metadata(entry.entry_metadata):
        case TaskMetadata(status=status):
            return status == TaskStatus.COMPLETED.value
        case DocumentMetadata(status=status):
            return status == DocumentStatus.APPROVED.value
        case _:
            return True

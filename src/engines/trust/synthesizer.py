"""
Entry Synthesizer - derives ledger entries from raw collaboration activity.

Rules (status -> action, points):
- Tasks: completed +3, review +2, in_progress +1, cancelled -1, anything else 0
- Documents: approved +2, pending/unset +1, rejected -1

Synthesis is a pure function of the records' statuses. Records that cannot be
credited to anyone (no assignee and no creator) are skipped.
"""

import uuid
from datetime import datetime
from typing import Iterable, List, Optional

from pydantic import BaseModel

from src.engines.trust.metadata import DocumentMetadata, LedgerMetadata, TaskMetadata
from src.engines.trust.policy import (
    DOCUMENT_STATUS_TEXT,
    TASK_STATUS_TEXT,
    EntryRule,
    document_rule,
    task_rule,
)
from src.kernel.models.activity import DocumentStatus, WorkspaceDocument, WorkspaceTask
from src.kernel.models.trust_ledger import LedgerAction, SourceType


class LedgerEntryDraft(BaseModel):
    """A ledger entry before persistence (no id, no created_at)."""

    workspace_id: uuid.UUID
    project_id: Optional[uuid.UUID] = None
    user_id: uuid.UUID

    action: LedgerAction
    description: str
    trust_points: int
    action_date: Optional[datetime] = None
    metadata: Optional[LedgerMetadata] = None

    source_type: Optional[SourceType] = None
    source_id: Optional[uuid.UUID] = None


def describe_doc_type(doc_type: Optional[str]) -> str:
    """Human-readable document type ("pitch_deck" -> "pitch deck")."""
    return (doc_type or "document").replace("_", " ")


class EntrySynthesizer:
    """
    Converts tasks and documents of one scope into ledger entry drafts.
    """

    @classmethod
    def task_entry(
        cls,
        task: WorkspaceTask,
        workspace_id: uuid.UUID,
        project_id: Optional[uuid.UUID],
    ) -> Optional[LedgerEntryDraft]:
        """Draft for a single task, or None when nobody can be credited."""
        subject = task.subject_id
        if subject is None:
            return None

        status = (task.status or "").lower()
        rule: EntryRule = task_rule(status)
        status_text = TASK_STATUS_TEXT.get(status, "Updated")

        return LedgerEntryDraft(
            workspace_id=workspace_id,
            project_id=project_id,
            user_id=subject,
            action=rule.action,
            description=f"{status_text} task: {task.title}",
            trust_points=rule.points,
            action_date=task.updated_at or task.created_at,
            metadata=TaskMetadata(
                task_id=task.id,
                title=task.title,
                status=status,
                priority=task.priority,
            ),
            source_type=SourceType.TASK,
            source_id=task.id,
        )

    @classmethod
    def document_entry(
        cls,
        document: WorkspaceDocument,
        workspace_id: uuid.UUID,
        project_id: Optional[uuid.UUID],
    ) -> Optional[LedgerEntryDraft]:
        """Draft for a single document, or None when it has no creator."""
        subject = document.subject_id
        if subject is None:
            return None

        status = (document.status or DocumentStatus.PENDING.value).lower()
        rule: EntryRule = document_rule(status)
        if rule.action == LedgerAction.DOCUMENT_UPLOADED:
            status = DocumentStatus.PENDING.value
        verb = DOCUMENT_STATUS_TEXT[status]

        return LedgerEntryDraft(
            workspace_id=workspace_id,
            project_id=project_id,
            user_id=subject,
            action=rule.action,
            description=f"{verb} {describe_doc_type(document.doc_type)}: {document.title}",
            trust_points=rule.points,
            action_date=document.updated_at or document.created_at,
            metadata=DocumentMetadata(
                document_id=document.id,
                title=document.title,
                doc_type=document.doc_type or "document",
                status=status,
            ),
            source_type=SourceType.DOCUMENT,
            source_id=document.id,
        )

    @classmethod
    def synthesize(
        cls,
        tasks: Iterable[WorkspaceTask],
        documents: Iterable[WorkspaceDocument],
        workspace_id: uuid.UUID,
        project_id: Optional[uuid.UUID] = None,
    ) -> List[LedgerEntryDraft]:
        """
        Derive entry drafts for a scope.

        Args:
            tasks: Tasks belonging to the scope
            documents: Documents belonging to the scope
            workspace_id: Workspace of the scope
            project_id: Project of the scope, None for the workspace level

        Returns:
            Drafts in input order (tasks first), skipping uncreditable records
        """
        drafts: List[LedgerEntryDraft] = []
        for task in tasks:
            draft = cls.task_entry(task, workspace_id, project_id)
            if draft is not None:
                drafts.append(draft)
        for document in documents:
            draft = cls.document_entry(document, workspace_id, project_id)
            if draft is not None:
                drafts.append(draft)
        return drafts

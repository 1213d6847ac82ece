"""Unit tests for ledger entry synthesis."""

import uuid
from datetime import datetime, timezone
from typing import Optional

import pytest

from src.engines.trust.metadata import DocumentMetadata, TaskMetadata
from src.engines.trust.synthesizer import EntrySynthesizer, describe_doc_type
from src.kernel.models.activity import WorkspaceDocument, WorkspaceTask
from src.kernel.models.trust_ledger import LedgerAction, SourceType

WORKSPACE_ID = uuid.uuid4()
STAMP = datetime(2026, 10, 1, 9, 30, tzinfo=timezone.utc)


def task(
    status: str,
    assigned_to: Optional[uuid.UUID] = None,
    created_by: Optional[uuid.UUID] = None,
    title: str = "Design homepage",
) -> WorkspaceTask:
    return WorkspaceTask(
        id=uuid.uuid4(),
        workspace_id=WORKSPACE_ID,
        title=title,
        status=status,
        priority="high",
        assigned_to=assigned_to,
        created_by=created_by,
        created_at=STAMP,
        updated_at=STAMP,
    )


def document(
    status: Optional[str],
    created_by: Optional[uuid.UUID] = None,
    doc_type: str = "pitch_deck",
) -> WorkspaceDocument:
    return WorkspaceDocument(
        id=uuid.uuid4(),
        workspace_id=WORKSPACE_ID,
        title="Series A",
        doc_type=doc_type,
        status=status,
        created_by=created_by,
        created_at=STAMP,
        updated_at=STAMP,
    )


class TestTaskRules:
    """Task status to action/points mapping."""

    @pytest.mark.parametrize(
        "status,action,points",
        [
            ("completed", LedgerAction.COMPLETED_TASK, 3),
            ("review", LedgerAction.SUBMITTED_TASK_FOR_REVIEW, 2),
            ("in_progress", LedgerAction.STARTED_TASK, 1),
            ("cancelled", LedgerAction.CANCELLED_TASK, -1),
            ("todo", LedgerAction.UPDATED_TASK, 0),
            ("blocked", LedgerAction.UPDATED_TASK, 0),
        ],
    )
    def test_status_mapping(self, status, action, points):
        user = uuid.uuid4()
        draft = EntrySynthesizer.task_entry(task(status, assigned_to=user), WORKSPACE_ID, None)

        assert draft is not None
        assert draft.action == action
        assert draft.trust_points == points

    def test_status_is_case_insensitive(self):
        draft = EntrySynthesizer.task_entry(task("Completed", created_by=uuid.uuid4()), WORKSPACE_ID, None)
        assert draft.action == LedgerAction.COMPLETED_TASK

    def test_assignee_is_credited_before_creator(self):
        assignee, creator = uuid.uuid4(), uuid.uuid4()
        draft = EntrySynthesizer.task_entry(task("completed", assignee, creator), WORKSPACE_ID, None)
        assert draft.user_id == assignee

    def test_creator_credited_when_unassigned(self):
        creator = uuid.uuid4()
        draft = EntrySynthesizer.task_entry(task("completed", created_by=creator), WORKSPACE_ID, None)
        assert draft.user_id == creator

    def test_uncreditable_task_is_skipped(self):
        assert EntrySynthesizer.task_entry(task("completed"), WORKSPACE_ID, None) is None

    def test_draft_carries_provenance(self):
        project_id = uuid.uuid4()
        record = task("completed", assigned_to=uuid.uuid4())
        draft = EntrySynthesizer.task_entry(record, WORKSPACE_ID, project_id)

        assert draft.workspace_id == WORKSPACE_ID
        assert draft.project_id == project_id
        assert draft.source_type == SourceType.TASK
        assert draft.source_id == record.id
        assert draft.action_date == STAMP
        assert draft.description == "Completed task: Design homepage"
        assert isinstance(draft.metadata, TaskMetadata)
        assert draft.metadata.task_id == record.id
        assert draft.metadata.status == "completed"
        assert draft.metadata.priority == "high"


class TestDocumentRules:
    """Document status to action/points mapping."""

    @pytest.mark.parametrize(
        "status,action,points",
        [
            ("approved", LedgerAction.DOCUMENT_APPROVED, 2),
            ("pending", LedgerAction.DOCUMENT_UPLOADED, 1),
            (None, LedgerAction.DOCUMENT_UPLOADED, 1),
            ("rejected", LedgerAction.DOCUMENT_REJECTED, -1),
            ("archived", LedgerAction.DOCUMENT_UPLOADED, 1),
        ],
    )
    def test_status_mapping(self, status, action, points):
        draft = EntrySynthesizer.document_entry(document(status, uuid.uuid4()), WORKSPACE_ID, None)

        assert draft.action == action
        assert draft.trust_points == points

    def test_unset_status_reads_as_pending(self):
        draft = EntrySynthesizer.document_entry(document(None, uuid.uuid4()), WORKSPACE_ID, None)

        assert isinstance(draft.metadata, DocumentMetadata)
        assert draft.metadata.status == "pending"
        assert draft.description == "Uploaded pitch deck: Series A"

    def test_document_without_creator_is_skipped(self):
        assert EntrySynthesizer.document_entry(document("approved"), WORKSPACE_ID, None) is None

    def test_source_is_document(self):
        record = document("approved", uuid.uuid4())
        draft = EntrySynthesizer.document_entry(record, WORKSPACE_ID, None)
        assert draft.source_type == SourceType.DOCUMENT
        assert draft.source_id == record.id


class TestSynthesize:
    """Scope-level synthesis."""

    def test_deterministic_for_same_statuses(self):
        user = uuid.uuid4()
        tasks = [task("completed", user), task("review", user), task("todo", user)]
        documents = [document("rejected", user), document(None, user)]

        first = EntrySynthesizer.synthesize(tasks, documents, WORKSPACE_ID)
        second = EntrySynthesizer.synthesize(tasks, documents, WORKSPACE_ID)

        assert [(d.action, d.trust_points, d.source_id) for d in first] == [
            (d.action, d.trust_points, d.source_id) for d in second
        ]

    def test_tasks_then_documents_skipping_uncreditable(self):
        user = uuid.uuid4()
        tasks = [task("completed", user), task("completed")]
        documents = [document("approved", user), document("approved")]

        drafts = EntrySynthesizer.synthesize(tasks, documents, WORKSPACE_ID)

        assert [d.source_type for d in drafts] == [SourceType.TASK, SourceType.DOCUMENT]
        assert sum(d.trust_points for d in drafts) == 5

    def test_empty_scope(self):
        assert EntrySynthesizer.synthesize([], [], WORKSPACE_ID) == []


def test_describe_doc_type():
    assert describe_doc_type("pitch_deck") == "pitch deck"
    assert describe_doc_type(None) == "document"

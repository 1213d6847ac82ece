"""Integration tests for ledger persistence and activity reads on SQLite."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select

from src.engines.trust.synthesizer import EntrySynthesizer, LedgerEntryDraft
from src.kernel.identity.identity_service import IdentityService
from src.kernel.ledger.activity_collector import ActivityCollector
from src.kernel.ledger.ledger_store import LedgerConflictError, LedgerStore
from src.kernel.models import LedgerAction, MemberStatus, TrustLedgerEntry, WorkspaceMember
from src.kernel.permissions.membership_service import MembershipService


def days_ago(days: int) -> datetime:
    return datetime.now(timezone.utc) - timedelta(days=days)


async def count_entries(session) -> int:
    result = await session.execute(select(func.count(TrustLedgerEntry.id)))
    return result.scalar()


class TestActivityCollector:
    """Scope filtering of raw records."""

    @pytest.mark.asyncio
    async def test_workspace_scope_excludes_project_records(
        self, db_session, workspace, project, founder, add_task, add_document
    ):
        ws_task = await add_task(workspace, "Hire designer", assigned_to=founder.id)
        await add_task(workspace, "Build login", assigned_to=founder.id, project=project)
        await add_document(workspace, "Deck", created_by=founder.id, project=project)

        collector = ActivityCollector(db_session)

        assert [t.id for t in await collector.tasks(workspace.id)] == [ws_task.id]
        assert await collector.documents(workspace.id) == []
        assert len(await collector.tasks(workspace.id, project.id)) == 1
        assert len(await collector.documents(workspace.id, project.id)) == 1

    @pytest.mark.asyncio
    async def test_records_ordered_oldest_first(self, db_session, workspace, founder, add_task):
        newer = await add_task(workspace, "Second", assigned_to=founder.id, updated_at=days_ago(1))
        older = await add_task(workspace, "First", assigned_to=founder.id, updated_at=days_ago(5))

        tasks = await ActivityCollector(db_session).tasks(workspace.id)

        assert [t.id for t in tasks] == [older.id, newer.id]


class TestLedgerStore:
    """Entry storage."""

    @pytest.mark.asyncio
    async def test_insert_and_count(self, db_session, workspace, founder, add_task, add_document):
        tasks = [await add_task(workspace, "Ship", "completed", assigned_to=founder.id)]
        documents = [await add_document(workspace, "Deck", created_by=founder.id)]
        drafts = EntrySynthesizer.synthesize(tasks, documents, workspace.id)

        store = LedgerStore(db_session)
        entries = await store.insert_drafts(drafts)
        await db_session.commit()

        assert len(entries) == 2
        assert all(entry.id is not None and entry.created_at is not None for entry in entries)
        assert await store.count_synthesized(workspace.id) == 2
        assert entries[0].entry_metadata["type"] == "task"

    @pytest.mark.asyncio
    async def test_duplicate_source_raises_conflict_and_keeps_session_usable(
        self, db_session, workspace, founder, add_task
    ):
        tasks = [await add_task(workspace, "Ship", "completed", assigned_to=founder.id)]
        store = LedgerStore(db_session)
        await store.insert_drafts(EntrySynthesizer.synthesize(tasks, [], workspace.id))
        await db_session.commit()

        with pytest.raises(LedgerConflictError):
            await store.insert_drafts(EntrySynthesizer.synthesize(tasks, [], workspace.id))

        # The savepoint rolled back; the outer transaction still works
        assert await store.count_synthesized(workspace.id) == 1
        await db_session.commit()
        assert await count_entries(db_session) == 1

    @pytest.mark.asyncio
    async def test_same_source_may_have_entries_in_two_scopes(
        self, db_session, workspace, project, founder, add_task
    ):
        tasks = [await add_task(workspace, "Ship", "completed", assigned_to=founder.id)]
        store = LedgerStore(db_session)
        await store.insert_drafts(EntrySynthesizer.synthesize(tasks, [], workspace.id))
        await store.insert_drafts(EntrySynthesizer.synthesize(tasks, [], workspace.id, project.id))
        await db_session.commit()

        assert await store.count_synthesized(workspace.id) == 1
        assert await store.count_synthesized(workspace.id, project.id) == 1

    @pytest.mark.asyncio
    async def test_manual_entries_are_not_synthesized(self, db_session, workspace, founder):
        store = LedgerStore(db_session)
        for _ in range(2):
            await store.add_entry(LedgerEntryDraft(
                workspace_id=workspace.id,
                user_id=founder.id,
                action=LedgerAction.MANUAL_ADJUSTMENT,
                description="Adjustment",
                trust_points=1,
            ))
        await db_session.commit()

        assert await count_entries(db_session) == 2
        assert await store.count_synthesized(workspace.id) == 0

    @pytest.mark.asyncio
    async def test_entries_newest_first(self, db_session, workspace, founder):
        store = LedgerStore(db_session)
        for days in (3, 1, 2):
            await store.add_entry(LedgerEntryDraft(
                workspace_id=workspace.id,
                user_id=founder.id,
                action=LedgerAction.MANUAL_ADJUSTMENT,
                description=f"{days} days ago",
                trust_points=1,
                action_date=days_ago(days),
            ))
        await db_session.commit()

        entries = await store.scope_entries(workspace.id)

        assert [e.description for e in entries] == ["1 days ago", "2 days ago", "3 days ago"]
        assert len(await store.scope_entries(workspace.id, limit=2)) == 2

    @pytest.mark.asyncio
    async def test_delete_scope_is_exact(self, db_session, workspace, project, other_project, founder):
        store = LedgerStore(db_session)
        for scope in (None, project.id, other_project.id):
            await store.add_entry(LedgerEntryDraft(
                workspace_id=workspace.id,
                project_id=scope,
                user_id=founder.id,
                action=LedgerAction.MANUAL_ADJUSTMENT,
                description="Adjustment",
                trust_points=1,
            ))
        await db_session.commit()

        deleted = await store.delete_scope(workspace.id, project.id)
        await db_session.commit()

        assert deleted == 1
        assert len(await store.scope_entries(workspace.id)) == 1
        assert len(await store.scope_entries(workspace.id, other_project.id)) == 1
        assert len(await store.workspace_entries(workspace.id)) == 2


class TestIdentityAndMembership:
    """Profile and membership lookups."""

    @pytest.mark.asyncio
    async def test_display_names_cover_every_id(self, db_session, founder, outsider):
        missing = uuid.uuid4()

        names = await IdentityService(db_session).display_names([founder.id, outsider.id, missing])

        assert names[founder.id] == "Ada Founder"
        assert names[outsider.id] == "mallory@example.com"
        assert names[missing] == f"User {str(missing)[:8]}"

    @pytest.mark.asyncio
    async def test_only_active_members_have_access(self, db_session, workspace, founder, mentor, outsider):
        membership = MembershipService(db_session)
        db_session.add(WorkspaceMember(
            workspace_id=workspace.id,
            user_id=outsider.id,
            status=MemberStatus.INVITED.value,
        ))
        await db_session.commit()

        assert await membership.is_active_member(founder.id, workspace.id)
        assert not await membership.is_active_member(outsider.id, workspace.id)
        assert set(await membership.active_member_ids(workspace.id)) == {founder.id, mentor.id}


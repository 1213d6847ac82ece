"""
Ledger Store - persistence of trust ledger entries.

Writes happen inside a SAVEPOINT so a failed bulk insert leaves neither
entries nor a half-finished scope behind, and the surrounding request
transaction stays usable.
"""

import uuid
from typing import List, Optional, Sequence

from sqlalchemy import delete, func, select, and_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.engines.trust.metadata import dump_metadata
from src.engines.trust.synthesizer import LedgerEntryDraft
from src.kernel.models.trust_ledger import TrustLedgerEntry
from src.logging_config import get_logger

logger = get_logger(__name__)


class LedgerPersistenceError(Exception):
    """Writing ledger entries failed; nothing from the write was kept."""


class LedgerConflictError(LedgerPersistenceError):
    """Another writer already stored entries for the same source records."""


def scope_clause(workspace_id: uuid.UUID, project_id: Optional[uuid.UUID]):
    """Exact (workspace, project) scope; ``None`` project is the workspace level."""
    if project_id is None:
        return and_(
            TrustLedgerEntry.workspace_id == workspace_id,
            TrustLedgerEntry.project_id.is_(None),
        )
    return and_(
        TrustLedgerEntry.workspace_id == workspace_id,
        TrustLedgerEntry.project_id == project_id,
    )


def newest_first():
    return (
        TrustLedgerEntry.action_date.desc().nulls_last(),
        TrustLedgerEntry.created_at.desc(),
        TrustLedgerEntry.id,
    )


def entry_from_draft(draft: LedgerEntryDraft) -> TrustLedgerEntry:
    return TrustLedgerEntry(
        workspace_id=draft.workspace_id,
        project_id=draft.project_id,
        user_id=draft.user_id,
        action=draft.action.value,
        description=draft.description,
        trust_points=draft.trust_points,
        action_date=draft.action_date,
        entry_metadata=dump_metadata(draft.metadata),
        source_type=draft.source_type.value if draft.source_type else None,
        source_id=draft.source_id,
    )


class LedgerStore:
    """
    Data access for TrustLedgerEntry rows.

    Usage:
        store = LedgerStore(session)
        if await store.count_synthesized(workspace_id, project_id) == 0:
            await store.insert_drafts(drafts)
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def count_synthesized(
        self,
        workspace_id: uuid.UUID,
        project_id: Optional[uuid.UUID] = None,
    ) -> int:
        """Entries of the scope that were derived from a task or document."""
        query = select(func.count(TrustLedgerEntry.id)).where(
            scope_clause(workspace_id, project_id),
            TrustLedgerEntry.source_id.is_not(None),
        )
        result = await self.session.execute(query)
        return result.scalar() or 0

    async def scope_entries(
        self,
        workspace_id: uuid.UUID,
        project_id: Optional[uuid.UUID] = None,
        limit: Optional[int] = None,
    ) -> List[TrustLedgerEntry]:
        """Entries of exactly one scope, newest first."""
        query = select(TrustLedgerEntry).where(scope_clause(workspace_id, project_id)).order_by(*newest_first())
        if limit is not None:
            query = query.limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def workspace_entries(self, workspace_id: uuid.UUID) -> List[TrustLedgerEntry]:
        """Entries of every scope in a workspace, newest first."""
        query = (
            select(TrustLedgerEntry)
            .where(TrustLedgerEntry.workspace_id == workspace_id)
            .order_by(*newest_first())
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def insert_drafts(self, drafts: Sequence[LedgerEntryDraft]) -> List[TrustLedgerEntry]:
        """
        Persist drafts in one bulk insert.

        Raises:
            LedgerConflictError: a source record already has an entry in this scope
            LedgerPersistenceError: any other database failure
        """
        entries = [entry_from_draft(draft) for draft in drafts]
        if not entries:
            return []

        try:
            async with self.session.begin_nested():
                self.session.add_all(entries)
                await self.session.flush()
        except IntegrityError as exc:
            raise LedgerConflictError(str(exc.orig)) from exc
        except SQLAlchemyError as exc:
            logger.error("Ledger bulk insert failed", extra={"entries": len(entries), "error": str(exc)})
            raise LedgerPersistenceError("Failed to store ledger entries") from exc

        return entries

    async def add_entry(self, draft: LedgerEntryDraft) -> TrustLedgerEntry:
        """Persist a single entry."""
        entries = await self.insert_drafts([draft])
        return entries[0]

    async def delete_scope(
        self,
        workspace_id: uuid.UUID,
        project_id: Optional[uuid.UUID] = None,
    ) -> int:
        """Delete every entry of exactly one scope. Returns the deleted count."""
        try:
            result = await self.session.execute(
                delete(TrustLedgerEntry)
                .where(scope_clause(workspace_id, project_id))
                .execution_options(synchronize_session=False)
            )
        except SQLAlchemyError as exc:
            logger.error("Ledger scope reset failed", extra={"error": str(exc)})
            raise LedgerPersistenceError("Failed to reset ledger scope") from exc
        return result.rowcount or 0

"""
Trust Ledger Service - orchestrates collection, synthesis, aggregation and
annotation for the workspace and project ledger reads.

Synthesis is the only write path of a read. It runs when a scope has no
synthesized entries yet (or when a project read forces a reset) and is
deduplicated by the per-scope source unique index when two first-reads race.
"""

import asyncio
import uuid
from datetime import datetime
from typing import List, Mapping, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from src.ai.narrative_annotator import NarrativeAnnotator
from src.config import get_settings
from src.engines.trust.aggregator import ScoreAggregator, TrustScore
from src.engines.trust.categories import build_trust_categories
from src.engines.trust.metadata import ProjectMetadata, parse_metadata
from src.engines.trust.narrative import (
    activity_type,
    fallback_description,
    reached_terminal_state,
    readable_action,
)
from src.engines.trust.policy import MANUAL_DEFAULT_POINTS
from src.engines.trust.synthesizer import EntrySynthesizer, LedgerEntryDraft
from src.kernel.events.event_store import EventStore
from src.kernel.events.event_types import (
    LedgerEntryRecordedEvent,
    LedgerResetEvent,
    LedgerSynthesizedEvent,
)
from src.kernel.ledger.activity_collector import ActivityCollector
from src.kernel.ledger.ledger_store import LedgerConflictError, LedgerPersistenceError, LedgerStore
from src.kernel.models.event_log import EventType
from src.kernel.models.trust_ledger import LedgerAction, TrustLedgerEntry
from src.kernel.models.user import placeholder_name
from src.kernel.models.workspace import WorkspaceProject
from src.logging_config import get_logger, set_ledger_scope
from src.schemas.trust_ledger import (
    ActivityItem,
    LedgerEntryCreate,
    PaginationInfo,
    ProjectInfo,
    ProjectTrustLedgerResponse,
    TrustScoreResponse,
    WorkspaceTrustLedgerResponse,
)

logger = get_logger(__name__)


def score_rows(
    scores: Mapping[uuid.UUID, TrustScore],
    names: Mapping[uuid.UUID, str],
) -> List[TrustScoreResponse]:
    """Scores as response rows, highest first."""
    rows = [
        TrustScoreResponse(
            user_id=user_id,
            actor=names.get(user_id) or placeholder_name(user_id),
            score=score.score,
            previous_score=score.previous_score,
            trend=score.trend,
        )
        for user_id, score in scores.items()
    ]
    rows.sort(key=lambda row: (-row.score, row.actor))
    return rows


class TrustLedgerService:
    """
    Ledger reads and writes for one request.

    Callers are responsible for access control; every method assumes the
    acting user is an active member of the workspace involved.
    """

    def __init__(self, session: AsyncSession, annotator: NarrativeAnnotator):
        self.session = session
        self.annotator = annotator
        self.store = LedgerStore(session)
        self.collector = ActivityCollector(session)
        self.event_store = EventStore(session)
        self.feed_limit = get_settings().trust_ledger_feed_limit

    # ------------------------------------------------------------------
    # Synthesis
    # ------------------------------------------------------------------

    async def synthesize(
        self,
        workspace_id: uuid.UUID,
        project_id: Optional[uuid.UUID] = None,
        actor_id: Optional[uuid.UUID] = None,
        forced: bool = False,
    ) -> int:
        """
        Derive and store entries for a scope.

        Returns the number of entries stored by this call; 0 when the scope
        has nothing to derive or a concurrent request stored them first.

        Raises:
            LedgerPersistenceError: the write failed and the scope is still empty
        """
        tasks = await self.collector.tasks(workspace_id, project_id)
        documents = await self.collector.documents(workspace_id, project_id)
        drafts = EntrySynthesizer.synthesize(tasks, documents, workspace_id, project_id)
        if not drafts:
            return 0

        try:
            entries = await self.store.insert_drafts(drafts)
        except LedgerConflictError as exc:
            if await self.store.count_synthesized(workspace_id, project_id) == 0:
                logger.error(
                    "Ledger insert conflicted but the scope holds no entries",
                    extra={"workspace_id": str(workspace_id), "project_id": str(project_id) if project_id else None},
                )
                raise LedgerPersistenceError("Failed to store ledger entries") from exc
            logger.info(
                "Scope synthesized concurrently, reusing stored entries",
                extra={"workspace_id": str(workspace_id), "project_id": str(project_id) if project_id else None},
            )
            return 0

        await self.event_store.log_from_model(
            event_type=EventType.LEDGER_SYNTHESIZED,
            entity_type="workspace",
            entity_id=workspace_id,
            user_id=actor_id,
            payload_model=LedgerSynthesizedEvent(
                workspace_id=workspace_id,
                project_id=project_id,
                entry_count=len(entries),
                task_count=len(tasks),
                document_count=len(documents),
                forced=forced,
            ),
        )
        logger.info(
            "Synthesized ledger entries",
            extra={"entry_count": len(entries), "forced": forced},
        )
        return len(entries)

    async def ensure_synthesized(
        self,
        workspace_id: uuid.UUID,
        project_id: Optional[uuid.UUID] = None,
        actor_id: Optional[uuid.UUID] = None,
    ) -> int:
        """Synthesize the scope unless it already holds synthesized entries."""
        if await self.store.count_synthesized(workspace_id, project_id) > 0:
            return 0
        return await self.synthesize(workspace_id, project_id, actor_id)

    async def reset_scope(
        self,
        workspace_id: uuid.UUID,
        project_id: Optional[uuid.UUID] = None,
        actor_id: Optional[uuid.UUID] = None,
    ) -> int:
        """Delete every entry of exactly this scope."""
        deleted = await self.store.delete_scope(workspace_id, project_id)
        await self.event_store.log_from_model(
            event_type=EventType.LEDGER_RESET,
            entity_type="workspace",
            entity_id=workspace_id,
            user_id=actor_id,
            payload_model=LedgerResetEvent(
                workspace_id=workspace_id,
                project_id=project_id,
                deleted_count=deleted,
            ),
        )
        logger.info("Reset ledger scope", extra={"deleted_count": deleted})
        return deleted

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def workspace_ledger(
        self,
        workspace_id: uuid.UUID,
        page: int,
        page_size: int,
        actor_id: Optional[uuid.UUID] = None,
        now: Optional[datetime] = None,
    ) -> WorkspaceTrustLedgerResponse:
        """
        Paginated workspace feed with bounded scores, insights and categories.

        Scores, insights and categories cover every entry of the workspace;
        only the feed is paginated. Every item is marked verified.
        """
        set_ledger_scope(workspace_id)
        await self.ensure_synthesized(workspace_id, None, actor_id)

        entries = await self.store.workspace_entries(workspace_id)
        start = (page - 1) * page_size
        page_entries = entries[start:start + page_size]
        names = await self.collector.display_names({entry.user_id for entry in entries})

        titles, insights = await asyncio.gather(
            self.annotator.titles(page_entries, names),
            self.annotator.insights(entries, names),
        )

        activities = [
            self._activity(
                entry,
                names,
                action=title,
                description=fallback_description(entry),
                verified=True,
            )
            for entry, title in zip(page_entries, titles)
        ]
        activities.sort(key=lambda item: item.timestamp, reverse=True)

        return WorkspaceTrustLedgerResponse(
            workspace_id=workspace_id,
            activities=activities,
            trust_scores=score_rows(ScoreAggregator.bounded(entries, now), names),
            insights=insights,
            categories=build_trust_categories(entries),
            pagination=PaginationInfo.create(page, page_size, len(entries)),
        )

    async def project_ledger(
        self,
        project: WorkspaceProject,
        force: bool = False,
        actor_id: Optional[uuid.UUID] = None,
        now: Optional[datetime] = None,
    ) -> ProjectTrustLedgerResponse:
        """
        Most recent project feed with unbounded scores.

        ``force`` deletes the project scope and synthesizes it again.
        ``verified`` reflects whether the source task/document reached a
        terminal completed/approved state.
        """
        workspace_id, project_id, project_name = project.workspace_id, project.id, project.name
        set_ledger_scope(workspace_id, project_id)

        if force:
            await self.reset_scope(workspace_id, project_id, actor_id)
            await self.synthesize(workspace_id, project_id, actor_id, forced=True)
        else:
            await self.ensure_synthesized(workspace_id, project_id, actor_id)

        entries = await self.store.scope_entries(workspace_id, project_id)
        feed = entries[:self.feed_limit]
        names = await self.collector.display_names({entry.user_id for entry in entries})

        descriptions = await self.annotator.descriptions(feed, names, project_name)

        activities = [
            self._activity(
                entry,
                names,
                action=fallback_description(entry),
                description=description,
                verified=reached_terminal_state(entry),
            )
            for entry, description in zip(feed, descriptions)
        ]
        activities.sort(key=lambda item: item.timestamp, reverse=True)

        return ProjectTrustLedgerResponse(
            project=ProjectInfo(id=project_id, name=project_name, workspace_id=workspace_id),
            activities=activities,
            trust_scores=score_rows(ScoreAggregator.unbounded(entries, now), names),
        )

    @staticmethod
    def _activity(
        entry: TrustLedgerEntry,
        names: Mapping[uuid.UUID, str],
        action: str,
        description: str,
        verified: bool,
    ) -> ActivityItem:
        return ActivityItem(
            id=entry.id,
            type=activity_type(entry),
            actor=names.get(entry.user_id) or placeholder_name(entry.user_id),
            action=action,
            description=description,
            timestamp=entry.effective_date,
            verified=verified,
            trust_points=entry.trust_points or 0,
            metadata=parse_metadata(entry.entry_metadata),
        )

    # ------------------------------------------------------------------
    # Manual entries
    # ------------------------------------------------------------------

    async def record_entry(
        self,
        workspace_id: uuid.UUID,
        user_id: uuid.UUID,
        request: LedgerEntryCreate,
        project: Optional[WorkspaceProject] = None,
        ip_address: Optional[str] = None,
    ) -> TrustLedgerEntry:
        """Record a manual entry crediting ``user_id``."""
        action = LedgerAction(request.action)
        points = request.trust_points if request.trust_points is not None else MANUAL_DEFAULT_POINTS[action]

        metadata = None
        if project is not None:
            metadata = ProjectMetadata(project_id=project.id, project_name=project.name)

        description = (request.description or "").strip()
        if not description:
            if action == LedgerAction.PROJECT_CREATED and project is not None:
                description = f"Created project: {project.name}"
            else:
                description = readable_action(action.value).capitalize()

        draft = LedgerEntryDraft(
            workspace_id=workspace_id,
            project_id=project.id if project is not None else None,
            user_id=user_id,
            action=action,
            description=description,
            trust_points=points,
            action_date=request.action_date,
            metadata=metadata,
        )
        entry = await self.store.add_entry(draft)

        await self.event_store.log_from_model(
            event_type=EventType.LEDGER_ENTRY_RECORDED,
            entity_type="trust_ledger_entry",
            entity_id=entry.id,
            user_id=user_id,
            payload_model=LedgerEntryRecordedEvent(
                workspace_id=workspace_id,
                project_id=draft.project_id,
                action=action.value,
                trust_points=points,
                subject_id=user_id,
            ),
            ip_address=ip_address,
        )
        logger.info("Recorded manual ledger entry", extra={"action": action.value, "trust_points": points})
        return entry

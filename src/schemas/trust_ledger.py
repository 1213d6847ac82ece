"""
Trust ledger schemas.
"""

import uuid
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from src.engines.trust.aggregator import Trend
from src.engines.trust.categories import TrustCategory
from src.engines.trust.insights import Insight
from src.engines.trust.metadata import LedgerMetadata, parse_metadata
from src.kernel.models.trust_ledger import MANUAL_ACTIONS, LedgerAction, TrustLedgerEntry


class ActivityItem(BaseModel):
    """One annotated row of an activity feed."""

    id: uuid.UUID
    type: Literal["task", "document", "trust_entry"]
    actor: str
    action: str
    description: str
    timestamp: datetime
    verified: bool
    trust_points: int
    metadata: Optional[LedgerMetadata] = None


class TrustScoreResponse(BaseModel):
    """Derived score of one user."""

    user_id: uuid.UUID
    actor: str
    score: int
    previous_score: int
    trend: Trend


class PaginationInfo(BaseModel):
    """Page block for the workspace feed."""

    page: int
    page_size: int
    total_items: int
    total_pages: int
    has_more: bool

    @classmethod
    def create(cls, page: int, page_size: int, total_items: int) -> "PaginationInfo":
        total_pages = (total_items + page_size - 1) // page_size if total_items else 0
        return cls(
            page=page,
            page_size=page_size,
            total_items=total_items,
            total_pages=total_pages,
            has_more=page * page_size < total_items,
        )


class WorkspaceTrustLedgerResponse(BaseModel):
    """Workspace ledger: paginated feed, bounded scores, insights and categories."""

    workspace_id: uuid.UUID
    activities: List[ActivityItem]
    trust_scores: List[TrustScoreResponse]
    insights: List[Insight]
    categories: List[TrustCategory]
    pagination: PaginationInfo


class ProjectInfo(BaseModel):
    id: uuid.UUID
    name: str
    workspace_id: uuid.UUID


class ProjectTrustLedgerResponse(BaseModel):
    """Project ledger: most recent feed items and unbounded scores."""

    project: ProjectInfo
    activities: List[ActivityItem]
    trust_scores: List[TrustScoreResponse]


class LedgerEntryCreate(BaseModel):
    """Manual ledger entry request."""

    action: LedgerAction
    project_id: Optional[uuid.UUID] = None
    description: Optional[str] = Field(None, max_length=1000)
    trust_points: Optional[int] = Field(None, ge=-100, le=100)
    action_date: Optional[datetime] = None

    @field_validator("action")
    @classmethod
    def _manual_only(cls, value: LedgerAction) -> LedgerAction:
        if value not in MANUAL_ACTIONS:
            raise ValueError("only manual actions can be recorded directly")
        return value


class LedgerEntryResponse(BaseModel):
    """A stored ledger entry."""

    id: uuid.UUID
    workspace_id: uuid.UUID
    project_id: Optional[uuid.UUID]
    user_id: uuid.UUID
    action: str
    description: str
    trust_points: int
    action_date: Optional[datetime]
    created_at: datetime
    metadata: Optional[LedgerMetadata] = None

    @classmethod
    def from_entry(cls, entry: TrustLedgerEntry) -> "LedgerEntryResponse":
        return cls(
            id=entry.id,
            workspace_id=entry.workspace_id,
            project_id=entry.project_id,
            user_id=entry.user_id,
            action=entry.action,
            description=entry.description,
            trust_points=entry.trust_points,
            action_date=entry.action_date,
            created_at=entry.created_at,
            metadata=parse_metadata(entry.entry_metadata),
        )

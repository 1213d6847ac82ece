"""
Event type definitions using Pydantic for validation.

These are the payload schemas for events logged to the audit trail.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from src.kernel.models.base import utcnow


class BaseEvent(BaseModel):
    """Base event payload structure."""

    model_config = ConfigDict(extra="allow")

    timestamp: datetime = Field(default_factory=utcnow)
    metadata: Dict[str, Any] = Field(default_factory=dict)


class LedgerScopeEvent(BaseEvent):
    """Event about a whole (workspace, project) ledger scope."""

    workspace_id: uuid.UUID
    project_id: Optional[uuid.UUID] = None


class LedgerSynthesizedEvent(LedgerScopeEvent):
    """Entries were derived from tasks and documents."""

    entry_count: int
    task_count: int = 0
    document_count: int = 0
    forced: bool = False


class LedgerResetEvent(LedgerScopeEvent):
    """All entries of a scope were deleted ahead of resynthesis."""

    deleted_count: int


class LedgerEntryRecordedEvent(LedgerScopeEvent):
    """A manual entry was recorded."""

    action: str
    trust_points: int
    subject_id: uuid.UUID

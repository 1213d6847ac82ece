"""
Trust ledger entries - the canonical unit of trust accounting.

Entries are append-only in normal operation. Synthesized entries are a cache
of a derivation from tasks/documents; they are only bulk-deleted by an
explicit scope reset.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, JSON, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from src.kernel.models.base import Base, CreatedAtMixin, as_aware, generate_uuid


class LedgerAction(str, Enum):
    """Closed set of ledger action codes."""
    
    # Synthesized from tasks
    COMPLETED_TASK = "completed_task"
    SUBMITTED_TASK_FOR_REVIEW = "submitted_task_for_review"
    STARTED_TASK = "started_task"
    CANCELLED_TASK = "cancelled_task"
    UPDATED_TASK = "updated_task"
    
    # Synthesized from documents
    DOCUMENT_APPROVED = "document_approved"
    DOCUMENT_UPLOADED = "document_uploaded"
    DOCUMENT_REJECTED = "document_rejected"
    
    # Recorded manually
    PROJECT_CREATED = "project_created"
    MANUAL_ADJUSTMENT = "manual_adjustment"


MANUAL_ACTIONS = frozenset({
    LedgerAction.PROJECT_CREATED,
    LedgerAction.MANUAL_ADJUSTMENT,
})


class SourceType(str, Enum):
    """Kind of activity record a synthesized entry was derived from."""
    TASK = "task"
    DOCUMENT = "document"


class TrustLedgerEntry(Base, CreatedAtMixin):
    """A point-valued, categorically-coded record of one user's contribution."""
    
    __tablename__ = "trust_ledger_entries"
    
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    
    # Scope
    workspace_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("workspaces.id", ondelete="CASCADE"),
        nullable=False,
    )
    project_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(),
        ForeignKey("workspace_projects.id", ondelete="CASCADE"),
        nullable=True,
    )
    
    # Subject
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    
    action: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    trust_points: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    action_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    
    # "metadata" is reserved on declarative classes
    entry_metadata: Mapped[Optional[dict]] = mapped_column(
        "metadata",
        JSON,
        nullable=True,
    )
    
    # Provenance; NULL for manual entries
    source_type: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    source_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid(), nullable=True)
    
    __table_args__ = (
        Index("ix_trust_ledger_entries_scope", "workspace_id", "project_id"),
        Index("ix_trust_ledger_entries_workspace_date", "workspace_id", "action_date", "created_at"),
    )
    
    @property
    def effective_date(self) -> datetime:
        """Timestamp used for scoring: action_date, else created_at."""
        return as_aware(self.action_date or self.created_at)
    
    @property
    def is_synthesized(self) -> bool:
        return self.source_id is not None
    
    def __repr__(self) -> str:
        return f"<TrustLedgerEntry {self.action} {self.trust_points:+d} user={self.user_id}>"


# One entry per source record and scope. A NULL project_id is the workspace
# level, keyed as the workspace id so the index treats it as a value.
Index(
    "uq_trust_ledger_entries_source",
    TrustLedgerEntry.workspace_id,
    func.coalesce(TrustLedgerEntry.project_id, TrustLedgerEntry.workspace_id),
    TrustLedgerEntry.source_type,
    TrustLedgerEntry.source_id,
    unique=True,
)

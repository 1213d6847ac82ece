"""
Collaboration activity records - workspace tasks and documents.

Their lifecycle belongs to the task/document CRUD feature. The trust ledger
reads them as raw activity when synthesizing ledger entries.
"""

import uuid
from enum import Enum
from typing import Optional

from sqlalchemy import ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from src.kernel.models.base import Base, TimestampMixin, generate_uuid


class TaskStatus(str, Enum):
    """Task lifecycle states."""
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    REVIEW = "review"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class DocumentStatus(str, Enum):
    """Document review states. A document without a status counts as pending."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class WorkspaceTask(Base, TimestampMixin):
    """A task on a workspace or project board."""
    
    __tablename__ = "workspace_tasks"
    
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
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
    
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # Free-form on purpose: boards may carry statuses outside TaskStatus
    status: Mapped[str] = mapped_column(
        String(50),
        default=TaskStatus.TODO.value,
        nullable=False,
    )
    priority: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    
    assigned_to: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(),
        ForeignKey("profiles.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(),
        ForeignKey("profiles.id", ondelete="SET NULL"),
        nullable=True,
    )
    
    __table_args__ = (
        Index("ix_workspace_tasks_scope", "workspace_id", "project_id"),
    )
    
    @property
    def subject_id(self) -> Optional[uuid.UUID]:
        """The user credited for this task: assignee first, then creator."""
        return self.assigned_to or self.created_by
    
    def __repr__(self) -> str:
        return f"<WorkspaceTask {self.id} {self.status}>"


class WorkspaceDocument(Base, TimestampMixin):
    """A document shared in a workspace or project."""
    
    __tablename__ = "workspace_documents"
    
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
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
    
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    doc_type: Mapped[str] = mapped_column(
        String(50),
        default="document",
        nullable=False,
    )
    status: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    
    created_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(),
        ForeignKey("profiles.id", ondelete="SET NULL"),
        nullable=True,
    )
    
    __table_args__ = (
        Index("ix_workspace_documents_scope", "workspace_id", "project_id"),
    )
    
    @property
    def subject_id(self) -> Optional[uuid.UUID]:
        """The user credited for this document."""
        return self.created_by
    
    def __repr__(self) -> str:
        return f"<WorkspaceDocument {self.id} {self.status}>"

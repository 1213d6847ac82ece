"""
Workspace models - collaboration containers, their members and projects.

These tables are owned by the workspace CRUD feature; the trust ledger only
reads them for scoping and access checks.
"""

import uuid
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import ForeignKey, Index, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.kernel.models.base import Base, TimestampMixin, generate_uuid

if TYPE_CHECKING:
    from src.kernel.models.user import User


class MemberStatus(str, Enum):
    """Membership lifecycle."""
    INVITED = "invited"
    ACTIVE = "active"
    REMOVED = "removed"


class MemberRole(str, Enum):
    """Role of a member inside a workspace."""
    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"
    VIEWER = "viewer"


class Workspace(Base, TimestampMixin):
    """A collaboration container; the outer scope for trust accounting."""
    
    __tablename__ = "workspaces"
    
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("profiles.id"),
        nullable=False,
        index=True,
    )
    
    members: Mapped[List["WorkspaceMember"]] = relationship(
        "WorkspaceMember",
        back_populates="workspace",
        cascade="all, delete-orphan",
    )
    projects: Mapped[List["WorkspaceProject"]] = relationship(
        "WorkspaceProject",
        back_populates="workspace",
        cascade="all, delete-orphan",
    )
    
    def __repr__(self) -> str:
        return f"<Workspace {self.id} {self.name}>"


class WorkspaceMember(Base, TimestampMixin):
    """Membership of a user in a workspace."""
    
    __tablename__ = "workspace_members"
    
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
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role: Mapped[str] = mapped_column(
        String(20),
        default=MemberRole.MEMBER.value,
        nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(20),
        default=MemberStatus.ACTIVE.value,
        nullable=False,
    )
    
    workspace: Mapped["Workspace"] = relationship(
        "Workspace",
        back_populates="members",
    )
    user: Mapped["User"] = relationship(
        "User",
        back_populates="memberships",
    )
    
    __table_args__ = (
        UniqueConstraint("workspace_id", "user_id", name="uq_workspace_members_user"),
        Index("ix_workspace_members_workspace_status", "workspace_id", "status"),
    )
    
    def __repr__(self) -> str:
        return f"<WorkspaceMember {self.user_id} in {self.workspace_id} ({self.status})>"


class WorkspaceProject(Base, TimestampMixin):
    """An optional sub-scope within a workspace."""
    
    __tablename__ = "workspace_projects"
    
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    workspace_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("workspaces.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    status: Mapped[str] = mapped_column(
        String(20),
        default="active",
        nullable=False,
    )
    created_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(),
        ForeignKey("profiles.id"),
        nullable=True,
    )
    
    workspace: Mapped["Workspace"] = relationship(
        "Workspace",
        back_populates="projects",
    )
    
    def __repr__(self) -> str:
        return f"<WorkspaceProject {self.id} {self.name}>"

"""
Kernel Data Models

SQLAlchemy models for profiles, workspaces, collaboration activity and the
trust ledger.
"""

from src.kernel.models.base import Base, TimestampMixin, CreatedAtMixin, generate_uuid
from src.kernel.models.user import User, UserRole, placeholder_name
from src.kernel.models.workspace import (
    Workspace,
    WorkspaceMember,
    WorkspaceProject,
    MemberRole,
    MemberStatus,
)
from src.kernel.models.activity import (
    WorkspaceTask,
    WorkspaceDocument,
    TaskStatus,
    DocumentStatus,
)
from src.kernel.models.trust_ledger import (
    TrustLedgerEntry,
    LedgerAction,
    SourceType,
    MANUAL_ACTIONS,
)
from src.kernel.models.event_log import EventLog, EventType

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "CreatedAtMixin",
    "generate_uuid",
    # Profiles
    "User",
    "UserRole",
    "placeholder_name",
    # Workspaces
    "Workspace",
    "WorkspaceMember",
    "WorkspaceProject",
    "MemberRole",
    "MemberStatus",
    # Activity
    "WorkspaceTask",
    "WorkspaceDocument",
    "TaskStatus",
    "DocumentStatus",
    # Trust ledger
    "TrustLedgerEntry",
    "LedgerAction",
    "SourceType",
    "MANUAL_ACTIONS",
    # Event Log
    "EventLog",
    "EventType",
]

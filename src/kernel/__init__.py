"""
Stable Kernel Layer

This layer contains the foundational components:
- Data models (profiles, workspaces, activity records, ledger entries)
- Immutable Event Log (ledger mutations logged in the same transaction)
- Identity Core (token verification, profile lookups)
- Permission Core (workspace membership)
- Ledger persistence (activity reads, entry storage)

Architectural Invariants:
- Ledger entries are only written by synthesis and manual recording
- Scope resets are logged and never touch other scopes
"""

from src.kernel.models import (
    User,
    UserRole,
    Workspace,
    WorkspaceMember,
    WorkspaceProject,
    WorkspaceTask,
    WorkspaceDocument,
    TrustLedgerEntry,
    LedgerAction,
    EventLog,
    EventType,
)

__all__ = [
    "User",
    "UserRole",
    "Workspace",
    "WorkspaceMember",
    "WorkspaceProject",
    "WorkspaceTask",
    "WorkspaceDocument",
    "TrustLedgerEntry",
    "LedgerAction",
    "EventLog",
    "EventType",
]

"""
Activity Collector - reads raw collaboration records for a ledger scope.

A scope is a (workspace, project) pair; ``project_id=None`` selects the
workspace-level records that belong to no project.
"""

import uuid
from typing import Dict, Iterable, List, Optional

from sqlalchemy import select, and_
from sqlalchemy.ext.asyncio import AsyncSession

from src.kernel.identity.identity_service import IdentityService
from src.kernel.models.activity import WorkspaceDocument, WorkspaceTask


def _scope_clause(model, workspace_id: uuid.UUID, project_id: Optional[uuid.UUID]):
    project_clause = model.project_id.is_(None) if project_id is None else model.project_id == project_id
    return and_(model.workspace_id == workspace_id, project_clause)


class ActivityCollector:
    """Read-only queries over tasks, documents and profiles."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.identity = IdentityService(session)

    async def tasks(
        self,
        workspace_id: uuid.UUID,
        project_id: Optional[uuid.UUID] = None,
    ) -> List[WorkspaceTask]:
        """Tasks of the scope, oldest first."""
        query = (
            select(WorkspaceTask)
            .where(_scope_clause(WorkspaceTask, workspace_id, project_id))
            .order_by(WorkspaceTask.created_at, WorkspaceTask.id)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def documents(
        self,
        workspace_id: uuid.UUID,
        project_id: Optional[uuid.UUID] = None,
    ) -> List[WorkspaceDocument]:
        """Documents of the scope, oldest first."""
        query = (
            select(WorkspaceDocument)
            .where(_scope_clause(WorkspaceDocument, workspace_id, project_id))
            .order_by(WorkspaceDocument.created_at, WorkspaceDocument.id)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def display_names(self, user_ids: Iterable[uuid.UUID]) -> Dict[uuid.UUID, str]:
        """Display name for every id; unknown profiles get a placeholder."""
        return await self.identity.display_names(user_ids)

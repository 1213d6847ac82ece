"""
Membership service - workspace access control for ledger reads and writes.
"""

import uuid
from typing import List, Optional

from sqlalchemy import select, and_
from sqlalchemy.ext.asyncio import AsyncSession

from src.kernel.models.workspace import MemberStatus, WorkspaceMember, WorkspaceProject


class MembershipService:
    """
    Answers "may this user see this workspace's ledger?".

    Only members whose status is ``active`` have access; invited and
    removed members are treated like strangers. There is no role bypass.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_membership(
        self,
        user_id: uuid.UUID,
        workspace_id: uuid.UUID,
    ) -> Optional[WorkspaceMember]:
        """Active membership row, if any."""
        query = select(WorkspaceMember).where(
            and_(
                WorkspaceMember.workspace_id == workspace_id,
                WorkspaceMember.user_id == user_id,
                WorkspaceMember.status == MemberStatus.ACTIVE.value,
            )
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def is_active_member(
        self,
        user_id: uuid.UUID,
        workspace_id: uuid.UUID,
    ) -> bool:
        return await self.get_membership(user_id, workspace_id) is not None

    async def get_project(self, project_id: uuid.UUID) -> Optional[WorkspaceProject]:
        return await self.session.get(WorkspaceProject, project_id)

    async def active_member_ids(self, workspace_id: uuid.UUID) -> List[uuid.UUID]:
        """User ids of all active members of a workspace."""
        query = select(WorkspaceMember.user_id).where(
            and_(
                WorkspaceMember.workspace_id == workspace_id,
                WorkspaceMember.status == MemberStatus.ACTIVE.value,
            )
        )
        result = await self.session.execute(query)
        return [row[0] for row in result.all()]

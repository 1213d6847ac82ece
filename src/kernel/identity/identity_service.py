"""
Identity service - profile lookups for authentication and display names.
"""

import uuid
from typing import Dict, Iterable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.kernel.models.user import User, placeholder_name


class IdentityService:
    """
    Read-only access to user profiles.

    Profiles are created by the auth provider; this service never writes them.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_user_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        """Get a profile by ID."""
        return await self.session.get(User, user_id)

    async def display_names(self, user_ids: Iterable[uuid.UUID]) -> Dict[uuid.UUID, str]:
        """
        Resolve display names for a set of users.

        Every requested id is present in the result: profile name, else
        email, else a placeholder built from the id.
        """
        ids = set(user_ids)
        if not ids:
            return {}

        query = select(User.id, User.name, User.email).where(User.id.in_(ids))
        result = await self.session.execute(query)
        names: Dict[uuid.UUID, str] = {
            row.id: row.name or row.email or placeholder_name(row.id)
            for row in result.all()
        }
        for user_id in ids:
            names.setdefault(user_id, placeholder_name(user_id))
        return names

"""
User profile model.

Accounts are created by the auth provider; this service only reads profiles
to verify bearer tokens and to resolve display names for ledger entries.
"""

import uuid
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.kernel.models.base import Base, TimestampMixin, generate_uuid

if TYPE_CHECKING:
    from src.kernel.models.workspace import WorkspaceMember


class UserRole(str, Enum):
    """Profile roles on the platform."""
    FOUNDER = "founder"
    MENTOR = "mentor"
    INVESTOR = "investor"
    ADMIN = "admin"


class User(Base, TimestampMixin):
    """User profile."""
    
    __tablename__ = "profiles"
    
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
    )
    name: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    role: Mapped[str] = mapped_column(
        String(50),
        default=UserRole.FOUNDER.value,
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )
    
    memberships: Mapped[List["WorkspaceMember"]] = relationship(
        "WorkspaceMember",
        back_populates="user",
        cascade="all, delete-orphan",
    )
    
    @property
    def display_name(self) -> str:
        """Name shown in activity feeds."""
        return self.name or self.email or placeholder_name(self.id)
    
    def __repr__(self) -> str:
        return f"<User {self.email}>"


def placeholder_name(user_id: uuid.UUID) -> str:
    """Label for a user whose profile cannot be resolved."""
    return f"User {str(user_id)[:8]}"

"""
FastAPI dependencies for authentication, authorization, database sessions
and the text collaborator.
"""

import uuid
from typing import Annotated, AsyncGenerator, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from src.ai.narrative_annotator import NarrativeAnnotator, TextCollaborator
from src.ai.text_generator import TextGenerator
from src.config import get_settings
from src.database import async_session_maker
from src.kernel.identity.identity_service import IdentityService
from src.kernel.identity.jwt import verify_access_token
from src.kernel.models.user import User
from src.kernel.models.workspace import WorkspaceProject
from src.kernel.permissions.membership_service import MembershipService


# Security scheme
security = HTTPBearer(auto_error=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency that yields database sessions; commits on success, rolls back on error."""
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


DbSession = Annotated[AsyncSession, Depends(get_db)]


async def get_current_user(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    db: DbSession,
) -> User:
    """Get current authenticated user or raise 401."""
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = verify_access_token(credentials.credentials)
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    identity_service = IdentityService(db)
    user = await identity_service.get_user_by_id(payload.sub)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is disabled",
        )

    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


def get_client_ip(request: Request) -> Optional[str]:
    """Extract client IP from request."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def get_text_generator() -> TextCollaborator:
    """Text collaborator for narratives; overridden in tests."""
    return TextGenerator()


def get_narrative_annotator(
    generator: Annotated[TextCollaborator, Depends(get_text_generator)],
) -> NarrativeAnnotator:
    return NarrativeAnnotator(generator, concurrency=get_settings().annotation_concurrency)


Annotator = Annotated[NarrativeAnnotator, Depends(get_narrative_annotator)]


async def require_workspace_member(
    workspace_id: uuid.UUID,
    user: CurrentUser,
    db: DbSession,
) -> uuid.UUID:
    """Resolve a workspace path parameter, requiring active membership."""
    if not await MembershipService(db).is_active_member(user.id, workspace_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied",
        )
    return workspace_id


async def require_project_member(
    project_id: uuid.UUID,
    user: CurrentUser,
    db: DbSession,
) -> WorkspaceProject:
    """Resolve a project path parameter (404 if unknown), requiring membership of its workspace."""
    membership = MembershipService(db)
    project = await membership.get_project(project_id)
    if project is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Project not found",
        )
    if not await membership.is_active_member(user.id, project.workspace_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied",
        )
    return project


MemberWorkspaceId = Annotated[uuid.UUID, Depends(require_workspace_member)]
MemberProject = Annotated[WorkspaceProject, Depends(require_project_member)]

"""
Trust ledger endpoints.

Both reads synthesize missing entries on the way (the only write a read
performs) and call the text collaborator for feed text, falling back to
deterministic text when it is unavailable.
"""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request, status

from src.api.deps import (
    Annotator,
    CurrentUser,
    DbSession,
    MemberProject,
    MemberWorkspaceId,
    get_client_ip,
)
from src.config import get_settings
from src.engines.trust.ledger_service import TrustLedgerService
from src.kernel.permissions.membership_service import MembershipService
from src.schemas.common import ErrorResponse
from src.schemas.trust_ledger import (
    LedgerEntryCreate,
    LedgerEntryResponse,
    ProjectTrustLedgerResponse,
    WorkspaceTrustLedgerResponse,
)

router = APIRouter()

_ACCESS_ERRORS = {
    401: {"model": ErrorResponse, "description": "Missing or invalid bearer token"},
    403: {"model": ErrorResponse, "description": "Not an active member of the workspace"},
}


@router.get(
    "/workspaces/{workspace_id}/trust-ledger",
    response_model=WorkspaceTrustLedgerResponse,
    responses=_ACCESS_ERRORS,
)
async def get_workspace_trust_ledger(
    workspace_id: MemberWorkspaceId,
    user: CurrentUser,
    db: DbSession,
    annotator: Annotator,
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1, le=100),
):
    """
    Workspace trust ledger.

    Returns one page of AI-titled activities, bounded trust scores for every
    user with entries, insights and the category breakdown.
    """
    service = TrustLedgerService(db, annotator)
    return await service.workspace_ledger(
        workspace_id,
        page=page,
        page_size=page_size or get_settings().trust_ledger_default_page_size,
        actor_id=user.id,
    )


@router.get(
    "/workspaces/projects/{project_id}/trust-ledger",
    response_model=ProjectTrustLedgerResponse,
    responses={**_ACCESS_ERRORS, 404: {"model": ErrorResponse, "description": "Unknown project"}},
)
async def get_project_trust_ledger(
    project: MemberProject,
    user: CurrentUser,
    db: DbSession,
    annotator: Annotator,
    force: bool = Query(False, description="Delete and resynthesize this project's entries"),
):
    """
    Project trust ledger.

    Returns the most recent activities with AI descriptions and unbounded
    trust scores. ``force=true`` rebuilds the project's entries from its
    current tasks and documents.
    """
    service = TrustLedgerService(db, annotator)
    return await service.project_ledger(project, force=force, actor_id=user.id)


@router.post(
    "/workspaces/{workspace_id}/trust-ledger/entries",
    response_model=LedgerEntryResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**_ACCESS_ERRORS, 404: {"model": ErrorResponse, "description": "Project not in this workspace"}},
)
async def record_trust_ledger_entry(
    request: Request,
    data: LedgerEntryCreate,
    workspace_id: MemberWorkspaceId,
    user: CurrentUser,
    db: DbSession,
    annotator: Annotator,
):
    """Record a manual ledger entry crediting the current user."""
    project = None
    if data.project_id is not None:
        project = await MembershipService(db).get_project(data.project_id)
        if project is None or project.workspace_id != workspace_id:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Project not found in this workspace",
            )

    service = TrustLedgerService(db, annotator)
    entry = await service.record_entry(
        workspace_id,
        user.id,
        data,
        project=project,
        ip_address=get_client_ip(request),
    )
    return LedgerEntryResponse.from_entry(entry)

"""
Pydantic schemas for API request/response validation.
"""

from src.schemas.trust_ledger import (
    ActivityItem,
    TrustScoreResponse,
    PaginationInfo,
    WorkspaceTrustLedgerResponse,
    ProjectInfo,
    ProjectTrustLedgerResponse,
    LedgerEntryCreate,
    LedgerEntryResponse,
)
from src.schemas.common import (
    ErrorResponse,
    HealthResponse,
)

__all__ = [
    # Trust ledger
    "ActivityItem",
    "TrustScoreResponse",
    "PaginationInfo",
    "WorkspaceTrustLedgerResponse",
    "ProjectInfo",
    "ProjectTrustLedgerResponse",
    "LedgerEntryCreate",
    "LedgerEntryResponse",
    # Common
    "ErrorResponse",
    "HealthResponse",
]

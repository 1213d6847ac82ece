"""
API v1 routes.
"""

from fastapi import APIRouter

from src.api.v1 import trust_ledger

router = APIRouter()

router.include_router(trust_ledger.router, tags=["Trust Ledger"])

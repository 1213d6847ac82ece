"""
Permission Core - workspace membership checks.
"""

from src.kernel.permissions.membership_service import MembershipService

__all__ = [
    "MembershipService",
]

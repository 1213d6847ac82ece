"""
Ledger persistence - raw activity reads and trust ledger entry storage.
"""

from src.kernel.ledger.activity_collector import ActivityCollector
from src.kernel.ledger.ledger_store import (
    LedgerStore,
    LedgerPersistenceError,
    LedgerConflictError,
)

__all__ = [
    "ActivityCollector",
    "LedgerStore",
    "LedgerPersistenceError",
    "LedgerConflictError",
]

"""
Trust Engine - Ledger synthesis, score aggregation and category breakdown.
"""

from src.engines.trust.policy import SCORE_POLICY, ScorePolicy, EntryRule, task_rule, document_rule
from src.engines.trust.metadata import (
    TaskMetadata,
    DocumentMetadata,
    ProjectMetadata,
    LedgerMetadata,
    parse_metadata,
    dump_metadata,
)
from src.engines.trust.synthesizer import EntrySynthesizer, LedgerEntryDraft
from src.engines.trust.aggregator import ScoreAggregator, TrustScore, Trend, scoring_cutoffs
from src.engines.trust.categories import TrustCategory, build_trust_categories
from src.engines.trust.insights import (
    Insight,
    LedgerStats,
    summarize_entries,
    fallback_insights,
    parse_ai_insights,
)

__all__ = [
    "SCORE_POLICY",
    "ScorePolicy",
    "EntryRule",
    "task_rule",
    "document_rule",
    "TaskMetadata",
    "DocumentMetadata",
    "ProjectMetadata",
    "LedgerMetadata",
    "parse_metadata",
    "dump_metadata",
    "EntrySynthesizer",
    "LedgerEntryDraft",
    "ScoreAggregator",
    "TrustScore",
    "Trend",
    "scoring_cutoffs",
    "TrustCategory",
    "build_trust_categories",
    "Insight",
    "LedgerStats",
    "summarize_entries",
    "fallback_insights",
    "parse_ai_insights",
]

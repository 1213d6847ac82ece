"""
Trust category breakdown - deterministic, no AI involved.

Four fixed categories:
- Execution: share of task entries that are completions (x100)
- Collaboration: average entries per distinct user (x10, capped at 100)
- Transparency: document entries (x20, capped at 100)
- Trust: base reputation + all points, clamped to the score range
"""

import math
from typing import List, Sequence

from pydantic import BaseModel

from src.engines.trust.aggregator import Trend
from src.engines.trust.insights import LedgerStats, summarize_entries
from src.engines.trust.policy import SCORE_POLICY, ScorePolicy
from src.kernel.models.trust_ledger import TrustLedgerEntry


class TrustCategory(BaseModel):
    """One row of the category breakdown."""

    id: str
    name: str
    score: int
    max_score: int = 100
    description: str
    activities: int
    trend: Trend


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def build_trust_categories(
    entries: Sequence[TrustLedgerEntry],
    policy: ScorePolicy = SCORE_POLICY,
) -> List[TrustCategory]:
    """Compute the four category scores for a set of entries."""
    stats: LedgerStats = summarize_entries(entries)

    task_count = stats.task_count
    completed = stats.completed_task_count
    execution_score = _round_half_up(completed / task_count * 100) if task_count else 0

    user_count = len(stats.per_user)
    avg_per_user = stats.total / user_count if user_count else 0.0
    collaboration_score = min(100, _round_half_up(avg_per_user * 10))

    transparency_score = min(100, stats.document_count * 20)

    trust_score = policy.bounded(stats.total_points)
    if stats.total_points > 0:
        trust_trend = Trend.UP
    elif stats.total_points < 0:
        trust_trend = Trend.DOWN
    else:
        trust_trend = Trend.STABLE

    return [
        TrustCategory(
            id="execution",
            name="Execution",
            score=execution_score,
            max_score=100,
            description="Task completion, deadline adherence, and delivery quality",
            activities=task_count,
            trend=Trend.UP if completed > task_count / 2 else Trend.STABLE,
        ),
        TrustCategory(
            id="collaboration",
            name="Collaboration",
            score=collaboration_score,
            max_score=100,
            description="Team coordination, communication, and contribution balance",
            activities=user_count,
            trend=Trend.UP if user_count > 1 else Trend.STABLE,
        ),
        TrustCategory(
            id="transparency",
            name="Transparency",
            score=transparency_score,
            max_score=100,
            description="Document sharing, updates, and information accessibility",
            activities=stats.document_count,
            trend=Trend.UP if stats.document_count > 0 else Trend.STABLE,
        ),
        TrustCategory(
            id="trust",
            name="Trust Score",
            score=trust_score,
            max_score=policy.ceiling,
            description="Overall trustworthiness based on all activities",
            activities=stats.total,
            trend=trust_trend,
        ),
    ]

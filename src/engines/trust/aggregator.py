"""
Score Aggregator - folds ledger entries into per-user trust scores.

Two cutoffs are compared: end of today and end of yesterday (local time).
The cumulative point total through each cutoff gives the current and the
previous score; their difference gives the trend. Entries dated after today
do not count yet.

Variants:
- Unbounded: score is the raw point total (project views)
- Bounded: score is base reputation + points, clamped to the policy range
  (workspace views)
"""

import uuid
from collections import defaultdict
from datetime import datetime, time, timedelta
from enum import Enum
from typing import Dict, Iterable, Optional, Protocol, Tuple

from pydantic import BaseModel

from src.engines.trust.policy import SCORE_POLICY, ScorePolicy

END_OF_DAY = time(23, 59, 59, 999000)


class Trend(str, Enum):
    """Direction of a score relative to the previous day."""
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class ScorableEntry(Protocol):
    user_id: uuid.UUID
    trust_points: int

    @property
    def effective_date(self) -> datetime: ...


class TrustScore(BaseModel):
    """Derived reputation of one user; never persisted."""

    user_id: uuid.UUID
    score: int
    previous_score: int
    trend: Trend


def scoring_cutoffs(now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """
    Return (end_of_today, end_of_yesterday) as timezone-aware datetimes.

    ``now`` defaults to the current local time. A naive ``now`` is taken as
    local time.
    """
    today = (now or datetime.now()).astimezone().date()
    # Offsets resolved per date; both cutoffs stay at 23:59:59.999 across DST
    end_of_today = datetime.combine(today, END_OF_DAY).astimezone()
    end_of_yesterday = datetime.combine(today - timedelta(days=1), END_OF_DAY).astimezone()
    return end_of_today, end_of_yesterday


def trend_for(score: int, previous_score: int) -> Trend:
    if score > previous_score:
        return Trend.UP
    if score < previous_score:
        return Trend.DOWN
    return Trend.STABLE


class ScoreAggregator:
    """
    Computes trust scores from ledger entries.

    Users without entries are absent from every result map.
    """

    @classmethod
    def totals(
        cls,
        entries: Iterable[ScorableEntry],
        now: Optional[datetime] = None,
    ) -> Dict[uuid.UUID, Tuple[int, int]]:
        """Per-user (current_total, previous_total)."""
        end_of_today, end_of_yesterday = scoring_cutoffs(now)
        totals: Dict[uuid.UUID, list] = defaultdict(lambda: [0, 0])

        for entry in entries:
            bucket = totals[entry.user_id]
            ts = entry.effective_date
            points = entry.trust_points or 0
            if ts <= end_of_today:
                bucket[0] += points
            if ts <= end_of_yesterday:
                bucket[1] += points

        return {user_id: (current, previous) for user_id, (current, previous) in totals.items()}

    @classmethod
    def unbounded(
        cls,
        entries: Iterable[ScorableEntry],
        now: Optional[datetime] = None,
    ) -> Dict[uuid.UUID, TrustScore]:
        """Raw point totals as scores."""
        return {
            user_id: TrustScore(
                user_id=user_id,
                score=current,
                previous_score=previous,
                trend=trend_for(current, previous),
            )
            for user_id, (current, previous) in cls.totals(entries, now).items()
        }

    @classmethod
    def bounded(
        cls,
        entries: Iterable[ScorableEntry],
        now: Optional[datetime] = None,
        policy: ScorePolicy = SCORE_POLICY,
    ) -> Dict[uuid.UUID, TrustScore]:
        """Base reputation plus points, clamped to the policy range."""
        scores: Dict[uuid.UUID, TrustScore] = {}
        for user_id, (current, previous) in cls.totals(entries, now).items():
            score = policy.bounded(current)
            previous_score = policy.bounded(previous)
            scores[user_id] = TrustScore(
                user_id=user_id,
                score=score,
                previous_score=previous_score,
                trend=trend_for(score, previous_score),
            )
        return scores

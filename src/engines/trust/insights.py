"""
Ledger statistics and rule-based insights.

The rule-based generator is the backstop for AI insights: each rule appends
one insight only when its triggering condition holds.
"""

import json
import re
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Mapping, Optional, Sequence

from pydantic import BaseModel, ValidationError, field_validator

from src.engines.trust.metadata import DocumentMetadata, TaskMetadata, parse_metadata
from src.kernel.models.activity import TaskStatus
from src.kernel.models.trust_ledger import TrustLedgerEntry
from src.kernel.models.user import placeholder_name

MIN_AI_INSIGHTS = 3
MAX_INSIGHTS = 5


class InsightType(str, Enum):
    POSITIVE = "positive"
    WARNING = "warning"
    SUGGESTION = "suggestion"


class InsightCategory(str, Enum):
    EXECUTION = "Execution"
    COLLABORATION = "Collaboration"
    TRANSPARENCY = "Transparency"
    GENERAL = "General"


class InsightPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Insight(BaseModel):
    """A portfolio-level observation about a ledger."""

    id: str
    type: InsightType
    title: str
    description: str
    category: InsightCategory
    priority: InsightPriority

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value):
        return str(value)

    @field_validator("title", "description")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value.strip()


@dataclass
class UserStats:
    tasks: int = 0
    documents: int = 0
    points: int = 0


@dataclass
class LedgerStats:
    """Counts derived from a set of ledger entries."""

    total: int = 0
    task_count: int = 0
    completed_task_count: int = 0
    document_count: int = 0
    positive_count: int = 0
    negative_count: int = 0
    total_points: int = 0
    per_user: Dict[uuid.UUID, UserStats] = field(default_factory=dict)

    def top_contributor(self) -> Optional[uuid.UUID]:
        """User with the most points (first seen wins ties), if anyone earned points."""
        best_id: Optional[uuid.UUID] = None
        best_points = 0
        for user_id, stats in self.per_user.items():
            if stats.points > best_points:
                best_id, best_points = user_id, stats.points
        return best_id


def summarize_entries(entries: Sequence[TrustLedgerEntry]) -> LedgerStats:
    """Fold entries into counts by source type, sign and user."""
    stats = LedgerStats(total=len(entries))
    for entry in entries:
        points = entry.trust_points or 0
        stats.total_points += points
        if points > 0:
            stats.positive_count += 1
        elif points < 0:
            stats.negative_count += 1

        user = stats.per_user.setdefault(entry.user_id, UserStats())
        user.points += points

        match parse_metadata(entry.entry_metadata):
            case TaskMetadata(status=status):
                stats.task_count += 1
                user.tasks += 1
                if status == TaskStatus.COMPLETED.value:
                    stats.completed_task_count += 1
            case DocumentMetadata():
                stats.document_count += 1
                user.documents += 1
            case _:
                pass
    return stats


def no_activity_insights() -> List[Insight]:
    return [
        Insight(
            id="1",
            type=InsightType.SUGGESTION,
            title="No Activities Yet",
            description="Start completing tasks and uploading documents to build your trust ledger.",
            category=InsightCategory.GENERAL,
            priority=InsightPriority.MEDIUM,
        )
    ]


def fallback_insights(
    stats: LedgerStats,
    names: Mapping[uuid.UUID, str],
) -> List[Insight]:
    """
    Rule-based insights.

    Rules, each independent:
    - Active Team: any activity recorded
    - Balance Activities: any task or document activity
    - Negative Activities Detected: at least one negative entry
    - Increase Documentation: tasks outnumber documents more than 2:1
    - Top Contributor: somebody earned points
    """
    if stats.total == 0:
        return no_activity_insights()

    insights: List[Insight] = []

    insights.append(Insight(
        id="1",
        type=InsightType.POSITIVE,
        title="Active Team",
        description=(
            f"Team has completed **{stats.total} activities** with "
            f"{stats.positive_count} positive contributions."
        ),
        category=InsightCategory.COLLABORATION,
        priority=InsightPriority.MEDIUM,
    ))

    if stats.task_count or stats.document_count:
        insights.append(Insight(
            id="2",
            type=InsightType.SUGGESTION,
            title="Balance Activities",
            description=(
                f"Consider balancing task completion ({stats.task_count}) with "
                f"document sharing ({stats.document_count}) for better transparency."
            ),
            category=InsightCategory.TRANSPARENCY,
            priority=InsightPriority.LOW,
        ))

    if stats.negative_count > 0:
        insights.append(Insight(
            id="3",
            type=InsightType.WARNING,
            title="Negative Activities Detected",
            description=(
                f"**{stats.negative_count} activities** resulted in negative trust points. "
                "Review these items to improve team performance."
            ),
            category=InsightCategory.EXECUTION,
            priority=InsightPriority.HIGH,
        ))

    if stats.task_count > stats.document_count * 2:
        insights.append(Insight(
            id="4",
            type=InsightType.SUGGESTION,
            title="Increase Documentation",
            description=(
                f"Team is **task-heavy** ({stats.task_count} tasks vs "
                f"{stats.document_count} documents). Consider sharing more documentation "
                "for better transparency."
            ),
            category=InsightCategory.TRANSPARENCY,
            priority=InsightPriority.MEDIUM,
        ))

    top = stats.top_contributor()
    if top is not None:
        top_stats = stats.per_user[top]
        insights.append(Insight(
            id="5",
            type=InsightType.POSITIVE,
            title="Top Contributor",
            description=(
                f"**{names.get(top) or placeholder_name(top)}** leads with {top_stats.points} "
                f"trust points from {top_stats.tasks} tasks and {top_stats.documents} documents."
            ),
            category=InsightCategory.COLLABORATION,
            priority=InsightPriority.LOW,
        ))

    return insights[:MAX_INSIGHTS]


_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$")


def parse_ai_insights(raw: Optional[str]) -> Optional[List[Insight]]:
    """
    Parse the text collaborator's insight JSON.

    Returns None unless the payload is a JSON list holding at least
    MIN_AI_INSIGHTS well-formed items. Malformed items are dropped; at most
    MAX_INSIGHTS are kept.
    """
    if not raw:
        return None
    cleaned = _FENCE_RE.sub("", raw.strip()).strip()
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError:
        return None
    if not isinstance(data, list):
        return None

    insights: List[Insight] = []
    for item in data:
        if not isinstance(item, dict):
            continue
        try:
            insights.append(Insight.model_validate(item))
        except ValidationError:
            continue

    if len(insights) < MIN_AI_INSIGHTS:
        return None
    return insights[:MAX_INSIGHTS]

"""
Narrative Annotator - AI-written titles, descriptions and insights for the
trust ledger feed.

Every call to the text collaborator is wrapped: a failure (no key, network
error, empty or unusable output) degrades to the deterministic text from
``src.engines.trust.narrative`` and is logged, never raised. Per-entry
calls fan out concurrently behind a semaphore and are joined by index.
"""

import asyncio
import uuid
from typing import Awaitable, Callable, List, Mapping, Optional, Protocol, Sequence

from src.ai.text_generator import GenerationRequest
from src.engines.trust.insights import (
    Insight,
    fallback_insights,
    no_activity_insights,
    parse_ai_insights,
    summarize_entries,
)
from src.engines.trust.metadata import DocumentMetadata, TaskMetadata, parse_metadata
from src.engines.trust.narrative import activity_type, fallback_title
from src.kernel.models.trust_ledger import TrustLedgerEntry
from src.kernel.models.user import placeholder_name
from src.logging_config import get_logger

logger = get_logger(__name__)

TITLE_MAX_TOKENS = 50
DESCRIPTION_MAX_TOKENS = 100
INSIGHTS_MAX_TOKENS = 800
TEMPERATURE = 0.7
RECENT_ACTIVITY_WINDOW = 10


class TextCollaborator(Protocol):
    async def generate(self, request: GenerationRequest) -> str: ...


def _strip_line(line: str) -> str:
    return line.strip().strip('"').strip("'").strip()


def _clean_line(text: str) -> str:
    """First non-empty line without surrounding quotes."""
    for line in text.splitlines():
        line = _strip_line(line)
        if line:
            return line
    return ""


def _clean_paragraph(text: str) -> str:
    """All non-empty lines joined into one paragraph."""
    return " ".join(line for line in map(_strip_line, text.splitlines()) if line)


def title_prompt(entry: TrustLedgerEntry, actor: str) -> str:
    task_title = document_title = document_type = status = "N/A"
    match parse_metadata(entry.entry_metadata):
        case TaskMetadata(title=title, status=task_status):
            task_title, status = title, task_status
        case DocumentMetadata(title=title, doc_type=doc_type, status=doc_status):
            document_title, document_type, status = title, doc_type, doc_status or "pending"
        case _:
            pass

    return (
        "Generate a concise, natural title for a trust ledger activity.\n\n"
        "Activity Details:\n"
        f"- Actor: {actor}\n"
        f"- Action: {entry.action}\n"
        f"- Type: {activity_type(entry)}\n"
        f"- Description: {entry.description or 'No description'}\n"
        f"- Task Title: {task_title}\n"
        f"- Document Title: {document_title}\n"
        f"- Document Type: {document_type}\n"
        f"- Status: {status}\n\n"
        f'Generate a title in this format: "{actor} [action] - [description]"\n\n'
        "Examples:\n"
        f'- "{actor} completed task - Design homepage"\n'
        f'- "{actor} uploaded document - Series A pitch deck"\n'
        f'- "{actor} started task - User authentication system"\n\n'
        "Response (just the title, no quotes or formatting):"
    )


def description_prompt(entry: TrustLedgerEntry, actor: str, project_name: str) -> str:
    match parse_metadata(entry.entry_metadata):
        case TaskMetadata(title=title, status=status, priority=priority):
            details = (
                "Task Details:\n"
                f"- Title: {title}\n"
                f"- Status: {status}\n"
                f"- Priority: {priority or 'N/A'}\n"
            )
            subject = "a task activity"
            purpose = "Explains what was accomplished or attempted"
        case DocumentMetadata(title=title, doc_type=doc_type, status=status):
            details = (
                "Document Details:\n"
                f"- Title: {title}\n"
                f"- Type: {doc_type}\n"
                f"- Status: {status or 'pending'}\n"
            )
            subject = "a document upload activity"
            purpose = "Explains the document's purpose and value"
        case _:
            details = (
                "Activity Details:\n"
                f"- Action: {entry.action}\n"
                f"- Summary: {entry.description or 'No description provided'}\n"
            )
            subject = "a trust ledger activity"
            purpose = "Explains what happened"

    return (
        f"Generate a concise, professional description for {subject} in a startup project.\n\n"
        f"{details}"
        f"- Actor: {actor}\n"
        f"- Project: {project_name}\n\n"
        "Generate a 1-2 sentence description that:\n"
        f"1. {purpose}\n"
        "2. Highlights the significance to the project\n"
        "3. Uses professional, investor-friendly language\n"
        "4. Is specific and actionable\n\n"
        "Response (just the description, no quotes or formatting):"
    )


def insights_prompt(
    entries: Sequence[TrustLedgerEntry],
    names: Mapping[uuid.UUID, str],
) -> str:
    stats = summarize_entries(entries)

    def name_of(user_id: uuid.UUID) -> str:
        return names.get(user_id) or placeholder_name(user_id)

    user_lines = "\n".join(
        f"- {name_of(user_id)}: {user.tasks} tasks, {user.documents} docs, {user.points} points"
        for user_id, user in stats.per_user.items()
    )
    recent_lines = "\n".join(
        f"- {name_of(entry.user_id)}: {entry.action} ({entry.trust_points or 0} points)"
        for entry in entries[:RECENT_ACTIVITY_WINDOW]
    )

    return (
        "Analyze this trust ledger data and generate EXACTLY 5 actionable insights. "
        "You must return exactly 5 insights, no more, no less.\n\n"
        "Trust Ledger Data:\n"
        f"- Total Activities: {stats.total}\n"
        f"- Task Activities: {stats.task_count}\n"
        f"- Document Activities: {stats.document_count}\n"
        f"- Positive Trust Points: {stats.positive_count}\n"
        f"- Negative Trust Points: {stats.negative_count}\n\n"
        f"User Statistics:\n{user_lines}\n\n"
        f"Recent Activities (last {RECENT_ACTIVITY_WINDOW}):\n{recent_lines}\n\n"
        "Return a JSON array of 5 objects with keys: "
        '"id" (string), "type" ("positive" | "warning" | "suggestion"), "title", '
        '"description" (may use **bold** and *italic*), '
        '"category" ("Execution" | "Collaboration" | "Transparency" | "General"), '
        '"priority" ("low" | "medium" | "high").\n\n'
        "Focus on:\n"
        "1. Performance patterns and trends\n"
        "2. Collaboration balance\n"
        "3. Areas for improvement\n"
        "4. Positive achievements\n"
        "5. Actionable recommendations\n\n"
        "IMPORTANT:\n"
        "- Return exactly 5 insights\n"
        "- Use different types and categories\n"
        "- Return ONLY valid JSON, no markdown code blocks, no explanations, no extra text\n"
        "- Start with [ and end with ]\n\n"
        "Response (JSON only, no markdown):"
    )


class NarrativeAnnotator:
    """
    Produces human-readable feed text with a guaranteed fallback.

    Usage:
        annotator = NarrativeAnnotator(TextGenerator())
        titles = await annotator.titles(entries, names)
    """

    def __init__(self, generator: TextCollaborator, concurrency: int = 5):
        self.generator = generator
        self.concurrency = max(1, concurrency)

    async def _generate_or_fallback(
        self,
        request: GenerationRequest,
        fallback: str,
        kind: str,
        entry_id: Optional[uuid.UUID] = None,
        clean: Callable[[str], str] = _clean_line,
    ) -> str:
        try:
            text = await self.generator.generate(request)
        except Exception as exc:
            logger.warning(
                "Narrative generation failed, using fallback",
                extra={"kind": kind, "entry_id": str(entry_id) if entry_id else None, "error": str(exc)},
            )
            return fallback

        cleaned = clean(text)
        if not cleaned:
            logger.warning(
                "Narrative generation returned unusable text, using fallback",
                extra={"kind": kind, "entry_id": str(entry_id) if entry_id else None},
            )
            return fallback
        return cleaned

    async def _fan_out(self, calls: Sequence[Callable[[], Awaitable[str]]]) -> List[str]:
        """Run calls with bounded concurrency; results keep input order."""
        semaphore = asyncio.Semaphore(self.concurrency)

        async def run(index: int) -> str:
            async with semaphore:
                return await calls[index]()

        return list(await asyncio.gather(*(run(i) for i in range(len(calls)))))

    async def titles(
        self,
        entries: Sequence[TrustLedgerEntry],
        names: Mapping[uuid.UUID, str],
    ) -> List[str]:
        """One title per entry, in input order."""

        def call(entry: TrustLedgerEntry) -> Callable[[], Awaitable[str]]:
            actor = names.get(entry.user_id) or placeholder_name(entry.user_id)
            request = GenerationRequest(
                prompt=title_prompt(entry, actor),
                max_tokens=TITLE_MAX_TOKENS,
                temperature=TEMPERATURE,
            )
            fallback = fallback_title(entry, actor)
            return lambda: self._generate_or_fallback(request, fallback, "title", entry.id)

        return await self._fan_out([call(entry) for entry in entries])

    async def descriptions(
        self,
        entries: Sequence[TrustLedgerEntry],
        names: Mapping[uuid.UUID, str],
        project_name: str,
    ) -> List[str]:
        """One project-context description per entry, in input order."""

        def call(entry: TrustLedgerEntry) -> Callable[[], Awaitable[str]]:
            actor = names.get(entry.user_id) or placeholder_name(entry.user_id)
            request = GenerationRequest(
                prompt=description_prompt(entry, actor, project_name),
                max_tokens=DESCRIPTION_MAX_TOKENS,
                temperature=TEMPERATURE,
            )
            fallback = fallback_title(entry, actor)
            return lambda: self._generate_or_fallback(
                request, fallback, "description", entry.id, clean=_clean_paragraph
            )

        return await self._fan_out([call(entry) for entry in entries])

    async def insights(
        self,
        entries: Sequence[TrustLedgerEntry],
        names: Mapping[uuid.UUID, str],
    ) -> List[Insight]:
        """
        Portfolio-level insights for a set of entries.

        Returns 3-5 AI insights when the collaborator's answer validates,
        otherwise the rule-based set. An empty ledger short-circuits to a
        single suggestion without contacting the collaborator.
        """
        if not entries:
            return no_activity_insights()

        request = GenerationRequest(
            prompt=insights_prompt(entries, names),
            max_tokens=INSIGHTS_MAX_TOKENS,
            temperature=TEMPERATURE,
        )
        raw: Optional[str] = None
        try:
            raw = await self.generator.generate(request)
        except Exception as exc:
            logger.warning(
                "Insight generation failed, using rule-based insights",
                extra={"error": str(exc), "entries": len(entries)},
            )

        if raw is not None:
            parsed = parse_ai_insights(raw)
            if parsed is not None:
                return parsed
            logger.warning(
                "Insight response did not validate, using rule-based insights",
                extra={"preview": raw[:200]},
            )

        return fallback_insights(summarize_entries(entries), names)

"""
AI Isolation Zone - text generation for ledger narratives.

All AI interactions are:
- Routed through TextGenerator (one narrow request/response contract)
- Logged on failure
- Backed by deterministic fallback text before surfacing to users
"""

from src.ai.text_generator import TextGenerator, GenerationRequest, TextGenerationError
from src.ai.narrative_annotator import NarrativeAnnotator

__all__ = [
    "TextGenerator",
    "GenerationRequest",
    "TextGenerationError",
    "NarrativeAnnotator",
]

"""Quick script to verify the OpenAI key used for ledger narratives works."""
import asyncio
import sys
from pathlib import Path

# Ensure project root is on path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from src.ai.text_generator import GenerationRequest, TextGenerationError, TextGenerator


async def main() -> int:
    generator = TextGenerator()
    if not generator.is_configured:
        print("FAIL: OPENAI_API_KEY is missing or still has the placeholder value.")
        print("Ledger reads will use fallback titles, descriptions and insights.")
        return 1
    print(f"OPENAI_API_KEY is set (length: {len(generator.api_key)} chars), model: {generator.model}")

    try:
        text = await generator.generate(GenerationRequest(
            prompt='Reply with the single word "ready".',
            max_tokens=5,
            temperature=0.0,
        ))
    except TextGenerationError as exc:
        print(f"FAIL: {exc}")
        return 1

    print(f"OK: API key works. Sample reply: {text!r}")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))

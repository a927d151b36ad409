"""LLM-backed expansion of a user's need into several GitHub search terms."""

import logging
import re

from app.services.llm_client import LLMClient

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a programming expert that helps find relevant GitHub libraries. "
    "Generate 3 different search queries that would help find relevant libraries. "
    "Focus on technical and functional aspects, avoid AI/ML terms unless specifically "
    "requested. Return only the search terms, one per line."
)

_LIST_MARKER = re.compile(r"^(?:[-*•]|\d+[.)])\s*")


def _clean_line(line: str) -> str:
    line = _LIST_MARKER.sub("", line.strip())
    return line.strip().strip("\"'`").strip()


def parse_terms(content: str, max_terms: int | None = None) -> list[str]:
    """Split a model reply into one search term per non-empty line."""
    terms = [_clean_line(line) for line in content.splitlines()]
    terms = [t for t in terms if t]
    if max_terms is not None:
        terms = terms[:max_terms]
    return terms


class TermGenerator:
    def __init__(self, llm: LLMClient, max_terms: int = 5) -> None:
        self.llm = llm
        self.max_terms = max_terms

    async def generate(self, language: str, description: str) -> list[str]:
        """Return search terms for *description*, always including *description* itself.

        Never raises: any LLM failure yields ``[description]``.
        """
        user_prompt = (
            f"I need to find GitHub libraries for {language} that can help with: {description}"
        )
        try:
            content = await self.llm.chat(
                SYSTEM_PROMPT, user_prompt, temperature=0.7, max_tokens=200
            )
        except Exception as e:
            logger.warning("Search term generation failed, using description only: %s", e)
            return [description]

        terms = parse_terms(content, self.max_terms)
        terms.append(description)
        # dict preserves first-occurrence order
        return list(dict.fromkeys(terms))

"""LLM classification of a library's licensing, pricing and integration effort."""

import json
import logging

from pydantic import ValidationError

from app.models.domain import Analysis, Pricing
from app.services.llm_client import LLMClient

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a technical analyst specialized in evaluating software libraries. "
    "Provide accurate, concise analysis in JSON format."
)

USER_PROMPT_TEMPLATE = """Analyze this GitHub library:
Name: {name}
Description: {description}
README excerpt: {readme}...

Please analyze the following aspects:
1. Is it free and open source? (true/false)
2. If it's not completely free, what's the pricing model and starting price?
3. Rate the integration complexity from 1-5 (1 being very easy, 5 being very complex)
4. Briefly explain the complexity rating

Respond in JSON format:
{{
  "isOpenSource": boolean,
  "pricing": {{
    "type": "free" | "paid" | "freemium",
    "startingPrice": string (if applicable)
  }},
  "integrationComplexity": number (1-5),
  "complexityReason": string
}}"""

FALLBACK_ANALYSIS = Analysis(
    is_open_source=True,
    pricing=Pricing(type="free"),
    integration_complexity=3,
    complexity_reason="Analysis unavailable",
)


class LibraryAnalyzer:
    def __init__(self, llm: LLMClient, readme_chars: int = 1500) -> None:
        self.llm = llm
        self.readme_chars = readme_chars

    def build_prompt(self, name: str, description: str, readme: str) -> str:
        return USER_PROMPT_TEMPLATE.format(
            name=name,
            description=description,
            readme=readme[: self.readme_chars],
        )

    async def analyze(self, name: str, description: str, readme: str) -> Analysis:
        """Ask the LLM for a structured verdict on a library.

        Raises :class:`~app.errors.LLMUnavailable` when the call fails and
        ``json.JSONDecodeError`` when the reply is not JSON; the enrichment
        stage treats both as "no analysis". A reply that is valid JSON but
        does not fit :class:`Analysis` is replaced by ``FALLBACK_ANALYSIS``.
        """
        content = await self.llm.chat(
            SYSTEM_PROMPT,
            self.build_prompt(name, description, readme),
            json_response=True,
        )
        data = json.loads(content)
        try:
            return Analysis.model_validate(data)
        except ValidationError as e:
            logger.warning("Unexpected analysis shape for %s, using fallback: %s", name, e)
            return FALLBACK_ANALYSIS

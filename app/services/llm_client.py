"""Chat-completion client for an OpenAI-compatible API."""

import logging

import httpx
from openai import AsyncOpenAI, OpenAIError

from app.errors import LLMUnavailable

logger = logging.getLogger(__name__)


class LLMClient:
    """Thin async wrapper around ``AsyncOpenAI``.

    When *api_key* is empty the client is left unconfigured and every call
    raises :class:`LLMUnavailable`, letting callers fall back without
    special-casing a missing key.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-3.5-turbo",
        base_url: str = "",
        timeout: float = 20.0,
        max_retries: int = 2,
    ) -> None:
        self.model = model
        if not api_key:
            self._client = None
            return
        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url or None,
            timeout=timeout,
            max_retries=max_retries,
            http_client=httpx.AsyncClient(timeout=timeout),
        )

    @property
    def configured(self) -> bool:
        return self._client is not None

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()

    async def chat(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
        json_response: bool = False,
    ) -> str:
        """Send a system/user message pair and return the reply text."""
        if self._client is None:
            raise LLMUnavailable("LLM client not configured")

        kwargs: dict = {}
        if temperature is not None:
            kwargs["temperature"] = temperature
        if max_tokens is not None:
            kwargs["max_tokens"] = max_tokens
        if json_response:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            resp = await self._client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                **kwargs,
            )
        except OpenAIError as e:
            raise LLMUnavailable(f"LLM request failed: {e}") from e

        if not resp.choices:
            raise LLMUnavailable("LLM returned no choices")
        return resp.choices[0].message.content or ""

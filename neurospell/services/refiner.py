"""Best-effort refinement of raw symbol sequences through an LLM."""

from __future__ import annotations

import logging
from typing import Optional

from openai import AsyncOpenAI, OpenAIError

from ..errors import RefinementError
from ..settings import AppSettings

LOGGER = logging.getLogger("neurospell.refiner")

SYSTEM_PROMPT = (
    "You are an assistant that corrects and completes text sequences derived from EEG brain "
    "signals. Be concise and return only the corrected text."
)


class TextRefiner:
    """Pass-through when no API key is configured; failures pass the raw text through unless strict."""

    def __init__(self, settings: AppSettings, *, client: Optional[AsyncOpenAI] = None) -> None:
        self.settings = settings
        self.model = settings.refiner_model
        self.strict = settings.refiner_strict
        self._client = client
        if self._client is None and settings.openai_api_key:
            self._client = AsyncOpenAI(api_key=settings.openai_api_key, timeout=settings.refiner_timeout)
        self._mock = self._client is None
        if self._mock:
            LOGGER.warning("Refiner mock mode enabled (set OPENAI_API_KEY to refine symbol sequences).")

    @property
    def mock(self) -> bool:
        return self._mock

    async def refine(self, raw: str) -> str:
        if not raw.strip() or self._client is None:
            return raw
        prompt = (
            "Correct any errors and complete the following sequence of predicted EEG letters into a "
            "coherent sentence. The letters may contain errors due to EEG signal noise. Return only "
            f'the corrected sentence without explanations: "{raw}"'
        )
        try:
            response = await self._client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                max_tokens=100,
                temperature=0.3,
            )
        except OpenAIError as exc:
            if self.strict:
                raise RefinementError(f"refinement failed: {exc}") from exc
            LOGGER.warning("Refinement failed, keeping raw sequence: %s", exc)
            return raw
        choices = response.choices or []
        content = choices[0].message.content if choices else None
        return (content or "").strip() or raw

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()

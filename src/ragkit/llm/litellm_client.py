"""LiteLLM-backed LLM client.

LiteLLM routes the call to whichever provider the model identifier names
(``openai/gpt-4o-mini``, ``anthropic/...``) and handles provider retries
and timeouts itself.
"""

from __future__ import annotations

import litellm
import structlog

from src.ragkit.config import RagkitSettings
from src.ragkit.llm.base import LLMClient

logger = structlog.get_logger(__name__)


class LiteLLMClient(LLMClient):
    """Single-model completion client over litellm.acompletion.

    Args:
        settings: Supplies llm_model, llm_timeout, and llm_max_retries.
        model: Overrides settings.llm_model.
        temperature: Sampling temperature. Classification wants 0.
        max_tokens: Maximum tokens in the response.
    """

    def __init__(
        self,
        settings: RagkitSettings | None = None,
        model: str | None = None,
        temperature: float = 0.0,
        max_tokens: int = 1024,
    ) -> None:
        settings = settings or RagkitSettings()
        self._model = model or settings.llm_model
        self._timeout = settings.llm_timeout
        self._num_retries = settings.llm_max_retries
        self._temperature = temperature
        self._max_tokens = max_tokens

    @property
    def model_name(self) -> str:
        return self._model

    @property
    def provider(self) -> str:
        if "/" not in self._model:
            return "openai"
        return self._model.split("/", 1)[0]

    async def generate(self, prompt: str) -> str:
        response = await litellm.acompletion(
            model=self._model,
            messages=[{"role": "user", "content": prompt}],
            temperature=self._temperature,
            max_tokens=self._max_tokens,
            timeout=self._timeout,
            num_retries=self._num_retries,
        )

        usage = getattr(response, "usage", None)
        if usage:
            logger.debug(
                "llm_completion",
                model=self._model,
                prompt_tokens=usage.prompt_tokens,
                completion_tokens=usage.completion_tokens,
            )

        return response.choices[0].message.content or ""

"""OpenAI dense embeddings with rate-limit backoff.

Batch requests go out as a single embeddings.create call; OpenAI returns
one vector per input in input order. RateLimitError is retried with
exponential backoff via tenacity, anything else propagates.
"""

from __future__ import annotations

import structlog
from openai import AsyncOpenAI, RateLimitError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.ragkit.config import RagkitSettings
from src.ragkit.embeddings.base import Embedder

logger = structlog.get_logger(__name__)


class OpenAIEmbedder(Embedder):
    """Embedder backed by the OpenAI embeddings API.

    Args:
        settings: Supplies openai_api_key, embedding_model, and
            embedding_dimensions.
        client: Pre-built AsyncOpenAI client, mainly for tests.
    """

    def __init__(
        self,
        settings: RagkitSettings | None = None,
        client: AsyncOpenAI | None = None,
    ) -> None:
        settings = settings or RagkitSettings()
        self._client = client or AsyncOpenAI(api_key=settings.openai_api_key)
        self._model = settings.embedding_model
        self._dimensions = settings.embedding_dimensions

    @property
    def dimensions(self) -> int:
        return self._dimensions

    @property
    def model_name(self) -> str:
        return self._model

    async def embed(self, text: str) -> list[float]:
        vectors = await self.embed_batch([text])
        return vectors[0]

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        return await self._create(texts)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type(RateLimitError),
        reraise=True,
    )
    async def _create(self, texts: list[str]) -> list[list[float]]:
        response = await self._client.embeddings.create(
            input=texts,
            model=self._model,
            dimensions=self._dimensions,
        )
        logger.debug("embeddings_created", model=self._model, count=len(texts))
        return [item.embedding for item in response.data]

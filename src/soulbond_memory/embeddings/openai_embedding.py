"""
OpenAI embeddings for memory content and retrieval queries.

Memory content is "User: ...\nResponse: ..." text; it is whitespace
normalized and clipped before being sent so long turns never exceed the
model's input limit.
"""

import logging
import os
from typing import List, Optional

logger = logging.getLogger(__name__)

# Default output dimension per known model
MODEL_DIMENSIONS = {
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
    "text-embedding-ada-002": 1536,
}

# Roughly 8k tokens of English text
MAX_INPUT_CHARS = 30000


class OpenAIEmbedding:
    """
    Embedder backed by the OpenAI embeddings endpoint.

    Uses the async client, so indexing and search do not block the event
    loop. Any OpenAI-compatible endpoint works through ``base_url``.
    """

    def __init__(
        self,
        model: str = "text-embedding-3-small",
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        dimensions: Optional[int] = None,
        timeout: float = 30.0,
        max_retries: int = 3,
    ):
        """
        Args:
            model: Embedding model name
            api_key: API key (default: OPENAI_API_KEY)
            base_url: Alternative endpoint
            dimensions: Shortened output size, for 3-series models
            timeout: Request timeout in seconds
            max_retries: Retries performed by the client
        """
        try:
            from openai import AsyncOpenAI
        except ImportError as e:
            raise ImportError(
                "openai is required for OpenAIEmbedding. "
                "Install with: pip install soulbond-memory[embeddings-openai]"
            ) from e

        if dimensions is None and model not in MODEL_DIMENSIONS:
            raise ValueError(f"Unknown embedding model {model}; pass dimensions explicitly")

        self._model = model
        self._dimensions = dimensions
        self._dimension = dimensions or MODEL_DIMENSIONS[model]
        self._client = AsyncOpenAI(
            api_key=api_key or os.getenv("OPENAI_API_KEY"),
            base_url=base_url,
            timeout=timeout,
            max_retries=max_retries,
        )

        logger.info(f"OpenAIEmbedding ready: {model} ({self._dimension} dimensions)")

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def model_name(self) -> str:
        return self._model

    @staticmethod
    def _prepare(text: str) -> str:
        cleaned = " ".join((text or "").split())
        if not cleaned:
            raise ValueError("Cannot embed empty text")
        return cleaned[:MAX_INPUT_CHARS]

    async def _embed(self, text: str) -> List[float]:
        request = {"model": self._model, "input": self._prepare(text)}
        if self._dimensions is not None:
            request["dimensions"] = self._dimensions

        response = await self._client.embeddings.create(**request)
        return response.data[0].embedding

    async def embed_document(self, text: str) -> List[float]:
        """
        Embed memory content for storage.

        Raises:
            ValueError: If text is empty
            openai.OpenAIError: If the request fails
        """
        return await self._embed(text)

    async def embed_query(self, text: str) -> List[float]:
        """Embed a retrieval query; OpenAI models treat it like a document."""
        return await self._embed(text)

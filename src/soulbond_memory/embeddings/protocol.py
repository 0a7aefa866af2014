"""
Text embedding protocol for soulbond-memory.

Vector indexes embed memory content on upsert and the retrieval query on
search through this interface.
"""

from typing import List, Protocol

from typing_extensions import runtime_checkable


@runtime_checkable
class TextEmbedding(Protocol):
    """
    Protocol for text embedding providers.

    Implementations must return vectors of a fixed length (``dimension``)
    and deterministic output for the same input.

    Example:
        >>> embedder = OpenAIEmbedding(dimensions=768)
        >>> vector = await embedder.embed_document("I finally told my sister")
        >>> len(vector) == embedder.dimension
        True
    """

    @property
    def dimension(self) -> int:
        """
        Vector dimension produced by this embedder.

        Vector collections are created with this size, so every vector
        stored in one collection must come from embedders that agree on it.
        """
        ...

    @property
    def model_name(self) -> str:
        """Identifier of the embedding model."""
        ...

    async def embed_document(self, text: str) -> List[float]:
        """
        Generate embedding for memory content to be stored.

        Args:
            text: Document text to embed

        Returns:
            Embedding vector

        Raises:
            ValueError: If text is empty
        """
        ...

    async def embed_query(self, text: str) -> List[float]:
        """
        Generate embedding for a retrieval query.

        Args:
            text: Query text to embed

        Returns:
            Embedding vector

        Raises:
            ValueError: If text is empty
        """
        ...

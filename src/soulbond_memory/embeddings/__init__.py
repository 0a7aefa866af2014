"""
Text embedding abstractions for soulbond-memory.

Provides the TextEmbedding protocol and the OpenAI adapter used in
production. The adapter is only exported when openai is installed.
"""

from soulbond_memory.embeddings.protocol import TextEmbedding

__all__ = [
    "TextEmbedding",
]

try:
    from soulbond_memory.embeddings.openai_embedding import OpenAIEmbedding  # noqa: F401

    __all__.append("OpenAIEmbedding")
except ImportError:
    pass

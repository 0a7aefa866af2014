"""
Lightweight text analysis for memory records.

Derives up to five keywords from a message and a topical category, falling
back to the dominant emotion when no topic vocabulary matches.
"""

import re
from collections import Counter
from typing import List, Tuple

from soulbond_memory.models import SentimentAnalysis

MAX_KEYWORDS = 5
MIN_KEYWORD_LENGTH = 4

STOPWORDS = frozenset(
    [
        "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
        "i", "me", "my", "you", "your", "it", "is", "was", "are", "were",
        "have", "has", "had", "do", "does", "did", "will", "would", "could",
        "should", "may", "might", "must", "can", "this", "that", "these",
    ]
)  # fmt: skip

# Checked in order; first match wins
CATEGORY_PATTERNS: List[Tuple[str, re.Pattern]] = [
    ("work", re.compile(r"work|job|career|boss|colleague", re.IGNORECASE)),
    ("family", re.compile(r"family|mother|father|sister|brother|parent", re.IGNORECASE)),
    ("friendship", re.compile(r"friend|friendship", re.IGNORECASE)),
    ("romance", re.compile(r"love|relationship|partner|dating|marriage", re.IGNORECASE)),
    ("interests", re.compile(r"hobby|fun|enjoy|favorite|like to", re.IGNORECASE)),
    ("concerns", re.compile(r"fear|anxiety|worried|scared|stress", re.IGNORECASE)),
    ("aspirations", re.compile(r"dream|goal|hope|wish|future", re.IGNORECASE)),
]

_NON_WORD = re.compile(r"[^\w\s]")


def extract_keywords(text: str, limit: int = MAX_KEYWORDS) -> List[str]:
    """
    Extract the most frequent meaningful words from text.

    Args:
        text: Message text
        limit: Maximum number of keywords (capped at 5)

    Returns:
        Keywords ordered by descending frequency; ties keep first-seen order
    """
    limit = min(limit, MAX_KEYWORDS)
    if not text or limit <= 0:
        return []

    words = _NON_WORD.sub(" ", text.lower()).split()
    counts = Counter(
        word for word in words if len(word) >= MIN_KEYWORD_LENGTH and word not in STOPWORDS
    )

    # sorted() is stable, so equal counts keep first-seen order
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [word for word, _ in ranked[:limit]]


def determine_category(sentiment: SentimentAnalysis, text: str) -> str:
    """Pick a topical category for text, or fall back to the primary emotion."""
    for category, pattern in CATEGORY_PATTERNS:
        if pattern.search(text or ""):
            return category

    return sentiment.primary_emotion

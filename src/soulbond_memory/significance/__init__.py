"""
Significance scoring and text analysis for chat turns.

- scorer: additive point system and retention classification
- patterns: pattern tables used by the scorer
- keywords: keyword and category extraction
"""

from soulbond_memory.significance.keywords import determine_category, extract_keywords
from soulbond_memory.significance.patterns import (
    DEFAULT_PATTERN_GROUPS,
    EXPLICIT_MEMORY_REQUEST,
    PERSONAL_INFO,
    RELATIONSHIP_MILESTONES,
    PatternGroup,
    ScoringPattern,
)
from soulbond_memory.significance.scorer import (
    MemorySignificance,
    SignificanceScorer,
    calculate_significance,
    classify_significance,
)

__all__ = [
    "MemorySignificance",
    "SignificanceScorer",
    "calculate_significance",
    "classify_significance",
    "PatternGroup",
    "ScoringPattern",
    "PERSONAL_INFO",
    "RELATIONSHIP_MILESTONES",
    "EXPLICIT_MEMORY_REQUEST",
    "DEFAULT_PATTERN_GROUPS",
    "extract_keywords",
    "determine_category",
]

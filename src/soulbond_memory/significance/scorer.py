"""
Significance scoring for chat turns.

Implements an additive point system that decides how memorable a turn is:

    emotional intensity     up to 3
    crisis / distress       up to 3
    personal information    up to 2 (0.5 per pattern)
    relationship milestone  up to 2 (1 per pattern)
    explicit request        2
    engaged conversation    0.5
    early relationship      0.5 (only when the running score is above 5)

Rules are applied in that order and the total is capped at 10. The final
score selects a retention class (episodic, long, medium or short).
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from soulbond_memory.config import (
    EARLY_RELATIONSHIP_MIN_SCORE,
    EARLY_RELATIONSHIP_TRUST,
    ENGAGED_CONVERSATION_LENGTH,
    EPISODIC_THRESHOLD,
    LONG_TERM_THRESHOLD,
    MEDIUM_TERM_THRESHOLD,
    MEMORY_MAX_SIGNIFICANCE,
    RETENTION_DAYS,
)
from soulbond_memory.models import MemoryContext, MemoryType
from soulbond_memory.significance.keywords import determine_category, extract_keywords
from soulbond_memory.significance.patterns import (
    EXPLICIT_MEMORY_REQUEST,
    PERSONAL_INFO,
    RELATIONSHIP_MILESTONES,
    PatternGroup,
)
from soulbond_memory.utils.timestamps import resolve_now

logger = logging.getLogger(__name__)

MAX_EMOTIONAL_POINTS = 3.0
EMOTIONAL_WEIGHT = 0.3
CRISIS_POINTS = 3.0
DISTRESS_POINTS = 2.0
DISTRESS_SEVERITY_THRESHOLD = 5.0
ENGAGEMENT_POINTS = 0.5
EARLY_RELATIONSHIP_POINTS = 0.5


@dataclass
class MemorySignificance:
    """
    Scoring outcome for one chat turn.

    Attributes:
        score: Significance in [0, 10]
        type: Retention class derived from the score
        category: Topical category or dominant emotion
        keywords: Up to five keywords from the user message
        expires_at: Expiry timestamp (None for episodic)
        reasons: Human-readable list of contributing rules
    """

    score: float
    type: MemoryType
    category: str
    keywords: List[str] = field(default_factory=list)
    expires_at: Optional[datetime] = None
    reasons: List[str] = field(default_factory=list)


def classify_significance(
    score: float, now: Optional[datetime] = None
) -> Tuple[MemoryType, Optional[datetime]]:
    """
    Map a significance score to a memory type and expiry.

    Args:
        score: Final significance score
        now: Reference time for the expiry (default: now)

    Returns:
        Tuple of (memory type, expires_at); expires_at is None for episodic
    """
    now = resolve_now(now)

    if score >= EPISODIC_THRESHOLD:
        return "episodic", None
    if score >= LONG_TERM_THRESHOLD:
        memory_type: MemoryType = "long"
    elif score >= MEDIUM_TERM_THRESHOLD:
        memory_type = "medium"
    else:
        memory_type = "short"

    return memory_type, now + timedelta(days=RETENTION_DAYS[memory_type])


class SignificanceScorer:
    """
    Scores chat turns for memory significance.

    The pattern groups are injectable so the tables can be extended without
    touching the scoring order.
    """

    def __init__(
        self,
        personal_info: PatternGroup = PERSONAL_INFO,
        milestones: PatternGroup = RELATIONSHIP_MILESTONES,
        explicit_request: PatternGroup = EXPLICIT_MEMORY_REQUEST,
    ):
        self.personal_info = personal_info
        self.milestones = milestones
        self.explicit_request = explicit_request

    def calculate(
        self, context: MemoryContext, now: Optional[datetime] = None
    ) -> MemorySignificance:
        """
        Score a chat turn.

        Args:
            context: The turn being scored
            now: Reference time used for the expiry

        Returns:
            MemorySignificance with score, type, category, keywords, expiry and reasons
        """
        sentiment = context.sentiment
        text = context.content or ""
        score = 0.0
        reasons: List[str] = []

        # 1. Emotional intensity
        intensity = max(0.0, sentiment.emotional_intensity)
        emotional = min(MAX_EMOTIONAL_POINTS, intensity * EMOTIONAL_WEIGHT)
        if emotional > 0:
            score += emotional
            reasons.append(
                "High emotional intensity" if emotional > 2 else "Emotional intensity"
            )

        # 2. Crisis or distress
        if sentiment.response_urgency == "crisis":
            score += CRISIS_POINTS
            reasons.append("Crisis moment - requires remembering")
        elif sentiment.crisis_indicators.severity > DISTRESS_SEVERITY_THRESHOLD:
            score += DISTRESS_POINTS
            reasons.append("Significant emotional distress")

        # 3-5. Pattern tables
        score += self._apply_group(self.personal_info, text, reasons)
        score += self._apply_group(self.milestones, text, reasons)
        score += self._apply_group(self.explicit_request, text, reasons)

        # 6. Engagement
        if len(context.conversation_history) > ENGAGED_CONVERSATION_LENGTH:
            score += ENGAGEMENT_POINTS
            reasons.append("Part of engaged conversation")

        # 7. Early relationship, judged on the running score
        trust_level = context.user_profile.trust_level or 0
        if trust_level < EARLY_RELATIONSHIP_TRUST and score > EARLY_RELATIONSHIP_MIN_SCORE:
            score += EARLY_RELATIONSHIP_POINTS
            reasons.append("Early relationship - building foundation")

        score = max(0.0, min(MEMORY_MAX_SIGNIFICANCE, score))
        memory_type, expires_at = classify_significance(score, now)
        if memory_type == "episodic":
            reasons.append("Episodic memory - permanent")

        significance = MemorySignificance(
            score=score,
            type=memory_type,
            category=determine_category(sentiment, text),
            keywords=extract_keywords(text),
            expires_at=expires_at,
            reasons=reasons,
        )

        logger.debug(
            f"Significance for user {context.user_id}: score={score:.2f}, "
            f"type={memory_type}, reasons={reasons}"
        )

        return significance

    @staticmethod
    def _apply_group(group: PatternGroup, text: str, reasons: List[str]) -> float:
        points = group.score(text)
        if points > 0:
            reasons.append(group.reason)
        return points


_default_scorer = SignificanceScorer()


def calculate_significance(
    context: MemoryContext, now: Optional[datetime] = None
) -> MemorySignificance:
    """Score a chat turn with the default pattern tables."""
    return _default_scorer.calculate(context, now)

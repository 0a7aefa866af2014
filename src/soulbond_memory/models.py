import uuid
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from soulbond_memory.utils.timestamps import ensure_utc, resolve_now, utc_now

MemoryType = Literal["short", "medium", "long", "episodic"]


class CrisisIndicators(BaseModel):
    """Distress signals detected by the upstream sentiment analysis."""

    model_config = ConfigDict(extra="allow")

    severity: float = Field(default=0.0, description="Distress severity (0-10)")
    indicators: List[str] = Field(default_factory=list)


class SentimentAnalysis(BaseModel):
    """
    Sentiment of a single user message.

    Every field has a default that contributes nothing to significance
    scoring, so partially populated analyses are safe to pass around.
    """

    model_config = ConfigDict(extra="allow")

    primary_emotion: str = "neutral"
    emotional_intensity: float = Field(default=0.0, description="Intensity on a 0-10 scale")
    hidden_emotions: List[str] = Field(default_factory=list)
    needs_detected: List[str] = Field(default_factory=list)
    response_urgency: Literal["normal", "crisis"] = "normal"
    crisis_indicators: CrisisIndicators = Field(default_factory=CrisisIndicators)


class UserProfile(BaseModel):
    model_config = ConfigDict(extra="allow")

    trust_level: Optional[float] = Field(
        default=None, description="Relationship trust level (0-100); missing counts as 0"
    )


class MemoryContext(BaseModel):
    """One chat turn, as seen by the significance scorer."""

    user_id: str
    content: str
    response: str = ""
    sentiment: SentimentAnalysis = Field(default_factory=SentimentAnalysis)
    conversation_history: List[Any] = Field(default_factory=list)
    user_profile: UserProfile = Field(default_factory=UserProfile)


class MemoryRecord(BaseModel):
    """
    A remembered chat turn.

    Records are write-once: significance, content and context are fixed at
    creation and the only later change is deletion.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), description="Record identifier")
    user_id: str = Field(..., description="Owning user")
    type: MemoryType = Field(..., description="Retention class")
    category: str = Field(..., description="Topical label or dominant emotion")
    content: str = Field(..., description="User prompt and companion response")
    context: Dict[str, Any] = Field(
        default_factory=dict, description="Metadata snapshot taken at creation"
    )
    significance: float = Field(..., ge=0.0, le=10.0, description="Score fixed at creation")
    keywords: List[str] = Field(default_factory=list, max_length=5)
    expires_at: Optional[datetime] = Field(
        default=None, description="Expiry timestamp; None only for episodic records"
    )
    created_at: datetime = Field(default_factory=utc_now, description="Creation time (UTC)")

    @field_validator("created_at", "expires_at")
    @classmethod
    def _normalize_timestamps(cls, value: Optional[datetime]) -> Optional[datetime]:
        return None if value is None else ensure_utc(value)

    @model_validator(mode="after")
    def _check_expiry_matches_type(self) -> "MemoryRecord":
        if self.type == "episodic" and self.expires_at is not None:
            raise ValueError("episodic memories never expire")
        if self.type != "episodic" and self.expires_at is None:
            raise ValueError(f"{self.type} memories require an expiry")
        return self

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.expires_at is None:
            return False
        return self.expires_at < resolve_now(now)


class MemoryStats(BaseModel):
    total: int = 0
    by_type: Dict[str, int] = Field(default_factory=dict)
    by_category: Dict[str, int] = Field(default_factory=dict)
    oldest_created_at: Optional[datetime] = None
    avg_significance: float = 0.0

    @field_validator("oldest_created_at")
    @classmethod
    def _normalize_oldest(cls, value: Optional[datetime]) -> Optional[datetime]:
        return None if value is None else ensure_utc(value)


class RateLimitEntry(BaseModel):
    """An active counting window for one key."""

    key: str
    count: int = Field(..., ge=0)
    reset_at: int = Field(..., description="Epoch milliseconds when the window resets")


class RateLimitResult(BaseModel):
    """Outcome of one rate limit check."""

    success: bool
    limit: Optional[int] = Field(default=None, description="None when unlimited")
    remaining: Optional[int] = Field(default=None, description="None when unlimited")
    reset: Optional[int] = Field(default=None, description="Epoch ms; None when unlimited")
    unlimited: bool = False
    degraded: bool = Field(
        default=False, description="Backend failed and the configured failure policy applied"
    )

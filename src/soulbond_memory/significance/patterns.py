"""
Pattern tables for significance scoring.

Each group is plain data: compiled patterns, the points a single match is
worth, a cap for the whole group and the reason recorded when the group
contributes. The scorer walks the groups without knowing their contents.
"""

import re
from dataclasses import dataclass, field
from typing import List, Pattern


@dataclass(frozen=True)
class ScoringPattern:
    """A single regular expression and what it detects."""

    name: str
    pattern: Pattern[str]

    def matches(self, text: str) -> bool:
        return self.pattern.search(text) is not None


@dataclass(frozen=True)
class PatternGroup:
    """
    A set of patterns scored together.

    Attributes:
        name: Group identifier
        patterns: Patterns checked against the message
        points_per_match: Points added for each pattern that matches
        cap: Maximum points the group can contribute
        reason: Reason recorded when the group contributes
    """

    name: str
    patterns: List[ScoringPattern] = field(default_factory=list)
    points_per_match: float = 1.0
    cap: float = 2.0
    reason: str = ""

    def count_matches(self, text: str) -> int:
        return sum(1 for p in self.patterns if p.matches(text))

    def score(self, text: str) -> float:
        return min(self.cap, self.count_matches(text) * self.points_per_match)


def _compile(name: str, expression: str) -> ScoringPattern:
    return ScoringPattern(name=name, pattern=re.compile(expression, re.IGNORECASE))


PERSONAL_INFO = PatternGroup(
    name="personal_info",
    patterns=[
        _compile("identity", r"my (name|birthday|age|job|work)"),
        _compile("whereabouts", r"I (live|work|study) (in|at)"),
        _compile("family", r"my (family|mother|father|sister|brother|partner|spouse)"),
        _compile("life_event", r"(died|passed away|broke up|divorced|married|engaged)"),
        _compile("strong_feeling", r"I (love|hate|fear|dream)"),
        _compile("preference", r"my favorite"),
        _compile("secret", r"I've never told anyone"),
    ],
    points_per_match=0.5,
    cap=2.0,
    reason="Contains personal information",
)

RELATIONSHIP_MILESTONES = PatternGroup(
    name="relationship_milestone",
    patterns=[
        _compile("first_time", r"first time"),
        _compile("gratitude", r"thank you for"),
        _compile("helped", r"you('ve| have) helped me"),
        _compile("trust", r"I trust you"),
        _compile("safety", r"I feel safe with you"),
        _compile("meaning", r"you mean (a lot|so much|everything)"),
        _compile("affection", r"I (love|care about) you"),
    ],
    points_per_match=1.0,
    cap=2.0,
    reason="Relationship milestone",
)

EXPLICIT_MEMORY_REQUEST = PatternGroup(
    name="explicit_request",
    patterns=[_compile("remember", r"remember (this|that)|don't forget")],
    points_per_match=2.0,
    cap=2.0,
    reason="User requested to remember",
)

DEFAULT_PATTERN_GROUPS = [PERSONAL_INFO, RELATIONSHIP_MILESTONES, EXPLICIT_MEMORY_REQUEST]

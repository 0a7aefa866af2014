"""Tests for the significance pattern tables."""

import re

from soulbond_memory.significance import (
    DEFAULT_PATTERN_GROUPS,
    EXPLICIT_MEMORY_REQUEST,
    PERSONAL_INFO,
    RELATIONSHIP_MILESTONES,
    PatternGroup,
    ScoringPattern,
)


def test_default_groups_in_scoring_order():
    assert [group.name for group in DEFAULT_PATTERN_GROUPS] == [
        "personal_info",
        "relationship_milestone",
        "explicit_request",
    ]


def test_patterns_are_case_insensitive():
    assert PERSONAL_INFO.count_matches("MY BIRTHDAY is in May") == 1
    assert RELATIONSHIP_MILESTONES.count_matches("i TRUST you") == 1


def test_each_pattern_counts_once():
    # Repeating the same phrase does not add more matches
    text = "thank you for this, thank you for that"

    assert RELATIONSHIP_MILESTONES.count_matches(text) == 1
    assert RELATIONSHIP_MILESTONES.score(text) == 1.0


def test_group_score_is_capped():
    text = "first time, thank you for it, you have helped me, I trust you"

    assert RELATIONSHIP_MILESTONES.count_matches(text) == 4
    assert RELATIONSHIP_MILESTONES.score(text) == RELATIONSHIP_MILESTONES.cap


def test_helped_matches_both_forms():
    assert RELATIONSHIP_MILESTONES.count_matches("you've helped me a lot") == 1
    assert RELATIONSHIP_MILESTONES.count_matches("you have helped me a lot") == 1


def test_explicit_request_single_award():
    text = "remember this and don't forget, remember that too"

    assert EXPLICIT_MEMORY_REQUEST.score(text) == 2.0


def test_no_match_scores_zero():
    assert PERSONAL_INFO.score("The weather is fine") == 0.0


def test_custom_group():
    group = PatternGroup(
        name="travel",
        patterns=[
            ScoringPattern(name="trip", pattern=re.compile(r"trip", re.IGNORECASE)),
            ScoringPattern(name="flight", pattern=re.compile(r"flight", re.IGNORECASE)),
        ],
        points_per_match=0.75,
        cap=1.0,
        reason="Travel plans",
    )

    assert group.score("Booked a trip") == 0.75
    assert group.score("Booked a trip and a flight") == 1.0

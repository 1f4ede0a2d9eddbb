"""Hybrid relevance scoring.

The final score blends three signals, each on a 0-10 scale:

    model    (50%)  the language model's event suitability score
    keyword  (30%)  how many query terms appear in the candidate's own data
    rating   (20%)  the provider's star rating, rescaled from 0-5

and then adds a small context boost derived from the event details. The
result is capped at 10. Every sub-score falls back to a fixed neutral value
when its input is missing, so two runs over the same data always agree.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass

from vendor_discovery.fallback import NEUTRAL_SUITABILITY
from vendor_discovery.models import EventContext, RankedResult

logger = logging.getLogger(__name__)

MODEL_WEIGHT = 0.5
KEYWORD_WEIGHT = 0.3
RATING_WEIGHT = 0.2

MAX_SCORE = 10.0
NEUTRAL_KEYWORD_SCORE = 5.0
NEUTRAL_RATING_SCORE = 5.0

MIN_TERM_LENGTH = 3  # shorter tokens ("a", "an", "to") carry no signal
MAX_KEYWORD_MATCHES = 5

GROUP_FRIENDLY_TAGS = frozenset({"restaurant", "event_venue", "conference_room", "banquet_hall"})
GROUP_SIZE_THRESHOLD = 10
GROUP_BOOST = 1.0

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


@dataclass(frozen=True)
class ScoreBreakdown:
    model: float
    keyword: float
    rating: float
    boost: float

    @property
    def weighted(self) -> float:
        return (
            self.model * MODEL_WEIGHT
            + self.keyword * KEYWORD_WEIGHT
            + self.rating * RATING_WEIGHT
            + self.boost
        )

    @property
    def total(self) -> float:
        return min(MAX_SCORE, self.weighted)


def query_terms(query: str) -> list[str]:
    return [t for t in query.lower().split() if len(t) >= MIN_TERM_LENGTH]


def keyword_score(result: RankedResult, query: str) -> float:
    terms = query_terms(query)
    max_matches = min(len(terms), MAX_KEYWORD_MATCHES)
    if max_matches == 0:
        return NEUTRAL_KEYWORD_SCORE

    haystack = " ".join(
        part
        for part in (result.name, result.category.value, result.address, *result.tags)
        if part
    ).lower()
    matches = sum(1 for term in terms if term in haystack)
    return min(MAX_SCORE, matches / max_matches * MAX_SCORE)


def rating_score(result: RankedResult) -> float:
    if result.rating is None:
        return NEUTRAL_RATING_SCORE
    return result.rating / 5 * MAX_SCORE


def model_score(result: RankedResult) -> float:
    if result.event_suitability_score is None:
        return NEUTRAL_SUITABILITY
    return result.event_suitability_score


def parse_attendee_count(value: str | None) -> int | None:
    """Read the leading integer of a free-text attendee count ("50 people" -> 50)."""
    if not value:
        return None
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else None


# ---- Context boost rules ----
# Each rule looks at one result and the event context and returns an
# additive boost. Append new rules to CONTEXT_RULES.

ContextRule = Callable[[RankedResult, EventContext], float]


def group_friendly_boost(result: RankedResult, context: EventContext) -> float:
    count = parse_attendee_count(context.attendee_count)
    if count is None or count <= GROUP_SIZE_THRESHOLD:
        return 0.0
    if any(tag.lower() in GROUP_FRIENDLY_TAGS for tag in result.tags):
        return GROUP_BOOST
    return 0.0


CONTEXT_RULES: list[ContextRule] = [group_friendly_boost]


def context_boost(result: RankedResult, context: EventContext | None) -> float:
    if context is None:
        return 0.0
    return sum(rule(result, context) for rule in CONTEXT_RULES)


def score_breakdown(
    result: RankedResult, query: str, context: EventContext | None = None
) -> ScoreBreakdown:
    return ScoreBreakdown(
        model=model_score(result),
        keyword=keyword_score(result, query),
        rating=rating_score(result),
        boost=context_boost(result, context),
    )


def hybrid_score(result: RankedResult, query: str, context: EventContext | None = None) -> float:
    """Score one merged result in [0, 10]. Pure: reads the result, never mutates it."""
    breakdown = score_breakdown(result, query, context)
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "hybrid score for %s: %.2f (model %.1f, keywords %.1f, rating %.1f, boost %.1f)",
            result.name,
            breakdown.total,
            breakdown.model,
            breakdown.keyword,
            breakdown.rating,
            breakdown.boost,
        )
        if breakdown.weighted > MAX_SCORE:
            logger.debug("  capped from %.2f", breakdown.weighted)
    return breakdown.total

"""Discovery orchestration: search, enhance, score, rank.

    idle -> searching -> empty                                  (no candidates)
                      -> enhancing -> scoring -> done
                      -> enhancing -> error_fallback -> scoring -> done

Every external failure is absorbed once, in the stage where it happens, and
replaced by a deterministic default. The only error a caller can see is
InvalidQueryError, raised before anything goes out over the network.
"""

from __future__ import annotations

import logging
from typing import Protocol

from vendor_discovery.config import Config
from vendor_discovery.enhancer import ClaudeEnhancer
from vendor_discovery.fallback import NEUTRAL_SUITABILITY, classify, fallback_enhancement
from vendor_discovery.models import (
    DiscoveryResult,
    DiscoveryState,
    Enhancement,
    EnhancementSource,
    EventContext,
    PlaceCandidate,
    Query,
    RankedResult,
    build_query,
)
from vendor_discovery.places import PlaceSearchClient
from vendor_discovery.scoring import hybrid_score

logger = logging.getLogger(__name__)

NO_RESULTS_MESSAGE = "No results found for your query. Try a different search term or location."


class CandidateSearcher(Protocol):
    def search(self, query: str) -> list[PlaceCandidate]: ...


class Enhancer(Protocol):
    def enhance(
        self,
        candidates: list[PlaceCandidate],
        query: str,
        context: EventContext | None = None,
    ) -> list[Enhancement]: ...


def merge_enhancements(
    candidates: list[PlaceCandidate],
    enhancements: list[Enhancement],
) -> list[RankedResult]:
    """Pair every candidate with its enhancement, filling gaps from the fallback table.

    Enhancements for unknown ids are ignored; for duplicate ids the first wins.
    Output order is candidate order.
    """
    by_id: dict[str, Enhancement] = {}
    for enhancement in enhancements:
        by_id.setdefault(enhancement.candidate_id, enhancement)

    merged = []
    for candidate in candidates:
        enhancement = by_id.get(candidate.id)
        if enhancement is None:
            enhancement = fallback_enhancement(candidate)
        else:
            # Report the same suitability the scorer will use
            gaps = {}
            if enhancement.category is None:
                gaps["category"] = classify(candidate.tags)
            if enhancement.suitability_score is None:
                gaps["suitability_score"] = NEUTRAL_SUITABILITY
            if gaps:
                enhancement = enhancement.model_copy(update=gaps)
        merged.append(RankedResult.merge(candidate, enhancement))
    return merged


def rank_results(results: list[RankedResult]) -> list[RankedResult]:
    """Order by hybrid score, highest first.

    sorted() is stable, so equal scores keep the provider's original order.
    That is the only tie-break.
    """
    return sorted(results, key=lambda r: r.hybrid_score, reverse=True)


class DiscoveryPipeline:
    """Runs one discovery request end to end. Holds no per-request state."""

    def __init__(self, searcher: CandidateSearcher, enhancer: Enhancer):
        self.searcher = searcher
        self.enhancer = enhancer

    def close(self) -> None:
        """Release the collaborators' HTTP connection pools, where they hold any."""
        for client in (self.searcher, self.enhancer):
            close = getattr(client, "close", None)
            if close is not None:
                close()

    def discover(self, query_text: object, context: EventContext | dict | None = None) -> DiscoveryResult:
        query = build_query(query_text, context)
        return self.run(query)

    def run(self, query: Query) -> DiscoveryResult:
        state = DiscoveryState.IDLE
        state = _transition(state, DiscoveryState.SEARCHING)
        candidates = self.searcher.search(query.text)

        if not candidates:
            _transition(state, DiscoveryState.EMPTY)
            logger.info("No candidates for %r", query.text)
            return DiscoveryResult(query=query, state=DiscoveryState.EMPTY, message=NO_RESULTS_MESSAGE)

        state = _transition(state, DiscoveryState.ENHANCING)
        enhancements = self.enhancer.enhance(candidates, query.text, query.context)
        if enhancements and all(e.source == EnhancementSource.FALLBACK for e in enhancements):
            state = _transition(state, DiscoveryState.ERROR_FALLBACK)

        merged = merge_enhancements(candidates, enhancements)
        gaps = sum(1 for r in merged if r.enhancement_source == EnhancementSource.FALLBACK)
        if gaps and state == DiscoveryState.ENHANCING:
            logger.info("Filled %d of %d candidate(s) from the fallback table", gaps, len(merged))

        state = _transition(state, DiscoveryState.SCORING)
        scored = [
            r.model_copy(update={"hybrid_score": hybrid_score(r, query.text, query.context)})
            for r in merged
        ]
        ranked = rank_results(scored)

        _transition(state, DiscoveryState.DONE)
        logger.info("Returning %d ranked result(s) for %r", len(ranked), query.text)
        return DiscoveryResult(query=query, state=DiscoveryState.DONE, results=ranked)


def _transition(current: DiscoveryState, target: DiscoveryState) -> DiscoveryState:
    logger.debug("discovery: %s -> %s", current.value, target.value)
    return target


def build_pipeline(config: Config) -> DiscoveryPipeline:
    """Wire the real Places and Claude clients from configuration."""
    for key in config.validate_keys():
        logger.warning("%s is not set; that stage will degrade to its fallback", key)

    searcher = PlaceSearchClient(
        api_key=config.google_places_api_key,
        max_results=config.result_limit,
        timeout=config.search_timeout,
    )
    enhancer = ClaudeEnhancer.from_api_key(
        config.anthropic_api_key,
        config.model,
        max_tokens=config.enhance_max_tokens,
        timeout=config.enhance_timeout,
    )
    return DiscoveryPipeline(searcher, enhancer)

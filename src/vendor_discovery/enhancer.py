"""Language-model enhancement of place candidates.

One Claude call covers the whole candidate batch. The model's reply is
decoded against a strict schema; if anything goes wrong the whole batch is
classified by the fallback table instead, so callers always get one
enhancement per candidate they can rely on.
"""

from __future__ import annotations

import logging
from typing import Any

import anthropic
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from vendor_discovery.errors import EnhancementError
from vendor_discovery.fallback import fallback_enhancements
from vendor_discovery.models import Enhancement, EnhancementSource, EventContext, PlaceCandidate, VendorCategory
from vendor_discovery.templates.base import SYSTEM_PROMPT, build_enhancement_prompt

logger = logging.getLogger(__name__)

MIN_SUITABILITY = 1.0
MAX_SUITABILITY = 10.0

# Names the model sometimes uses instead of ours
CATEGORY_ALIASES = {
    "food": VendorCategory.CATERING,
    "restaurant": VendorCategory.CATERING,
    "venues": VendorCategory.VENUE,
}


# ---- Response schema ----

class EnhancedResultItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    place_id: str = Field(alias="placeId", min_length=1)
    category: VendorCategory | None = None
    event_suitability_score: float | None = Field(default=None, alias="eventSuitabilityScore")
    description: str | None = None

    @field_validator("category", mode="before")
    @classmethod
    def _known_category(cls, value: Any) -> VendorCategory | None:
        # An unknown category is treated as absent; the fallback table fills it in
        if not isinstance(value, str):
            return None
        value = value.strip().lower()
        if value in CATEGORY_ALIASES:
            return CATEGORY_ALIASES[value]
        try:
            return VendorCategory(value)
        except ValueError:
            return None

    @field_validator("event_suitability_score")
    @classmethod
    def _clamp_score(cls, value: float | None) -> float | None:
        if value is None:
            return None
        return max(MIN_SUITABILITY, min(MAX_SUITABILITY, value))


class EnhancementPayload(BaseModel):
    enhanced_results: list[EnhancedResultItem] = Field(alias="enhancedResults")


# ---- Client ----

class ClaudeEnhancer:
    """Assess a batch of candidates with a single Claude call."""

    def __init__(
        self,
        client: anthropic.Anthropic | None,
        model: str,
        max_tokens: int = 4096,
        timeout: float = 30.0,
    ):
        self.client = client
        self.model = model
        self.max_tokens = max_tokens
        self.timeout = timeout

    @classmethod
    def from_api_key(cls, api_key: str, model: str, max_tokens: int = 4096, timeout: float = 30.0) -> ClaudeEnhancer:
        # No key means no client: every batch goes straight to the fallback table
        client = None
        if api_key:
            # One attempt per request: the SDK's built-in retries are switched off
            client = anthropic.Anthropic(api_key=api_key, max_retries=0)
        return cls(client, model, max_tokens=max_tokens, timeout=timeout)

    def close(self) -> None:
        if self.client is not None:
            self.client.close()

    def enhance(
        self,
        candidates: list[PlaceCandidate],
        query: str,
        context: EventContext | None = None,
    ) -> list[Enhancement]:
        if not candidates:
            return []
        if self.client is None:
            logger.warning("No Anthropic client configured, using fallback classification")
            return fallback_enhancements(candidates)

        prompt = build_enhancement_prompt(candidates, query, context)
        logger.info("Enhancing %d candidate(s) with %s (prompt length %d)", len(candidates), self.model, len(prompt))

        try:
            response = self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=SYSTEM_PROMPT,
                messages=[{"role": "user", "content": prompt}],
                timeout=self.timeout,
            )
            payload = parse_enhancement_response(response)
        except anthropic.AnthropicError as e:
            logger.error("Enhancement call failed, using fallback classification: %s", e)
            return fallback_enhancements(candidates)
        except EnhancementError as e:
            logger.error("Enhancement response unusable, using fallback classification: %s", e)
            return fallback_enhancements(candidates)
        except Exception:
            logger.exception("Unexpected enhancement failure, using fallback classification")
            return fallback_enhancements(candidates)

        enhancements = [
            Enhancement(
                candidate_id=item.place_id,
                category=item.category,
                suitability_score=item.event_suitability_score,
                description=item.description,
                source=EnhancementSource.MODEL,
            )
            for item in payload.enhanced_results
        ]
        logger.info("Model returned %d enhancement(s) for %d candidate(s)", len(enhancements), len(candidates))
        return enhancements


def parse_enhancement_response(response: Any) -> EnhancementPayload:
    """Decode a Messages API response into the enhancement schema.

    Raises EnhancementError when there is no text or it does not match.
    """
    text_parts = [block.text for block in getattr(response, "content", None) or [] if block.type == "text"]
    text = "\n".join(text_parts).strip()
    if not text:
        raise EnhancementError("Model returned no text")
    return parse_enhancement_text(text)


def parse_enhancement_text(text: str) -> EnhancementPayload:
    cleaned = strip_code_fences(text)
    try:
        return EnhancementPayload.model_validate_json(cleaned)
    except ValidationError as e:
        logger.debug("Unparseable enhancement response: %s", text[:3000])
        raise EnhancementError(f"Response does not match the enhancement schema: {e.error_count()} error(s)") from e


def strip_code_fences(text: str) -> str:
    """Drop ``` / ```json fence lines wrapped around a JSON body."""
    cleaned = text.strip()
    if "```" in cleaned:
        lines = cleaned.split("\n")
        lines = [line for line in lines if not line.strip().startswith("```")]
        cleaned = "\n".join(lines).strip()
    return cleaned

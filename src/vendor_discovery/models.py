"""Data models for discovery queries, place candidates and ranked results."""

from __future__ import annotations
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from vendor_discovery.errors import InvalidQueryError


class VendorCategory(str, Enum):
    VENUE = "venue"
    CATERING = "catering"
    ENTERTAINMENT = "entertainment"
    STAFFING = "staffing"
    EQUIPMENT = "equipment"
    TRANSPORTATION = "transportation"
    OTHER = "other"


class EnhancementSource(str, Enum):
    MODEL = "model"  # assessed by the language model
    FALLBACK = "fallback"  # synthesized from the provider tags


class DiscoveryState(str, Enum):
    IDLE = "idle"
    SEARCHING = "searching"
    EMPTY = "empty"
    ENHANCING = "enhancing"
    ERROR_FALLBACK = "error_fallback"
    SCORING = "scoring"
    DONE = "done"


class EventContext(BaseModel):
    """Optional event details the user gives alongside the query.

    Blank values are dropped, so every field is either meaningful text or None.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    attendee_count: str | None = None  # free text, e.g. "50" or "about 40"
    event_type: str | None = None  # e.g. "wedding", "corporate offsite"
    special_requirements: str | None = None  # e.g. "wheelchair accessible, outdoor"

    @field_validator("attendee_count", "event_type", "special_requirements", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if value is None:
            return None
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            value = str(value)
        if isinstance(value, str):
            return value.strip() or None
        return value

    @property
    def is_empty(self) -> bool:
        return not (self.attendee_count or self.event_type or self.special_requirements)


class Query(BaseModel):
    """A validated discovery request. Built once per request by build_query()."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(min_length=1)
    context: EventContext | None = None


class PhotoRef(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str  # provider resource name, e.g. "places/<id>/photos/<ref>"
    height_px: int | None = None
    width_px: int | None = None


class PlaceCandidate(BaseModel):
    """A single business returned by the place search provider."""

    id: str
    name: str
    address: str | None = None
    tags: list[str] = Field(default_factory=list)  # provider place types, in provider order
    price_level: int | None = Field(default=None, ge=0, le=4)
    rating: float | None = Field(default=None, ge=0, le=5)
    rating_count: int | None = None
    website: str | None = None
    phone: str | None = None
    photos: list[PhotoRef] = Field(default_factory=list)


class Enhancement(BaseModel):
    """Category, suitability and description for one candidate."""

    candidate_id: str
    category: VendorCategory | None = None
    suitability_score: float | None = Field(default=None, ge=1, le=10)
    description: str | None = None
    source: EnhancementSource = EnhancementSource.MODEL


class RankedResult(BaseModel):
    """A candidate merged with its enhancement and hybrid score.

    This is what callers get back; serialize with by_alias=True for the
    camelCase wire shape.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    place_id: str
    name: str
    address: str | None = None
    tags: list[str] = Field(default_factory=list)
    price_level: int | None = None
    rating: float | None = None
    rating_count: int | None = None
    website: str | None = None
    phone: str | None = None
    photos: list[PhotoRef] = Field(default_factory=list)

    category: VendorCategory
    event_suitability_score: float | None = None
    description: str = ""
    enhancement_source: EnhancementSource = EnhancementSource.MODEL

    hybrid_score: float = 0.0

    @classmethod
    def merge(cls, candidate: PlaceCandidate, enhancement: Enhancement) -> RankedResult:
        """Combine a candidate with its (already resolved) enhancement. Score is filled later."""
        return cls(
            place_id=candidate.id,
            name=candidate.name,
            address=candidate.address,
            tags=list(candidate.tags),
            price_level=candidate.price_level,
            rating=candidate.rating,
            rating_count=candidate.rating_count,
            website=candidate.website,
            phone=candidate.phone,
            photos=list(candidate.photos),
            category=enhancement.category or VendorCategory.OTHER,
            event_suitability_score=enhancement.suitability_score,
            description=enhancement.description or "",
            enhancement_source=enhancement.source,
        )


class DiscoveryResult(BaseModel):
    """The full output of a discovery run."""

    query: Query
    state: DiscoveryState
    results: list[RankedResult] = Field(default_factory=list)
    message: str | None = None

    @property
    def fell_back(self) -> bool:
        """True when at least one result was classified without the language model."""
        return any(r.enhancement_source == EnhancementSource.FALLBACK for r in self.results)


def build_query(text: Any, context: EventContext | dict | None = None) -> Query:
    """Validate raw request input into a Query.

    Raises InvalidQueryError for a missing, non-string or blank query, or a
    context that cannot be read as an EventContext.
    """
    if not isinstance(text, str) or not text.strip():
        raise InvalidQueryError("Invalid query. Query must be a non-empty string.")

    if isinstance(context, dict):
        try:
            context = EventContext.model_validate(context)
        except ValidationError as e:
            raise InvalidQueryError(f"Invalid event context: {e.error_count()} bad field(s)") from e
    elif context is not None and not isinstance(context, EventContext):
        raise InvalidQueryError("Invalid event context.")

    if context is not None and context.is_empty:
        context = None

    return Query(text=text.strip(), context=context)

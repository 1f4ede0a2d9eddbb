"""Deterministic vendor classification from provider place types.

Used whenever the language model is unavailable, returns garbage, or skips a
candidate. No I/O.
"""

from __future__ import annotations

from collections.abc import Iterable

from vendor_discovery.models import Enhancement, EnhancementSource, PlaceCandidate, VendorCategory

# Suitability given to any candidate the model did not score
NEUTRAL_SUITABILITY = 6.0

TAG_CATEGORIES: dict[str, VendorCategory] = {
    "restaurant": VendorCategory.CATERING,
    "food": VendorCategory.CATERING,
    "bakery": VendorCategory.CATERING,
    "meal_delivery": VendorCategory.CATERING,
    "meal_takeaway": VendorCategory.CATERING,
    "cafe": VendorCategory.CATERING,

    "event_venue": VendorCategory.VENUE,
    "banquet_hall": VendorCategory.VENUE,
    "wedding_hall": VendorCategory.VENUE,
    "conference_center": VendorCategory.VENUE,
    "lodging": VendorCategory.VENUE,
    "park": VendorCategory.VENUE,
    "tourist_attraction": VendorCategory.VENUE,

    "night_club": VendorCategory.ENTERTAINMENT,
    "casino": VendorCategory.ENTERTAINMENT,
    "movie_theater": VendorCategory.ENTERTAINMENT,
    "amusement_park": VendorCategory.ENTERTAINMENT,
    "aquarium": VendorCategory.ENTERTAINMENT,
    "art_gallery": VendorCategory.ENTERTAINMENT,
    "bowling_alley": VendorCategory.ENTERTAINMENT,

    "moving_company": VendorCategory.TRANSPORTATION,
    "airport_shuttle": VendorCategory.TRANSPORTATION,
    "taxi_stand": VendorCategory.TRANSPORTATION,
    "transit_station": VendorCategory.TRANSPORTATION,
    "car_rental": VendorCategory.TRANSPORTATION,
    "bus_station": VendorCategory.TRANSPORTATION,

    "store": VendorCategory.EQUIPMENT,
    "electronics_store": VendorCategory.EQUIPMENT,
    "rental": VendorCategory.EQUIPMENT,
    "furniture_store": VendorCategory.EQUIPMENT,

    "employment_agency": VendorCategory.STAFFING,
}


def classify(tags: Iterable[str] | None) -> VendorCategory:
    """Map provider tags to a category. First known tag wins, in provider order."""
    for tag in tags or ():
        category = TAG_CATEGORIES.get(tag)
        if category is not None:
            return category
    return VendorCategory.OTHER


def fallback_enhancement(candidate: PlaceCandidate) -> Enhancement:
    """Synthesize an enhancement for a candidate the model did not assess."""
    if candidate.address:
        description = f"{candidate.name} is located at {candidate.address}."
    else:
        description = f"{candidate.name}."
    return Enhancement(
        candidate_id=candidate.id,
        category=classify(candidate.tags),
        suitability_score=NEUTRAL_SUITABILITY,
        description=description,
        source=EnhancementSource.FALLBACK,
    )


def fallback_enhancements(candidates: Iterable[PlaceCandidate]) -> list[Enhancement]:
    return [fallback_enhancement(c) for c in candidates]

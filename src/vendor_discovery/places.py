"""Client for the Google Places API (New) text search and photo media endpoints."""

from __future__ import annotations

import logging
from typing import Any

import requests
from pydantic import ValidationError

from vendor_discovery.config import MAX_RESULTS_LIMIT
from vendor_discovery.errors import PlaceSearchError
from vendor_discovery.models import PhotoRef, PlaceCandidate

logger = logging.getLogger(__name__)

SEARCH_URL = "https://places.googleapis.com/v1/places:searchText"
PHOTO_BASE_URL = "https://places.googleapis.com/v1"
LEGACY_PHOTO_URL = "https://maps.googleapis.com/maps/api/place/photo"

FIELD_MASK = ",".join([
    "places.id",
    "places.displayName",
    "places.formattedAddress",
    "places.types",
    "places.priceLevel",
    "places.rating",
    "places.userRatingCount",
    "places.websiteUri",
    "places.nationalPhoneNumber",
    "places.photos",
])

PRICE_LEVELS = {
    "PRICE_LEVEL_FREE": 0,
    "PRICE_LEVEL_INEXPENSIVE": 1,
    "PRICE_LEVEL_MODERATE": 2,
    "PRICE_LEVEL_EXPENSIVE": 3,
    "PRICE_LEVEL_VERY_EXPENSIVE": 4,
}


class PlaceSearchClient:
    """Text search against the Places API.

    search() never raises: any provider problem is logged and reported as
    "no candidates", so a provider outage cannot fail a discovery request.
    """

    def __init__(
        self,
        api_key: str,
        max_results: int = MAX_RESULTS_LIMIT,
        timeout: float = 5.0,
        session: requests.Session | None = None,
    ):
        self.api_key = api_key
        self.max_results = max(1, min(max_results, MAX_RESULTS_LIMIT))
        self.timeout = timeout
        self.session = session or requests.Session()

    def close(self) -> None:
        self.session.close()

    def search(self, query: str) -> list[PlaceCandidate]:
        if not self.api_key:
            logger.warning("GOOGLE_PLACES_API_KEY is not configured; returning no candidates")
            return []
        try:
            payload = self._text_search(query)
        except (requests.RequestException, PlaceSearchError) as e:
            logger.error("Place search failed for %r: %s", query, e)
            return []

        places = payload.get("places") or []
        if not isinstance(places, list):
            logger.error("Place search returned malformed 'places' field: %r", type(places).__name__)
            return []

        candidates = []
        for place in places[: self.max_results]:
            candidate = to_candidate(place)
            if candidate is not None:
                candidates.append(candidate)
        logger.info("Place search for %r returned %d candidate(s)", query, len(candidates))
        return candidates

    def _text_search(self, query: str) -> dict[str, Any]:
        response = self.session.post(
            SEARCH_URL,
            json={
                "textQuery": query,
                "languageCode": "en",
                "maxResultCount": self.max_results,
            },
            headers={
                "Content-Type": "application/json",
                "X-Goog-Api-Key": self.api_key,
                "X-Goog-FieldMask": FIELD_MASK,
            },
            timeout=self.timeout,
        )
        if response.status_code >= 400:
            raise PlaceSearchError(f"Places API returned HTTP {response.status_code}: {response.text[:500]}")
        try:
            payload = response.json()
        except ValueError as e:
            raise PlaceSearchError("Places API returned a non-JSON body") from e
        if not isinstance(payload, dict):
            raise PlaceSearchError("Places API returned an unexpected JSON document")
        return payload

    def fetch_photo(
        self,
        reference: str,
        max_width: int | None = None,
        max_height: int | None = None,
    ) -> tuple[bytes, str]:
        """Download a place photo. Returns (content, content_type).

        Unlike search(), this raises PlaceSearchError on failure: it backs a
        client-facing proxy that has nothing sensible to return instead.
        """
        if not self.api_key:
            raise PlaceSearchError("GOOGLE_PLACES_API_KEY is not configured")
        url = photo_media_url(reference, self.api_key, max_width=max_width, max_height=max_height)
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise PlaceSearchError(f"Photo request failed: {e}") from e
        if response.status_code >= 400:
            raise PlaceSearchError(f"Photo request returned HTTP {response.status_code}")
        return response.content, response.headers.get("Content-Type", "image/jpeg")


def to_candidate(place: dict[str, Any]) -> PlaceCandidate | None:
    """Convert one Places API (New) result into a PlaceCandidate, or None if unusable."""
    if not isinstance(place, dict) or not place.get("id"):
        logger.warning("Skipping place without an id")
        return None

    display_name = place.get("displayName") or {}
    name = display_name.get("text") if isinstance(display_name, dict) else None

    try:
        return PlaceCandidate(
            id=place["id"],
            name=name or place["id"],
            address=place.get("formattedAddress"),
            tags=place.get("types") or [],
            price_level=parse_price_level(place.get("priceLevel")),
            rating=place.get("rating"),
            rating_count=place.get("userRatingCount"),
            website=place.get("websiteUri"),
            phone=place.get("nationalPhoneNumber"),
            photos=[PhotoRef.model_validate(p) for p in place.get("photos") or [] if p.get("name")],
        )
    except (ValidationError, AttributeError) as e:
        logger.warning("Skipping place %s due to parse error: %s", place.get("id"), e)
        return None


def parse_price_level(value: Any) -> int | None:
    """Price levels arrive as v1 enum strings or legacy integers 0-4."""
    if isinstance(value, str):
        return PRICE_LEVELS.get(value)
    if isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= 4:
        return value
    return None


def photo_media_url(
    reference: str,
    api_key: str,
    max_width: int | None = None,
    max_height: int | None = None,
) -> str:
    """Build a photo URL for a v1 resource name or a legacy photo reference."""
    if "places/" in reference and "/photos/" in reference:
        resource = reference if reference.endswith("/media") else f"{reference}/media"
        params = [f"maxWidthPx={max_width or 600}"]
        if max_height:
            params.append(f"maxHeightPx={max_height}")
        params.append(f"key={api_key}")
        return f"{PHOTO_BASE_URL}/{resource}?{'&'.join(params)}"

    return f"{LEGACY_PHOTO_URL}?photoreference={reference}&maxwidth={max_width or 400}&key={api_key}"

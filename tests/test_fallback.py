import pytest

from vendor_discovery.fallback import NEUTRAL_SUITABILITY, classify, fallback_enhancement, fallback_enhancements
from vendor_discovery.models import EnhancementSource, VendorCategory


@pytest.mark.parametrize(
    "tags, expected",
    [
        (["banquet_hall"], VendorCategory.VENUE),
        (["restaurant", "point_of_interest"], VendorCategory.CATERING),
        (["night_club"], VendorCategory.ENTERTAINMENT),
        (["moving_company"], VendorCategory.TRANSPORTATION),
        (["electronics_store"], VendorCategory.EQUIPMENT),
        (["employment_agency"], VendorCategory.STAFFING),
        (["point_of_interest", "establishment"], VendorCategory.OTHER),
        ([], VendorCategory.OTHER),
        (None, VendorCategory.OTHER),
    ],
)
def test_classify(tags, expected):
    assert classify(tags) == expected


def test_classify_first_known_tag_wins():
    assert classify(["point_of_interest", "bakery", "banquet_hall"]) == VendorCategory.CATERING
    assert classify(["banquet_hall", "bakery"]) == VendorCategory.VENUE


def test_classify_is_deterministic():
    tags = ["store", "night_club", "cafe"]
    assert classify(tags) == classify(list(tags))


def test_fallback_enhancement(make_candidate):
    enhancement = fallback_enhancement(make_candidate(tags=["wedding_hall"]))
    assert enhancement.candidate_id == "p1"
    assert enhancement.category == VendorCategory.VENUE
    assert enhancement.suitability_score == NEUTRAL_SUITABILITY
    assert enhancement.description == "Grand Hall is located at 1 Main St, Austin, TX."
    assert enhancement.source == EnhancementSource.FALLBACK


def test_fallback_enhancement_without_address(make_candidate):
    enhancement = fallback_enhancement(make_candidate(address=None))
    assert enhancement.description == "Grand Hall."


def test_fallback_enhancements_cover_every_candidate(make_candidate):
    candidates = [make_candidate(id=f"p{i}") for i in range(4)]
    assert [e.candidate_id for e in fallback_enhancements(candidates)] == ["p0", "p1", "p2", "p3"]

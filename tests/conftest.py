import pytest

from vendor_discovery.models import Enhancement, EnhancementSource, PlaceCandidate


class FakeSearcher:
    def __init__(self, candidates=None):
        self.candidates = candidates or []
        self.calls = []

    def search(self, query):
        self.calls.append(query)
        return list(self.candidates)


class FakeEnhancer:
    """Returns canned enhancements keyed by candidate id."""

    def __init__(self, by_id=None):
        self.by_id = by_id or {}
        self.calls = []

    def enhance(self, candidates, query, context=None):
        self.calls.append((candidates, query, context))
        return [
            Enhancement(candidate_id=cid, source=EnhancementSource.MODEL, **fields)
            for cid, fields in self.by_id.items()
        ]


@pytest.fixture
def make_candidate():
    def _make(id="p1", name="Grand Hall", **fields):
        fields.setdefault("address", "1 Main St, Austin, TX")
        return PlaceCandidate(id=id, name=name, **fields)

    return _make


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ("API_SECRET", "MAX_RESULTS", "SEARCH_TIMEOUT", "ENHANCE_TIMEOUT", "MODEL", "LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)

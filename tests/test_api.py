import pytest
from fastapi.testclient import TestClient

from conftest import FakeEnhancer, FakeSearcher
from vendor_discovery import api
from vendor_discovery.errors import PlaceSearchError
from vendor_discovery.models import PlaceCandidate, VendorCategory
from vendor_discovery.pipeline import DiscoveryPipeline


class DummyPhotos:
    def __init__(self, error=None):
        self.error = error
        self.calls = []

    def fetch_photo(self, reference, max_width=None, max_height=None):
        self.calls.append((reference, max_width, max_height))
        if self.error:
            raise self.error
        return b"\x89PNG", "image/png"


@pytest.fixture
def searcher():
    return FakeSearcher([
        PlaceCandidate(id="p1", name="Taco Stand", tags=["restaurant"], rating=3.0),
        PlaceCandidate(id="p2", name="Grand Banquet Hall", tags=["banquet_hall"], rating=4.8),
    ])


@pytest.fixture
def client(searcher):
    enhancer = FakeEnhancer({"p2": {"category": VendorCategory.VENUE, "suitability_score": 9, "description": "Big room."}})
    api.app.dependency_overrides[api.get_pipeline] = lambda: DiscoveryPipeline(searcher, enhancer)
    with TestClient(api.app) as test_client:
        yield test_client
    api.app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_discover_returns_ranked_results(client):
    response = client.post("/discover", json={
        "query": "banquet hall",
        "context": {"attendeeCount": "80", "eventType": "wedding"},
    })

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "success"
    assert [r["placeId"] for r in body["results"]] == ["p2", "p1"]
    top = body["results"][0]
    assert top["category"] == "venue"
    assert top["eventSuitabilityScore"] == 9
    assert top["description"] == "Big room."
    assert 0 <= top["hybridScore"] <= 10
    assert body["results"][1]["enhancementSource"] == "fallback"


@pytest.mark.parametrize("payload", [{}, {"query": ""}, {"query": "   "}, {"query": 42}, {"query": ["a"]}])
def test_discover_rejects_bad_query(client, searcher, payload):
    response = client.post("/discover", json=payload)
    assert response.status_code == 400
    assert searcher.calls == []


def test_discover_with_no_candidates(client, searcher):
    searcher.candidates = []
    body = client.post("/discover", json={"query": "ice sculptor on the moon"}).json()
    assert body["status"] == "success"
    assert body["results"] == []
    assert body["message"]


def test_discover_requires_secret_when_configured(client, monkeypatch):
    monkeypatch.setenv("API_SECRET", "s3cret")

    assert client.post("/discover", json={"query": "dj"}).status_code == 401
    assert client.post("/discover", json={"query": "dj"}, headers={"Authorization": "Bearer nope"}).status_code == 403
    ok = client.post("/discover", json={"query": "dj"}, headers={"Authorization": "Bearer s3cret"})
    assert ok.status_code == 200


def test_photo_proxy_requires_reference(client):
    assert client.get("/places/photo").status_code == 400


def test_photo_proxy_streams_image(client):
    photos = DummyPhotos()
    api.app.dependency_overrides[api.get_places_client] = lambda: photos

    response = client.get("/places/photo", params={"reference": "places/p1/photos/abc", "maxwidth": 300})

    assert response.status_code == 200
    assert response.content == b"\x89PNG"
    assert response.headers["content-type"] == "image/png"
    assert photos.calls == [("places/p1/photos/abc", 300, None)]


def test_photo_proxy_upstream_failure(client):
    api.app.dependency_overrides[api.get_places_client] = lambda: DummyPhotos(PlaceSearchError("404"))
    assert client.get("/places/photo", params={"reference": "places/p1/photos/abc"}).status_code == 502


class ClosingPipeline(DiscoveryPipeline):
    def __init__(self, searcher, enhancer):
        super().__init__(searcher, enhancer)
        self.closed = False

    def close(self):
        self.closed = True


def test_lifespan_shares_one_pipeline_and_closes_it(monkeypatch, searcher):
    built = []

    def fake_build(config):
        built.append(ClosingPipeline(searcher, FakeEnhancer()))
        return built[-1]

    monkeypatch.setattr(api, "build_pipeline", fake_build)
    closed_places = []
    monkeypatch.setattr(api.PlaceSearchClient, "close", lambda self: closed_places.append(self))

    with TestClient(api.app) as test_client:
        assert test_client.post("/discover", json={"query": "banquet hall"}).status_code == 200
        assert test_client.post("/discover", json={"query": "taco stand"}).status_code == 200
        assert len(built) == 1
        assert not built[0].closed
        places_client = api.app.state.places

    assert built[0].closed
    assert closed_places == [places_client]
    assert searcher.calls == ["banquet hall", "taco stand"]


def test_auth_runs_before_pipeline_lookup(monkeypatch, searcher):
    monkeypatch.setenv("API_SECRET", "s3cret")
    lookups = []

    def tracking_pipeline():
        lookups.append(1)
        return DiscoveryPipeline(searcher, FakeEnhancer())

    api.app.dependency_overrides[api.get_pipeline] = tracking_pipeline
    try:
        with TestClient(api.app) as test_client:
            assert test_client.post("/discover", json={"query": "dj"}).status_code == 401
    finally:
        api.app.dependency_overrides.clear()

    assert lookups == []
    assert searcher.calls == []

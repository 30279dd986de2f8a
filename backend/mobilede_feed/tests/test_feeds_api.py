from fastapi.testclient import TestClient

from conftest import FakeFetcher
from mobilede_feed.api.feeds import get_fetcher
from mobilede_feed.main import app

BASE_URI = "https://example.test/search?classification=Car"


def _client(fetcher: FakeFetcher) -> TestClient:
    app.dependency_overrides[get_fetcher] = lambda: fetcher
    return TestClient(app)


def teardown_function():
    app.dependency_overrides.clear()


def test_health():
    response = TestClient(app).get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_read_feed_as_xml(search_pages):
    client = _client(FakeFetcher(search_pages))

    response = client.post(
        "/v1/feeds/mobilede",
        json={"parameters": {"uri": BASE_URI, "equipment-fields": "color"}},
    )

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/xml")
    assert "<equipmentCollection>color.red</equipmentCollection>" in response.text


def test_read_feed_as_array(search_pages):
    client = _client(FakeFetcher(search_pages))

    response = client.post("/v1/feeds/mobilede?output=array", json={"parameters": {"uri": BASE_URI}})

    assert response.status_code == 200
    assert response.json()["searchResult"]["total"] == "3"


def test_missing_uri_is_unprocessable():
    response = _client(FakeFetcher()).post("/v1/feeds/mobilede", json={"parameters": {}})

    assert response.status_code == 422
    assert "uri" in response.json()["detail"]


def test_unknown_connector_is_unprocessable():
    response = _client(FakeFetcher()).post("/v1/feeds/csv", json={"parameters": {"uri": BASE_URI}})

    assert response.status_code == 422


def test_upstream_failure_is_bad_gateway():
    response = _client(FakeFetcher()).post("/v1/feeds/mobilede", json={"parameters": {"uri": BASE_URI}})

    assert response.status_code == 502
    assert "page.number=1" in response.json()["detail"]

from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from app.api import LIVENESS_TEXT
from app.main import create_app
from datastore.memory_store import InMemorySensorStore
from services.ingestion import IngestionService

FORM = "application/x-www-form-urlencoded"


@pytest.fixture
def service() -> IngestionService:
    return IngestionService(store=InMemorySensorStore(), server_label="test-server")


@pytest.fixture
def api_client(service: IngestionService, monkeypatch) -> Iterator[TestClient]:
    def build_test_service() -> IngestionService:
        return service

    build_test_service.cache_clear = lambda: None  # type: ignore[attr-defined]

    monkeypatch.setattr("app.api.build_default_service", build_test_service)
    monkeypatch.setattr("app.main.build_default_service", build_test_service)

    app = create_app()
    with TestClient(app) as client:
        yield client


def _post_json(client: TestClient, temp, hum=50) -> dict:
    response = client.post("/api/data", json={"temp": temp, "hum": hum})
    assert response.status_code == 200
    return response.json()


def test_post_form_reading(api_client: TestClient) -> None:
    response = api_client.post(
        "/api/data",
        content="temp=25.5&hum=60.0",
        headers={"Content-Type": FORM, "User-Agent": "ESP8266HTTPClient"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Data received successfully"
    assert body["count"] == 1
    assert body["server"] == "test-server"
    reading = body["data"]
    assert reading["temperature"] == 25.5
    assert reading["humidity"] == 60.0
    assert reading["client"] == "ESP8266HTTPClient"
    assert reading["timestamp"].endswith("Z")
    assert set(reading) == {"id", "timestamp", "temperature", "humidity", "receivedAt", "client"}


def test_post_json_reading(api_client: TestClient) -> None:
    body = _post_json(api_client, 18.25, 33)

    assert body["data"]["temperature"] == 18.25
    assert body["data"]["humidity"] == 33.0


def test_post_text_reading(api_client: TestClient) -> None:
    response = api_client.post(
        "/api/data",
        content="reading: temp=21.5, hum=40",
        headers={"Content-Type": "text/plain"},
    )

    assert response.status_code == 200
    assert response.json()["data"]["temperature"] == 21.5
    assert response.json()["data"]["humidity"] == 40.0


@pytest.mark.parametrize(
    ("content", "content_type"),
    [
        ("temp=hot&hum=", FORM),
        ("", FORM),
        ('{"temp": "n/a"}', "application/json"),
        ("{}", "application/json"),
        ('{"temp": 1' + "0" * 400 + "}", "application/json"),
        ("nothing useful here", "text/plain"),
    ],
)
def test_missing_or_garbage_fields_store_zero(api_client: TestClient, content, content_type) -> None:
    response = api_client.post("/api/data", content=content, headers={"Content-Type": content_type})

    assert response.status_code == 200
    reading = response.json()["data"]
    assert reading["temperature"] == 0
    assert reading["humidity"] == 0


def test_oversized_json_integer_stores_zero(api_client: TestClient) -> None:
    response = api_client.post(
        "/api/data",
        content='{"temp": 1' + "0" * 400 + ', "hum": 5}',
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 200
    reading = response.json()["data"]
    assert reading["temperature"] == 0
    assert reading["humidity"] == 5.0


def test_malformed_json_returns_structured_failure(api_client: TestClient) -> None:
    response = api_client.post(
        "/api/data",
        content="{temp: 1",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert "Malformed JSON body" in body["error"]
    assert body["help"] == "Send data as: temp=25.5&hum=60.0"

    stats = api_client.get("/api/data").json()["stats"]
    assert stats["totalRequests"] == 1
    assert stats["successfulPosts"] == 0
    assert stats["lastRequest"] is not None


def test_counters_track_posts(api_client: TestClient) -> None:
    initial = api_client.get("/api/data").json()["stats"]
    assert initial == {"totalRequests": 0, "successfulPosts": 0, "lastRequest": None}

    _post_json(api_client, 1)
    _post_json(api_client, 2)
    api_client.post("/api/data", content="{", headers={"Content-Type": "application/json"})
    api_client.get("/api/simple?temp=3&hum=4")

    stats = api_client.get("/api/data").json()["stats"]
    assert stats["totalRequests"] == 3
    assert stats["successfulPosts"] == 2


def test_history_is_capped_at_one_hundred(api_client: TestClient) -> None:
    for index in range(105):
        body = _post_json(api_client, index)

    assert body["count"] == 100

    payload = api_client.get("/api/data").json()
    assert payload["success"] is True
    assert payload["count"] == 100
    temperatures = [entry["temperature"] for entry in payload["data"]]
    assert temperatures == [float(i) for i in range(104, 4, -1)]
    ids = [entry["id"] for entry in payload["data"]]
    assert ids == sorted(ids, reverse=True)


def test_simple_endpoint_stores_strings_at_front(api_client: TestClient) -> None:
    _post_json(api_client, 5)

    response = api_client.get("/api/simple", params={"temp": "12", "hum": "34"})

    assert response.status_code == 200
    body = response.json()
    assert body["received"] is True
    entry = body["data"]
    assert entry["temperature"] == "12"
    assert entry["humidity"] == "34"
    assert entry["method"] == "GET"

    history = api_client.get("/api/data").json()["data"]
    assert history[0] == entry
    assert history[1]["temperature"] == 5.0


def test_simple_endpoint_defaults_to_zero_strings(api_client: TestClient) -> None:
    entry = api_client.get("/api/simple").json()["data"]

    assert entry["temperature"] == "0"
    assert entry["humidity"] == "0"


def test_capacity_applies_only_to_post_path(api_client: TestClient) -> None:
    for index in range(100):
        _post_json(api_client, index)
    for index in range(5):
        api_client.get("/api/simple", params={"temp": str(index), "hum": "1"})

    assert api_client.get("/api/data").json()["count"] == 105

    body = _post_json(api_client, 999)
    assert body["count"] == 100


def test_liveness_text_is_constant(api_client: TestClient) -> None:
    before = api_client.get("/api/test")
    _post_json(api_client, 1)
    after = api_client.get("/api/test")

    for response in (before, after):
        assert response.status_code == 200
        assert response.text == "OK - Node.js API is working!" == LIVENESS_TEXT
        assert response.headers["content-type"].startswith("text/plain")


def test_health_payload(api_client: TestClient) -> None:
    _post_json(api_client, 1)

    response = api_client.get("/api/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "online"
    assert body["server"] == "Arduino Sensor API"
    assert body["runtime"].startswith("Python ")
    assert body["uptime"] >= 0
    assert set(body["memory"]) == {"maxRss", "gcObjects", "gcCollections"}
    assert body["requests"]["totalRequests"] == 1
    assert body["requests"]["successfulPosts"] == 1


def test_dashboard_shows_ten_newest(api_client: TestClient) -> None:
    for index in range(1, 16):
        _post_json(api_client, 100 + index)

    response = api_client.get("/dashboard")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    html = response.text
    assert "Arduino Sensor Dashboard" in html
    assert "Total readings: 15" in html
    assert html.count('class="data-card"') == 10
    assert "Temp: 115.0&deg;C" in html
    assert "Temp: 106.0&deg;C" in html
    assert "Temp: 105.0&deg;C" not in html
    assert 'href="/api/data"' in html
    assert 'href="/api/health"' in html


def test_dashboard_counts_and_rows_share_one_snapshot(
    api_client: TestClient, service: IngestionService, monkeypatch
) -> None:
    for index in range(12):
        _post_json(api_client, index)
    calls = []
    original = service.history

    def tracked_history():
        entries = original()
        calls.append(len(entries))
        return entries

    monkeypatch.setattr(service, "history", tracked_history)

    html = api_client.get("/dashboard").text

    assert calls == [12]
    assert "Total readings: 12" in html
    assert html.count('class="data-card"') == 10


def test_dashboard_renders_simple_entries(api_client: TestClient) -> None:
    api_client.get("/api/simple", params={"temp": "12", "hum": "34"})

    html = api_client.get("/dashboard").text

    assert "Temp: 12&deg;C | Hum: 34%" in html


def test_root_lists_endpoints(api_client: TestClient) -> None:
    body = api_client.get("/").json()

    assert body["message"] == "Arduino Sensor API"
    assert body["endpoints"]["postData"] == "POST /api/data"
    assert body["endpoints"]["simple"] == "GET /api/simple?temp=25&hum=60"
    assert set(body["endpoints"]) == {"postData", "getData", "health", "test", "simple", "dashboard"}
    assert body["note"] == "Send sensor data as: temp=25.5&hum=60.0"


def test_cors_allows_any_origin(api_client: TestClient) -> None:
    response = api_client.get("/api/data", headers={"Origin": "http://device.local"})

    assert response.headers["access-control-allow-origin"] == "*"

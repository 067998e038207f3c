import pytest
from fastapi.testclient import TestClient

from main import app
from schemas.itinerary_schema import DayItinerary, DestinationOverview
from services import ai_service, itinerary_service, photo_service
from services.ai_service import AIServiceError, RateLimitError
from services.itinerary_service import build_itinerary_title

client = TestClient(app)

PARIS_REQUEST = {
    "destination": "Paris",
    "days": 1,
    "budget": "Mid-range ($100-250/day)",
    "travel_companions": "couple",
    "interests": "museums, food",
}

PARIS_DAY = {
    "day": "Day 1 - Louvre Area",
    "location": "Louvre Museum Paris",
    "google_map_url": "https://www.google.com/maps/search/Louvre+Museum+Paris",
    "morning": [{"activity": "Louvre museum visit", "details": "See the art"}],
    "afternoon": [{"activity": "Stroll along the Seine", "details": "Relaxing walk"}],
    "evening": [{"activity": "Dinner cruise", "details": "French cuisine on the river"}],
    "travel_tip": "Book museum tickets online.",
}


@pytest.fixture
def ai_itinerary(monkeypatch):
    """Replaces the AI itinerary, overview and photo lookups; returns a state dict to steer them."""
    state = {"error": None, "overview_error": None}

    async def fake_itinerary(request):
        if state["error"]:
            raise state["error"]
        return [DayItinerary(**PARIS_DAY)]

    async def fake_overview(destination):
        if state["overview_error"]:
            raise state["overview_error"]
        return DestinationOverview(destination_overview=f"All about {destination}.")

    async def fake_image(destination):
        return f"https://images.example/{destination}.jpg"

    monkeypatch.setattr(ai_service, "draft_itinerary", fake_itinerary)
    monkeypatch.setattr(ai_service, "draft_destination_overview", fake_overview)
    monkeypatch.setattr(photo_service, "fetch_destination_image", fake_image)
    return state


def _save_payload(**overrides):
    payload = {
        "title": "Perfect 1-Day Paris Couple Museums Mid-Range Itinerary",
        "itinerary": [PARIS_DAY],
        **PARIS_REQUEST,
    }
    payload.update(overrides)
    return payload


@pytest.mark.parametrize("args, expected", [
    (("Paris", 3, "Mid-range ($100-250/day)", "couple", "museums, food"),
     "Perfect 3-Day Paris Couple Museums Mid-Range Itinerary"),
    (("Rome", 5, "Budget-friendly ($50-100/day)", "solo traveler", "street food"),
     "Perfect 5-Day Rome Solo Street Food Budget Itinerary"),
    (("Kyoto", 4, "Flexible", "friends", "zen"),
     "4-Day Kyoto Itinerary"),
    (("Llanfairpwllgwyngyllgogerychwyrndrobwllllantysiliogogogoch", 7, "Mid-range ($100-250/day)", "couple", "hiking"),
     "7-Day Llanfairpwllgwyngyllgogerychwyrndrobwllllantysiliogogogoch Guide"),
])
def test_build_itinerary_title(args, expected):
    assert build_itinerary_title(*args) == expected


def test_title_stays_within_sixty_characters():
    title = build_itinerary_title("San Francisco Bay Area", 10, "Ultra-luxury ($500+/day)", "group of friends", "photography")
    assert len(title) <= 60


def test_generate_returns_budget_and_auto_saves(ai_itinerary, fake_db):
    response = client.post("/api/itinerary/generate", json=PARIS_REQUEST)
    assert response.status_code == 200
    body = response.json()

    assert body["destination"] == "Paris"
    assert body["title"] == "Perfect 1-Day Paris Couple Museums Mid-Range Itinerary"
    assert body["destination_image"] == "https://images.example/Paris.jpg"
    assert body["overview"]["destination_overview"] == "All about Paris."
    assert body["itinerary"][0]["evening"][0]["activity"] == "Dinner cruise"
    assert body["budget_breakdown"]["accommodation"]["cost"] == 110
    assert body["budget_breakdown"]["total_trip"] == 369

    assert body["saved_id"] == "1"
    stored = fake_db.data["itineraries"]["1"]
    assert stored["title"] == body["title"]
    assert stored["overview"]["destination_overview"] == "All about Paris."


def test_generate_without_overview_still_succeeds(ai_itinerary, fake_db):
    ai_itinerary["overview_error"] = AIServiceError("overview failed")
    body = client.post("/api/itinerary/generate", json=PARIS_REQUEST).json()
    assert body["overview"] is None
    assert body["saved_id"] == "1"


def test_generate_survives_storage_failure(ai_itinerary, monkeypatch):
    def broken_save(request):
        raise ValueError("The default Firebase app does not exist.")

    monkeypatch.setattr(itinerary_service, "save_itinerary", broken_save)
    response = client.post("/api/itinerary/generate", json=PARIS_REQUEST)
    assert response.status_code == 200
    assert response.json()["saved_id"] is None


def test_generate_reports_ai_failure(ai_itinerary):
    ai_itinerary["error"] = AIServiceError("Gemini API key is not configured.")
    response = client.post("/api/itinerary/generate", json=PARIS_REQUEST)
    assert response.status_code == 500
    assert response.json()["detail"] == "Gemini API key is not configured."


def test_generate_rate_limited(ai_itinerary):
    ai_itinerary["error"] = RateLimitError("Rate limit exceeded. Please try again later.")
    assert client.post("/api/itinerary/generate", json=PARIS_REQUEST).status_code == 429


@pytest.mark.parametrize("override", [
    {"days": 0},
    {"days": "two"},
    {"destination": "  "},
    {"budget": ""},
    {"interests": "   "},
])
def test_generate_rejects_invalid_input(ai_itinerary, override):
    assert client.post("/api/itinerary/generate", json={**PARIS_REQUEST, **override}).status_code == 422


def test_budget_endpoint():
    response = client.post("/api/itinerary/budget", json={
        "itinerary": [PARIS_DAY],
        "budget": "Mid-range ($100-250/day)",
        "days": 1,
        "travel_companions": "solo traveler",
    })
    assert response.status_code == 200
    body = response.json()
    assert body["total_trip"] == 205
    assert body["meals"]["cost"] == 53
    assert body["budget_range"] == "Mid-range ($100-250/day)"


def test_overview_endpoint(ai_itinerary):
    response = client.post("/api/itinerary/overview", json={"destination": "Lisbon"})
    assert response.status_code == 200
    assert response.json()["destination_overview"] == "All about Lisbon."


def test_save_assigns_sequential_ids(fake_db):
    first = client.post("/api/itinerary/save", json=_save_payload())
    second = client.post("/api/itinerary/save", json=_save_payload(destination="Lyon"))
    assert first.json() == {"success": True, "id": "1"}
    assert second.json() == {"success": True, "id": "2"}
    assert fake_db.data["itinerary_counter"] == 2


def test_itinerary_and_packing_ids_are_independent(fake_db):
    client.post("/api/itinerary/save", json=_save_payload())
    assert "packing_list_counter" not in fake_db.data


def test_save_requires_title(fake_db):
    payload = _save_payload()
    del payload["title"]
    assert client.post("/api/itinerary/save", json=payload).status_code == 422


def test_saved_itinerary_round_trip(fake_db):
    itinerary_id = client.post(
        "/api/itinerary/save",
        json=_save_payload(overview={"destinationOverview": "Lovely.", "hiddenGems": [{"name": "A", "description": "B"}]}),
    ).json()["id"]

    response = client.get(f"/api/itinerary/{itinerary_id}")
    assert response.status_code == 200
    saved = response.json()
    assert saved["id"] == "1"
    assert saved["created_at"] == saved["updated_at"]
    assert saved["itinerary"][0]["location"] == "Louvre Museum Paris"
    assert saved["overview"]["destination_overview"] == "Lovely."
    assert saved["overview"]["hidden_gems"] == [{"name": "A", "description": "B"}]


def test_get_missing_itinerary_returns_404(fake_db):
    assert client.get("/api/itinerary/42").status_code == 404


def test_list_all_newest_first(fake_db, monkeypatch):
    timestamps = iter(["2026-01-01T00:00:00+00:00", "2026-03-01T00:00:00+00:00", "2026-02-01T00:00:00+00:00"])
    monkeypatch.setattr(itinerary_service, "_now_iso", lambda: next(timestamps))
    for destination in ("Paris", "Lyon", "Nice"):
        client.post("/api/itinerary/save", json=_save_payload(destination=destination))

    response = client.get("/api/itinerary")
    assert response.status_code == 200
    assert [item["destination"] for item in response.json()] == ["Lyon", "Nice", "Paris"]


def test_list_all_empty(fake_db):
    assert client.get("/api/itinerary").json() == []

"""Integration tests for the /trip endpoints."""

from collections.abc import Iterator
from datetime import date

import pytest
from fastapi.testclient import TestClient
from prometheus_client import REGISTRY

from tripboard.app.api.deps import get_forecast_lookup, get_store
from tripboard.app.db.repositories import InMemoryTripRepository
from tripboard.app.db.seed import starter_trip
from tripboard.app.db.store import TripStore
from tripboard.app.main import app
from tripboard.app.models.common import Coordinates
from tripboard.app.models.tool_results import DayForecast

DAY = "/trip/days/day-1"


@pytest.fixture
def store() -> TripStore:
    return TripStore(InMemoryTripRepository(starter_trip()))


@pytest.fixture
def client(store: TripStore) -> Iterator[TestClient]:
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


def _ids(day: dict) -> list[str]:
    return [a["id"] for a in day["activities"]]


def _times(day: dict) -> list[tuple[str, str]]:
    return [(a["start_time"], a["end_time"]) for a in day["activities"]]


def _mutation_count(operation: str) -> float:
    return REGISTRY.get_sample_value("day_mutations_total", {"operation": operation}) or 0.0


class TestTrip:
    def test_get_trip(self, client: TestClient) -> None:
        response = client.get("/trip")

        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Japan Adventure"
        assert _ids(data["days"][0]) == ["act-1-1", "act-1-2", "act-1-3"]

    def test_empty_store_is_404(self) -> None:
        app.dependency_overrides[get_store] = lambda: TripStore(InMemoryTripRepository())
        try:
            assert TestClient(app).get("/trip").status_code == 404
        finally:
            app.dependency_overrides.clear()

    def test_put_trip_replaces_snapshot(self, client: TestClient) -> None:
        trip = client.get("/trip").json()
        trip["title"] = "Kansai"

        assert client.put("/trip", json=trip).json()["title"] == "Kansai"
        assert client.get("/trip").json()["title"] == "Kansai"

    def test_trip_expenses(self, client: TestClient) -> None:
        data = client.get("/trip/expenses").json()
        assert data["total"] == 0
        assert data["transit"] == 0

    def test_add_and_delete_day(self, client: TestClient) -> None:
        response = client.post("/trip/days")

        assert response.status_code == 201
        days = response.json()["days"]
        assert len(days) == 2
        assert days[1]["date"] == "2025-02-04"
        assert days[1]["city"] == "Tokyo"

        remaining = client.delete(f"/trip/days/{days[1]['id']}").json()["days"]
        assert [d["id"] for d in remaining] == ["day-1"]

    def test_add_day_after_non_iso_date(self, client: TestClient) -> None:
        trip = client.get("/trip").json()
        trip["days"][0]["date"] = "Feb 3"
        client.put("/trip", json=trip)

        response = client.post("/trip/days")

        assert response.status_code == 201
        assert response.json()["days"][1]["date"] == date.today().isoformat()

    def test_last_day_cannot_be_deleted(self, client: TestClient) -> None:
        response = client.delete(DAY)
        assert response.status_code == 409


class TestActivities:
    def test_delete_unknown_id_is_404_and_keeps_schedule(self, client: TestClient) -> None:
        before = client.get("/trip").json()["days"][0]

        response = client.delete(f"{DAY}/activities/zzz")

        assert response.status_code == 404
        after = client.get("/trip").json()["days"][0]
        assert _times(after) == _times(before)

    def test_delete_unknown_id_stores_nothing(self, client: TestClient) -> None:
        # PUT stores times as given, so any recalculation would be visible
        trip = client.get("/trip").json()
        trip["days"][0]["activities"][1]["start_time"] = "15:00"
        trip["days"][0]["activities"][1]["end_time"] = "16:00"
        client.put("/trip", json=trip)
        deletes = _mutation_count("delete")

        response = client.delete(f"{DAY}/activities/zzz")

        assert response.status_code == 404
        after = client.get("/trip").json()["days"][0]
        assert _times(after)[1] == ("15:00", "16:00")
        assert _mutation_count("delete") == deletes

    def test_update_unknown_id_is_404(self, client: TestClient) -> None:
        activity = client.get("/trip").json()["days"][0]["activities"][0]
        activity["id"] = "zzz"

        response = client.put(f"{DAY}/activities/zzz", json=activity)

        assert response.status_code == 404
        assert _ids(client.get("/trip").json()["days"][0]) == ["act-1-1", "act-1-2", "act-1-3"]

    def test_delete_reflows_but_keeps_anchor(self, client: TestClient) -> None:
        response = client.delete(f"{DAY}/activities/act-1-1")

        assert response.status_code == 200
        day = response.json()
        assert _ids(day) == ["act-1-2", "act-1-3"]
        assert _times(day) == [("10:00", "12:00"), ("16:00", "18:00")]

    def test_add_activity_without_providers(self, client: TestClient) -> None:
        response = client.post(f"{DAY}/activities", json={"name": "Meiji Shrine", "duration_min": 90})

        assert response.status_code == 201
        added = response.json()["activities"][-1]
        assert added["name"] == "Meiji Shrine"
        assert (added["start_time"], added["end_time"]) == ("18:30", "20:00")
        assert added["location"] == {"lat": 35.6762, "lng": 139.6503}

    def test_add_activity_at_start(self, client: TestClient) -> None:
        day = client.post(f"{DAY}/activities", json={"name": "Breakfast", "type": "food", "at_start": True}).json()

        assert day["activities"][0]["name"] == "Breakfast"
        assert day["activities"][0]["start_time"] == "10:00"
        assert day["activities"][1]["start_time"] == "11:30"

    def test_add_activity_rejects_empty_name(self, client: TestClient) -> None:
        assert client.post(f"{DAY}/activities", json={"name": ""}).status_code == 422

    def test_update_activity(self, client: TestClient) -> None:
        activity = client.get("/trip").json()["days"][0]["activities"][0]
        activity["locked_duration_minutes"] = 90

        day = client.put(f"{DAY}/activities/act-1-1", json=activity).json()

        assert _times(day)[:2] == [("10:00", "11:30"), ("12:00", "14:00")]

    def test_update_activity_id_mismatch(self, client: TestClient) -> None:
        activity = client.get("/trip").json()["days"][0]["activities"][0]
        assert client.put(f"{DAY}/activities/act-1-2", json=activity).status_code == 400

    def test_move(self, client: TestClient) -> None:
        day = client.post(f"{DAY}/activities/0/move", json={"direction": "down"}).json()
        assert _ids(day) == ["act-1-2", "act-1-1", "act-1-3"]

    def test_move_out_of_bounds_is_noop(self, client: TestClient) -> None:
        day = client.post(f"{DAY}/activities/0/move", json={"direction": "up"}).json()
        assert _ids(day) == ["act-1-1", "act-1-2", "act-1-3"]

    def test_reorder(self, client: TestClient) -> None:
        day = client.post(f"{DAY}/reorder", json={"source_index": 2, "target_index": 0}).json()
        assert _ids(day) == ["act-1-3", "act-1-1", "act-1-2"]

    def test_sort(self, client: TestClient) -> None:
        # PUT stores the snapshot as given, so the list can be out of time order
        trip = client.get("/trip").json()
        trip["days"][0]["activities"].reverse()
        client.put("/trip", json=trip)

        day = client.post(f"{DAY}/sort").json()

        assert _ids(day) == ["act-1-1", "act-1-2", "act-1-3"]
        assert _times(day) == [("10:00", "11:00"), ("11:30", "13:30"), ("16:00", "18:00")]

    def test_split(self, client: TestClient) -> None:
        response = client.post(
            f"{DAY}/activities/act-1-2/split", json={"names": ["Nintendo Tokyo", "Pokemon Center"]}
        )

        day = response.json()
        assert _ids(day) == ["act-1-1", "split-act-1-2-0", "split-act-1-2-1", "act-1-3"]
        assert _times(day)[1:3] == [("11:30", "12:30"), ("13:00", "14:00")]

    def test_accept_suggestion(self, client: TestClient) -> None:
        suggestion = {"id": "sug-1", "name": "Coffee", "type": "food", "suggested_after_id": "act-1-1"}

        day = client.post(f"{DAY}/suggestions/accept", json=suggestion).json()

        assert _ids(day) == ["act-1-1", "sug-1", "act-1-2", "act-1-3"]


class TestDay:
    def test_patch_start_time_keeps_anchor(self, client: TestClient) -> None:
        day = client.patch(DAY, json={"start_time": "09:00"}).json()

        assert day["start_time"] == "09:00"
        assert _times(day) == [("09:00", "10:00"), ("10:30", "12:30"), ("16:00", "18:00")]

    def test_patch_rejects_bad_time(self, client: TestClient) -> None:
        assert client.patch(DAY, json={"start_time": "9am"}).status_code == 422

    def test_patch_city_notes_and_hotel(self, client: TestClient) -> None:
        day = client.patch(
            DAY,
            json={
                "city": "Yokohama",
                "notes": "Pack light",
                "accommodation_name": "Hotel New Grand",
                "accommodation_location": {"lat": 35.4437, "lng": 139.6497},
            },
        ).json()

        assert day["city"] == "Yokohama"
        assert day["notes"] == "Pack light"
        assert day["accommodation"]["location"] == {"lat": 35.4437, "lng": 139.6497}

    def test_unknown_day_is_404(self, client: TestClient) -> None:
        assert client.patch("/trip/days/nope", json={"notes": "x"}).status_code == 404
        assert client.get("/trip/days/nope/expenses").status_code == 404
        assert client.post("/trip/days/nope/optimize").status_code == 404

    def test_advisories_report_anchor_overlap(self, client: TestClient) -> None:
        activity = client.get("/trip").json()["days"][0]["activities"][1]
        activity["locked_duration_minutes"] = 400
        client.put(f"{DAY}/activities/act-1-2", json=activity)

        violations = client.get(f"{DAY}/advisories").json()["violations"]

        assert [v["code"] for v in violations] == ["ANCHOR_OVERLAP"]
        assert violations[0]["affected_activity_ids"] == ["act-1-2", "act-1-3"]

    def test_optimize_without_providers_uses_placeholders(self, client: TestClient) -> None:
        response = client.post(f"{DAY}/optimize")

        assert response.status_code == 200
        data = response.json()
        assert _ids(data["day"]) == ["act-1-1", "act-1-2", "act-1-3"]
        assert [s["duration"] for s in data["day"]["travel_segments"]] == ["?", "?", "?"]
        assert data["day"]["activities"][2]["start_time"] == "16:00"
        assert data["total_duration"] == "0m"

    def test_optimize_needs_two_activities(self, client: TestClient) -> None:
        client.delete(f"{DAY}/activities/act-1-1")
        client.delete(f"{DAY}/activities/act-1-2")

        response = client.post(f"{DAY}/optimize")

        assert response.status_code == 422


class TestWeather:
    def test_day_weather(self, client: TestClient) -> None:
        calls: list[tuple[Coordinates, date]] = []

        async def lookup(location: Coordinates, day: date) -> DayForecast | None:
            calls.append((location, day))
            return DayForecast(date=day, max_temp_c=11.5, min_temp_c=3.0, weather_code=2, description="Partly cloudy")

        app.dependency_overrides[get_forecast_lookup] = lambda: lookup
        trip = client.get("/trip").json()
        trip["days"][0]["date"] = date.today().isoformat()
        client.put("/trip", json=trip)

        response = client.get(f"{DAY}/weather")

        assert response.status_code == 200
        data = response.json()
        assert data["day_id"] == "day-1"
        assert data["forecast"]["description"] == "Partly cloudy"
        assert data["forecast"]["max_temp_c"] == 11.5
        assert len(calls) == 1

    def test_weather_for_distant_day_is_null(self, client: TestClient) -> None:
        calls: list[date] = []

        async def lookup(location: Coordinates, day: date) -> DayForecast | None:
            calls.append(day)
            return None

        app.dependency_overrides[get_forecast_lookup] = lambda: lookup
        trip = client.get("/trip").json()
        trip["days"][0]["date"] = "2001-01-01"
        client.put("/trip", json=trip)

        assert client.get(f"{DAY}/weather").json()["forecast"] is None
        assert calls == []

    def test_weather_unknown_day(self, client: TestClient) -> None:
        assert client.get("/trip/days/nope/weather").status_code == 404

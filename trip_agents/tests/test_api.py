"""
Tests for the itinerary HTTP API.

Runs the FastAPI app with an isolated repository, a fixed clock and the
generative service replaced by fakes.
"""

import json
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

import trip_agents.budget.nodes.rebalance as rebalance_nodes
import trip_agents.generation.nodes.generation as generation_nodes
from trip_agents.api.itinerary_api import get_service
from trip_agents.main import app
from trip_agents.service import ItineraryService
from trip_agents.shared.contracts.itinerary import (
    BudgetBreakdown,
    Itinerary,
    ItineraryMetadata,
    TripDetails,
)
from trip_agents.shared.errors import ServiceUnavailable
from trip_agents.storage.repository import ItineraryRepository


# Fixed clock: one month before the trips below start
NOW = datetime(2026, 5, 1, 12, tzinfo=timezone.utc)
CREATED = datetime(2026, 1, 1, tzinfo=timezone.utc)
HEADERS = {"X-User-Id": "user-1"}


# ============================================================================
# Test Fixtures
# ============================================================================


def _make_itinerary(user_id="user-1", status="draft", created_at=CREATED):
    breakdown = BudgetBreakdown(
        flights=700,
        accommodation=600,
        activities=300,
        food=300,
        transportation=100,
        total_spent=2000,
        remaining_budget=0,
        daily_average=400,
    )
    return Itinerary(
        user_id=user_id,
        trip_details=TripDetails(
            destination="Lisbon",
            start_date=datetime(2026, 6, 1, tzinfo=timezone.utc),
            end_date=datetime(2026, 6, 6, tzinfo=timezone.utc),
            total_days=5,
            total_budget=2000,
        ),
        budget_breakdown=breakdown,
        status=status,
        metadata=ItineraryMetadata(generation_time=created_at, last_updated=created_at),
        created_at=created_at,
    )


def _make_trip_request(**overrides):
    data = {
        "source": "New York",
        "destination": "Lisbon",
        "start_date": "2026-06-01",
        "end_date": "2026-06-06",
        "total_budget": 2000,
        "travelers": 2,
    }
    data.update(overrides)
    return data


def _make_reply():
    return json.dumps(
        {
            "flights": [{"type": "outbound", "price": 450, "departure_time": "2026-06-01T08:00:00Z"}],
            "accommodations": [{"name": "Hotel Alfama", "total_price": 600}],
            "activities": [],
            "daily_itinerary": [{"day": 1, "date": "2026-06-01", "budget_allocated": 400}],
        }
    )


@pytest.fixture
def repository():
    return ItineraryRepository()


@pytest.fixture
def client(repository):
    app.dependency_overrides[get_service] = lambda: ItineraryService(repository, clock=lambda: NOW)
    yield TestClient(app)
    app.dependency_overrides.clear()


# ============================================================================
# App
# ============================================================================


class TestApp:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_missing_user_header_is_unauthorized(self, client):
        assert client.get("/api/itineraries").status_code == 401


# ============================================================================
# Generate
# ============================================================================


class TestGenerate:
    """Tests for POST /api/itineraries/generate."""

    def test_generates_and_stores_draft(self, client, repository, monkeypatch):
        monkeypatch.setattr(generation_nodes, "generate_text", lambda *a, **k: _make_reply())

        response = client.post("/api/itineraries/generate", json=_make_trip_request(), headers=HEADERS)

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Itinerary generated successfully"
        assert body["itinerary"]["status"] == "draft"
        assert body["itinerary"]["user_id"] == "user-1"
        assert body["itinerary"]["budget_breakdown"]["flights"] == 700
        assert repository.count("user-1") == 1

    def test_invalid_parameters_are_bad_request(self, client, repository, monkeypatch):
        monkeypatch.setattr(generation_nodes, "generate_text", lambda *a, **k: _make_reply())

        response = client.post(
            "/api/itineraries/generate", json=_make_trip_request(travelers=25), headers=HEADERS
        )

        assert response.status_code == 400
        assert repository.count("user-1") == 0

    def test_service_failure_is_bad_gateway(self, client, repository, monkeypatch):
        def failing_generate_text(prompt, sampling=None, client=None):
            raise ServiceUnavailable("timeout")

        monkeypatch.setattr(generation_nodes, "generate_text", failing_generate_text)

        response = client.post("/api/itineraries/generate", json=_make_trip_request(), headers=HEADERS)

        assert response.status_code == 502
        assert repository.count("user-1") == 0


# ============================================================================
# Read
# ============================================================================


class TestRead:
    """Tests for listing and fetching with derived statuses."""

    def test_get_derives_and_persists_status(self, client, repository):
        itinerary = repository.create(_make_itinerary())

        response = client.get(f"/api/itineraries/{itinerary.id}", headers=HEADERS)

        assert response.status_code == 200
        assert response.json()["itinerary"]["status"] == "confirmed"
        stored = repository.find_one(itinerary.id, "user-1")
        assert stored.status == "confirmed"
        assert stored.metadata.last_updated == NOW

    def test_get_other_users_itinerary_is_not_found(self, client, repository):
        itinerary = repository.create(_make_itinerary(user_id="user-2"))
        assert client.get(f"/api/itineraries/{itinerary.id}", headers=HEADERS).status_code == 404

    def test_get_unknown_is_not_found(self, client):
        assert client.get("/api/itineraries/does-not-exist", headers=HEADERS).status_code == 404

    def test_list_paginates_newest_first(self, client, repository):
        created = [
            repository.create(_make_itinerary(created_at=CREATED + timedelta(days=offset)))
            for offset in range(3)
        ]

        response = client.get("/api/itineraries?page=1&limit=2&status=all", headers=HEADERS)

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 3
        assert body["total_pages"] == 2
        assert body["current_page"] == 1
        assert [i["id"] for i in body["itineraries"]] == [created[2].id, created[1].id]
        assert all(i["status"] == "confirmed" for i in body["itineraries"])

    def test_list_filters_by_status(self, client, repository):
        repository.create(_make_itinerary())
        cancelled = repository.create(_make_itinerary(status="cancelled"))

        body = client.get("/api/itineraries?status=cancelled", headers=HEADERS).json()

        assert body["total"] == 1
        assert [i["id"] for i in body["itineraries"]] == [cancelled.id]
        assert body["itineraries"][0]["status"] == "cancelled"


# ============================================================================
# Update / Delete
# ============================================================================


class TestUpdateAndDelete:
    """Tests for PUT and DELETE."""

    def test_cancel_is_sticky(self, client, repository):
        itinerary = repository.create(_make_itinerary())

        response = client.put(f"/api/itineraries/{itinerary.id}", json={"status": "cancelled"}, headers=HEADERS)
        assert response.status_code == 200
        assert response.json()["itinerary"]["status"] == "cancelled"

        fetched = client.get(f"/api/itineraries/{itinerary.id}", headers=HEADERS).json()
        assert fetched["itinerary"]["status"] == "cancelled"

    def test_edit_merges_fields_without_changing_status(self, client, repository):
        itinerary = repository.create(_make_itinerary())

        response = client.put(
            f"/api/itineraries/{itinerary.id}",
            json={"trip_details": {"destination": "Porto"}, "metadata": {"ai_confidence_score": 0.5}},
            headers=HEADERS,
        )

        assert response.status_code == 200
        stored = repository.find_one(itinerary.id, "user-1")
        assert stored.trip_details.destination == "Porto"
        assert stored.trip_details.total_budget == 2000
        assert stored.metadata.ai_confidence_score == 0.5
        assert stored.metadata.last_updated == NOW
        assert stored.status == "draft"

    def test_date_edit_rederives_total_days(self, client, repository, monkeypatch):
        monkeypatch.setattr(rebalance_nodes, "generate_text", lambda *a, **k: "no json here")
        itinerary = repository.create(_make_itinerary())

        response = client.put(
            f"/api/itineraries/{itinerary.id}",
            json={"trip_details": {"end_date": "2026-06-21T00:00:00Z"}},
            headers=HEADERS,
        )

        assert response.status_code == 200
        assert response.json()["itinerary"]["trip_details"]["total_days"] == 20
        assert repository.find_one(itinerary.id, "user-1").trip_details.total_days == 20

        optimized = client.post(
            f"/api/itineraries/{itinerary.id}/optimize-budget", json={"new_budget": 1000}, headers=HEADERS
        )
        assert optimized.json()["itinerary"]["budget_breakdown"]["daily_average"] == 50

    @pytest.mark.parametrize(
        "changes",
        [
            {"user_id": "user-2"},
            {"status": "archived"},
            {"trip_details": {"end_date": "2026-05-01T00:00:00Z"}},
            {"trip_details": {"start_date": "2026-06-06T00:00:00Z"}},
            {"trip_details": {"end_date": "2027-06-10T00:00:00Z"}},
        ],
    )
    def test_invalid_edit_is_bad_request(self, client, repository, changes):
        itinerary = repository.create(_make_itinerary())
        response = client.put(f"/api/itineraries/{itinerary.id}", json=changes, headers=HEADERS)
        assert response.status_code == 400

    def test_delete(self, client, repository):
        itinerary = repository.create(_make_itinerary())

        response = client.delete(f"/api/itineraries/{itinerary.id}", headers=HEADERS)
        assert response.status_code == 200
        assert response.json() == {"message": "Itinerary deleted successfully"}
        assert client.delete(f"/api/itineraries/{itinerary.id}", headers=HEADERS).status_code == 404


# ============================================================================
# Optimize budget
# ============================================================================


class TestOptimizeBudget:
    """Tests for POST /api/itineraries/{id}/optimize-budget."""

    def test_fallback_result_is_persisted(self, client, repository, monkeypatch):
        def failing_generate_text(prompt, sampling=None, client=None):
            raise ServiceUnavailable("down")

        monkeypatch.setattr(rebalance_nodes, "generate_text", failing_generate_text)
        itinerary = repository.create(_make_itinerary())

        response = client.post(
            f"/api/itineraries/{itinerary.id}/optimize-budget", json={"new_budget": 1000}, headers=HEADERS
        )

        assert response.status_code == 200
        breakdown = response.json()["itinerary"]["budget_breakdown"]
        assert breakdown["flights"] == 350
        assert breakdown["total_spent"] == 950
        assert breakdown["remaining_budget"] == 50

        stored = repository.find_one(itinerary.id, "user-1")
        assert stored.trip_details.total_budget == 1000
        assert stored.ai_generated_plan.budget_breakdown.flights == 350
        assert stored.metadata.last_updated == NOW

    def test_non_positive_budget_is_bad_request(self, client, repository):
        itinerary = repository.create(_make_itinerary())
        response = client.post(
            f"/api/itineraries/{itinerary.id}/optimize-budget", json={"new_budget": 0}, headers=HEADERS
        )
        assert response.status_code == 400

    def test_unknown_itinerary_is_not_found(self, client):
        response = client.post(
            "/api/itineraries/missing/optimize-budget", json={"new_budget": 1000}, headers=HEADERS
        )
        assert response.status_code == 404

"""
Tests for the generation pipeline.

Covers trip parameter validation, prompt composition, reply
normalization, itinerary assembly and the end-to-end pipeline with the
generative service replaced by a fake.
"""

import json
from datetime import date, datetime, timedelta, timezone

import pytest

import trip_agents.generation.nodes.generation as generation_nodes
import trip_agents.generation.response_parser as response_parser
from trip_agents.generation.assembler import assemble_itinerary
from trip_agents.generation.pipeline import generate_itinerary
from trip_agents.generation.prompts.builders import (
    build_itinerary_prompt,
    build_itinerary_skeleton,
)
from trip_agents.generation.response_parser import (
    NormalizedResponse,
    coerce_number,
    extract_json_from_response,
    normalize_itinerary_response,
)
from trip_agents.shared.contracts.itinerary import BudgetBreakdown, GeneratedPlan
from trip_agents.shared.contracts.trip_parameters import (
    TripParameters,
    validate_trip_parameters,
)
from trip_agents.shared.errors import (
    GenerationError,
    IncompleteResponse,
    MalformedResponse,
    PreconditionViolation,
    ServiceUnavailable,
)


# ============================================================================
# Test Fixtures
# ============================================================================


def _make_trip_data(**overrides):
    """Create raw trip parameters for a 5-day Lisbon trip."""
    start = date.today() + timedelta(days=10)
    data = {
        "source": "New York",
        "destination": "Lisbon",
        "start_date": start.isoformat(),
        "end_date": (start + timedelta(days=5)).isoformat(),
        "total_budget": 2000,
        "travelers": 2,
        "preferences": {"budget_range": "mid-range", "interests": ["food", "history"]},
    }
    data.update(overrides)
    return data


def _make_params(**overrides):
    return TripParameters.model_validate(_make_trip_data(**overrides))


def _make_reply_data(include_breakdown=True):
    """Create a generative reply payload as a dict."""
    data = {
        "flights": [
            {
                "type": "outbound",
                "departure_city": "New York",
                "arrival_city": "Lisbon",
                "departure_time": "2026-06-01T08:00:00Z",
                "arrival_time": "2026-06-01T16:00:00Z",
                "airline": "TAP",
                "price": 450,
                "stops": 0,
            }
        ],
        "accommodations": [
            {
                "name": "Hotel Alfama",
                "check_in": "2026-06-01T15:00:00Z",
                "check_out": "2026-06-06T11:00:00Z",
                "nights": 5,
                "price_per_night": 120,
                "total_price": 600,
            }
        ],
        "activities": [{"day": 1, "activity": "Tram 28 ride", "price": 3}],
        "daily_itinerary": [
            {
                "day": 1,
                "date": "2026-06-01",
                "budget_allocated": 400,
                "morning": {"activity": "Arrival", "cost": "0"},
                "meals": {"dinner": {"restaurant": "Tasca", "estimated_cost": 40}},
                "transportation": {"type": "Metro", "cost": 10},
            }
        ],
    }
    if include_breakdown:
        data["budget_breakdown"] = {
            "flights": 900,
            "accommodation": 600,
            "activities": 150,
            "food": 250,
            "transportation": 50,
            "shopping": 0,
            "miscellaneous": 50,
            "total_spent": 2000,
            "remaining_budget": 0,
        }
    return data


def _make_reply(include_breakdown=True):
    return json.dumps(_make_reply_data(include_breakdown))


# ============================================================================
# Trip Parameters
# ============================================================================


class TestTripParameters:
    """Tests for trip parameter validation."""

    def test_total_days_derived_from_dates(self):
        """total_days is the day count between start and end."""
        assert _make_params().total_days == 5

    def test_text_inputs_are_trimmed(self):
        """Source and destination are stripped of whitespace."""
        params = _make_params(source="  New York ", destination=" Lisbon  ")
        assert params.source == "New York"
        assert params.destination == "Lisbon"

    def test_end_before_start_rejected(self):
        """End date must be after start date."""
        data = _make_trip_data()
        data["end_date"], data["start_date"] = data["start_date"], data["end_date"]
        with pytest.raises(PreconditionViolation, match="End date must be after start date"):
            validate_trip_parameters(data)

    def test_same_day_trip_rejected(self):
        """A zero-day trip violates total days >= 1."""
        data = _make_trip_data()
        data["end_date"] = data["start_date"]
        with pytest.raises(PreconditionViolation):
            validate_trip_parameters(data)

    def test_trip_longer_than_a_year_rejected(self):
        """Trips are capped at 365 days."""
        start = date.today() + timedelta(days=10)
        data = _make_trip_data(end_date=(start + timedelta(days=366)).isoformat())
        with pytest.raises(PreconditionViolation, match="365"):
            validate_trip_parameters(data)

    def test_budget_must_be_positive(self):
        with pytest.raises(PreconditionViolation, match="total_budget"):
            validate_trip_parameters(_make_trip_data(total_budget=0))

    def test_travelers_out_of_range_rejected(self):
        """Traveler count must be within [1, 20]."""
        with pytest.raises(PreconditionViolation):
            validate_trip_parameters(_make_trip_data(travelers=0))
        with pytest.raises(PreconditionViolation):
            validate_trip_parameters(_make_trip_data(travelers=21))

    def test_unknown_preference_tier_rejected(self):
        with pytest.raises(PreconditionViolation):
            validate_trip_parameters(_make_trip_data(preferences={"budget_range": "extravagant"}))


# ============================================================================
# Prompt Composer
# ============================================================================


class TestPromptComposer:
    """Tests for the itinerary prompt."""

    def test_prompt_contains_trip_facts(self):
        """Destination, ISO dates, budget and traveler count are all stated."""
        params = _make_params()
        prompt = build_itinerary_prompt(params)

        assert "Lisbon" in prompt
        assert "New York" in prompt
        assert params.start_date.isoformat() in prompt
        assert params.end_date.isoformat() in prompt
        assert "Budget: 2000 USD" in prompt
        assert "Travelers: 2" in prompt
        assert "(5 days)" in prompt

    def test_prompt_is_deterministic(self):
        params = _make_params()
        assert build_itinerary_prompt(params) == build_itinerary_prompt(params)

    def test_prompt_requests_json_only(self):
        prompt = build_itinerary_prompt(_make_params())
        assert "ONLY a valid JSON object" in prompt
        for key in ("flights", "accommodations", "activities", "daily_itinerary", "budget_breakdown"):
            assert key in prompt

    def test_missing_source_is_stated(self):
        prompt = build_itinerary_prompt(_make_params(source=None))
        assert "Source: Not specified" in prompt

    def test_skeleton_has_one_day_per_trip_day(self):
        skeleton = build_itinerary_skeleton(_make_params())
        assert [day["day"] for day in skeleton["daily_itinerary"]] == [1, 2, 3, 4, 5]

    def test_one_way_skeleton_has_single_flight(self):
        """Only round trips get a return leg."""
        assert len(build_itinerary_skeleton(_make_params())["flights"]) == 2
        assert len(build_itinerary_skeleton(_make_params(trip_type="one-way"))["flights"]) == 1


# ============================================================================
# Response Normalizer
# ============================================================================


class TestResponseNormalizer:
    """Tests for generative reply normalization."""

    def test_fenced_reply_parses_like_plain_reply(self):
        """A ```json fenced reply normalizes identically to the bare payload."""
        params = _make_params()
        plain = normalize_itinerary_response(_make_reply(), params)
        fenced = normalize_itinerary_response(f"```json\n{_make_reply()}\n```", params)

        assert fenced.plan.model_dump() == plain.plan.model_dump()
        assert fenced.budget_breakdown == plain.budget_breakdown

    def test_surrounding_prose_is_ignored(self):
        raw = f"Here is your itinerary:\n{_make_reply()}\nEnjoy your trip!"
        normalized = normalize_itinerary_response(raw, _make_params())
        assert len(normalized.plan.flights) == 1

    def test_comments_stripped_but_urls_kept(self):
        """Line and block comments are removed; '//' inside URLs survives."""
        raw = """{
          /* generated plan */
          "flights": [{"price": 450, "booking_url": "https://example.com/book"}], // one leg
          "accommodations": [],
          "daily_itinerary": []
        }"""
        normalized = normalize_itinerary_response(raw, _make_params())

        flight = normalized.plan.flights[0]
        assert flight.price == 450
        assert flight.booking_url == "https://example.com/book"

    def test_comment_markers_inside_strings_survive(self):
        raw = """{
          "flights": [{"notes": "ID // passport", "airline": "TAP /* star */"}], // one leg
          "accommodations": [], /* none booked */
          "daily_itinerary": []
        }"""
        flight = normalize_itinerary_response(raw, _make_params()).plan.flights[0]

        assert flight.notes == "ID // passport"
        assert flight.airline == "TAP /* star */"

    def test_reply_without_json_is_malformed(self):
        """No braces at all is a MalformedResponse, not an unhandled error."""
        with pytest.raises(MalformedResponse, match="No valid JSON structure"):
            normalize_itinerary_response("Sorry, I cannot plan this trip.", _make_params())

    def test_invalid_json_is_malformed_with_distinct_message(self):
        with pytest.raises(MalformedResponse, match="invalid"):
            normalize_itinerary_response('{"flights": [}', _make_params())

    def test_missing_sections_is_incomplete(self):
        with pytest.raises(IncompleteResponse, match="daily_itinerary"):
            normalize_itinerary_response('{"flights": [], "accommodations": []}', _make_params())

    def test_bad_date_clears_only_that_field(self):
        """An unparseable flight date keeps the flight with the date cleared."""
        data = _make_reply_data()
        data["flights"][0]["departure_time"] = "sometime in June"
        normalized = normalize_itinerary_response(json.dumps(data), _make_params())

        assert len(normalized.plan.flights) == 1
        flight = normalized.plan.flights[0]
        assert flight.departure_time is None
        assert flight.arrival_time == datetime(2026, 6, 1, 16, tzinfo=timezone.utc)
        assert flight.airline == "TAP"

    def test_mistyped_list_field_is_cleared(self):
        """A string where a list is expected clears that field, not the stay."""
        data = _make_reply_data()
        data["accommodations"][0]["amenities"] = "WiFi, Pool"
        normalized = normalize_itinerary_response(json.dumps(data), _make_params())

        assert len(normalized.plan.accommodations) == 1
        stay = normalized.plan.accommodations[0]
        assert stay.amenities == []
        assert stay.name == "Hotel Alfama"
        assert stay.total_price == 600

    def test_mistyped_slot_activity_is_cleared(self):
        """A list-valued slot activity keeps the day and the rest of the slot."""
        data = _make_reply_data()
        data["daily_itinerary"][0]["morning"] = {
            "activity": ["Museum", "Park"],
            "location": "Belem",
            "cost": 15,
        }
        normalized = normalize_itinerary_response(json.dumps(data), _make_params())

        assert len(normalized.plan.daily_itinerary) == 1
        day = normalized.plan.daily_itinerary[0]
        assert day.morning.activity is None
        assert day.morning.location == "Belem"
        assert day.morning.cost == 15
        assert day.transportation.cost == 10

    def test_record_still_invalid_after_clearing_is_dropped(self, monkeypatch):
        """With no clearing passes left, an invalid record is dropped whole."""
        monkeypatch.setattr(response_parser, "_MAX_CLEARING_PASSES", 0)
        data = _make_reply_data()
        data["flights"].append({"price": 90, "departure_city": ["Porto"]})

        normalized = normalize_itinerary_response(json.dumps(data), _make_params())

        assert len(normalized.plan.flights) == 1

    def test_plain_dates_become_midnight_utc(self):
        normalized = normalize_itinerary_response(_make_reply(), _make_params())
        assert normalized.plan.daily_itinerary[0].date == datetime(2026, 6, 1, tzinfo=timezone.utc)

    def test_money_fields_coerced_to_numbers(self):
        """Numeric strings become numbers; non-numeric values become 0."""
        data = _make_reply_data()
        data["flights"][0]["price"] = "$1,200"
        data["accommodations"][0]["total_price"] = "call for price"
        normalized = normalize_itinerary_response(json.dumps(data), _make_params())

        assert normalized.plan.flights[0].price == 1200
        assert normalized.plan.accommodations[0].total_price == 0
        assert normalized.plan.daily_itinerary[0].morning.cost == 0

    def test_missing_breakdown_is_none(self):
        normalized = normalize_itinerary_response(_make_reply(include_breakdown=False), _make_params())
        assert normalized.budget_breakdown is None
        assert normalized.plan.budget_breakdown is None

    def test_non_list_section_treated_as_empty(self):
        data = _make_reply_data()
        data["activities"] = "see daily plan"
        normalized = normalize_itinerary_response(json.dumps(data), _make_params())
        assert normalized.plan.activities == []

    def test_extract_json_span(self):
        assert extract_json_from_response('noise {"a": {"b": 1}} noise') == '{"a": {"b": 1}}'

    def test_coerce_number(self):
        assert coerce_number(12.5) == 12.5
        assert coerce_number("45") == 45
        assert coerce_number(None) == 0
        assert coerce_number(True) == 0


# ============================================================================
# Itinerary Assembler
# ============================================================================


class TestItineraryAssembler:
    """Tests for draft itinerary assembly."""

    def test_missing_breakdown_is_synthesized(self):
        """A reply without budget_breakdown gets the fixed-weight allocation."""
        params = _make_params()
        normalized = normalize_itinerary_response(_make_reply(include_breakdown=False), params)
        itinerary = assemble_itinerary(params, normalized, user_id="user-1")

        breakdown = itinerary.budget_breakdown
        assert breakdown.flights == 700
        assert breakdown.accommodation == 600
        assert breakdown.activities == 300
        assert breakdown.food == 300
        assert breakdown.transportation == 100
        assert breakdown.shopping == 0
        assert breakdown.miscellaneous == 0
        assert itinerary.ai_generated_plan.budget_breakdown == breakdown

    def test_all_zero_breakdown_is_synthesized(self):
        params = _make_params()
        normalized = NormalizedResponse(plan=GeneratedPlan(), budget_breakdown=BudgetBreakdown())
        itinerary = assemble_itinerary(params, normalized, user_id="user-1")
        assert itinerary.budget_breakdown.flights == 700

    def test_generated_breakdown_is_kept(self):
        params = _make_params()
        normalized = normalize_itinerary_response(_make_reply(), params)
        itinerary = assemble_itinerary(params, normalized, user_id="user-1")
        assert itinerary.budget_breakdown.flights == 900
        assert itinerary.budget_breakdown.miscellaneous == 50

    def test_draft_with_timestamps_set_to_now(self):
        params = _make_params()
        now = datetime(2026, 3, 1, 12, tzinfo=timezone.utc)
        normalized = normalize_itinerary_response(_make_reply(), params)
        itinerary = assemble_itinerary(params, normalized, user_id="user-1", now=now)

        assert itinerary.status == "draft"
        assert itinerary.user_id == "user-1"
        assert itinerary.metadata.created_with_ai is True
        assert itinerary.metadata.generation_time == now
        assert itinerary.metadata.last_updated == now
        assert itinerary.created_at == now

    def test_trip_details_snapshot(self):
        params = _make_params()
        normalized = normalize_itinerary_response(_make_reply(), params)
        details = assemble_itinerary(params, normalized, user_id="user-1").trip_details

        assert details.destination == "Lisbon"
        assert details.total_days == 5
        assert details.total_budget == 2000
        assert details.travelers == 2
        assert details.start_date.date() == params.start_date
        assert details.start_date.tzinfo is not None


# ============================================================================
# Generation Pipeline
# ============================================================================


class TestGenerationPipeline:
    """End-to-end tests of the generation graph with a fake service."""

    def test_generates_draft_itinerary(self, monkeypatch):
        prompts = []

        def fake_generate_text(prompt, sampling=None, client=None):
            prompts.append(prompt)
            return f"```json\n{_make_reply(include_breakdown=False)}\n```"

        monkeypatch.setattr(generation_nodes, "generate_text", fake_generate_text)

        itinerary = generate_itinerary(_make_trip_data(), user_id="user-1")

        assert len(prompts) == 1
        assert "Lisbon" in prompts[0]
        assert itinerary.status == "draft"
        assert itinerary.trip_details.destination == "Lisbon"
        assert itinerary.budget_breakdown.flights == 700
        assert len(itinerary.ai_generated_plan.flights) == 1

    def test_uses_given_creation_time(self, monkeypatch):
        monkeypatch.setattr(generation_nodes, "generate_text", lambda *a, **k: _make_reply())
        now = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)

        itinerary = generate_itinerary(_make_trip_data(), user_id="user-1", now=now)

        assert itinerary.created_at == now
        assert itinerary.metadata.generation_time == now

    def test_invalid_parameters_surface_as_generation_error(self, monkeypatch):
        """Precondition failures never reach the service."""
        calls = []
        monkeypatch.setattr(generation_nodes, "generate_text", lambda *a, **k: calls.append(a))

        with pytest.raises(GenerationError) as exc_info:
            generate_itinerary(_make_trip_data(travelers=0), user_id="user-1")

        assert isinstance(exc_info.value.cause, PreconditionViolation)
        assert calls == []

    def test_service_failure_surfaces_as_generation_error(self, monkeypatch):
        def failing_generate_text(prompt, sampling=None, client=None):
            raise ServiceUnavailable("timeout")

        monkeypatch.setattr(generation_nodes, "generate_text", failing_generate_text)

        with pytest.raises(GenerationError) as exc_info:
            generate_itinerary(_make_trip_data(), user_id="user-1")
        assert isinstance(exc_info.value.cause, ServiceUnavailable)

    def test_malformed_reply_surfaces_as_generation_error(self, monkeypatch):
        monkeypatch.setattr(generation_nodes, "generate_text", lambda *a, **k: "no json here")

        with pytest.raises(GenerationError) as exc_info:
            generate_itinerary(_make_trip_data(), user_id="user-1")
        assert isinstance(exc_info.value.cause, MalformedResponse)

    def test_generation_is_attempted_once(self, monkeypatch):
        """An incomplete reply is not retried."""
        calls = []

        def incomplete_generate_text(prompt, sampling=None, client=None):
            calls.append(prompt)
            return '{"flights": []}'

        monkeypatch.setattr(generation_nodes, "generate_text", incomplete_generate_text)

        with pytest.raises(GenerationError) as exc_info:
            generate_itinerary(_make_trip_data(), user_id="user-1")
        assert isinstance(exc_info.value.cause, IncompleteResponse)
        assert len(calls) == 1

"""
Tests for structured logging of itinerary events.
"""

import json
import logging
from datetime import datetime, timezone

from trip_agents.lifecycle.status import derive_status
from trip_agents.shared.contracts.itinerary import Itinerary, TripDetails
from trip_agents.shared.logging.config import (
    StructuredFormatter,
    log_itinerary_transition,
    setup_logging,
)


def _make_itinerary():
    return Itinerary(
        user_id="user-1",
        trip_details=TripDetails(
            destination="Lisbon",
            start_date=datetime(2026, 6, 1, tzinfo=timezone.utc),
            end_date=datetime(2026, 6, 6, tzinfo=timezone.utc),
            total_days=5,
            total_budget=2000,
        ),
    )


def _read_entries(path):
    with open(path) as f:
        return [json.loads(line) for line in f if line.strip()]


class TestStructuredLogging:
    """Tests for the JSON formatter and itinerary event logging."""

    def test_formatter_emits_json(self):
        record = logging.LogRecord("trip_agents", logging.WARNING, "", 0, "over budget", (), None)
        entry = json.loads(StructuredFormatter().format(record))

        assert entry["level"] == "WARNING"
        assert entry["logger"] == "trip_agents"
        assert entry["message"] == "over budget"

    def test_transition_written_to_log_file(self, tmp_path):
        log_file = tmp_path / "events.log"
        logger = setup_logging(log_file=str(log_file), logger_name="trip_agents.test_events")
        itinerary = _make_itinerary()

        try:
            log_itinerary_transition("budget_reconciled", itinerary, extra={"strategy": "fallback"}, logger=logger)
        finally:
            for handler in logger.handlers:
                handler.close()
            logger.handlers = []

        entry = _read_entries(log_file)[0]
        assert entry["message"] == "Itinerary event: budget_reconciled"
        assert entry["event"] == "budget_reconciled"
        assert entry["itinerary_id"] == itinerary.id
        assert entry["extra"]["itinerary"]["itinerary_id"] == itinerary.id
        assert entry["extra"]["itinerary"]["destination"] == "Lisbon"
        assert entry["extra"]["extra"] == {"strategy": "fallback"}

    def test_status_change_is_logged(self, tmp_path):
        log_file = tmp_path / "status.log"
        logger = setup_logging(log_file=str(log_file))
        try:
            derive_status(_make_itinerary(), datetime(2026, 6, 2, tzinfo=timezone.utc))
        finally:
            for handler in logger.handlers:
                handler.close()
            logger.handlers = []

        events = [entry.get("event") for entry in _read_entries(log_file)]
        assert "status_derived" in events

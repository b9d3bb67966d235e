"""
Structured logging configuration.

JSON log lines for itinerary lifecycle and budget events, plus the
console setup used by the application entry point.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from trip_agents.shared.contracts.itinerary import Itinerary


TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-35s | %(message)s"
TEXT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that are too chatty at INFO
NOISY_LOGGERS = ("httpcore", "httpx", "openai")


class StructuredFormatter(logging.Formatter):
    """
    Render log records as one JSON object per line.

    Records produced by log_itinerary_transition carry an "extra" payload;
    its event name and itinerary id are lifted to the top level so log
    queries can filter on them directly.
    """

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        entry: Dict[str, Any] = {
            "timestamp": created.isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        payload = getattr(record, "extra", None)
        if isinstance(payload, dict):
            entry["event"] = payload.get("event")
            entry["itinerary_id"] = payload.get("itinerary", {}).get("itinerary_id")
            entry["extra"] = payload

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        # datetimes and enums in event payloads
        return json.dumps(entry, default=str)


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    logger_name: str = "trip_agents",
    json_output: bool = True,
) -> logging.Logger:
    """
    Attach console (and optionally file) handlers to a logger.

    Replaces any handlers already on the logger, so calling it again
    reconfigures instead of duplicating output.

    Args:
        level: Logging level (default: INFO)
        log_file: Optional path of a file that receives the same records
        logger_name: Logger to configure; "" configures the root logger
        json_output: JSON lines when True, the pipe-separated text format otherwise

    Returns:
        The configured logger.
    """
    logger = logging.getLogger(logger_name or None)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if json_output:
        formatter: logging.Formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(TEXT_FORMAT, datefmt=TEXT_DATE_FORMAT)

    handlers: list = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger


def itinerary_summary(itinerary: "Itinerary") -> Dict[str, Any]:
    """Fields of an itinerary worth carrying on every event."""
    details = itinerary.trip_details
    return {
        "itinerary_id": itinerary.id,
        "user_id": itinerary.user_id,
        "status": itinerary.status,
        "destination": details.destination,
        "total_budget": details.total_budget,
        "currency": details.currency,
    }


def log_itinerary_transition(
    event: str,
    itinerary: "Itinerary",
    extra: Optional[Dict[str, Any]] = None,
    logger: Optional[logging.Logger] = None,
) -> None:
    """
    Emit an itinerary lifecycle or budget event.

    Args:
        event: Event name, e.g. "itinerary_created", "status_derived",
            "budget_reconciled"
        itinerary: Itinerary the event applies to, after the change
        extra: Event-specific context (previous status, strategy, ...)
        logger: Logger to emit on; defaults to the "trip_agents" logger
    """
    if logger is None:
        logger = logging.getLogger("trip_agents")

    payload: Dict[str, Any] = {"event": event, "itinerary": itinerary_summary(itinerary)}
    if extra:
        payload["extra"] = extra

    logger.info(f"Itinerary event: {event}", extra={"extra": payload})

"""
Response parser for generative itinerary replies.

Handles extraction of the JSON payload from free-form replies (markdown
code fences, comments, surrounding prose), then coerces dates and
monetary values so a mostly-usable reply is never rejected over a single
bad field.
"""

import json
import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import Any, Callable, Dict, List, Optional, Type

from pydantic import BaseModel, TypeAdapter, ValidationError

from trip_agents.budget.allocation import daily_average
from trip_agents.shared.contracts.itinerary import (
    BUDGET_CATEGORIES,
    Accommodation,
    Activity,
    BudgetBreakdown,
    DayPlan,
    Flight,
    GeneratedPlan,
)
from trip_agents.shared.contracts.trip_parameters import TripParameters
from trip_agents.shared.errors import IncompleteResponse, MalformedResponse


logger = logging.getLogger(__name__)


REQUIRED_SECTIONS = ("flights", "accommodations", "daily_itinerary")

_FENCE_PATTERN = re.compile(r"```[a-zA-Z]*")
_NUMBER_PATTERN = re.compile(r"-?\d+(?:\.\d+)?")

_DATETIME_ADAPTER = TypeAdapter(datetime)
_DATE_ADAPTER = TypeAdapter(date)

_PREVIEW_CHARS = 500
_MAX_CLEARING_PASSES = 3


@dataclass
class NormalizedResponse:
    """Normalized generated plan plus its breakdown, if the reply had one."""

    plan: GeneratedPlan
    budget_breakdown: Optional[BudgetBreakdown]


# =============================================================================
# JSON extraction
# =============================================================================


def strip_comments(content: str) -> str:
    """
    Remove // line comments and /* block */ comments outside JSON strings.

    Comment markers inside double-quoted strings (URLs, free-text notes)
    are left untouched. An unterminated block comment runs to the end.
    """
    out = []
    i = 0
    length = len(content)
    in_string = False

    while i < length:
        char = content[i]
        if in_string:
            out.append(char)
            if char == "\\" and i + 1 < length:
                out.append(content[i + 1])
                i += 2
                continue
            if char == '"':
                in_string = False
            i += 1
        elif char == '"':
            in_string = True
            out.append(char)
            i += 1
        elif content.startswith("//", i):
            newline = content.find("\n", i)
            i = length if newline == -1 else newline
        elif content.startswith("/*", i):
            end = content.find("*/", i + 2)
            i = length if end == -1 else end + 2
        else:
            out.append(char)
            i += 1

    return "".join(out)


def strip_wrapping(raw_response: str) -> str:
    """
    Remove common non-JSON wrapping from a reply.

    Strips markdown code fences (```json ... ```), // line comments and
    /* block */ comments.

    Args:
        raw_response: Raw reply text

    Returns:
        Cleaned text, still possibly surrounded by prose
    """
    content = raw_response.strip()
    content = _FENCE_PATTERN.sub("", content)
    content = strip_comments(content)
    return content.strip()


def extract_json_from_response(raw_response: str) -> str:
    """
    Extract the JSON object span from a reply.

    The span runs from the first "{" to the last "}" of the cleaned text.

    Args:
        raw_response: Raw reply text

    Returns:
        JSON object substring ready for parsing

    Raises:
        MalformedResponse: If no object boundaries are found
    """
    content = strip_wrapping(raw_response)

    json_start = content.find("{")
    json_end = content.rfind("}")
    if json_start == -1 or json_end == -1 or json_end < json_start:
        raise MalformedResponse("No valid JSON structure found in AI response")

    return content[json_start : json_end + 1]


def load_json_object(raw_response: str) -> Dict[str, Any]:
    """
    Extract and parse the JSON object of a reply.

    Raises:
        MalformedResponse: If no object is found, or the span fails to parse
    """
    json_str = extract_json_from_response(raw_response)

    try:
        data = json.loads(json_str)
    except json.JSONDecodeError as e:
        logger.error(
            "Failed to parse AI response JSON: %s | preview=%s",
            e,
            raw_response[:_PREVIEW_CHARS],
        )
        raise MalformedResponse(f"AI response JSON is invalid: {e}") from e

    if not isinstance(data, dict):
        raise MalformedResponse("AI response JSON is not an object")

    return data


# =============================================================================
# Field coercion
# =============================================================================


def coerce_number(value: Any) -> float:
    """
    Coerce a monetary value to a number, defaulting to 0.

    Accepts numbers and numeric strings such as "1,200" or "$45.50".
    """
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        match = _NUMBER_PATTERN.search(value.replace(",", ""))
        if match:
            return float(match.group())
    return 0


def coerce_datetime(value: Any) -> Optional[datetime]:
    """
    Coerce an ISO date or datetime string to an aware datetime.

    Plain dates become midnight UTC; naive datetimes are taken as UTC.
    Returns None when the value cannot be parsed.
    """
    if value is None or value == "":
        return None

    try:
        parsed = _DATETIME_ADAPTER.validate_python(value)
    except ValidationError:
        try:
            parsed = datetime.combine(_DATE_ADAPTER.validate_python(value), time(0))
        except ValidationError:
            return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _coerce_optional_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str) and _NUMBER_PATTERN.search(value):
        return coerce_number(value)
    return None


def _coerce_optional_int(value: Any) -> Optional[int]:
    number = _coerce_optional_number(value)
    return int(number) if number is not None else None


def _coerce_dates(record: Dict[str, Any], fields: tuple, section: str, index: int) -> None:
    for field in fields:
        if field not in record:
            continue
        parsed = coerce_datetime(record[field])
        if parsed is None and record[field] not in (None, ""):
            logger.warning(
                "Discarding unparseable date | section=%s, index=%d, field=%s, value=%r",
                section,
                index,
                field,
                record[field],
            )
        record[field] = parsed


def _coerce_money(record: Dict[str, Any], fields: tuple) -> None:
    for field in fields:
        if field in record:
            record[field] = coerce_number(record[field])


def _coerce_optional(record: Dict[str, Any], fields: tuple, coercer: Callable[[Any], Any]) -> None:
    for field in fields:
        if field in record:
            record[field] = coercer(record[field])


def _normalize_flight(record: Dict[str, Any], index: int) -> None:
    _coerce_dates(record, ("departure_time", "arrival_time", "date"), "flights", index)
    _coerce_money(record, ("price",))
    _coerce_optional(record, ("stops",), _coerce_optional_int)


def _normalize_accommodation(record: Dict[str, Any], index: int) -> None:
    _coerce_dates(record, ("check_in", "check_out"), "accommodations", index)
    _coerce_money(record, ("price_per_night", "total_price"))
    _coerce_optional(record, ("nights",), _coerce_optional_int)
    _coerce_optional(record, ("rating",), _coerce_optional_number)


def _normalize_activity(record: Dict[str, Any], index: int) -> None:
    _coerce_money(record, ("price",))
    _coerce_optional(record, ("day",), _coerce_optional_int)
    _coerce_optional(record, ("rating",), _coerce_optional_number)


def _normalize_day(record: Dict[str, Any], index: int) -> None:
    _coerce_dates(record, ("date",), "daily_itinerary", index)
    _coerce_money(record, ("budget_allocated",))
    _coerce_optional(record, ("day",), _coerce_optional_int)

    for slot in ("morning", "afternoon", "evening"):
        if isinstance(record.get(slot), dict):
            _coerce_money(record[slot], ("cost",))
        elif not isinstance(record.get(slot), (str, type(None))):
            record[slot] = None

    meals = record.get("meals")
    if isinstance(meals, dict):
        for meal in meals.values():
            if isinstance(meal, dict):
                _coerce_money(meal, ("estimated_cost",))
        for name in ("breakfast", "lunch", "dinner"):
            if not isinstance(meals.get(name), (dict, str, type(None))):
                meals[name] = None
    elif meals is not None:
        record["meals"] = None

    if isinstance(record.get("transportation"), dict):
        _coerce_money(record["transportation"], ("cost",))
    elif "transportation" in record:
        record["transportation"] = None

    weather = record.get("weather")
    if isinstance(weather, dict):
        _coerce_optional(weather, ("temperature", "humidity"), _coerce_optional_number)
    elif weather is not None:
        record["weather"] = None


_SECTION_NORMALIZERS = {
    "flights": (Flight, _normalize_flight),
    "accommodations": (Accommodation, _normalize_accommodation),
    "activities": (Activity, _normalize_activity),
    "daily_itinerary": (DayPlan, _normalize_day),
}


def _error_path(record: Dict[str, Any], loc: tuple) -> tuple:
    """Keys of the record that an error location points at, skipping union tags."""
    container: Any = record
    path = []
    for part in loc:
        if isinstance(container, dict) and isinstance(part, str) and part in container:
            path.append(part)
            container = container[part]
    return tuple(path)


def _clear_invalid_fields(record: Dict[str, Any], error: ValidationError) -> List[str]:
    paths = {_error_path(record, tuple(detail["loc"])) for detail in error.errors()}
    paths.discard(())
    # Deepest paths only; a prefix of another path is a union branch that also failed
    deepest = [p for p in paths if not any(o != p and o[: len(p)] == p for o in paths)]

    cleared = []
    for path in deepest:
        parent = record
        for key in path[:-1]:
            parent = parent[key]
        parent.pop(path[-1], None)
        cleared.append(".".join(path))
    return cleared


def _validate_record(
    record: Dict[str, Any],
    model: Type[BaseModel],
    section: str,
    index: int,
) -> Optional[BaseModel]:
    for _ in range(_MAX_CLEARING_PASSES):
        try:
            return model.model_validate(record)
        except ValidationError as e:
            cleared = _clear_invalid_fields(record, e)
            if not cleared:
                break
            logger.warning(
                "Clearing invalid fields | section=%s, index=%d, fields=%s",
                section,
                index,
                ",".join(sorted(cleared)),
            )

    try:
        return model.model_validate(record)
    except ValidationError as e:
        logger.warning(
            "Dropping invalid record | section=%s, index=%d, errors=%d",
            section,
            index,
            e.error_count(),
        )
        return None


def _normalize_section(
    records: Any,
    section: str,
    model: Type[BaseModel],
    normalizer: Callable[[Dict[str, Any], int], None],
) -> List[BaseModel]:
    if not isinstance(records, list):
        logger.warning("Section is not a list, treating as empty | section=%s", section)
        return []

    normalized = []
    for index, record in enumerate(records):
        if not isinstance(record, dict):
            logger.warning("Dropping non-object record | section=%s, index=%d", section, index)
            continue
        record = dict(record)
        normalizer(record, index)
        validated = _validate_record(record, model, section, index)
        if validated is not None:
            normalized.append(validated)
    return normalized


def normalize_budget_breakdown(data: Any) -> Optional[BudgetBreakdown]:
    """
    Coerce a breakdown mapping into a BudgetBreakdown.

    Only numeric category fields are read; missing categories default
    to 0. Returns None when data is not a mapping.
    """
    if not isinstance(data, dict):
        return None

    values = {name: coerce_number(data.get(name, 0)) for name in BUDGET_CATEGORIES}
    for total in ("total_spent", "remaining_budget"):
        if total in data:
            values[total] = coerce_number(data[total])
    if data.get("daily_average") is not None:
        values["daily_average"] = coerce_number(data["daily_average"])

    return BudgetBreakdown(**values)


# =============================================================================
# Full itinerary reply
# =============================================================================


def normalize_itinerary_response(
    raw_response: str,
    trip_parameters: TripParameters,
) -> NormalizedResponse:
    """
    Parse a generative itinerary reply into a normalized plan.

    Args:
        raw_response: Raw reply text from the generative service
        trip_parameters: Parameters the reply was generated for

    Returns:
        NormalizedResponse with the plan and its breakdown (None if absent)

    Raises:
        MalformedResponse: If no JSON object is found or it does not parse
        IncompleteResponse: If flights, accommodations or daily_itinerary is missing
    """
    data = load_json_object(raw_response)

    missing = [key for key in REQUIRED_SECTIONS if key not in data]
    if missing:
        raise IncompleteResponse(f"AI response missing required sections: {missing}")

    plan_data: Dict[str, Any] = {
        key: value
        for key, value in data.items()
        if key not in _SECTION_NORMALIZERS and key != "budget_breakdown"
    }
    for section, (model, normalizer) in _SECTION_NORMALIZERS.items():
        plan_data[section] = _normalize_section(data.get(section, []), section, model, normalizer)

    budget_breakdown = normalize_budget_breakdown(data.get("budget_breakdown"))
    plan_data["budget_breakdown"] = budget_breakdown

    plan = GeneratedPlan.model_validate(plan_data)

    logger.info(
        "Normalized AI response | destination=%s, flights=%d, accommodations=%d, "
        "activities=%d, days=%d/%d, budget_breakdown=%s",
        trip_parameters.destination,
        len(plan.flights),
        len(plan.accommodations),
        len(plan.activities),
        len(plan.daily_itinerary),
        trip_parameters.total_days,
        "present" if budget_breakdown is not None else "missing",
    )

    return NormalizedResponse(plan=plan, budget_breakdown=budget_breakdown)


# =============================================================================
# Budget-only reply
# =============================================================================


def parse_budget_response(raw_response: str, new_budget: float, total_days: int) -> BudgetBreakdown:
    """
    Parse a budget reconciliation reply.

    Accepts either {"budget_breakdown": {...}} or the breakdown object
    itself. Totals are derived from the category sum and the new budget.

    Args:
        raw_response: Raw reply text from the generative service
        new_budget: Budget the reply was asked to fit
        total_days: Trip length, for the daily average

    Returns:
        BudgetBreakdown for the new budget

    Raises:
        MalformedResponse: If no JSON object is found or it does not parse
        IncompleteResponse: If no budget category is present
    """
    data = load_json_object(raw_response)
    breakdown_data = data.get("budget_breakdown", data)

    if not isinstance(breakdown_data, dict) or not any(
        name in breakdown_data for name in BUDGET_CATEGORIES
    ):
        raise IncompleteResponse("AI response has no budget_breakdown categories")

    categories = {
        name: coerce_number(breakdown_data.get(name, 0)) for name in BUDGET_CATEGORIES
    }
    total_spent = sum(categories.values())

    return BudgetBreakdown(
        **categories,
        total_spent=total_spent,
        remaining_budget=new_budget - total_spent,
        daily_average=daily_average(new_budget, total_days),
    )

"""
FastAPI endpoints for itineraries.

Provides the REST API for generating, listing, reading, editing,
deleting and budget-optimizing a user's itineraries. The owner is taken
from the X-User-Id header.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, status
from pydantic import BaseModel, Field

from trip_agents.service import ItineraryService
from trip_agents.shared.contracts.trip_parameters import validate_trip_parameters
from trip_agents.shared.errors import (
    GenerationError,
    ItineraryNotFound,
    PreconditionViolation,
)
from trip_agents.storage.repository import ItineraryRepository


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/itineraries", tags=["itineraries"])

# In-memory store shared by all requests of this process
_repository = ItineraryRepository()


# ============================================================================
# Request/Response Models
# ============================================================================


class OptimizeBudgetRequest(BaseModel):
    """Request to re-fit an itinerary to a new budget."""

    new_budget: float = Field(description="New total budget")


class ItineraryResponse(BaseModel):
    """Single itinerary with an optional status message."""

    message: Optional[str] = None
    itinerary: Dict[str, Any]


class ItineraryListResponse(BaseModel):
    """One page of itineraries."""

    itineraries: List[Dict[str, Any]]
    total_pages: int
    current_page: int
    total: int


# ============================================================================
# Dependencies
# ============================================================================


def get_repository() -> ItineraryRepository:
    return _repository


def get_service(repository: ItineraryRepository = Depends(get_repository)) -> ItineraryService:
    return ItineraryService(repository)


def get_current_user_id(x_user_id: Optional[str] = Header(default=None)) -> str:
    """Owner of the request, from the X-User-Id header."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id header",
        )
    return x_user_id.strip()


def _to_http_error(e: Exception, _log: str) -> HTTPException:
    """Map a pipeline error to an HTTP error."""
    if isinstance(e, PreconditionViolation):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if isinstance(e, ItineraryNotFound):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Itinerary not found")
    if isinstance(e, GenerationError):
        logger.error(f"{_log}Generation failed: {e}")
        return HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to generate itinerary: {e.cause or e}",
        )
    logger.exception(f"{_log}Request failed: {e}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Server error",
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.post("/generate", response_model=ItineraryResponse, status_code=status.HTTP_201_CREATED)
def generate(
    request: Dict[str, Any],
    user_id: str = Depends(get_current_user_id),
    service: ItineraryService = Depends(get_service),
) -> ItineraryResponse:
    """
    Generate a new itinerary from trip parameters.

    Validates the parameters, runs the generation pipeline once and
    stores the resulting draft.
    """
    session_id = str(uuid.uuid4())
    _log = f"[session={session_id}] [graph=generation] [api=generate] "

    try:
        params = validate_trip_parameters(request)
        logger.info(
            f"{_log}Generation requested | user={user_id}, destination={params.destination}, "
            f"days={params.total_days}, budget={params.total_budget}"
        )
        itinerary = service.generate(user_id, params)
    except Exception as e:
        raise _to_http_error(e, _log)

    return ItineraryResponse(
        message="Itinerary generated successfully",
        itinerary=itinerary.model_dump(mode="json"),
    )


@router.get("", response_model=ItineraryListResponse)
def list_itineraries(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    status_filter: Optional[str] = Query(default=None, alias="status"),
    user_id: str = Depends(get_current_user_id),
    service: ItineraryService = Depends(get_service),
) -> ItineraryListResponse:
    """List the user's itineraries, newest first, with derived statuses."""
    _log = f"[user={user_id}] [api=list_itineraries] "

    try:
        result = service.list(user_id, page=page, limit=limit, status=status_filter)
    except Exception as e:
        raise _to_http_error(e, _log)

    return ItineraryListResponse(
        itineraries=[itinerary.model_dump(mode="json") for itinerary in result.itineraries],
        total_pages=result.total_pages,
        current_page=result.current_page,
        total=result.total,
    )


@router.get("/{itinerary_id}", response_model=ItineraryResponse)
def get_itinerary(
    itinerary_id: str,
    user_id: str = Depends(get_current_user_id),
    service: ItineraryService = Depends(get_service),
) -> ItineraryResponse:
    """Fetch one itinerary with its derived status."""
    _log = f"[itinerary={itinerary_id}] [api=get_itinerary] "

    try:
        itinerary = service.get(itinerary_id, user_id)
    except Exception as e:
        raise _to_http_error(e, _log)

    return ItineraryResponse(itinerary=itinerary.model_dump(mode="json"))


@router.put("/{itinerary_id}", response_model=ItineraryResponse)
def update_itinerary(
    itinerary_id: str,
    request: Dict[str, Any],
    user_id: str = Depends(get_current_user_id),
    service: ItineraryService = Depends(get_service),
) -> ItineraryResponse:
    """
    Partially update an itinerary.

    Accepts trip_details, preferences, ai_generated_plan,
    budget_breakdown, status and metadata. The status is never
    re-derived by an edit.
    """
    _log = f"[itinerary={itinerary_id}] [api=update_itinerary] "

    try:
        itinerary = service.update(itinerary_id, user_id, request)
    except Exception as e:
        raise _to_http_error(e, _log)

    logger.info(f"{_log}Itinerary updated | fields={sorted(request)}")
    return ItineraryResponse(
        message="Itinerary updated successfully",
        itinerary=itinerary.model_dump(mode="json"),
    )


@router.delete("/{itinerary_id}")
def delete_itinerary(
    itinerary_id: str,
    user_id: str = Depends(get_current_user_id),
    service: ItineraryService = Depends(get_service),
) -> Dict[str, str]:
    """Delete an itinerary."""
    _log = f"[itinerary={itinerary_id}] [api=delete_itinerary] "

    try:
        service.delete(itinerary_id, user_id)
    except Exception as e:
        raise _to_http_error(e, _log)

    return {"message": "Itinerary deleted successfully"}


@router.post("/{itinerary_id}/optimize-budget", response_model=ItineraryResponse)
def optimize_budget(
    itinerary_id: str,
    request: OptimizeBudgetRequest,
    user_id: str = Depends(get_current_user_id),
    service: ItineraryService = Depends(get_service),
) -> ItineraryResponse:
    """
    Re-fit an itinerary to a new total budget.

    Uses the generative service when it succeeds and proportional
    scaling otherwise; never fails for a positive budget.
    """
    _log = f"[itinerary={itinerary_id}] [graph=budget] [api=optimize_budget] "

    try:
        itinerary = service.optimize_budget(itinerary_id, user_id, request.new_budget)
    except Exception as e:
        raise _to_http_error(e, _log)

    return ItineraryResponse(
        message="Budget optimized successfully",
        itinerary=itinerary.model_dump(mode="json"),
    )

"""
Error taxonomy for the itinerary pipelines.

Generation surfaces every failure below as a single GenerationError.
Budget optimization catches them internally and falls back to
proportional scaling instead.
"""

from typing import Optional


class ItineraryPipelineError(Exception):
    """Base class for all pipeline errors."""

    pass


class PreconditionViolation(ItineraryPipelineError):
    """Raised when trip parameters are invalid, before any prompt is composed."""

    pass


class ServiceUnavailable(ItineraryPipelineError):
    """Raised when the generative service cannot be reached or times out."""

    pass


class ServiceError(ItineraryPipelineError):
    """Raised when the generative service answers with a non-success or empty reply."""

    pass


class ParseError(ItineraryPipelineError):
    """Raised when a generative reply cannot be turned into a usable payload."""

    pass


class MalformedResponse(ParseError):
    """No JSON object could be located in the reply, or it did not parse."""

    pass


class IncompleteResponse(ParseError):
    """The reply parsed as JSON but is missing mandatory sections."""

    pass


class GenerationError(ItineraryPipelineError):
    """
    Single failure surfaced by the generation path.

    Wraps the underlying pipeline error so callers can still inspect it.
    """

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.cause = cause


class ItineraryNotFound(ItineraryPipelineError):
    """Raised when no itinerary matches the given id and owner."""

    pass

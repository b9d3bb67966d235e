"""
FastAPI application entry point.

Builds the app around the itinerary router. Run with
`uvicorn trip_agents.main:app` or `python -m trip_agents.main`.

Environment:
    TRIP_AGENTS_LOG_FORMAT: "json" for structured log lines, anything
        else for the plain text format (default)
    TRIP_AGENTS_CORS_ORIGINS: Comma-separated allowed origins (default "*")
"""

import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from trip_agents.api.itinerary_api import router as itinerary_router
from trip_agents.shared.logging.config import setup_logging


APP_NAME = "Trip Agents"
APP_VERSION = "0.1.0"

# Configure the root logger once for every pipeline module
setup_logging(
    level=logging.INFO,
    logger_name="",
    json_output=os.environ.get("TRIP_AGENTS_LOG_FORMAT", "text").lower() == "json",
)


def _cors_origins() -> list:
    raw = os.environ.get("TRIP_AGENTS_CORS_ORIGINS", "*")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


app = FastAPI(
    title=APP_NAME,
    description="Itinerary generation and budget reconciliation pipelines built with LangGraph",
    version=APP_VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(itinerary_router)


@app.get("/")
async def root():
    """Service name, version and the pipelines it exposes."""
    return {
        "name": APP_NAME,
        "version": APP_VERSION,
        "pipelines": {
            "generation": "/api/itineraries/generate",
            "budget": "/api/itineraries/{itinerary_id}/optimize-budget",
            "itineraries": "/api/itineraries",
        },
    }


@app.get("/health")
async def health():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.environ.get("PORT", "8000")))

"""Generative service client utilities."""

from trip_agents.shared.llm.client import get_cached_client, generate_text, SamplingConfig

__all__ = ["get_cached_client", "generate_text", "SamplingConfig"]

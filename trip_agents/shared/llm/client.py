"""
OpenAI client for the generative text service.

Provides a cached client instance and a single-prompt generation call.
Retries are driven by tenacity but default to a single attempt: the
generation path does not retry on its own.
"""

import logging
import os
from typing import Dict, List, Optional

import openai
from openai import OpenAI
from pydantic import BaseModel, Field
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from dotenv import load_dotenv

from trip_agents.shared.errors import ServiceError, ServiceUnavailable

load_dotenv()


logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4.1-mini"

# Module-level cache for OpenAI client
_client: Optional[OpenAI] = None


def default_model() -> str:
    """Model name, overridable through TRIP_AGENTS_MODEL."""
    return os.environ.get("TRIP_AGENTS_MODEL", DEFAULT_MODEL)


class SamplingConfig(BaseModel):
    """Sampling and transport settings for one generation call."""

    model: str = Field(default_factory=default_model)
    temperature: float = Field(default=0.3, ge=0, le=2)
    top_p: float = Field(default=0.8, gt=0, le=1)
    max_output_tokens: int = Field(default=8192, ge=1)
    timeout: float = Field(default=60.0, gt=0, le=120, description="Seconds")
    max_attempts: int = Field(default=1, ge=1)
    retry_min_wait: float = Field(default=2, ge=0)
    retry_max_wait: float = Field(default=10, ge=0)


def get_cached_client() -> OpenAI:
    """
    Returns a cached instance of the OpenAI client.

    Uses the OPENAI_API_KEY environment variable for authentication.
    The client is created once and reused for all subsequent calls.
    """
    global _client
    if _client is None:
        api_key = os.environ.get("OPENAI_API_KEY")
        if not api_key:
            raise ServiceUnavailable(
                "OPENAI_API_KEY environment variable is not set. "
                "Please set it to your OpenAI API key."
            )
        _client = OpenAI(api_key=api_key)
    return _client


def _complete(
    client: OpenAI,
    messages: List[Dict[str, str]],
    sampling: SamplingConfig,
) -> str:
    try:
        response = client.chat.completions.create(
            model=sampling.model,
            messages=messages,
            temperature=sampling.temperature,
            top_p=sampling.top_p,
            max_tokens=sampling.max_output_tokens,
            timeout=sampling.timeout,
        )
    except openai.APIConnectionError as e:
        # APITimeoutError is a subclass of APIConnectionError
        raise ServiceUnavailable(f"Generative service unreachable: {e}") from e
    except openai.APIStatusError as e:
        raise ServiceError(
            f"Generative service returned status {e.status_code}: {e.message}"
        ) from e
    except openai.OpenAIError as e:
        raise ServiceError(f"Generative service call failed: {type(e).__name__}: {e}") from e

    if not response.choices or not response.choices[0].message.content:
        raise ServiceError("No response from AI service")

    if response.usage is not None:
        logger.debug(
            "Generation usage | model=%s, tokens_in=%s, tokens_out=%s",
            sampling.model,
            response.usage.prompt_tokens,
            response.usage.completion_tokens,
        )

    return response.choices[0].message.content.strip()


def generate_text(
    prompt: str,
    sampling: Optional[SamplingConfig] = None,
    client: Optional[OpenAI] = None,
) -> str:
    """
    Send a single prompt to the generative service and return its reply.

    Args:
        prompt: The complete request text
        sampling: Sampling configuration. Defaults to SamplingConfig().
        client: Optional OpenAI client instance. If not provided, uses cached client.

    Returns:
        The reply text, stripped of surrounding whitespace.

    Raises:
        ServiceUnavailable: On network errors or timeouts (after all attempts)
        ServiceError: On a non-success or empty reply, or any other client error
    """
    if sampling is None:
        sampling = SamplingConfig()
    if client is None:
        client = get_cached_client()

    messages = [{"role": "user", "content": prompt}]

    retrying = Retrying(
        stop=stop_after_attempt(sampling.max_attempts),
        wait=wait_exponential(
            multiplier=1, min=sampling.retry_min_wait, max=sampling.retry_max_wait
        ),
        retry=retry_if_exception_type(ServiceUnavailable),
        reraise=True,
    )
    return retrying(_complete, client, messages, sampling)

"""Retry utilities with exponential backoff."""

import logging

import httpx
import structlog
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from llm import LLMRateLimitError

from .config_models import RetryConfig

logger = structlog.stdlib.get_logger(__name__)

# Transport-level failures only; HTTP 4xx/5xx responses are not retried
HTTP_RETRY_EXCEPTIONS = (httpx.TransportError,)
LLM_RETRY_EXCEPTIONS = (LLMRateLimitError,)


def with_retry(
    max_attempts: int = 3,
    min_wait: float = 2.0,
    max_wait: float = 10.0,
    exceptions: tuple = (Exception,),
):
    """Generic retry decorator.

    Args:
        max_attempts: Max retry attempts
        min_wait: Min wait between retries (seconds)
        max_wait: Max wait between retries (seconds)
        exceptions: Exception types to retry on
    """
    return retry(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=1, min=min_wait, max=max_wait),
        retry=retry_if_exception_type(exceptions),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )


def http_retry(
    max_attempts: int = 3,
    min_wait: float = 2.0,
    max_wait: float = 10.0,
    exceptions: tuple = HTTP_RETRY_EXCEPTIONS,
):
    """Retry decorator for page fetches."""
    return with_retry(max_attempts, min_wait, max_wait, exceptions)


def llm_retry(
    max_attempts: int = 3,
    min_wait: float = 2.0,
    max_wait: float = 30.0,
    exceptions: tuple = LLM_RETRY_EXCEPTIONS,
):
    """Retry decorator for LLM API calls.

    Uses longer max_wait for rate limiting scenarios.
    """
    return with_retry(max_attempts, min_wait, max_wait, exceptions)


def retry_from_config(config: RetryConfig, retry_type: str = "http"):
    """Create retry decorator from the ``retry`` config section.

    Args:
        config: RetryConfig section
        retry_type: "http" or "llm"
    """
    if retry_type == "llm":
        return llm_retry(config.max_attempts, config.min_wait, config.llm_max_wait)
    return http_retry(config.max_attempts, config.min_wait, config.max_wait)

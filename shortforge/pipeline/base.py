"""
Pipeline Base
Error taxonomy for the short generation pipeline and retry logic for calls
to external generation services.
"""

import asyncio
import logging
import traceback
from functools import wraps
from typing import Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')


class PipelineError(Exception):
    """Base exception for pipeline errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class PresetValidationError(PipelineError):
    """A Style/Climate preset or request is missing required fields. Nothing was mutated."""


class JobNotFoundError(PipelineError):
    """The requested job does not exist (or is not owned by the caller)."""


class JobConflictError(PipelineError):
    """A run was requested while the job is running or cannot be restarted."""

    def __init__(self, job_id: str, status: str):
        super().__init__(
            f"Job {job_id} cannot start a run from status {status}",
            details={"job_id": job_id, "status": status},
        )
        self.job_id = job_id
        self.status = status


class StageError(PipelineError):
    """A pipeline stage failed; the job has been marked FAILED."""

    def __init__(self, stage: str, message: str, details: Optional[dict] = None):
        super().__init__(f"{stage} stage failed: {message}", details=details)
        self.stage = stage
        self.reason = message


class ExternalServiceError(PipelineError):
    """Base exception for text/image generation service errors."""

    def __init__(self, message: str, retryable: bool = True, details: Optional[dict] = None):
        super().__init__(message, details=details)
        self.retryable = retryable


class NonRetryableError(ExternalServiceError):
    """Error that should NOT be retried (e.g., invalid request, unparsable response)."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, retryable=False, details=details)


class RetryableError(ExternalServiceError):
    """Error that SHOULD be retried (e.g., API timeout, rate limit)."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, retryable=True, details=details)


class ResponseParseError(NonRetryableError):
    """Generation service answered, but not with the expected JSON document."""


def with_retry(
    max_retries: int = 3,
    retry_delay: float = 1.0,
    exponential_backoff: bool = True,
    retryable_exceptions: tuple = (RetryableError, TimeoutError, ConnectionError)
):
    """
    Decorator to add retry logic to async calls of external services.

    Args:
        max_retries: Maximum number of retry attempts
        retry_delay: Base delay between retries (seconds)
        exponential_backoff: Whether to use exponential backoff
        retryable_exceptions: Tuple of exception types that should trigger retry
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            last_exception = None

            for attempt in range(max_retries + 1):
                try:
                    return await func(*args, **kwargs)

                except retryable_exceptions as e:
                    last_exception = e

                    if attempt < max_retries:
                        delay = retry_delay * (2 ** attempt if exponential_backoff else 1)
                        logger.warning(
                            f"[Retry {attempt + 1}/{max_retries}] {func.__name__} failed: {e}. "
                            f"Retrying in {delay:.1f}s..."
                        )
                        await asyncio.sleep(delay)
                    else:
                        logger.error(
                            f"[Failed] {func.__name__} exhausted all {max_retries} retries: {e}"
                        )

                except NonRetryableError as e:
                    logger.error(f"[Non-Retryable] {func.__name__}: {e}")
                    raise

                except Exception as e:
                    logger.error(f"[Unexpected] {func.__name__}: {e}\n{traceback.format_exc()}")
                    raise

            # All retries exhausted
            raise last_exception

        return wrapper

    return decorator


__all__ = [
    "PipelineError",
    "PresetValidationError",
    "JobNotFoundError",
    "JobConflictError",
    "StageError",
    "ExternalServiceError",
    "NonRetryableError",
    "RetryableError",
    "ResponseParseError",
    "with_retry",
]

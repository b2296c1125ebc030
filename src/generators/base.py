"""
Base classes for design document generators.

This module provides the shared error types, the retry decorator used around
external API calls, and the interface every design generator implements.
"""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from functools import wraps
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

import structlog

from src.models.design_document import DesignDocument
from src.models.project_model import GameCategory

# Configure structured logging for generators
logger = structlog.get_logger(__name__)

T = TypeVar("T")


class ErrorSeverity(str, Enum):
    """Error severity levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


# Error Handling Classes

class DesignGenerationError(Exception):
    """Base exception for design generation errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        details: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.severity = severity
        self.details = details or {}
        self.original_exception = original_exception
        self.timestamp = datetime.utcnow()

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary format."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "severity": self.severity.value,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
            "original_exception": str(self.original_exception) if self.original_exception else None,
        }


class APIError(DesignGenerationError):
    """API-related errors (network, authentication, service unavailable)."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_data: Optional[Dict[str, Any]] = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.status_code = status_code
        self.response_data = response_data or {}
        self.details.update({
            "status_code": status_code,
            "response_data": response_data,
        })


class RateLimitError(APIError):
    """Rate limiting errors."""

    def __init__(self, message: str, retry_after: Optional[int] = None, **kwargs):
        super().__init__(message, severity=ErrorSeverity.LOW, **kwargs)
        self.retry_after = retry_after
        self.details.update({"retry_after": retry_after})


class GenerationTimeoutError(DesignGenerationError):
    """Request timeout errors."""

    def __init__(self, message: str, timeout_duration: Optional[float] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.timeout_duration = timeout_duration
        self.details.update({"timeout_duration": timeout_duration})


def with_retry(
    max_retries: int = 3,
    backoff_factor: float = 1.0,
    backoff_max: float = 60.0,
    retry_on: tuple = (APIError, GenerationTimeoutError),
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """
    Decorator to add retry logic to async methods.

    Args:
        max_retries: Maximum number of retry attempts
        backoff_factor: Exponential backoff factor
        backoff_max: Maximum backoff time in seconds
        retry_on: Tuple of exception types to retry on
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            for attempt in range(max_retries + 1):
                try:
                    return await func(*args, **kwargs)

                except retry_on as e:
                    if attempt == max_retries:
                        logger.error(
                            "Max retries exceeded",
                            attempt=attempt,
                            max_retries=max_retries,
                            error=str(e),
                            func_name=func.__name__,
                        )
                        raise

                    backoff_time = min(backoff_factor * (2 ** attempt), backoff_max)
                    if isinstance(e, RateLimitError) and e.retry_after:
                        backoff_time = max(backoff_time, e.retry_after)

                    logger.warning(
                        "Retrying after error",
                        attempt=attempt + 1,
                        max_retries=max_retries,
                        backoff_time=backoff_time,
                        error=str(e),
                        func_name=func.__name__,
                    )
                    await asyncio.sleep(backoff_time)

            raise DesignGenerationError("Unexpected error in retry logic")

        return wrapper
    return decorator


@dataclass
class DesignDraft:
    """What a generator derives from a prompt."""
    category: GameCategory
    name: str
    design: DesignDocument
    source: str = "offline"


class DesignGenerator(ABC):
    """
    Abstract base class for design document generators.

    Implementations turn a free-text game description into a category, a
    name and a canonical design document.
    """

    def __init__(self, name: Optional[str] = None):
        self.name = name or self.__class__.__name__
        self.logger = structlog.get_logger(self.__class__.__module__).bind(generator=self.name)

    @abstractmethod
    async def generate(self, prompt: str) -> DesignDraft:
        """Derive a design draft from a prompt."""

    async def close(self) -> None:
        """Release any resources held by the generator."""

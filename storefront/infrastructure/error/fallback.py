"""
Ordered fallback across catalog sources.
Tries each source in priority order until one answers.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Generic, List, Optional, Sequence, TypeVar

from pydantic import BaseModel

from storefront.core.exceptions import SourceTimeout
from storefront.core.logging import source_context
from storefront.infrastructure.error.handler import ErrorDetails, ErrorHandler

T = TypeVar("T")


class SourceAttempt(BaseModel):
    """Outcome of calling one source during a fallback run."""
    source: str
    succeeded: bool
    error: Optional[ErrorDetails] = None


@dataclass
class FallbackResult(Generic[T]):
    """Value returned by a fallback run plus the trail of attempts."""

    value: T
    source: Optional[str] = None
    attempts: List[SourceAttempt] = field(default_factory=list)

    @property
    def exhausted(self) -> bool:
        return self.source is None

    @property
    def attempted_sources(self) -> List[str]:
        return [attempt.source for attempt in self.attempts]


class FallbackHandler:
    """
    Runs one operation against an ordered list of sources.

    Sources are awaited one at a time, never concurrently. The first
    source that returns wins; a source that raises or runs past the
    timeout is logged and the next one is tried. When every source has
    failed the default value is returned instead of an error.
    """

    def __init__(self, logger: logging.Logger, error_handler: Optional[ErrorHandler] = None):
        """
        Initialize the fallback handler.

        Args:
            logger: Logger instance for fallback operations
            error_handler: Categorizes and logs source failures
        """
        self.logger = logger
        self.error_handler = error_handler or ErrorHandler(logger)

    async def execute(
        self,
        operation: str,
        sources: Sequence,
        call: Callable[[object], Awaitable[T]],
        default_factory: Callable[[], T],
        timeout: Optional[float] = None,
    ) -> FallbackResult[T]:
        """
        Execute an operation with fallback.

        Args:
            operation: Operation name for logs, e.g. "get_all_products"
            sources: Sources in priority order; each has a ``name``
            call: Coroutine function invoked with one source
            default_factory: Builds the value returned on exhaustion
            timeout: Seconds allowed per source attempt

        Returns:
            FallbackResult: The winning value and source, or the default
        """
        attempts: List[SourceAttempt] = []

        for source in sources:
            with source_context(source.name):
                try:
                    if timeout:
                        value = await asyncio.wait_for(call(source), timeout=timeout)
                    else:
                        value = await call(source)
                except asyncio.TimeoutError as e:
                    error = SourceTimeout(source.name, timeout=timeout, context={"operation": operation})
                    error.__cause__ = e
                    details = self.error_handler.handle_error(error, source.name, {"operation": operation})
                    attempts.append(SourceAttempt(source=source.name, succeeded=False, error=details))
                    continue
                except Exception as e:
                    details = self.error_handler.handle_error(e, source.name, {"operation": operation})
                    attempts.append(SourceAttempt(source=source.name, succeeded=False, error=details))
                    continue

            attempts.append(SourceAttempt(source=source.name, succeeded=True))
            if len(attempts) > 1:
                self.logger.info(
                    f"{operation} served by fallback source '{source.name}'",
                    extra={"operation": operation, "attempted": [a.source for a in attempts]}
                )
            return FallbackResult(value=value, source=source.name, attempts=attempts)

        self.logger.warning(
            f"{operation}: no catalog source available, returning empty result",
            extra={"operation": operation, "attempted": [a.source for a in attempts]}
        )
        return FallbackResult(value=default_factory(), source=None, attempts=attempts)

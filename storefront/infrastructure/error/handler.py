"""
Error handling for catalog source calls.
Provides centralized error categorization and logging.
"""
import asyncio
import logging
import traceback
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel

from storefront.core.exceptions import (
    MappingError,
    SourceAuthenticationError,
    SourceMisconfigured,
    SourceTimeout,
    SourceUnavailable,
)


class ErrorCategory(str, Enum):
    """Categorization of errors for processing and reporting."""
    AUTHENTICATION = "authentication"
    CONFIGURATION = "configuration"
    CONNECTION = "connection"
    TIMEOUT = "timeout"
    MAPPING = "mapping"
    EXTERNAL_API = "external_api"
    UNKNOWN = "unknown"


class ErrorSeverity(str, Enum):
    """Severity levels for errors."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorDetails(BaseModel):
    """Structured error details for consistency in logging and reporting."""
    timestamp: datetime
    category: ErrorCategory
    severity: ErrorSeverity
    message: str
    source: str
    error_code: Optional[str] = None
    http_status_code: Optional[int] = None
    context: Dict[str, Any] = {}
    stacktrace: Optional[str] = None


class ErrorHandler:
    """
    Central error processing class that categorizes errors raised while
    talking to a catalog source and logs them at a matching level.
    """

    # Most specific first; the first isinstance match wins.
    EXCEPTION_MAP = (
        (SourceMisconfigured, ErrorCategory.CONFIGURATION, ErrorSeverity.HIGH),
        (SourceAuthenticationError, ErrorCategory.AUTHENTICATION, ErrorSeverity.HIGH),
        (SourceTimeout, ErrorCategory.TIMEOUT, ErrorSeverity.MEDIUM),
        (asyncio.TimeoutError, ErrorCategory.TIMEOUT, ErrorSeverity.MEDIUM),
        (MappingError, ErrorCategory.MAPPING, ErrorSeverity.LOW),
        (SourceUnavailable, ErrorCategory.CONNECTION, ErrorSeverity.MEDIUM),
    )

    def __init__(self, logger: logging.Logger):
        """
        Initialize the error handler.

        Args:
            logger: Logger instance for error logging
        """
        self.logger = logger

    def handle_error(
        self,
        exception: Exception,
        source: str,
        context: Dict[str, Any] = None,
    ) -> ErrorDetails:
        """
        Categorize and log an error.

        Args:
            exception: The exception that occurred
            source: Name of the catalog source that raised it
            context: Additional context about the error

        Returns:
            ErrorDetails: Structured details about the error
        """
        error_details = self.categorize_error(exception, source, context or {})
        self.log_error(error_details)
        return error_details

    def categorize_error(
        self,
        exception: Exception,
        source: str,
        context: Dict[str, Any],
    ) -> ErrorDetails:
        """
        Categorize an error based on the exception type and build error details.

        Args:
            exception: The exception that occurred
            source: Source identifier
            context: Additional context about the error

        Returns:
            ErrorDetails: Structured details about the error
        """
        category = ErrorCategory.UNKNOWN
        severity = ErrorSeverity.HIGH

        for exception_type, mapped_category, mapped_severity in self.EXCEPTION_MAP:
            if isinstance(exception, exception_type):
                category, severity = mapped_category, mapped_severity
                break

        http_status_code = None
        error_code = getattr(exception, "code", None)
        merged_context = dict(context)

        exception_context = getattr(exception, "context", None)
        if isinstance(exception_context, dict):
            merged_context.update(exception_context)
            http_status_code = exception_context.get("http_status")

        if http_status_code is not None and http_status_code >= 500 and category == ErrorCategory.CONNECTION:
            category = ErrorCategory.EXTERNAL_API

        stacktrace = None
        if exception.__traceback__ is not None:
            stacktrace = "".join(traceback.format_exception(type(exception), exception, exception.__traceback__))

        return ErrorDetails(
            timestamp=datetime.now(timezone.utc),
            category=category,
            severity=severity,
            message=str(exception) or type(exception).__name__,
            source=source,
            error_code=error_code if isinstance(error_code, str) else None,
            http_status_code=http_status_code,
            context=merged_context,
            stacktrace=stacktrace,
        )

    def log_error(self, error_details: ErrorDetails) -> None:
        """
        Log error details at the appropriate level.

        Args:
            error_details: Structured error information
        """
        log_data = {
            "category": error_details.category.value,
            "severity": error_details.severity.value,
            "source": error_details.source,
        }
        if error_details.error_code:
            log_data["error_code"] = error_details.error_code
        if error_details.http_status_code:
            log_data["http_status_code"] = error_details.http_status_code
        if error_details.context:
            log_data["context"] = error_details.context

        message = f"{error_details.source}: {error_details.message}"

        if error_details.severity == ErrorSeverity.CRITICAL:
            self.logger.critical(message, extra=log_data)
        elif error_details.severity == ErrorSeverity.HIGH:
            self.logger.error(message, extra=log_data)
            # Unknown errors are bugs rather than outages
            if error_details.category == ErrorCategory.UNKNOWN and error_details.stacktrace:
                self.logger.error(f"Stacktrace:\n{error_details.stacktrace}")
        elif error_details.severity == ErrorSeverity.MEDIUM:
            self.logger.warning(message, extra=log_data)
        else:
            self.logger.info(message, extra=log_data)

from fastapi import status
from typing import Any, Dict, Optional, Union


class APIException(Exception):
    """
    Base exception for API errors.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail: str = "An unexpected error occurred",
        code: str = "internal_error",
        context: Optional[Dict[str, Any]] = None
    ):
        self.status_code = status_code
        self.detail = detail
        self.code = code
        self.context = context or {}
        super().__init__(self.detail)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to a dictionary for consistent response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.detail,
                "status_code": self.status_code,
                "context": self.context
            }
        }


class SourceUnavailable(APIException):
    """
    Raised when a catalog source cannot be reached or refuses the request.

    The catalog service recovers from this by moving on to the next source,
    so it never reaches page code.
    """

    def __init__(
        self,
        source: str,
        detail: Optional[str] = None,
        code: str = "source_unavailable",
        status_code: int = status.HTTP_503_SERVICE_UNAVAILABLE,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        merged_context = {"source": source}
        if context:
            merged_context.update(context)

        super().__init__(
            status_code=status_code,
            detail=detail or f"Catalog source '{source}' is unavailable",
            code=code,
            context=merged_context
        )
        self.source = source
        self.original_exception = original_exception

        if original_exception is not None:
            self.context["original_error"] = str(original_exception)


class SourceTimeout(SourceUnavailable):
    """Raised when a source does not answer within its time budget."""

    def __init__(
        self,
        source: str,
        timeout: Optional[float] = None,
        detail: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        merged_context = {"timeout_seconds": timeout} if timeout is not None else {}
        if context:
            merged_context.update(context)

        super().__init__(
            source=source,
            detail=detail or f"Catalog source '{source}' timed out",
            code="source_timeout",
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            context=merged_context,
            original_exception=original_exception
        )


class SourceAuthenticationError(SourceUnavailable):
    """Raised when a source rejects the configured credentials."""

    def __init__(
        self,
        source: str,
        detail: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        super().__init__(
            source=source,
            detail=detail or f"Catalog source '{source}' rejected the credentials",
            code="source_authentication_error",
            status_code=status.HTTP_502_BAD_GATEWAY,
            context=context,
            original_exception=original_exception
        )


class SourceMisconfigured(SourceUnavailable):
    """Raised when a source is switched on but its URL or credentials are missing."""

    def __init__(
        self,
        source: str,
        missing: Optional[list] = None,
        detail: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        merged_context = {"missing": list(missing)} if missing else {}
        if context:
            merged_context.update(context)

        super().__init__(
            source=source,
            detail=detail or f"Catalog source '{source}' is enabled but not configured",
            code="source_misconfigured",
            context=merged_context
        )


class MappingError(APIException):
    """Raised when a source record cannot be coerced into the normalized shape."""

    def __init__(
        self,
        source: str,
        detail: str = "Record could not be normalized",
        record_id: Optional[Union[str, int]] = None,
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        merged_context: Dict[str, Any] = {"source": source}
        if record_id is not None:
            merged_context["record_id"] = str(record_id)
        if field:
            merged_context["field"] = field
        if context:
            merged_context.update(context)

        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=detail,
            code="mapping_error",
            context=merged_context
        )
        self.source = source
        self.record_id = record_id
        self.field = field


class NotFoundError(APIException):
    """Exception raised when a requested resource is not found."""

    def __init__(
        self,
        resource_type: str,
        resource_id: Union[str, int],
        detail: Optional[str] = None,
        code: str = "not_found_error",
        context: Optional[Dict[str, Any]] = None
    ):
        if detail is None:
            detail = f"{resource_type} '{resource_id}' not found"

        merged_context = {
            "resource_type": resource_type,
            "resource_id": str(resource_id)
        }
        if context:
            merged_context.update(context)

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            code=code,
            context=merged_context
        )

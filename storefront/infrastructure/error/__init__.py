from storefront.infrastructure.error.handler import ErrorCategory, ErrorDetails, ErrorHandler, ErrorSeverity
from storefront.infrastructure.error.fallback import FallbackHandler, FallbackResult, SourceAttempt

__all__ = [
    "ErrorCategory",
    "ErrorDetails",
    "ErrorHandler",
    "ErrorSeverity",
    "FallbackHandler",
    "FallbackResult",
    "SourceAttempt",
]

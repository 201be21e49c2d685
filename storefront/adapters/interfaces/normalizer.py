import html
import re
from abc import ABC, abstractmethod
from functools import wraps
from typing import Any, Dict, Generic, Iterable, List, Optional, TypeVar

from storefront.core.exceptions import MappingError
from storefront.domain.models import Category, Product

# Type variable for the raw record shape of a backend
T = TypeVar("T")

_TAG_RE = re.compile(r"<[^>]+>")
_WS_RE = re.compile(r"\s+")

# Errors a wrongly typed field can raise deep inside a mapping
_SHAPE_ERRORS = (TypeError, ValueError, AttributeError, KeyError, ArithmeticError)


def maps_record(func):
    """
    Decorator for normalizer methods that map one raw record.

    Any error caused by a field of the wrong type is reported as
    ``MappingError`` so batch callers skip the record instead of failing.

    Args:
        func: Normalizer method taking the raw record as its first argument

    Returns:
        Callable: Decorated method
    """
    @wraps(func)
    def wrapper(self, raw_data, *args, **kwargs):
        try:
            return func(self, raw_data, *args, **kwargs)
        except MappingError:
            raise
        except _SHAPE_ERRORS as e:
            record_id = raw_data.get("id") if isinstance(raw_data, dict) else None
            raise MappingError(
                self.source,
                detail=f"Malformed record in {func.__name__}: {type(e).__name__}: {e}",
                record_id=record_id if isinstance(record_id, (str, int)) else None,
            ) from e

    return wrapper


class DataNormalizer(Generic[T], ABC):
    """
    Abstract base interface for data normalizers.

    A normalizer is a pure mapping from one backend's raw records to the
    normalized domain models. It performs no I/O. Anything that cannot be
    mapped raises ``MappingError`` so the caller can skip the record.

    Implementations decorate their mapping methods with ``maps_record``.

    Type Parameters:
        T: The type of raw record from the backend
    """

    source: str = ""

    @abstractmethod
    def normalize_product(self, raw_data: T) -> Product:
        """
        Normalizes product data from the backend format.

        Args:
            raw_data: Raw product record

        Returns:
            Product: Normalized product

        Raises:
            MappingError: If the record cannot be normalized
        """
        pass

    @abstractmethod
    def normalize_category(self, raw_data: T) -> Category:
        """
        Normalizes category data from the backend format.

        Args:
            raw_data: Raw category record

        Returns:
            Category: Normalized category without subcategories

        Raises:
            MappingError: If the record cannot be normalized
        """
        pass

    def require(self, raw_data: Dict[str, Any], field: str, record_id: Any = None) -> str:
        """Read a required non-empty string field or raise ``MappingError``."""
        value = raw_data.get(field) if isinstance(raw_data, dict) else None
        if value is None or not str(value).strip():
            raise MappingError(
                self.source,
                detail=f"Record is missing required field '{field}'",
                record_id=record_id,
                field=field,
            )
        return str(value).strip()

    def ensure_record(self, raw_data: Any) -> Dict[str, Any]:
        if not isinstance(raw_data, dict):
            raise MappingError(self.source, detail=f"Expected an object, got {type(raw_data).__name__}")
        return raw_data


def strip_html(value: Optional[str]) -> str:
    """Remove tags and entities from an HTML fragment."""
    if not value:
        return ""
    text = _TAG_RE.sub(" ", str(value))
    return _WS_RE.sub(" ", html.unescape(text)).strip()


def first_line(value: Optional[str]) -> str:
    """First non-empty line of a block of text."""
    if not isinstance(value, str):
        return ""
    for line in value.splitlines():
        if line.strip():
            return line.strip()
    return ""


def as_string_list(value: Any) -> List[str]:
    """Coerce a list, a comma separated string or None into a list of strings."""
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    if isinstance(value, (list, tuple)):
        return [str(item).strip() for item in value if item is not None and str(item).strip()]
    return []


def dedupe_tags(tags: Iterable[str]) -> List[str]:
    """
    Drop duplicate tags, ignoring case and a trailing plural "s" (but not "ss").

    The first spelling seen is kept, so "Antenna" and "antennas" collapse
    to "Antenna".
    """
    seen = set()
    result = []
    for tag in tags:
        if not tag:
            continue
        cleaned = str(tag).strip()
        key = cleaned.lower()
        if len(key) > 1 and key.endswith("s") and not key.endswith("ss"):
            key = key[:-1]
        if not cleaned or key in seen:
            continue
        seen.add(key)
        result.append(cleaned)
    return result


def is_http_url(value: Any) -> bool:
    return isinstance(value, str) and value.startswith(("http://", "https://"))

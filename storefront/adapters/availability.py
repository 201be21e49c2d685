"""
Source availability checks.

Each check is a pure function of the settings object: no I/O and no side
effects, cheap enough to run on every request. They decide routing only;
they say nothing about whether a source is actually reachable.
"""
from typing import Callable, Dict, List, Optional

from storefront.core.config import Settings

SOURCE_MEDUSA = "medusa"
SOURCE_WOOCOMMERCE = "woocommerce"
SOURCE_LOCAL = "local"

# Fixed priority order used when no source is preferred
DEFAULT_PRIORITY = (SOURCE_MEDUSA, SOURCE_WOOCOMMERCE, SOURCE_LOCAL)


def _present(value: Optional[str]) -> bool:
    return bool(value and value.strip())


def _missing(settings: Settings, fields) -> List[str]:
    return [field for field in fields if not _present(getattr(settings, field))]


MEDUSA_REQUIRED = ("MEDUSA_BACKEND_URL", "MEDUSA_PUBLISHABLE_KEY")
WOOCOMMERCE_REQUIRED = ("WC_API_URL", "WC_CONSUMER_KEY", "WC_CONSUMER_SECRET")
LOCAL_REQUIRED = ("LOCAL_DATASET_PATH",)


def is_medusa_enabled(settings: Settings) -> bool:
    """True when the commerce platform is switched on and has a URL and publishable key."""
    return settings.USE_MEDUSA and not _missing(settings, MEDUSA_REQUIRED)


def is_woocommerce_enabled(settings: Settings) -> bool:
    """True when the legacy shop is switched on and has a URL, key and secret."""
    return settings.WOO_ENABLED and not _missing(settings, WOOCOMMERCE_REQUIRED)


def is_local_dataset_enabled(settings: Settings) -> bool:
    return settings.LOCAL_DATASET_ENABLED and not _missing(settings, LOCAL_REQUIRED)


AVAILABILITY_CHECKS: Dict[str, Callable[[Settings], bool]] = {
    SOURCE_MEDUSA: is_medusa_enabled,
    SOURCE_WOOCOMMERCE: is_woocommerce_enabled,
    SOURCE_LOCAL: is_local_dataset_enabled,
}

_FLAGS = {
    SOURCE_MEDUSA: ("USE_MEDUSA", MEDUSA_REQUIRED),
    SOURCE_WOOCOMMERCE: ("WOO_ENABLED", WOOCOMMERCE_REQUIRED),
    SOURCE_LOCAL: ("LOCAL_DATASET_ENABLED", LOCAL_REQUIRED),
}


def missing_settings(settings: Settings, source: str) -> List[str]:
    """Names of the required settings that are empty for a source."""
    _, required = _FLAGS[source]
    return _missing(settings, required)


def misconfigured_sources(settings: Settings) -> Dict[str, List[str]]:
    """
    Sources whose enable flag is on but whose required settings are empty.

    Returns:
        Dict[str, List[str]]: Source name to the missing setting names
    """
    result = {}
    for source, (flag, required) in _FLAGS.items():
        if getattr(settings, flag):
            missing = _missing(settings, required)
            if missing:
                result[source] = missing
    return result


def priority_order(settings: Settings) -> List[str]:
    """
    Source names in fallback order.

    ``PREFERRED_SOURCE`` moves one known source to the front; the rest keep
    their default order and nothing is removed.
    """
    order = list(DEFAULT_PRIORITY)
    preferred = settings.PREFERRED_SOURCE
    if preferred in order:
        order.remove(preferred)
        order.insert(0, preferred)
    return order


def enabled_sources(settings: Settings) -> List[str]:
    """Enabled source names in fallback order."""
    return [name for name in priority_order(settings) if AVAILABILITY_CHECKS[name](settings)]

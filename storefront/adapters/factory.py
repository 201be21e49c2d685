import logging
from typing import List, Optional

import httpx

from storefront.adapters.availability import AVAILABILITY_CHECKS, misconfigured_sources, priority_order
from storefront.adapters.implementations import ADAPTOR_IMPLEMENTATIONS
from storefront.adapters.interfaces.catalog_source import CatalogSource
from storefront.adapters.registry import AdaptorRegistry
from storefront.core.config import Settings
from storefront.core.exceptions import SourceMisconfigured

logger = logging.getLogger(__name__)


def default_registry() -> AdaptorRegistry:
    """Registry holding every built-in catalog source."""
    registry = AdaptorRegistry()
    for source_name, adaptor_class in ADAPTOR_IMPLEMENTATIONS.items():
        registry.register(source_name, adaptor_class)
    return registry


class AdaptorFactory:
    """
    Builds catalog source instances from settings.

    The factory owns the routing decision: it runs the availability checks
    in priority order and returns only the enabled sources.
    """

    def __init__(self, registry: AdaptorRegistry = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Initialize the adaptor factory.

        Args:
            registry: Registry of available sources, the built-in one by default
            transport: Optional httpx transport handed to remote sources
        """
        self.registry = registry or default_registry()
        self.transport = transport

    def create_source(self, source_name: str, settings: Settings) -> CatalogSource:
        """
        Create one catalog source.

        Args:
            source_name: Registered source name
            settings: Application settings

        Returns:
            CatalogSource: The configured source

        Raises:
            ValueError: If the source name is not registered
        """
        adaptor_class = self.registry.get(source_name)
        if adaptor_class is None:
            raise ValueError(f"Catalog source '{source_name}' not found in registry")
        return adaptor_class.from_settings(settings, transport=self.transport)

    def create_sources(self, settings: Settings) -> List[CatalogSource]:
        """
        Create every enabled source, in fallback order.

        Args:
            settings: Application settings

        Returns:
            List[CatalogSource]: Enabled sources, highest priority first
        """
        for source_name, missing in misconfigured_sources(settings).items():
            logger.warning(
                f"Catalog source '{source_name}' is enabled but missing settings: {', '.join(missing)}"
            )

        sources = []
        for source_name in priority_order(settings):
            if not self.registry.is_registered(source_name):
                continue
            if not AVAILABILITY_CHECKS[source_name](settings):
                continue
            try:
                sources.append(self.create_source(source_name, settings))
            except SourceMisconfigured as e:
                logger.error(f"Catalog source '{source_name}' disabled: {e.detail}", extra={"context": e.context})

        logger.info(f"Catalog sources in fallback order: {[s.name for s in sources] or 'none'}")
        return sources

import logging
from typing import Dict, List, Optional, Type

from storefront.adapters.interfaces.catalog_source import CatalogSource

logger = logging.getLogger(__name__)


class AdaptorRegistry:
    """
    Registry of available catalog source implementations.
    Maps source names to their implementing classes.
    """

    def __init__(self):
        self._adaptors: Dict[str, Type[CatalogSource]] = {}

    def register(self, source_name: str, adaptor_class: Type[CatalogSource]) -> None:
        """
        Register a catalog source implementation.

        Args:
            source_name: Name identifying the source
            adaptor_class: Class to instantiate for this source

        Raises:
            ValueError: If the name is invalid, the class is not a
                CatalogSource, or the name is already registered
        """
        if not source_name or not isinstance(source_name, str):
            raise ValueError("Source name must be a non-empty string")

        if not isinstance(adaptor_class, type) or not issubclass(adaptor_class, CatalogSource):
            raise ValueError("Adaptor class must be a subclass of CatalogSource")

        if source_name in self._adaptors:
            raise ValueError(f"Source '{source_name}' is already registered")

        self._adaptors[source_name] = adaptor_class
        logger.debug(f"Registered catalog source: {source_name}")

    def get(self, source_name: str) -> Optional[Type[CatalogSource]]:
        """
        Retrieve an implementation by source name.

        Args:
            source_name: Name identifying the source

        Returns:
            The adaptor class if found, None otherwise
        """
        return self._adaptors.get(source_name)

    def list(self) -> List[str]:
        """List all registered source names."""
        return list(self._adaptors.keys())

    def is_registered(self, source_name: str) -> bool:
        return source_name in self._adaptors

    def clear(self) -> None:
        """
        Clear all registered sources.
        Primarily used for testing purposes.
        """
        self._adaptors.clear()

from typing import Dict, Optional

from storefront.core.exceptions import SourceUnavailable
from storefront.core.logging import get_logger
from storefront.infrastructure.http import HttpConnector

logger = get_logger(__name__)


class RegionResolver:
    """
    Maps a country code to the Medusa region used for price calculation.

    Regions are listed once; every ``iso_2 -> region id`` pair is then kept
    in a plain dict for the life of the process. The set of regions is
    small and static, so the map has no eviction or expiry. Codes that
    belong to no region resolve to the first region.
    """

    def __init__(self, connector: HttpConnector):
        self.connector = connector
        self._regions: Dict[str, str] = {}
        self._default_region_id: Optional[str] = None
        self._loaded = False

    async def resolve(self, country_code: Optional[str] = None) -> Optional[str]:
        """
        Region id for a country.

        Args:
            country_code: ISO 3166-1 alpha-2 code, any case

        Returns:
            The region id, or None when no region could be listed
        """
        code = (country_code or "").strip().lower()
        if code in self._regions:
            return self._regions[code]

        if not self._loaded:
            try:
                await self._load()
            except SourceUnavailable as e:
                # Prices are still returned without a region, just uncalculated
                logger.warning(f"Could not list Medusa regions: {e.detail}")
                return None

        return self._regions.get(code, self._default_region_id)

    async def _load(self) -> None:
        data = await self.connector.get("/store/regions")
        regions = data.get("regions") if isinstance(data, dict) else None
        for region in regions or []:
            region_id = (region or {}).get("id")
            if not region_id:
                continue
            if self._default_region_id is None:
                self._default_region_id = region_id
            for country in region.get("countries") or []:
                iso = (country or {}).get("iso_2")
                if iso:
                    self._regions.setdefault(iso.lower(), region_id)
        self._loaded = True
        logger.debug(f"Resolved {len(self._regions)} Medusa country codes")

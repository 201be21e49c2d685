from typing import Dict, Optional

from storefront.core.exceptions import SourceMisconfigured


class ApiKeyAuth:
    """Sends a static API key in a request header."""

    def __init__(self, source: str, api_key: Optional[str], header_name: str = "x-api-key"):
        self.source = source
        self.api_key = (api_key or "").strip()
        self.header_name = header_name

    def generate_header(self) -> Dict[str, str]:
        """
        Build the header dict carrying the key.

        Raises:
            SourceMisconfigured: If no key is configured
        """
        if not self.api_key:
            raise SourceMisconfigured(self.source, missing=[self.header_name])
        return {self.header_name: self.api_key}

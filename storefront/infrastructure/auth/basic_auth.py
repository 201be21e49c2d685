from typing import Dict, Optional

from storefront.core.exceptions import SourceMisconfigured
from storefront.core.logging import get_logger

logger = get_logger(__name__)


class BasicAuthHandler:
    """
    Builds credentials for APIs that take a key/secret pair.

    WooCommerce takes the consumer key and secret of its Basic scheme as
    query parameters, which is how every catalog read authenticates.
    """

    def __init__(self, source: str, username: Optional[str] = None, password: Optional[str] = None):
        """
        Initialize the basic authentication handler.

        Args:
            source: Name of the catalog source the credentials belong to
            username: Username or consumer key
            password: Password or consumer secret
        """
        self.source = source
        self.username = username
        self.password = password

    def _require_credentials(self) -> None:
        missing = [name for name, value in (("username", self.username), ("password", self.password)) if not value]
        if missing:
            logger.error(f"Missing credentials for {self.source} basic authentication")
            raise SourceMisconfigured(self.source, missing=missing)

    def query_params(self) -> Dict[str, str]:
        """
        Credentials as ``consumer_key``/``consumer_secret`` query parameters.

        Raises:
            SourceMisconfigured: If credentials are missing
        """
        self._require_credentials()
        return {"consumer_key": self.username, "consumer_secret": self.password}

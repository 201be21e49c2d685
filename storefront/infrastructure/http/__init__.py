from storefront.infrastructure.http.connector import HttpConnector, RequestConfig, validate_url

__all__ = ["HttpConnector", "RequestConfig", "validate_url"]

from storefront.infrastructure.auth.api_key import ApiKeyAuth
from storefront.infrastructure.auth.basic_auth import BasicAuthHandler

__all__ = ["ApiKeyAuth", "BasicAuthHandler"]

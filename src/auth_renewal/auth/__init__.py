"""
Authentication layer: authenticators and the load-collapsing Access cache.
"""

from auth_renewal.auth.authenticator import Authenticator, TokenEndpointAuthenticator
from auth_renewal.auth.cache import AuthenticationCache
from auth_renewal.auth.exceptions import (
    AuthenticationError,
    AuthenticationUnavailableError,
    InvalidCredentialsError,
)

__all__ = [
    "Authenticator",
    "TokenEndpointAuthenticator",
    "AuthenticationCache",
    "AuthenticationError",
    "AuthenticationUnavailableError",
    "InvalidCredentialsError",
]

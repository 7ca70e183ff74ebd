"""
Exceptions for the authentication layer.

AuthenticationError is the only error the cache lets escape from
`AuthenticationCache.get`; the subclasses let callers tell a bad secret
apart from an identity service that is simply unreachable.
"""


class AuthenticationError(Exception):
    """
    Base exception for all authentication failures.

    Raised by authenticators and propagated unchanged by the cache to every
    caller that was waiting on the same load.
    """
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidCredentialsError(AuthenticationError):
    """
    Raised when the identity service rejects the credentials (401/403).

    Retrying with the same credentials will not help.
    """
    pass


class AuthenticationUnavailableError(AuthenticationError):
    """
    Raised when the identity service cannot be reached or answers 5xx.
    """
    pass

"""
Data models for the auth renewal policy.

Includes:
- Credentials and Access (authentication values)
- RequestIdentity, request/response views, FailedExchange
- Enums (FailureKind, LedgerBackend)
"""

from auth_renewal.models.credentials import Access, Credentials
from auth_renewal.models.enums import FailureKind, LedgerBackend
from auth_renewal.models.exchange import (
    FailedExchange,
    HeaderListRequest,
    RequestIdentity,
    RequestView,
    ResponseView,
)

__all__ = [
    "Access",
    "Credentials",
    "FailureKind",
    "LedgerBackend",
    "FailedExchange",
    "HeaderListRequest",
    "RequestIdentity",
    "RequestView",
    "ResponseView",
]

"""
HTTP execution layer (httpx) wired to the renewal retry policy.
"""

from auth_renewal.http.adapters import HttpxRequestView, HttpxResponseView
from auth_renewal.http.client import RenewingHttpClient
from auth_renewal.http.exceptions import AuthRenewalFailed

__all__ = [
    "HttpxRequestView",
    "HttpxResponseView",
    "RenewingHttpClient",
    "AuthRenewalFailed",
]

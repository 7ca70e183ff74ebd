"""
httpx adapters for the request/response views the retry policy consumes.
"""

import httpx


class HttpxRequestView:
    """RequestView over an httpx.Request (header lookup is case-insensitive)."""

    def __init__(self, request: httpx.Request):
        self.request = request

    def has_header(self, name: str) -> bool:
        return name in self.request.headers

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.request.method} {self.request.url})"


class HttpxResponseView:
    """
    ResponseView over an httpx.Response.

    `release()` closes the response so its connection goes back to the pool.
    Only the first call does anything.
    """

    def __init__(self, response: httpx.Response):
        self.response = response
        self._released = False

    @property
    def status_code(self) -> int:
        return self.response.status_code

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        self.response.close()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(status_code={self.status_code}, released={self._released})"

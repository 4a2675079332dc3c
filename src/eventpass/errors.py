"""
Exceptions raised by the decoding API layer.

The authenticated request core never raises these; it hands responses back
as-is. ``EventPassClient`` and the ``auth`` helpers turn failed responses into
exceptions, the same way ``raise_for_status()`` would.
"""

from typing import Optional

import requests


class ApiError(requests.HTTPError):
    """Backend answered with a non-2xx status."""

    def __init__(
        self,
        detail: str,
        response: Optional[requests.Response] = None,
        payload: Optional[dict] = None,
    ):
        super().__init__(detail, response=response)
        self.detail = detail
        self.payload = payload if payload is not None else {}

    @property
    def status_code(self) -> Optional[int]:
        return self.response.status_code if self.response is not None else None

    def __str__(self) -> str:
        if self.status_code is None:
            return self.detail
        return f"{self.status_code}: {self.detail}"


class SessionExpiredError(ApiError):
    """Still unauthorized after the refresh-and-retry cycle."""


class InvalidResponseError(ApiError):
    """Body could not be decoded as JSON (usually an HTML error page)."""

    def __init__(self, raw: str, response: Optional[requests.Response] = None):
        super().__init__("Invalid server response", response=response)
        self.raw = raw

"""
eventpass: client for the eventpass ticketing backend.
"""

from .auth import login, logout, refresh_access_token
from .client import EventPassClient
from .errors import ApiError, InvalidResponseError, SessionExpiredError
from .request import MAX_REFRESH_ATTEMPTS, authenticated_request, safe_decode_json
from .storage import FileTokenStorage, MemoryTokenStorage, TokenStorage
from .types import FormData, TokenPair

__all__ = [
    "MAX_REFRESH_ATTEMPTS",
    "ApiError",
    "EventPassClient",
    "FileTokenStorage",
    "FormData",
    "InvalidResponseError",
    "MemoryTokenStorage",
    "SessionExpiredError",
    "TokenPair",
    "TokenStorage",
    "authenticated_request",
    "login",
    "logout",
    "refresh_access_token",
    "safe_decode_json",
]
__version__ = "0.1.0"

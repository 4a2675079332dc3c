"""
Shared types and settings for the eventpass client.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

API_BASE = os.getenv("EVENTPASS_API_URL", "https://api.eventpass.app").rstrip("/")

TOKEN_FILE = Path(
    os.getenv("EVENTPASS_TOKEN_FILE", "~/.eventpass/tokens.json")
).expanduser()

DEFAULT_HEADERS = {
    "User-Agent": "eventpass-python/0.1.0",
    "Accept": "application/json, text/plain, */*",
}

ACCESS_KEY = "access"
REFRESH_KEY = "refresh"
ROLE_KEY = "role"

INVALID_RESPONSE = "Invalid server response"


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str

    def to_dict(self) -> dict[str, str]:
        return {
            ACCESS_KEY: self.access_token,
            REFRESH_KEY: self.refresh_token,
        }

    def save(self, storage) -> None:
        storage.set(ACCESS_KEY, self.access_token)
        storage.set(REFRESH_KEY, self.refresh_token)

    @classmethod
    def from_storage(cls, storage) -> Optional["TokenPair"]:
        """Both tokens from storage, or None if either is missing."""
        access = storage.get(ACCESS_KEY)
        refresh = storage.get(REFRESH_KEY)
        if access and refresh:
            return cls(access_token=access, refresh_token=refresh)
        return None


@dataclass
class FormData:
    """Multipart payload: plain form fields plus file parts.

    ``files`` takes anything ``requests`` accepts for ``files=``, e.g.
    ``{"image": ("event.jpg", fh, "image/jpeg")}``.
    """

    fields: dict[str, Any] = field(default_factory=dict)
    files: dict[str, Any] = field(default_factory=dict)

    def parts(self) -> dict[str, Any]:
        """Fields and files as ``requests`` multipart parts.

        Fields become ``(None, value)`` parts so the body is multipart even
        without any file attached.
        """
        parts: dict[str, Any] = {
            name: (None, str(value)) for name, value in self.fields.items()
        }
        parts.update(self.files)
        return parts

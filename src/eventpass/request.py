"""
Authenticated requests against the eventpass backend.

Bearer token injection, a single refresh-and-retry on 401, and a JSON decoder
that degrades to a sentinel dict instead of raising. Tokens are re-read from
storage on every call; nothing is cached here.
"""

import json
import logging
from typing import Any, Optional

import requests
from requests.structures import CaseInsensitiveDict

from .errors import ApiError, InvalidResponseError
from .storage import TokenStorage
from .types import (
    ACCESS_KEY,
    API_BASE,
    DEFAULT_HEADERS,
    INVALID_RESPONSE,
    REFRESH_KEY,
    FormData,
)

logger = logging.getLogger(__name__)

REFRESH_PATH = "/api/auth/refresh/"
MAX_REFRESH_ATTEMPTS = 1


def _read_text(resp: requests.Response) -> str:
    try:
        return resp.text
    except (requests.RequestException, RuntimeError) as exc:
        logger.warning("Could not read response body: %s", exc)
        return ""


def safe_decode_json(resp: requests.Response) -> Any:
    """Decode the body as JSON, or return ``{"error", "raw"}`` if it isn't."""
    text = _read_text(resp)
    try:
        return json.loads(text)
    except (ValueError, TypeError):
        logger.warning("Server returned a non-JSON body: %.200s", text)
        return {"error": INVALID_RESPONSE, "raw": text}


def decode_response(resp: requests.Response) -> Any:
    """Decode a response, raising ``ApiError`` for failures.

    An empty body decodes to ``{}``.
    """
    data: Any = {}
    if resp.content:
        text = _read_text(resp)
        try:
            data = json.loads(text)
        except ValueError:
            logger.warning("Server returned a non-JSON body: %.200s", text)
            raise InvalidResponseError(text, response=resp) from None

    if not resp.ok:
        raise ApiError(error_detail(data), response=resp, payload=data)

    return data


def error_detail(data: Any, default: str = "Request failed") -> str:
    if isinstance(data, dict):
        return str(data.get("detail") or data.get("error") or default)
    return default


def _build_request(
    body: Any, headers: Optional[dict]
) -> tuple[CaseInsensitiveDict, dict]:
    merged = CaseInsensitiveDict(DEFAULT_HEADERS)
    if headers:
        merged.update(headers)

    if isinstance(body, FormData):
        # requests writes the multipart boundary itself
        merged.pop("Content-Type", None)
        return merged, {"files": body.parts()}

    merged["Content-Type"] = "application/json"
    if body is None:
        return merged, {}
    if isinstance(body, (str, bytes)):
        return merged, {"data": body}
    return merged, {"data": json.dumps(body)}


def _rewind(payload: dict) -> None:
    for part in (payload.get("files") or {}).values():
        handle = part[1] if isinstance(part, tuple) else part
        if hasattr(handle, "seek"):
            handle.seek(0)


def _send(
    method: str,
    url: str,
    headers: CaseInsensitiveDict,
    payload: dict,
    timeout: Optional[float],
) -> requests.Response:
    logger.debug("%s %s", method, url)
    return requests.request(
        method, url, headers=dict(headers), timeout=timeout, **payload
    )


def refresh_access_token(
    storage: TokenStorage,
    base_url: str = API_BASE,
    timeout: Optional[float] = None,
) -> Optional[str]:
    """Exchange the stored refresh token for a new access token.

    Returns the new token (already persisted) or None. Never raises on a bad
    refresh response or a transport failure.
    """
    refresh = storage.get(REFRESH_KEY)
    if not refresh:
        logger.debug("No refresh token stored, skipping refresh")
        return None

    try:
        resp = requests.post(
            f"{base_url}{REFRESH_PATH}",
            headers={**DEFAULT_HEADERS, "Content-Type": "application/json"},
            json={"refresh": refresh},
            timeout=timeout,
        )
    except requests.RequestException as exc:
        logger.warning("Token refresh failed: %s", exc)
        return None

    if not resp.ok:
        logger.warning("Token refresh rejected with status %s", resp.status_code)
        return None

    data = safe_decode_json(resp)
    access = data.get("access") if isinstance(data, dict) else None
    if not access or not isinstance(access, str):
        logger.warning("Token refresh response carried no access token")
        return None

    storage.set(ACCESS_KEY, access)
    logger.debug("Access token refreshed")
    return access


def authenticated_request(
    storage: TokenStorage,
    path: str,
    method: str = "GET",
    body: Any = None,
    headers: Optional[dict] = None,
    base_url: str = API_BASE,
    timeout: Optional[float] = None,
) -> requests.Response:
    """Send ``method path`` with the stored bearer token.

    On 401 the access token is refreshed at most ``MAX_REFRESH_ATTEMPTS``
    times and the request replayed. The last response is returned as-is,
    including a final 401. Transport errors from the request itself propagate.
    """
    url = f"{base_url}{path}"
    merged, payload = _build_request(body, headers)

    access = storage.get(ACCESS_KEY)
    if access:
        merged["Authorization"] = f"Bearer {access}"

    resp = _send(method, url, merged, payload, timeout)

    attempts = 0
    while resp.status_code == 401 and attempts < MAX_REFRESH_ATTEMPTS:
        attempts += 1
        new_access = refresh_access_token(storage, base_url, timeout)
        if not new_access:
            break

        merged["Authorization"] = f"Bearer {new_access}"
        _rewind(payload)
        resp = _send(method, url, merged, payload, timeout)

    return resp

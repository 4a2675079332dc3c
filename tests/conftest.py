"""
Shared fixtures for the eventpass test suite.
"""

import json
import logging

import pytest
import requests

from eventpass.storage import MemoryTokenStorage
from eventpass.types import TokenPair

BASE = "https://api.test.local"


@pytest.fixture(autouse=True)
def _reset_package_logger():
    """CLI tests attach a stderr handler; drop it so later tests stay quiet."""
    yield
    logger = logging.getLogger("eventpass")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


# ── Token fixtures ───────────────────────────────────────────

@pytest.fixture
def access_token():
    return "eyJ0eXAiOiJKV1QiLCJhbGciOiJIUzI1NiJ9.access.test"


@pytest.fixture
def refresh_token():
    return "eyJ0eXAiOiJKV1QiLCJhbGciOiJIUzI1NiJ9.refresh.test"


@pytest.fixture
def new_access_token():
    return "eyJ0eXAiOiJKV1QiLCJhbGciOiJIUzI1NiJ9.access.new"


@pytest.fixture
def token_pair(access_token, refresh_token):
    return TokenPair(access_token=access_token, refresh_token=refresh_token)


@pytest.fixture
def storage(access_token, refresh_token):
    """Storage holding a logged-in session."""
    return MemoryTokenStorage({"access": access_token, "refresh": refresh_token})


@pytest.fixture
def empty_storage():
    return MemoryTokenStorage()


# ── Response factory ─────────────────────────────────────────

def build_response(status=200, body=None, text=None):
    """Real ``requests.Response`` with a JSON (or raw text) body."""
    resp = requests.Response()
    resp.status_code = status
    resp.encoding = "utf-8"
    resp.url = f"{BASE}/test"
    if text is not None:
        resp._content = text.encode("utf-8")
    elif body is not None:
        resp._content = json.dumps(body).encode("utf-8")
    else:
        resp._content = b""
    return resp


@pytest.fixture
def make_response():
    return build_response


@pytest.fixture
def mock_events_response():
    return [
        {"id": 1, "title": "Afrobeats Night", "location": "Accra"},
        {"id": 2, "title": "Tech Summit", "location": "Kumasi"},
    ]


@pytest.fixture
def mock_order_response():
    return {"id": 77, "status": "pending", "total": "150.00"}


@pytest.fixture
def mock_login_response(access_token, refresh_token):
    return {
        "access": access_token,
        "refresh": refresh_token,
        "user": {"email": "ama@example.com", "role": "customer"},
    }


def prepare_sent(call, method=None):
    """Rebuild the ``requests.PreparedRequest`` a mocked call would send.

    ``call`` is a mock ``call_args``. Pass ``method`` for ``requests.post``
    style calls, where the URL is the only positional argument.
    """
    args, kwargs = call
    if method is None:
        method, url = args[0], args[1]
    else:
        url = args[0]
    return requests.Request(
        method,
        url,
        headers=kwargs.get("headers"),
        data=kwargs.get("data"),
        files=kwargs.get("files"),
        json=kwargs.get("json"),
    ).prepare()


@pytest.fixture
def prepare_request():
    return prepare_sent

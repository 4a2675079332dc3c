"""
eventpass authentication
Login, registration, OTP verification and password reset against the backend.
Tokens from a successful login land in the given ``TokenStorage``.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

import requests

from .errors import ApiError
from .logging_setup import configure_logging
from .request import decode_response, refresh_access_token
from .storage import FileTokenStorage, TokenStorage
from .types import (
    ACCESS_KEY,
    API_BASE,
    DEFAULT_HEADERS,
    REFRESH_KEY,
    ROLE_KEY,
    TOKEN_FILE,
    FormData,
    TokenPair,
)

logger = logging.getLogger(__name__)

ORGANIZER = "organizer"
CUSTOMER = "customer"


def _post(
    path: str,
    json_body: Optional[dict] = None,
    form: Optional[FormData] = None,
    base_url: str = API_BASE,
    timeout: Optional[float] = None,
) -> Any:
    headers = {**DEFAULT_HEADERS}
    kwargs: dict[str, Any] = {}
    if form is not None:
        kwargs["files"] = form.parts()
    else:
        headers["Content-Type"] = "application/json"
        kwargs["json"] = json_body or {}

    resp = requests.post(
        f"{base_url}{path}", headers=headers, timeout=timeout, **kwargs
    )
    return decode_response(resp)


def _store_session(
    storage: TokenStorage, data: Any, role: Optional[str]
) -> TokenPair:
    access = data.get("access") if isinstance(data, dict) else None
    refresh = data.get("refresh") if isinstance(data, dict) else None
    if not access or not refresh:
        raise ApiError("Login response carried no tokens", payload=data)

    tokens = TokenPair(access_token=access, refresh_token=refresh)
    tokens.save(storage)
    if role:
        storage.set(ROLE_KEY, role)
    return tokens


def login(
    storage: TokenStorage,
    email: str,
    password: str,
    role: Optional[str] = None,
    base_url: str = API_BASE,
    timeout: Optional[float] = None,
) -> dict:
    """Email/password login. With ``role`` the role-checked endpoint is used."""
    body = {"email": email, "password": password}
    path = "/api/auth/login/"
    if role:
        body["role"] = role
        path = "/api/auth/login-role/"

    data = _post(path, body, base_url=base_url, timeout=timeout)
    _store_session(storage, data, role)
    logger.debug("Logged in as %s", email)
    return data


def google_login(
    storage: TokenStorage,
    access_token: str,
    role: str = CUSTOMER,
    base_url: str = API_BASE,
    timeout: Optional[float] = None,
) -> dict:
    """Exchange a Google OAuth access token for backend tokens."""
    data = _post(
        "/api/auth/google/",
        {"access_token": access_token, "role": role},
        base_url=base_url,
        timeout=timeout,
    )
    _store_session(storage, data, role)
    return data


def register(
    full_name: str,
    email: str,
    phone: str,
    password: str,
    role: str = CUSTOMER,
    company_name: Optional[str] = None,
    momo_number: Optional[str] = None,
    id_document: Any = None,
    base_url: str = API_BASE,
    timeout: Optional[float] = None,
) -> dict:
    """Create an account. Organizers must supply company, MoMo number and ID.

    ``id_document`` is a ``requests`` file part, e.g.
    ``("id.jpg", fh, "image/jpeg")``.
    """
    form = FormData(
        fields={
            "full_name": full_name,
            "email": email,
            "phone": phone,
            "password": password,
            "password2": password,
            "role": role,
        }
    )

    if role == ORGANIZER:
        if not company_name or not momo_number or id_document is None:
            raise ValueError(
                "Company name, MoMo number and ID document are required "
                "for organizers"
            )
        form.fields["company_name"] = company_name
        form.fields["momo_number"] = momo_number
        form.files["id_document"] = id_document

    return _post(
        "/api/auth/register/", form=form, base_url=base_url, timeout=timeout
    )


def verify_otp(
    email: str, otp: str, base_url: str = API_BASE, timeout: Optional[float] = None
) -> dict:
    return _post(
        "/api/auth/verify-otp/",
        {"email": email, "otp": otp},
        base_url=base_url,
        timeout=timeout,
    )


def resend_otp(
    email: str, base_url: str = API_BASE, timeout: Optional[float] = None
) -> dict:
    return _post(
        "/api/auth/resend-otp/", {"email": email}, base_url=base_url, timeout=timeout
    )


def forgot_password(
    email: str, base_url: str = API_BASE, timeout: Optional[float] = None
) -> dict:
    """Ask the backend to mail a password reset OTP."""
    return _post(
        "/api/auth/forgot-password/",
        {"email": email},
        base_url=base_url,
        timeout=timeout,
    )


def reset_password(
    email: str,
    otp: str,
    new_password: str,
    base_url: str = API_BASE,
    timeout: Optional[float] = None,
) -> dict:
    return _post(
        "/api/auth/reset-password/",
        {
            "email": email,
            "otp": otp,
            "new_password": new_password,
            "new_password2": new_password,
        },
        base_url=base_url,
        timeout=timeout,
    )


def logout(storage: TokenStorage) -> None:
    """Forget the stored session. Local only, the backend is not called."""
    for key in (ACCESS_KEY, REFRESH_KEY, ROLE_KEY):
        storage.remove(key)


# ── CLI ───────────────────────────────────────────────────


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="eventpass authentication")
    parser.add_argument("--token-file", type=Path, default=TOKEN_FILE)
    parser.add_argument("--base-url", default=API_BASE)
    parser.add_argument("--timeout", type=float)
    parser.add_argument("--verbose", action="store_true")

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("login")
    p.add_argument("--email", required=True)
    p.add_argument("--password", required=True)
    p.add_argument("--role", choices=[CUSTOMER, ORGANIZER])

    p = sub.add_parser("google")
    p.add_argument("--access-token", required=True)
    p.add_argument("--role", choices=[CUSTOMER, ORGANIZER], default=CUSTOMER)

    sub.add_parser("logout")
    sub.add_parser("refresh")

    p = sub.add_parser("verify-otp")
    p.add_argument("--email", required=True)
    p.add_argument("--otp", required=True)

    p = sub.add_parser("resend-otp")
    p.add_argument("--email", required=True)

    p = sub.add_parser("forgot-password")
    p.add_argument("--email", required=True)

    p = sub.add_parser("reset-password")
    p.add_argument("--email", required=True)
    p.add_argument("--otp", required=True)
    p.add_argument("--new-password", required=True)

    return parser


def _refresh_command(storage: TokenStorage, args) -> dict:
    access = refresh_access_token(storage, args.base_url, args.timeout)
    if not access:
        raise ApiError("Refresh failed, log in again")
    return {"refreshed": True}


def _logout_command(storage: TokenStorage, _args) -> dict:
    logout(storage)
    return {"logged_out": True}


_DISPATCH = {
    "login": lambda s, a: login(
        s, a.email, a.password, a.role, a.base_url, a.timeout
    ),
    "google": lambda s, a: google_login(
        s, a.access_token, a.role, a.base_url, a.timeout
    ),
    "logout": _logout_command,
    "refresh": _refresh_command,
    "verify-otp": lambda _, a: verify_otp(a.email, a.otp, a.base_url, a.timeout),
    "resend-otp": lambda _, a: resend_otp(a.email, a.base_url, a.timeout),
    "forgot-password": lambda _, a: forgot_password(
        a.email, a.base_url, a.timeout
    ),
    "reset-password": lambda _, a: reset_password(
        a.email, a.otp, a.new_password, a.base_url, a.timeout
    ),
}


def main() -> None:
    """CLI entry point: run an auth command and print the result as JSON."""
    args = _build_parser().parse_args()
    configure_logging(args.verbose)
    storage = FileTokenStorage(args.token_file)

    try:
        result = _DISPATCH[args.command](storage, args)
    except requests.HTTPError as exc:
        print(json.dumps({"error": str(exc)}), file=sys.stderr)
        sys.exit(1)
    except requests.RequestException as exc:
        print(json.dumps({"error": f"Network error: {exc}"}), file=sys.stderr)
        sys.exit(1)

    if args.command in ("login", "google"):
        print(f"[+] Session saved to {storage.path}", file=sys.stderr)
        result = {k: v for k, v in result.items() if k not in ("access", "refresh")}

    json.dump(result, sys.stdout, ensure_ascii=False, indent=2)
    print()

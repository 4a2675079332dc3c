"""
eventpass API client
Events, ticket types, orders, payments, refunds and venue scanning.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Optional

import requests

from .errors import SessionExpiredError
from .logging_setup import configure_logging
from .request import (
    authenticated_request,
    decode_response,
    error_detail,
    safe_decode_json,
)
from .storage import FileTokenStorage, TokenStorage
from .types import API_BASE, TOKEN_FILE, FormData


class EventPassClient:
    """Backend client. Tokens live in ``storage`` and are refreshed on 401."""

    def __init__(
        self,
        storage: TokenStorage,
        base_url: str = API_BASE,
        timeout: Optional[float] = None,
    ):
        self._storage = storage
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    @property
    def storage(self) -> TokenStorage:
        return self._storage

    def _request(self, method: str, path: str, body: Any = None, **kwargs) -> Any:
        resp = authenticated_request(
            self._storage,
            path,
            method=method,
            body=body,
            base_url=self._base_url,
            timeout=self._timeout,
            **kwargs,
        )

        if resp.status_code == 401:
            data = safe_decode_json(resp) if resp.content else {}
            raise SessionExpiredError(
                error_detail(data, "Session expired"), response=resp, payload=data
            )

        return decode_response(resp)

    # ── Events ────────────────────────────────────────────

    def events(self) -> Any:
        return self._request("GET", "/api/events/")

    def my_events(self) -> Any:
        return self._request("GET", "/api/events/my-events/")

    def organizer_events(self) -> Any:
        return self._request("GET", "/api/events/organizer/")

    def create_event(
        self,
        title: str,
        description: str,
        location: str,
        category: str,
        start_date: str,
        end_date: str,
        image: Any = None,
    ) -> dict:
        """Create an event as multipart so a cover image can ride along.

        ``image`` is a ``requests`` file part, e.g.
        ``("event.jpg", fh, "image/jpeg")``.
        """
        form = FormData(
            fields={
                "title": title,
                "description": description,
                "location": location,
                "category": category,
                "start_date": start_date,
                "end_date": end_date,
                "payout_done": "false",
            }
        )
        if image is not None:
            form.files["image"] = image
        return self._request("POST", "/api/events/create/", form)

    def update_event(self, event_id, **fields) -> dict:
        return self._request("PUT", f"/api/events/{event_id}/", fields)

    def delete_event(self, event_id) -> dict:
        return self._request("DELETE", f"/api/events/{event_id}/")

    # ── Tickets ───────────────────────────────────────────

    def ticket_types(self, event_id) -> Any:
        return self._request("GET", f"/api/tickets/?event={event_id}")

    def create_ticket_type(
        self, event_id, name: str, price, quantity_total: int
    ) -> dict:
        return self._request(
            "POST",
            "/api/tickets/",
            {
                "event": event_id,
                "name": name,
                "price": price,
                "quantity_total": quantity_total,
            },
        )

    def my_tickets(self) -> Any:
        return self._request("GET", "/api/tickets/my/")

    def scan_ticket(self, ticket_code: str, event_id) -> dict:
        """Validate a scanned QR code at the venue door."""
        return self._request(
            "POST",
            "/api/tickets/scan/",
            {"ticket_code": ticket_code, "event_id": event_id},
        )

    # ── Orders & payments ─────────────────────────────────

    def create_order(self, event_id, ticket_id, quantity: int = 1) -> dict:
        return self._request(
            "POST",
            "/api/orders/create/",
            {"event_id": event_id, "ticket_id": ticket_id, "quantity": quantity},
        )

    def my_orders(self) -> Any:
        return self._request("GET", "/api/orders/my/")

    def organizer_orders(self) -> Any:
        return self._request("GET", "/api/orders/organizer/")

    def initiate_payment(self, order_id, provider: str, phone: str) -> dict:
        return self._request(
            "POST",
            "/api/payments/initiate/",
            {"order_id": order_id, "provider": provider, "phone": phone},
        )

    def organizer_payments(self) -> Any:
        return self._request("GET", "/api/payments/organizer/")

    def payouts(self) -> Any:
        return self._request("GET", "/api/payments/payouts/")

    # ── Refunds ───────────────────────────────────────────

    def request_refund(self, order_id, reason: Optional[str] = None) -> dict:
        body: dict[str, object] = {"order_id": order_id}
        if reason:
            body["reason"] = reason
        return self._request("POST", "/api/refunds/request/", body)

    def organizer_refunds(self) -> Any:
        return self._request("GET", "/api/refunds/organizer/")

    def approve_refund(self, refund_id) -> dict:
        return self._request("POST", f"/api/refunds/{refund_id}/approve/")

    def reject_refund(self, refund_id) -> dict:
        return self._request("POST", f"/api/refunds/{refund_id}/reject/")

    # ── Account ───────────────────────────────────────────

    def profile(self) -> dict:
        return self._request("GET", "/api/auth/profile/")

    def organizer_dashboard(self) -> dict:
        return self._request("GET", "/api/organizer/dashboard/")


# ── CLI ───────────────────────────────────────────────────


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="eventpass API client")
    parser.add_argument("--token-file", type=Path, default=TOKEN_FILE)
    parser.add_argument("--base-url", default=API_BASE)
    parser.add_argument("--timeout", type=float)
    parser.add_argument("--verbose", action="store_true")

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("events")
    sub.add_parser("my-events")

    p = sub.add_parser("tickets")
    p.add_argument("--event-id", required=True)

    p = sub.add_parser("create-ticket-type")
    p.add_argument("--event-id", required=True)
    p.add_argument("--name", required=True)
    p.add_argument("--price", required=True)
    p.add_argument("--quantity", type=int, required=True)

    sub.add_parser("my-tickets")

    p = sub.add_parser("scan")
    p.add_argument("--event-id", required=True)
    p.add_argument("--code", required=True)

    p = sub.add_parser("order")
    p.add_argument("--event-id", required=True)
    p.add_argument("--ticket-id", required=True)
    p.add_argument("--quantity", type=int, default=1)

    sub.add_parser("my-orders")
    sub.add_parser("organizer-orders")

    p = sub.add_parser("pay")
    p.add_argument("--order-id", required=True)
    p.add_argument("--provider", required=True)
    p.add_argument("--phone", required=True)

    sub.add_parser("payments")
    sub.add_parser("payouts")

    p = sub.add_parser("refund")
    p.add_argument("--order-id", required=True)
    p.add_argument("--reason")

    sub.add_parser("refunds")

    p = sub.add_parser("approve-refund")
    p.add_argument("--refund-id", required=True)

    p = sub.add_parser("reject-refund")
    p.add_argument("--refund-id", required=True)

    sub.add_parser("profile")
    sub.add_parser("dashboard")

    return parser


_DISPATCH = {
    "events": lambda c, _: c.events(),
    "my-events": lambda c, _: c.my_events(),
    "tickets": lambda c, a: c.ticket_types(a.event_id),
    "create-ticket-type": lambda c, a: c.create_ticket_type(
        a.event_id, a.name, a.price, a.quantity
    ),
    "my-tickets": lambda c, _: c.my_tickets(),
    "scan": lambda c, a: c.scan_ticket(a.code, a.event_id),
    "order": lambda c, a: c.create_order(a.event_id, a.ticket_id, a.quantity),
    "my-orders": lambda c, _: c.my_orders(),
    "organizer-orders": lambda c, _: c.organizer_orders(),
    "pay": lambda c, a: c.initiate_payment(a.order_id, a.provider, a.phone),
    "payments": lambda c, _: c.organizer_payments(),
    "payouts": lambda c, _: c.payouts(),
    "refund": lambda c, a: c.request_refund(a.order_id, a.reason),
    "refunds": lambda c, _: c.organizer_refunds(),
    "approve-refund": lambda c, a: c.approve_refund(a.refund_id),
    "reject-refund": lambda c, a: c.reject_refund(a.refund_id),
    "profile": lambda c, _: c.profile(),
    "dashboard": lambda c, _: c.organizer_dashboard(),
}


def main() -> None:
    """CLI entry point for API operations."""
    args = _build_parser().parse_args()
    configure_logging(args.verbose)
    client = EventPassClient(
        FileTokenStorage(args.token_file), args.base_url, args.timeout
    )

    handler = _DISPATCH.get(args.command)
    if not handler:
        print("Unknown command", file=sys.stderr)
        sys.exit(1)

    try:
        result = handler(client, args)
        json.dump(result, sys.stdout, ensure_ascii=False, indent=2)
        print()
    except SessionExpiredError as exc:
        print(json.dumps({"error": str(exc)}), file=sys.stderr)
        print("[!] Session expired, run: eventpass auth login", file=sys.stderr)
        sys.exit(1)
    except requests.HTTPError as exc:
        print(json.dumps({"error": str(exc)}), file=sys.stderr)
        sys.exit(1)
    except requests.RequestException as exc:
        print(json.dumps({"error": f"Network error: {exc}"}), file=sys.stderr)
        sys.exit(1)

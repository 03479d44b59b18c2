#!/usr/bin/env python3
"""End-to-end smoke check: buy a drink from the wallet and redeem it as a machine.

Reads (health, catalog, order status) are retried on transient failures.
Purchases and redemptions are sent once: repeating them could charge twice
or burn a code.
"""

from __future__ import annotations

import argparse
import time
from typing import Any

import httpx

TRANSIENT_STATUSES = {502, 503, 504}
TRANSIENT_ERRORS = (httpx.ConnectError, httpx.ConnectTimeout, httpx.ReadTimeout, httpx.RemoteProtocolError)


class SmokeFailure(RuntimeError):
    pass


class KioskSmokeClient:
    def __init__(
        self,
        http: httpx.Client,
        *,
        api_root: str,
        token: str,
        machine_key: str,
        read_retries: int,
        retry_delay: float,
    ):
        self.http = http
        self.api_root = api_root
        self.user_headers = {"Authorization": f"Bearer {token}"}
        self.machine_headers = {"X-API-Key": machine_key}
        self.read_retries = read_retries
        self.retry_delay = retry_delay

    def _send(self, label: str, method: str, url: str, expect: int, **kwargs: Any) -> httpx.Response:
        try:
            resp = self.http.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise SmokeFailure(f"{label}: request failed: {exc}") from exc
        if resp.status_code != expect:
            raise SmokeFailure(f"{label}: expected HTTP {expect}, got {resp.status_code}: {resp.text}")
        return resp

    def read(self, label: str, url: str, **kwargs: Any) -> Any:
        for attempt in range(self.read_retries + 1):
            last_try = attempt == self.read_retries
            try:
                resp = self.http.get(url, **kwargs)
            except TRANSIENT_ERRORS as exc:
                if last_try:
                    raise SmokeFailure(f"{label}: request failed: {exc}") from exc
                print(f"  {label}: {exc.__class__.__name__}, retry {attempt + 1}/{self.read_retries}")
                time.sleep(self.retry_delay)
                continue
            if resp.status_code in TRANSIENT_STATUSES and not last_try:
                print(f"  {label}: HTTP {resp.status_code}, retry {attempt + 1}/{self.read_retries}")
                time.sleep(self.retry_delay)
                continue
            if resp.status_code != 200:
                raise SmokeFailure(f"{label}: expected HTTP 200, got {resp.status_code}: {resp.text}")
            return resp.json()
        raise SmokeFailure(f"{label}: no response")

    def health(self, base_url: str) -> None:
        self.read("liveness", f"{base_url}/healthz")
        self.read("readiness", f"{base_url}/readyz")

    def catalog(self) -> list[dict]:
        return self.read("catalog", f"{self.api_root}/drinks")

    def top_up(self, amount: str) -> dict:
        return self._send(
            "top-up", "POST", f"{self.api_root}/wallet/top-up", 200,
            headers=self.user_headers, json={"amount": amount},
        ).json()

    def buy(self, drink_id: str) -> dict:
        return self._send(
            "purchase", "POST", f"{self.api_root}/orders", 201,
            headers=self.user_headers, json={"itemId": drink_id, "paymentMethod": "wallet"},
        ).json()

    def redeem(self, otp: str, *, expect: int = 200) -> httpx.Response:
        return self._send(
            "redeem", "POST", f"{self.api_root}/machine/redeem", expect,
            headers=self.machine_headers, json={"otp": otp},
        )

    def order(self, order_id: str) -> dict:
        return self.read("order status", f"{self.api_root}/orders/{order_id}", headers=self.user_headers)


def run_smoke(args: argparse.Namespace) -> None:
    base_url = args.base_url.rstrip("/")
    api_root = base_url + "/" + args.api_prefix.strip("/")

    with httpx.Client(timeout=args.timeout, verify=not args.insecure) as http:
        kiosk = KioskSmokeClient(
            http,
            api_root=api_root,
            token=args.token,
            machine_key=args.machine_key,
            read_retries=max(0, args.retries),
            retry_delay=max(0.0, args.retry_delay),
        )

        print("==> health")
        kiosk.health(base_url)

        print("==> catalog")
        drinks = kiosk.catalog()
        if not drinks:
            raise SmokeFailure("catalog is empty; run scripts/seed_drinks.py first")
        if args.drink_id:
            drink = next((d for d in drinks if d["id"] == args.drink_id), None)
            if drink is None:
                raise SmokeFailure(f"drink {args.drink_id} is not in the catalog")
        else:
            drink = drinks[0]
        print(f"  using {drink['id']} at {drink['price']}")

        if args.top_up:
            print("==> top-up")
            print(f"  balance now {kiosk.top_up(args.top_up)['newBalance']}")

        print("==> purchase")
        order = kiosk.buy(drink["id"])
        print(f"  order {order['orderId']} code {order['otp']}")

        print("==> redeem")
        dispensed = kiosk.redeem(order["otp"]).json()
        if dispensed.get("itemId") != drink["id"]:
            raise SmokeFailure(f"machine was told to dispense {dispensed.get('itemId')}, expected {drink['id']}")

        print("==> replay is refused")
        kiosk.redeem(order["otp"], expect=409)

        print("==> order completed")
        status = kiosk.order(order["orderId"]).get("status")
        if status != "completed":
            raise SmokeFailure(f"order status is {status} after redemption")

    print("\nSUCCESS: kiosk smoke checks passed.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Buy and redeem one drink against a running kiosk backend.")
    parser.add_argument("--base-url", required=True, help="Backend base URL, e.g. https://kiosk.example.com")
    parser.add_argument("--api-prefix", default="/api/v1")
    parser.add_argument("--token", required=True, help="Bearer access token for the purchasing user")
    parser.add_argument("--machine-key", required=True, help="Vending machine API key")
    parser.add_argument("--drink-id", default=None, help="Drink to buy; defaults to the first catalog entry")
    parser.add_argument("--top-up", default=None, help="Top up the wallet by this amount before buying")
    parser.add_argument("--timeout", type=float, default=20.0)
    parser.add_argument("--retries", type=int, default=3, help="Retries for read requests on transient failures")
    parser.add_argument("--retry-delay", type=float, default=5.0)
    parser.add_argument("--insecure", action="store_true", help="Disable TLS certificate verification")
    return parser


def main() -> int:
    try:
        run_smoke(build_parser().parse_args())
    except SmokeFailure as exc:
        print(f"ERROR: {exc}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

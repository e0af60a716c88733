#!/usr/bin/env python3
"""
run_demo.py - End-to-end demo against a running storefront API
- Registers (or logs in) a customer
- Browses the catalog with filters, search, sort and pagination
- Forces an expired access token to show the silent refresh + retry
- Logs out and shows that the old refresh token is rejected
"""

import argparse
import asyncio
import json
import os
import uuid

from storefront.client.pipeline import ApiError, SessionExpired
from storefront.client.storefront import StorefrontClient
from storefront.core.logging import configure_logging


def show_step(title: str):
    print(f"\n=== {title} ===")


def mask_token(token: str | None) -> str:
    if not token:
        return "<none>"
    return token if len(token) <= 12 else f"{token[:8]}...{token[-6:]}"


def dump(data):
    print(json.dumps(data, indent=2, default=str))


async def run_demo(base_url: str):
    email = f"demo-{uuid.uuid4().hex[:8]}@example.com"
    password = "P@ssw0rd!"

    def on_logout():
        print("\033[93m   -> session cleared, redirecting to /login\033[0m")

    async with StorefrontClient(base_url=base_url, on_logout=on_logout) as client:
        show_step("Customer: register")
        body = await client.register("Demo Customer", email, password)
        print(f"User id: {body['data']['user']['id']}")
        print(f"Access token: {mask_token(client.session.get_access_token())}")

        show_step("Catalog: vitamins, price 10-40, cheapest first")
        listing = await client.list_products(category="vitamins", priceRange="10-40", sortBy="price-asc", limit=5)
        for p in listing["data"]:
            print(f"  - {p['name']:<30} {p['price']:>8}")
        dump(listing["pagination"])

        show_step("Catalog: search 'protein'")
        listing = await client.list_products(search="protein")
        print(f"  {listing['pagination']['totalProducts']} match(es)")

        show_step("Catalog: page past the end")
        listing = await client.list_products(page=999)
        dump({"data": listing["data"], "pagination": listing["pagination"]})

        show_step("Auth: expired access token is refreshed once and retried")
        old_refresh = client.session.get_refresh_token()
        client.session.set_token_pair("not-a-valid-token", old_refresh)
        me = await client.me()
        print(f"  /auth/me -> {me['data']['email']}")
        print(f"  refresh token rotated: {old_refresh != client.session.get_refresh_token()}")

        show_step("Auth: logout")
        stale_refresh = client.session.get_refresh_token()
        await client.logout()

        show_step("Auth: reuse refresh token after logout")
        client.session.set_token_pair("not-a-valid-token", stale_refresh)
        try:
            await client.me()
        except SessionExpired as exc:
            print(f"\033[92m   Rejected as expected: {exc.message}\033[0m")
        except ApiError as exc:
            print(f"\033[91m   Unexpected error {exc.status_code}: {exc.message}\033[0m")

    print("\n\033[92m=== DEMO COMPLETE ===\033[0m")


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--base-url", default=os.getenv("API_BASE_URL", "http://localhost:8000/api"))
    args = ap.parse_args()
    configure_logging("WARNING")
    asyncio.run(run_demo(args.base_url))


if __name__ == "__main__":
    main()

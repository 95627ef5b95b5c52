#!/usr/bin/env python3
# This project was developed with assistance from AI tools.
"""Live smoke suite for the Loss Run Analytics API.

Hits every endpoint of a running server and checks status codes and
response shapes.

Prerequisites:
  - API server running (default http://localhost:3001)
  - Analytics store populated by the loss run pipeline

Usage:
  ./scripts/live-tests.py
  ./scripts/live-tests.py --base-url http://analytics.internal:3001
  ./scripts/live-tests.py --batch-id bd808b9e-937d-4243-b9e7-d74e6922719a
"""

import argparse
import asyncio
import sys

import httpx
from lossrun_analytics.formatters import format_number, format_percent, format_time

APP_ID = "loss-run-intelligence"
PREFIX = "/api/analytics"

# ---------------------------------------------------------------------------
# Test runner
# ---------------------------------------------------------------------------

PASS = 0
FAIL = 0
ERRORS: list[str] = []
SECTION = ""


def section(name: str):
    global SECTION
    SECTION = name
    print(f"\n{'=' * 60}")
    print(f"  {name}")
    print(f"{'=' * 60}\n")


def ok(name: str, passed: bool, detail: str = ""):
    global PASS, FAIL
    if passed:
        PASS += 1
        print(f"  PASS  {name}")
    else:
        FAIL += 1
        msg = f"[{SECTION}] {name}: {detail}" if detail else f"[{SECTION}] {name}"
        ERRORS.append(msg)
        print(f"  FAIL  {name} -- {detail}")


def has_keys(d: dict, *keys: str) -> bool:
    return all(k in d for k in keys)


def app_url(path: str) -> str:
    return f"{PREFIX}/apps/{APP_ID}{path}"


# ---------------------------------------------------------------------------
# 1. Health and registry
# ---------------------------------------------------------------------------


async def test_health(c: httpx.AsyncClient):
    section("Health")

    r = await c.get("/health")
    ok("GET /health returns 200", r.status_code == 200)
    body = r.json()
    ok("health has status/database/timestamp", has_keys(body, "status", "database", "timestamp"))
    ok("database is connected", body.get("database") == "connected", body.get("database", ""))


async def test_apps(c: httpx.AsyncClient):
    section("Apps")

    r = await c.get(f"{PREFIX}/apps")
    ok("GET /apps returns 200", r.status_code == 200)
    apps = r.json().get("apps", [])
    ok("apps is non-empty", len(apps) > 0)
    entry = next((a for a in apps if a.get("app_id") == APP_ID), None)
    ok(f"{APP_ID} is registered", entry is not None)
    if entry and entry.get("status") == "active":
        ok("active app carries stats",
           has_keys(entry.get("stats") or {}, "total_users", "active_today", "total_batches"))


# ---------------------------------------------------------------------------
# 2. Per-app analytics
# ---------------------------------------------------------------------------


async def test_system_health(c: httpx.AsyncClient):
    section("System health")

    r = await c.get(app_url("/system-health"))
    ok("GET system-health returns 200", r.status_code == 200)
    body = r.json()
    ok("has current and trend", has_keys(body, "current", "trend"))
    current = body.get("current") or {}
    print(
        f"        today: {format_number(current.get('total_batches'))} batches, "
        f"match rate {format_percent(current.get('match_rate'))}, "
        f"avg {format_time(current.get('avg_processing_time'))}"
    )

    r = await c.get(app_url("/system-health"), params={"days": 7})
    ok("days=7 returns 200", r.status_code == 200)
    trend = r.json().get("trend", [])
    dates = [p["date"] for p in trend]
    ok("trend is ascending by date", dates == sorted(dates))

    r = await c.get(app_url("/system-health"), params={"days": 30, "bucket": "week"})
    ok("weekly bucket returns 200", r.status_code == 200)


async def test_users(c: httpx.AsyncClient):
    section("Users")

    r = await c.get(app_url("/users"))
    ok("GET users returns 200", r.status_code == 200)
    ok("has users and total_count", has_keys(r.json(), "users", "total_count"))

    r = await c.get(app_url("/users"), params={"sort": "policies", "limit": 10})
    ok("sorted users returns 200", r.status_code == 200)
    users = r.json().get("users", [])
    ok("limit honoured", len(users) <= 10)
    counts = [u["total_policies"] for u in users]
    ok("sorted by total_policies desc", counts == sorted(counts, reverse=True))


async def test_batches(c: httpx.AsyncClient) -> str | None:
    """Returns the first batch_id seen, for the detail test."""
    section("Batches")

    r = await c.get(app_url("/batches"))
    ok("GET batches returns 200", r.status_code == 200)
    body = r.json()
    ok("has pagination fields", has_keys(body, "batches", "total_count", "page", "pages"))

    r = await c.get(app_url("/batches"), params={"limit": 5})
    ok("limit=5 returns at most 5", len(r.json().get("batches", [])) <= 5)

    r = await c.get(app_url("/batches/does-not-exist"))
    ok("unknown batch returns 404", r.status_code == 404)
    ok("unknown batch error text", r.json().get("error") == "Batch not found")

    batches = body.get("batches", [])
    return batches[0]["batch_id"] if batches else None


async def test_batch_detail(c: httpx.AsyncClient, batch_id: str):
    section("Batch detail")

    r = await c.get(app_url(f"/batches/{batch_id}"))
    ok(f"GET batches/{batch_id} returns 200", r.status_code == 200)
    body = r.json()
    ok("has summary, products, policies", has_keys(body, "summary", "products", "policies"))


async def test_failures(c: httpx.AsyncClient):
    section("Failures")

    r = await c.get(app_url("/failures"), params={"group_by": "lob"})
    ok("group_by=lob returns 200", r.status_code == 200)
    ok("lob response has summary and by_lob", has_keys(r.json(), "summary", "by_lob"))

    r = await c.get(app_url("/failures"), params={"group_by": "carrier"})
    ok("group_by=carrier returns 200", r.status_code == 200)
    ok("carrier response has by_carrier", "by_carrier" in r.json())

    r = await c.get(app_url("/failures"), params={"group_by": "none", "limit": 10})
    ok("group_by=none returns 200", r.status_code == 200)
    ok("individual failures limited", len(r.json().get("failures", [])) <= 10)


async def test_products(c: httpx.AsyncClient):
    section("Products")

    r = await c.get(app_url("/products"))
    ok("GET products returns 200", r.status_code == 200)
    ok("has products list", isinstance(r.json().get("products"), list))


async def test_error_handling(c: httpx.AsyncClient):
    section("Error handling")

    r = await c.get(f"{PREFIX}/apps/no-such-app/users")
    ok("unknown app returns 404", r.status_code == 404)
    ok("unknown app error text", r.json().get("error") == "App not found")

    r = await c.get("/nope")
    ok("unknown route returns 404", r.status_code == 404)
    ok("unknown route error text", r.json().get("error") == "Endpoint not found")


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------


async def main():
    parser = argparse.ArgumentParser(description="Live smoke suite for the analytics API")
    parser.add_argument("--base-url", default="http://localhost:3001",
                        help="Server root (without the API prefix)")
    parser.add_argument("--batch-id", help="Batch to fetch for the detail test")
    args = parser.parse_args()

    print("=" * 60)
    print("  LIVE TEST SUITE -- Loss Run Analytics API")
    print("=" * 60)

    async with httpx.AsyncClient(base_url=args.base_url, timeout=15) as c:

        # Pre-flight: make sure server is up
        try:
            r = await c.get("/health")
            if r.status_code != 200:
                print(f"\n  Server returned {r.status_code} on /health -- is it running?")
                sys.exit(2)
        except httpx.ConnectError:
            print(f"\n  Cannot connect to server at {args.base_url} -- is it running?")
            sys.exit(2)

        await test_health(c)
        await test_apps(c)
        await test_system_health(c)
        await test_users(c)
        first_batch = await test_batches(c)
        batch_id = args.batch_id or first_batch
        if batch_id:
            await test_batch_detail(c, batch_id)
        await test_failures(c)
        await test_products(c)
        await test_error_handling(c)

    # Summary
    print(f"\n{'=' * 60}")
    print(f"  RESULTS: {PASS} passed, {FAIL} failed")
    print(f"{'=' * 60}")

    if ERRORS:
        print("\nFailures:")
        for e in ERRORS:
            print(f"  - {e}")

    sys.exit(0 if FAIL == 0 else 1)


if __name__ == "__main__":
    asyncio.run(main())

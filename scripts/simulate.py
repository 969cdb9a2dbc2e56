"""
Ordering Flow Simulation Script

Walks the seeded demo data through the full ordering flow against a
running server, then fires concurrent cart updates for one member to show
how lost updates are reported.

Requires: python scripts/seed.py, then uvicorn app.main:app --port 8001
Run from project root: python scripts/simulate.py
"""

import argparse
import asyncio
import sys
import time
from datetime import datetime
from typing import Any, Optional

import httpx

# Configuration
API_BASE_URL = "http://localhost:8001"
PASSWORD = "password123"

MEMBER_INDIA = "thor@company.com"
MANAGER_INDIA = "cm@company.com"
MANAGER_AMERICA = "ca@company.com"


async def login(email: str) -> httpx.AsyncClient:
    """Return a client carrying the session cookie for ``email``."""
    client = httpx.AsyncClient(base_url=API_BASE_URL, timeout=30.0)
    response = await client.post("/api/auth/login", json={"email": email, "password": PASSWORD})
    if response.status_code != 200:
        await client.aclose()
        raise RuntimeError(f"Login failed for {email}: {response.text}")
    return client


def report(step: str, response: httpx.Response, expected: int) -> bool:
    ok = response.status_code == expected
    marker = "OK  " if ok else "FAIL"
    print(f"   [{marker}] {step}: {response.status_code} {response.json().get('message', '')}")
    return ok


# =============================================================================
# HAPPY PATH
# =============================================================================

async def run_order_flow() -> Optional[int]:
    """Member fills a cart and checks out; managers try to pay for it."""
    print("\n" + "=" * 70)
    print("ORDER FLOW")
    print("=" * 70)

    async with httpx.AsyncClient(base_url=API_BASE_URL) as public:
        restaurants = (await public.get("/api/restaurants")).json()["restaurants"]
        india = next(r for r in restaurants if r["country"] == "INDIA")
        menu = (await public.get(f"/api/restaurants/{india['id']}/menu")).json()["menu"]
        print(f"\n   Restaurant: {india['name']} ({len(menu)} menu items)")

    member = await login(MEMBER_INDIA)
    manager = await login(MANAGER_INDIA)
    foreign_manager = await login(MANAGER_AMERICA)

    try:
        await member.delete("/api/cart")
        report("add 2 x first item", await member.post(
            "/api/cart", json={"menuItemId": menu[0]["id"], "quantity": 2}), 200)
        response = await member.post("/api/cart", json={"menuItemId": menu[1]["id"]})
        report("add 1 x second item", response, 200)
        print(f"   Cart total: {response.json()['cart']['total']}")

        response = await member.post("/api/cart/checkout")
        if not report("checkout cart", response, 201):
            return None
        order = response.json()["order"]
        print(f"   Order #{order['id']}: {order['totalAmount']} {order['status']} {order['country']}")

        report("member pays own order (forbidden)",
               await member.post(f"/api/orders/{order['id']}/checkout"), 403)
        report("american manager pays (forbidden)",
               await foreign_manager.post(f"/api/orders/{order['id']}/checkout"), 403)
        report("indian manager pays",
               await manager.post(f"/api/orders/{order['id']}/checkout"), 200)
        report("second checkout (conflict)",
               await manager.post(f"/api/orders/{order['id']}/checkout"), 400)
        return order["id"]
    finally:
        for client in (member, manager, foreign_manager):
            await client.aclose()


# =============================================================================
# CONCURRENT CART UPDATES
# =============================================================================

async def add_once(client: httpx.AsyncClient, menu_item_id: int, num: int) -> dict[str, Any]:
    start_time = time.time()
    try:
        response = await client.post("/api/cart", json={"menuItemId": menu_item_id})
        return {
            "num": num,
            "success": response.status_code == 200,
            "status": response.status_code,
            "message": response.json().get("message", ""),
            "time": round(time.time() - start_time, 3),
        }
    except httpx.HTTPError as e:
        return {"num": num, "success": False, "status": None, "message": str(e)[:100], "time": None}


async def run_concurrent_adds(num_requests: int) -> dict[str, Any]:
    """Fire ``num_requests`` simultaneous adds of the same item for one member."""
    print("\n" + "=" * 70)
    print(f"CONCURRENT CART UPDATES ({num_requests} requests)")
    print(f"Started: {datetime.now().strftime('%H:%M:%S')}")
    print("=" * 70)

    member = await login(MEMBER_INDIA)
    try:
        await member.delete("/api/cart")
        restaurants = (await member.get("/api/restaurants")).json()["restaurants"]
        menu = (await member.get(f"/api/restaurants/{restaurants[0]['id']}/menu")).json()["menu"]
        item_id = menu[0]["id"]

        results = await asyncio.gather(*[add_once(member, item_id, i + 1) for i in range(num_requests)])
        cart = (await member.get("/api/cart")).json()["cart"]
    finally:
        await member.aclose()

    accepted = [r for r in results if r["success"]]
    rejected = [r for r in results if not r["success"]]
    quantity = sum(line["quantity"] for line in cart["items"])

    print(f"\n   Accepted: {len(accepted)}/{num_requests}")
    print(f"   Rejected as conflicts: {len(rejected)}/{num_requests}")
    print(f"   Final quantity in cart: {quantity}")
    print(f"   Lost updates: {len(accepted) - quantity}")
    for r in rejected[:5]:
        print(f"     #{r['num']}: {r['status']} {r['message']}")

    return {"accepted": len(accepted), "rejected": len(rejected), "quantity": quantity}


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Ordering Flow Simulation")
    parser.add_argument("--requests", type=int, default=20, help="Concurrent cart adds")
    parser.add_argument("--skip-flow", action="store_true", help="Only run the concurrency test")
    args = parser.parse_args()

    if not args.skip_flow:
        order_id = asyncio.run(run_order_flow())
        if order_id is None:
            print("\nOrder flow failed. Is the database seeded?")
            sys.exit(1)

    asyncio.run(run_concurrent_adds(args.requests))
    print("\n" + "=" * 70)

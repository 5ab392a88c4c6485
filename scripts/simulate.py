"""
Dinner Rush Simulation Script

Fires concurrent table orders at a running server, then edits and
completes a share of them, to smoke-test the order lifecycle end to end.
Run from project root: python scripts/simulate.py
"""

import asyncio
import sys
import random
import time
import argparse
from datetime import datetime
from typing import Any, Optional

import httpx

# Configuration
API_BASE_URL = "http://localhost:8001"
TOTAL_ORDERS = 30
MAX_TABLE_NUMBER = 30

# Sample data for random orders
CUSTOMER_NAMES = [None, None, "Asha", "Ravi", "Meera", "Karan", "Priya", "Vikram", "Neha", "Arjun"]
MENU_ITEMS = [
    {"itemName": "Paneer Tikka", "price": "220.00"},
    {"itemName": "Butter Naan", "price": "45.00"},
    {"itemName": "Dal Makhani", "price": "180.00"},
    {"itemName": "Veg Biryani", "price": "210.00"},
    {"itemName": "Masala Dosa", "price": "90.00"},
    {"itemName": "Gulab Jamun", "price": "60.00"},
    {"itemName": "Masala Chai", "price": "30.00"},
    {"itemName": "Fresh Lime Soda", "price": "70.00"},
]


def generate_random_items() -> list[dict]:
    """Generate random order items."""
    picks = random.sample(MENU_ITEMS, random.randint(1, 4))
    return [{**item, "quantity": random.randint(1, 3)} for item in picks]


def generate_order_payload() -> dict[str, Any]:
    """Generate payload for the /api/orders endpoint."""
    name = random.choice(CUSTOMER_NAMES)
    return {
        "tableNumber": random.randint(1, MAX_TABLE_NUMBER),
        "customerName": name,
        "customerPhone": f"98{random.randint(10000000, 99999999)}" if name else None,
        "items": generate_random_items(),
    }


def expected_total(items: list[dict]) -> float:
    return round(sum(float(item["price"]) * item["quantity"] for item in items), 2)


# =============================================================================
# ORDER FLOWS
# =============================================================================

async def send_order(
    client: httpx.AsyncClient,
    order_num: int
) -> dict[str, Any]:
    """Create one order and check its total."""
    payload = generate_order_payload()
    start_time = time.time()

    try:
        response = await client.post(
            f"{API_BASE_URL}/api/orders",
            json=payload,
            timeout=30.0
        )
        elapsed = round(time.time() - start_time, 3)

        if response.status_code != 201:
            return {
                "order_num": order_num,
                "success": False,
                "error": response.text[:100],
                "time": elapsed,
            }

        data = response.json()
        total = float(data["total"])
        if abs(total - expected_total(payload["items"])) > 0.001:
            return {
                "order_num": order_num,
                "success": False,
                "error": f"Total mismatch: got {data['total']}",
                "time": elapsed,
            }

        return {
            "order_num": order_num,
            "success": True,
            "order_number": data["orderNumber"],
            "total": total,
            "time": elapsed,
        }
    except httpx.HTTPError as e:
        elapsed = round(time.time() - start_time, 3)
        return {
            "order_num": order_num,
            "success": False,
            "error": str(e)[:100],
            "time": elapsed,
        }


async def finish_order(
    client: httpx.AsyncClient,
    order_number: str,
) -> Optional[str]:
    """Edit then complete an order. Returns an error message or None."""
    try:
        response = await client.put(
            f"{API_BASE_URL}/api/orders/{order_number}",
            json=generate_order_payload(),
            timeout=30.0,
        )
        if response.status_code != 200:
            return f"edit {order_number}: {response.status_code}"

        response = await client.patch(
            f"{API_BASE_URL}/api/orders/{order_number}/complete",
            timeout=30.0,
        )
        if response.status_code != 200 or response.json()["status"] != "completed":
            return f"complete {order_number}: {response.status_code}"
    except httpx.HTTPError as e:
        return f"{order_number}: {str(e)[:80]}"
    return None


# =============================================================================
# MAIN SIMULATION RUNNER
# =============================================================================

async def run_simulation(
    num_orders: int = TOTAL_ORDERS,
    complete_ratio: float = 0.5,
) -> dict[str, Any]:
    """
    Run the dinner rush simulation.

    Args:
        num_orders: Number of orders to create
        complete_ratio: Share of created orders to edit and complete
    """
    print("=" * 70)
    print("🍛 DINNER RUSH SIMULATION")
    print("=" * 70)
    print(f"📋 Total Orders: {num_orders}")
    print(f"🎯 Target: {API_BASE_URL}")
    print(f"⏰ Started: {datetime.now().strftime('%H:%M:%S')}")
    print("=" * 70)

    start_time = time.time()

    async with httpx.AsyncClient() as client:
        print("\n🚀 Firing orders...\n")
        results = await asyncio.gather(
            *[send_order(client, i + 1) for i in range(num_orders)]
        )

        successful = [r for r in results if r["success"]]
        to_finish = random.sample(successful, int(len(successful) * complete_ratio))

        print(f"🧾 Editing and completing {len(to_finish)} orders...\n")
        finish_errors = [
            e for e in await asyncio.gather(
                *[finish_order(client, r["order_number"]) for r in to_finish]
            )
            if e
        ]

        response = await client.get(f"{API_BASE_URL}/api/orders")
        active_numbers = {o["orderNumber"] for o in response.json()}

    total_time = round(time.time() - start_time, 2)
    failed = [r for r in results if not r["success"]]
    leaked = [r["order_number"] for r in to_finish if r["order_number"] in active_numbers]

    print("\n" + "=" * 70)
    print("📊 SIMULATION RESULTS")
    print("=" * 70)

    print(f"\n✅ Created Orders: {len(successful)}/{num_orders}")
    print(f"❌ Failed Orders: {len(failed)}/{num_orders}")
    print(f"🧾 Completion Errors: {len(finish_errors)}")
    print(f"🔎 Completed but still listed active: {len(leaked)}")
    print(f"⏱️  Total Time: {total_time}s")

    if successful:
        avg_time = round(sum(r["time"] for r in successful) / len(successful), 3)
        total_sales = sum(r["total"] for r in successful)

        print(f"\n📈 Performance Metrics:")
        print(f"   Average Response: {avg_time}s")
        print(f"   Fastest: {min(r['time'] for r in successful)}s")
        print(f"   Slowest: {max(r['time'] for r in successful)}s")
        print(f"   💰 Total Sales: {total_sales:.2f}")

    if failed or finish_errors:
        print(f"\n⚠️  Failure Details (showing first 5):")
        for f in failed[:5]:
            print(f"   Order #{f['order_num']}: {f.get('error', 'Unknown error')}")
        for error in finish_errors[:5]:
            print(f"   {error}")

    print("=" * 70)

    return {
        "total": num_orders,
        "successful": len(successful),
        "failed": len(failed),
        "finish_errors": len(finish_errors),
        "leaked": len(leaked),
        "total_time": total_time,
    }


async def check_health() -> bool:
    """Verify the server answers before the rush starts."""
    async with httpx.AsyncClient() as client:
        try:
            response = await client.get(f"{API_BASE_URL}/health", timeout=5.0)
        except httpx.HTTPError as e:
            print(f"   ❌ Server unreachable: {e}")
            return False

    if response.status_code != 200:
        print(f"   ❌ Failed: {response.text}")
        return False

    data = response.json()
    print(f"   ✅ Status: {data.get('status')}")
    print(f"   Storage: {data.get('storage')} ({data.get('storage_status')})")
    return data.get("status") == "operational"


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Dinner Rush Simulation Script")
    parser.add_argument("--orders", type=int, default=TOTAL_ORDERS, help="Number of orders")
    parser.add_argument("--complete-ratio", type=float, default=0.5, help="Share of orders to complete")
    parser.add_argument("--url", default=API_BASE_URL, help="Server base URL")
    args = parser.parse_args()

    API_BASE_URL = args.url.rstrip("/")

    print("\n1️⃣ Health Check...")
    if not asyncio.run(check_health()):
        print("\n❌ Pre-flight check failed. Is the server running?")
        sys.exit(1)

    summary = asyncio.run(run_simulation(args.orders, args.complete_ratio))
    sys.exit(0 if summary["failed"] == 0 and summary["leaked"] == 0 else 1)

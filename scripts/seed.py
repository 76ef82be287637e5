"""
Demo Seeding Script

Drives a running server through the owner flow over HTTP: sign up,
finish onboarding, add a sample menu, generate the QR code and save it
as a PNG. Works against any backend because it only talks to the API.

Run from project root: python scripts/seed.py --restaurants 3

Author: Khalil_Bannouri
Version: 1.0.0
"""

import asyncio
import sys
import os
import re
import random
import time
import argparse
from pathlib import Path
from typing import Any, Optional

import httpx
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
# Windows event loop fix
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

# Configuration
API_BASE_URL = "http://localhost:8001"
OUT_DIR = Path(__file__).resolve().parents[1] / "qrcodes"

RESTAURANT_NAMES = ["Chez Nous", "La Piazza", "Spice Route", "The Green Fork", "Harbor Grill", "Café Olé"]
OWNER_NAMES = ["Jane Smith", "Mike Brown", "Sarah Garcia", "Tom Wilson", "Emma Davis", "Chris Miller"]
SAMPLE_MENU = [
    {"name": "Tomato Soup", "price": "4.50", "category": "Starters", "description": "Slow-roasted tomatoes, basil"},
    {"name": "Garlic Bread", "price": "3.99", "category": "Starters"},
    {"name": "Pasta Carbonara", "price": "13.99", "category": "Main Course", "description": "Guanciale, pecorino, egg yolk"},
    {"name": "Grilled Salmon", "price": "18.50", "category": "Main Course"},
    {"name": "Tiramisu", "price": "7.99", "category": "Desserts"},
    {"name": "Sparkling Water", "price": "2.50", "category": "Drinks"},
    {"name": "Chef's Surprise", "price": "9.00", "category": ""},
]

_MENU_URL = re.compile(r"/menu/([A-Za-z0-9_-]+)")


def generate_owner(index: int) -> dict[str, str]:
    """Form data for one demo account."""
    suffix = f"{int(time.time())}{index}{random.randint(100, 999)}"
    return {
        "owner_name": OWNER_NAMES[index % len(OWNER_NAMES)],
        "restaurant_name": RESTAURANT_NAMES[index % len(RESTAURANT_NAMES)],
        "email": f"owner{suffix}@example.com",
        "password": "demo-password",
    }


def generate_onboarding() -> dict[str, str]:
    return {
        "address": f"{random.randint(1, 999)} Main St",
        "phone": f"+1 555 {random.randint(100, 999)} {random.randint(1000, 9999)}",
        "description": "Seasonal plates and house-made desserts.",
        "categories": "Starters\nMain Course\nDesserts\nDrinks",
    }


# =============================================================================
# OWNER FLOW
# =============================================================================

async def seed_restaurant(index: int, base_url: str, out_dir: Path) -> dict[str, Any]:
    """Create one restaurant with a full menu; returns a result record."""
    owner = generate_owner(index)
    start_time = time.time()

    # Each owner gets its own cookie jar
    async with httpx.AsyncClient(base_url=base_url, timeout=30.0) as client:
        try:
            response = await client.post("/signup", data=owner)
            if response.status_code != 303:
                return _failure(index, f"signup: {response.status_code}", start_time)

            response = await client.post("/onboarding", data=generate_onboarding())
            if response.status_code != 303:
                return _failure(index, f"onboarding: {response.status_code}", start_time)

            for item in SAMPLE_MENU:
                response = await client.post("/dashboard/items", data=item)
                if response.status_code != 303:
                    return _failure(index, f"add item {item['name']}: {response.status_code}", start_time)

            response = await client.get("/dashboard", params={"tab": "qr"})
            match = _MENU_URL.search(response.text)
            restaurant_id: Optional[str] = match.group(1) if match else None

            await client.post("/dashboard/qr")
            response = await client.get("/dashboard/qr/download")
            qr_path = None
            if response.headers.get("content-type") == "image/png":
                qr_path = out_dir / f"{restaurant_id or index}.png"
                qr_path.write_bytes(response.content)

        except httpx.HTTPError as e:
            return _failure(index, str(e)[:100], start_time)

    return {
        "index": index,
        "success": True,
        "email": owner["email"],
        "restaurant_id": restaurant_id,
        "qr_path": qr_path,
        "time": round(time.time() - start_time, 3),
    }


def _failure(index: int, error: str, start_time: float) -> dict[str, Any]:
    return {
        "index": index,
        "success": False,
        "error": error,
        "time": round(time.time() - start_time, 3),
    }


# =============================================================================
# MAIN RUNNER
# =============================================================================

async def run_seed(count: int, base_url: str, out_dir: Path) -> list[dict[str, Any]]:
    print("=" * 70)
    print("🌱 SCAN2DINE DEMO SEED")
    print("=" * 70)
    print(f"📋 Restaurants: {count}")
    print(f"🎯 Target: {base_url}")
    print(f"📁 QR output: {out_dir}")
    print("=" * 70)

    out_dir.mkdir(parents=True, exist_ok=True)

    async with httpx.AsyncClient(base_url=base_url) as client:
        try:
            health = await client.get("/health")
        except httpx.HTTPError as e:
            print(f"❌ Server not reachable: {e}")
            return []
        data = health.json()
        print(f"\n✅ Status: {data.get('status')}")
        print(f"   Data store: {data.get('data_backend')} ({data.get('data_store')})")
        print(f"   Auth: {data.get('auth_backend')} ({data.get('auth_service')})")

    results = await asyncio.gather(
        *(seed_restaurant(i, base_url, out_dir) for i in range(count))
    )

    successful = [r for r in results if r["success"]]
    failed = [r for r in results if not r["success"]]

    print("\n" + "=" * 70)
    print("📊 SEED RESULTS")
    print("=" * 70)
    print(f"\n✅ Seeded: {len(successful)}/{count}")
    print(f"❌ Failed: {len(failed)}/{count}")

    for r in successful:
        print(f"\n   {r['email']}  (password: demo-password)")
        if r["restaurant_id"]:
            print(f"   Menu: {base_url}/menu/{r['restaurant_id']}")
        if r["qr_path"]:
            print(f"   QR:   {r['qr_path']}")

    for r in failed[:5]:
        print(f"\n   ⚠️  Restaurant #{r['index']}: {r['error']}")

    print("\n" + "=" * 70)
    return list(results)


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed demo restaurants into a running server")
    parser.add_argument("--restaurants", "-n", type=int, default=1, help="Number of restaurants to create")
    parser.add_argument("--base-url", default=API_BASE_URL, help="Server origin")
    parser.add_argument("--out", type=Path, default=OUT_DIR, help="Directory for QR PNG files")
    args = parser.parse_args()

    results = asyncio.run(run_seed(args.restaurants, args.base_url.rstrip("/"), args.out))
    if not results or not all(r["success"] for r in results):
        sys.exit(1)


if __name__ == "__main__":
    main()

"""
Async seeding script that posts sample reviews to the running API.

Usage:
    python scripts/seed_async.py --reviews 20 --base-url http://localhost:8000

The API must be running and reachable at the provided base URL, and the
pavilions must already exist (see scripts/seed.py).
"""

import argparse
import asyncio
import os
import random
import uuid

import httpx

DEFAULT_BASE_URL = os.getenv("SEED_BASE_URL", "http://localhost:8000")

SAMPLE_COMMENTS = [
    "とても感動しました！",
    "伝統と未来が融合していて良かったです。",
    "ロボットの実演がすごかった！",
    "Long queue, but worth it.",
    "Great show!",
]


async def list_pavilion_ids(client: httpx.AsyncClient) -> list[int]:
    resp = await client.get("/")
    resp.raise_for_status()
    return [item["id"] for item in resp.json()["items"]]


async def create_review(
    client: httpx.AsyncClient, pavilion_id: int, name: str | None, comment: str, again: bool
) -> int:
    resp = await client.post(
        f"/pavilion/{pavilion_id}/reviews",
        json={"name": name, "comment": comment, "again": again},
    )
    resp.raise_for_status()
    return resp.json()["id"]


async def seed(base_url: str, reviews: int, anonymous_share: float):
    async with httpx.AsyncClient(base_url=base_url, timeout=30.0) as client:
        pavilion_ids = await list_pavilion_ids(client)
        if not pavilion_ids:
            print("No pavilions found; run scripts/seed.py first.")
            return

        created: list[int] = []
        for _ in range(reviews):
            name = None
            if random.random() >= anonymous_share:
                name = f"visitor-{uuid.uuid4().hex[:6]}"
            review_id = await create_review(
                client,
                pavilion_id=random.choice(pavilion_ids),
                name=name,
                comment=random.choice(SAMPLE_COMMENTS),
                again=random.random() < 0.7,
            )
            created.append(review_id)

    print(f"Seeded {len(created)} reviews across {len(pavilion_ids)} pavilions to {base_url}")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Async review seeder for the Pavilion API")
    parser.add_argument("--base-url", default=DEFAULT_BASE_URL, help="API base URL")
    parser.add_argument("--reviews", type=int, default=20, help="Number of reviews to create")
    parser.add_argument(
        "--anonymous-share",
        type=float,
        default=0.3,
        help="Fraction of reviews posted without a name",
    )
    return parser.parse_args()


def main():
    args = parse_args()
    asyncio.run(
        seed(
            base_url=args.base_url,
            reviews=args.reviews,
            anonymous_share=args.anonymous_share,
        )
    )


if __name__ == "__main__":
    main()

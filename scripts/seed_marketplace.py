#!/usr/bin/env python3
"""Populate a running marketplace instance through its public API.

Flow:
1) Register a seller and a buyer
2) Create sample listings as the seller
3) Add the first listing to the buyer's cart
"""

from __future__ import annotations

import argparse
import os
import sys
import time
from typing import Any, Dict, List

import httpx


DEFAULT_BASE_URL = "http://127.0.0.1:8000"
USER_ID_HEADER = "user-id"

SAMPLE_LISTINGS: List[Dict[str, Any]] = [
    {
        "title": "Organic Cotton Tote Bag",
        "description": "Eco-friendly reusable tote bag made from 100% organic cotton.",
        "category": "Fashion & Accessories",
        "price": 12.99,
        "images": ["https://images.unsplash.com/photo-1553062407-98eeb64c6a62?w=800&h=600&fit=crop"],
    },
    {
        "title": "Bamboo Water Bottle",
        "description": "Bamboo water bottle with a stainless steel interior, lightly used.",
        "category": "Lifestyle",
        "price": 19.99,
        "images": ["https://images.unsplash.com/photo-1594223274512-ad4803739b7c?w=800&h=600&fit=crop"],
    },
    {
        "title": "Solar Phone Charger",
        "description": "Portable solar charger for phones and small devices.",
        "category": "Electronics",
        "price": 37.99,
        "images": ["https://images.unsplash.com/photo-1584917865442-de9dfe0e4e0e?w=800&h=600&fit=crop"],
    },
]


class ApiError(RuntimeError):
    pass


def _json_or_text(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


def _require_success(response: httpx.Response, context: str) -> Dict[str, Any]:
    payload = _json_or_text(response)
    if response.status_code >= 400:
        raise ApiError(f"{context} failed ({response.status_code}): {payload}")
    if not isinstance(payload, dict):
        raise ApiError(f"{context} returned non-JSON payload: {payload}")
    if payload.get("success") is False:
        raise ApiError(f"{context} returned success=false: {payload}")
    return payload


def _as_user(user_id: int) -> Dict[str, str]:
    return {USER_ID_HEADER: str(user_id)}


def register_user(client: httpx.Client, *, username: str, address: str) -> int:
    resp = client.post(
        "/api/v1/auth/register",
        json={"username": username, "email": f"{username}@example.com", "address": address},
    )
    payload = _require_success(resp, f"Register '{username}'")
    user_id = ((payload.get("data") or {}).get("user") or {}).get("id")
    if not isinstance(user_id, int):
        raise ApiError(f"Unexpected register response for '{username}': {payload}")
    return user_id


def create_listing(client: httpx.Client, seller_id: int, listing: Dict[str, Any]) -> int:
    resp = client.post("/api/v1/products", json=listing, headers=_as_user(seller_id))
    payload = _require_success(resp, f"Create listing '{listing['title']}'")
    product_id = ((payload.get("data") or {}).get("product") or {}).get("id")
    if not isinstance(product_id, int):
        raise ApiError(f"Unexpected create-product response for '{listing['title']}': {payload}")
    return product_id


def add_to_cart(client: httpx.Client, buyer_id: int, product_id: int) -> Dict[str, Any]:
    resp = client.post(
        "/api/v1/cart/add",
        json={"product_id": product_id, "quantity": 1},
        headers=_as_user(buyer_id),
    )
    payload = _require_success(resp, f"Add product {product_id} to cart")
    return (payload.get("data") or {}).get("cart_item") or {}


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Create demo users, listings and a cart via the marketplace API"
    )
    parser.add_argument("--base-url", default=os.getenv("MARKETPLACE_BASE_URL", DEFAULT_BASE_URL))
    parser.add_argument(
        "--suffix",
        default=str(int(time.time())),
        help="Appended to the demo usernames so repeated runs do not collide",
    )
    return parser.parse_args()


def main() -> int:
    args = parse_args()

    with httpx.Client(base_url=args.base_url.rstrip("/"), timeout=30.0, follow_redirects=True) as client:
        seller_id = register_user(
            client, username=f"seller_{args.suffix}", address="12 Green Street, Springfield"
        )
        buyer_id = register_user(
            client, username=f"buyer_{args.suffix}", address="34 Oak Avenue, Springfield"
        )
        print(f"Seller id={seller_id}, buyer id={buyer_id}")

        product_ids = []
        print("Created listings:")
        for listing in SAMPLE_LISTINGS:
            product_id = create_listing(client, seller_id, listing)
            product_ids.append(product_id)
            print(f"- id={product_id}, title={listing['title']}")

        cart_item = add_to_cart(client, buyer_id, product_ids[0])
        print(f"Cart item id={cart_item.get('id')} for product {product_ids[0]}")

    return 0


if __name__ == "__main__":
    try:
        raise SystemExit(main())
    except (ApiError, httpx.HTTPError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        raise SystemExit(1)

"""
Seed products from a JSON file.

Accepts either a list of product entries or an object with an "items" list.
Entries may use the catalogue field names (name/category/price_cents/stock)
or the admin export names (productName/price/quantity).

Usage:
    shopcart-seed --file products.json
"""
import argparse
import json
import logging
import os
import sys

from shopcart.db import SessionLocal, init_db
from shopcart.repositories.product_repo import ProductRepository

log = logging.getLogger("shopcart.seed")


def _to_int(value, default=0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def normalize_entry(entry: dict) -> dict:
    """Return a dict with keys: name, category, price_cents, stock, description, image"""
    name = entry.get("name") or entry.get("productName") or ""
    if entry.get("price_cents") is not None:
        price_cents = _to_int(entry.get("price_cents"))
    else:
        # plain prices are in major units
        try:
            price_cents = int(round(float(entry.get("price", 0)) * 100))
        except (TypeError, ValueError):
            price_cents = 0

    image = entry.get("image")
    if not image:
        imgs = entry.get("images") or []
        image = imgs[0] if isinstance(imgs, (list, tuple)) and imgs else None

    return {
        "name": name,
        "category": entry.get("category") or None,
        "price_cents": price_cents,
        "stock": _to_int(entry.get("stock", entry.get("quantity", 0)) or 0),
        "description": entry.get("description") or "",
        "image": image,
    }


def load_entries(path: str) -> list:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("items", [])
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of products in {path}")
    return [normalize_entry(e) for e in data if isinstance(e, dict)]


def seed_from_file(path: str, session_factory=SessionLocal) -> int:
    entries = load_entries(path)
    db = session_factory()
    repo = ProductRepository(db)
    created = 0
    try:
        for entry in entries:
            if not entry["name"]:
                continue
            repo.create_or_update(**entry)
            created += 1
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
    log.info("Seeded %d products from %s", created, path)
    return created


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Seed the product catalogue.")
    parser.add_argument("--file", "-f", required=True, help="Path to product json")
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    if not os.path.exists(args.file):
        log.error("File not found: %s", args.file)
        return 1
    init_db()
    seed_from_file(args.file)
    return 0


if __name__ == "__main__":
    sys.exit(main())

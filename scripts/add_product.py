#!/usr/bin/env python3
"""
Add a product to the catalog (remote database when configured, local store otherwise).

Usage:
  python scripts/add_product.py --name "Roti Sobek" --price 14000 [--stock 20]
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Make the kasir package importable when run directly
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from kasir.core.config import get_settings
from kasir.core.errors import KasirError
from kasir.repositories.json_storage import LocalStore
from kasir.repositories.sql_repository import SQLRepository
from kasir.services.persistence import PersistenceFacade


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Add a product to the catalog")
    ap.add_argument("--name", required=True, help="Product name (e.g. Roti Sobek)")
    ap.add_argument("--price", required=True, help="Unit price in rupiah")
    ap.add_argument("--stock", type=int, help="Optional stock count")
    args = ap.parse_args(argv)

    settings = get_settings()
    facade = PersistenceFacade(settings, LocalStore(settings.local_data_dir), SQLRepository(settings))
    existing = {p.name.lower() for p in facade.list_products()}
    if args.name.strip().lower() in existing:
        raise SystemExit(f"Product '{args.name}' already exists")

    product = facade.create_product(args.name, args.price, args.stock)
    print("OK: product added")
    print(f"  ID: {product.id}")
    print(f"  Name: {product.name}")
    print(f"  Price: {product.price}")
    if product.stock is not None:
        print(f"  Stock: {product.stock}")
    print(f"  Backend: {facade.active_backend}")
    return 0


if __name__ == "__main__":
    try:
        raise SystemExit(main())
    except KasirError as exc:  # pragma: no cover - CLI usage
        sys.stderr.write(f"Error: {exc.message}\n")
        raise SystemExit(1)

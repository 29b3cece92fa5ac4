"""One-off migration script: local JSON store -> remote database."""
from __future__ import annotations

import sys
from pathlib import Path

# Make the kasir package importable when run directly
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from kasir.core.config import Settings, get_settings
from kasir.core.logging import get_logger
from kasir.repositories.backends import LocalBackend, RemoteBackend
from kasir.repositories.json_storage import LocalStore
from kasir.repositories.sql_repository import SQLRepository

logger = get_logger("migrate_local_to_remote")


def migrate(settings: Settings | None = None) -> dict:
    """Copy every local product and transaction to the remote backend. Existing ids are replaced."""
    settings = settings or get_settings()
    if not settings.remote_configured:
        raise SystemExit("KASIR_REMOTE_URL and KASIR_REMOTE_KEY must be set")
    local = LocalBackend(LocalStore(settings.local_data_dir), seed_defaults=False)
    remote = RemoteBackend(SQLRepository(settings))

    remote_ids = {p.id for p in remote.list_products()}
    products = 0
    for product in local.list_products():
        if product.id in remote_ids:
            remote.update_product(product.id, {"name": product.name, "price": product.price, "stock": product.stock})
        else:
            remote.create_product(product)
        products += 1

    transactions = 0
    for tx in local.list_transactions():
        remote.save_transaction(tx)
        transactions += 1

    logger.info("migration_done", products=products, transactions=transactions)
    return {"products": products, "transactions": transactions}


if __name__ == "__main__":
    counts = migrate()
    print(f"Local data migrated: {counts['products']} products, {counts['transactions']} transactions.")

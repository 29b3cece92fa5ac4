"""
Export/import of the local data (products + transactions).

Import is a raw replace of each collection present in the document; duplicate
transaction ids that come in this way are dropped by the next read.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional
import json

from kasir.core.errors import ValidationFailed
from kasir.core.logging import get_logger
from kasir.repositories.backends import LocalBackend
from kasir.repositories.json_storage import PRODUCTS, TRANSACTIONS

logger = get_logger(__name__)


def backup_filename(now: Optional[datetime] = None) -> str:
    moment = now or datetime.now().astimezone()
    return f"kasir-backup-{moment:%Y-%m-%d}.json"


class BackupService:
    def __init__(self, local: LocalBackend) -> None:
        self.local = local

    def export_data(self, now: Optional[datetime] = None) -> dict:
        return {
            "products": self.local.product_records(),
            "transactions": self.local.transaction_records(),
            "exportDate": (now or datetime.now().astimezone()).isoformat(),
        }

    def export_json(self, now: Optional[datetime] = None) -> str:
        return json.dumps(self.export_data(now), ensure_ascii=False, indent=2)

    def import_data(self, document: Any) -> list[str]:
        """Replace each collection present as a list. Returns the replaced collection names."""
        if isinstance(document, (str, bytes)):
            try:
                document = json.loads(document)
            except ValueError as exc:
                raise ValidationFailed("backup file is not valid JSON") from exc
        if not isinstance(document, dict):
            raise ValidationFailed("backup document must be an object")
        replaced = []
        for collection in (PRODUCTS, TRANSACTIONS):
            records = document.get(collection)
            if isinstance(records, list):
                self.local.store.write(collection, records)
                replaced.append(collection)
        logger.info("backup_imported", collections=replaced)
        return replaced

    def clear_all_data(self) -> None:
        self.local.store.remove(PRODUCTS)
        self.local.store.remove(TRANSACTIONS)

    def cleanup_duplicate_transactions(self) -> int:
        before = len(self.local.store.read(TRANSACTIONS).records)
        return before - len(self.local.transaction_records())

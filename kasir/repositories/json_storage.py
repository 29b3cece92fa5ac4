"""
Local JSON persistence adapter.

Each collection lives in its own UTF-8 JSON file (an array of records) inside
the local data directory. Reads never fail: a missing or unreadable blob comes
back as an empty LocalRead. Writes never raise either; failures are logged and
reported through the boolean return value only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import json
import os

from kasir.core.logging import get_logger

PRODUCTS = "products"
TRANSACTIONS = "transactions"
COLLECTIONS = (PRODUCTS, TRANSACTIONS)

logger = get_logger(__name__)


@dataclass
class LocalRead:
    """Value-or-empty result of reading a collection."""

    records: list = field(default_factory=list)
    present: bool = False
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class LocalStore:
    def __init__(self, data_dir: str | Path) -> None:
        self.data_dir = Path(data_dir)

    def _path(self, collection: str) -> Path:
        if collection not in COLLECTIONS:
            raise ValueError(f"unknown collection: {collection}")
        return self.data_dir / f"{collection}.json"

    def read(self, collection: str) -> LocalRead:
        path = self._path(collection)
        if not path.exists():
            return LocalRead()
        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            logger.warning("local_read_failed", collection=collection, error=str(exc))
            return LocalRead(present=True, error=str(exc))
        if not isinstance(data, list):
            logger.warning("local_read_not_a_list", collection=collection)
            return LocalRead(present=True, error="collection is not a list")
        return LocalRead(records=data, present=True)

    def write(self, collection: str, records: list) -> bool:
        path = self._path(collection)
        tmp = path.with_suffix(".json.tmp")
        try:
            payload = json.dumps(records, ensure_ascii=False, indent=2)
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(payload, encoding="utf-8")
            os.replace(tmp, path)
        except (OSError, TypeError, ValueError) as exc:
            logger.error("local_write_failed", collection=collection, error=str(exc))
            return False
        return True

    def remove(self, collection: str) -> None:
        path = self._path(collection)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            logger.error("local_remove_failed", collection=collection, error=str(exc))

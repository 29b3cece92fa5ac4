"""
Persistence facade used by every router and service.

Each call checks remote availability once and then commits to one backend.
Reads that fail remotely are served from the local store; writes that fail
remotely raise RemoteOperationFailed and are never redirected to local.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Optional

from kasir.core.config import Settings
from kasir.core.errors import KasirError, RemoteOperationFailed
from kasir.core.logging import get_logger
from kasir.domain import aggregates
from kasir.domain.models import DailyStats, Product, Transaction
from kasir.repositories.backends import Backend, LocalBackend, RemoteBackend, clean_product_changes
from kasir.repositories.json_storage import LocalStore
from kasir.repositories.sql_repository import SQLRepository

logger = get_logger(__name__)


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """Local midnight of ``day`` and of the following day."""
    start = datetime.combine(day, time.min).astimezone()
    end = datetime.combine(day + timedelta(days=1), time.min).astimezone()
    return start, end


class PersistenceFacade:
    def __init__(self, settings: Settings, local_store: LocalStore, remote_repository: SQLRepository) -> None:
        self.settings = settings
        self.local = LocalBackend(local_store)
        self.remote = RemoteBackend(remote_repository)

    # -------------------------------------- routing --------------------------------------
    def backend_for_call(self) -> Backend:
        return self.remote if self.settings.remote_configured else self.local

    @property
    def active_backend(self) -> str:
        return self.backend_for_call().name

    def _read(self, operation: str, *args, **kwargs):
        backend = self.backend_for_call()
        try:
            return getattr(backend, operation)(*args, **kwargs)
        except RemoteOperationFailed as exc:
            logger.warning("remote_read_fallback", operation=operation, error=exc.message)
            return getattr(self.local, operation)(*args, **kwargs)

    def _write(self, operation: str, *args, **kwargs):
        backend = self.backend_for_call()
        result = getattr(backend, operation)(*args, **kwargs)
        if backend is self.remote and self.settings.mirror_to_local:
            try:
                getattr(self.local, operation)(*args, **kwargs)
            except KasirError as exc:
                logger.warning("local_mirror_failed", operation=operation, error=exc.message)
        return result

    # -------------------------------------- products --------------------------------------
    def list_products(self) -> list[Product]:
        return self._read("list_products")

    def get_product(self, product_id: str) -> Optional[Product]:
        return self._read("get_product", product_id)

    def create_product(self, name: str, price, stock: Optional[int] = None) -> Product:
        product = Product(id=aggregates.new_record_id(), name=name, price=price, stock=stock)
        return self._write("create_product", product)

    def update_product(self, product_id: str, **changes) -> Optional[Product]:
        changes = clean_product_changes(changes)
        return self._write("update_product", product_id, changes)

    def delete_product(self, product_id: str) -> bool:
        return self._write("delete_product", product_id)

    # -------------------------------------- transactions --------------------------------------
    def list_transactions(self, limit: Optional[int] = None) -> list[Transaction]:
        return self._read("list_transactions", limit)

    def recent_transactions(self, count: int = 5) -> list[Transaction]:
        return self.list_transactions(limit=count)

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        return self._read("get_transaction", transaction_id)

    def save_transaction(self, tx: Transaction) -> Transaction:
        """Upsert by id: saving the same id twice leaves one record holding the latest payload."""
        return self._write("save_transaction", tx)

    def transactions_between(self, start: Optional[datetime], end: Optional[datetime] = None) -> list[Transaction]:
        return self._read("transactions_between", start, end or datetime.now().astimezone())

    def today_stats(self, now: Optional[datetime] = None) -> DailyStats:
        moment = (now or datetime.now()).astimezone()
        start, end = day_bounds(moment.date())
        return aggregates.today_stats(self._read("transactions_between", start, end), now=moment)

    def search_history(self, query: str = "", day: Optional[date] = None) -> list[Transaction]:
        if day is not None:
            start, end = day_bounds(day)
            candidates = self._read("transactions_between", start, end)
        else:
            candidates = self.list_transactions()
        return aggregates.filter_history(candidates, query, day)

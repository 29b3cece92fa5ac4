"""Remote data access backed by SQLAlchemy.

Every public method returns a RemoteResult instead of raising. When the
remote endpoint or credential is missing the methods answer immediately with
an error and never create an engine.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload

from kasir.core.config import Settings
from kasir.core.logging import get_logger
from kasir.db.models import ProductRow, TransactionItemRow, TransactionRow
from kasir.db.session import get_session

NOT_CONFIGURED = "remote backend not configured"

logger = get_logger(__name__)


@dataclass
class RemoteResult:
    data: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        moment = moment.astimezone()
    return moment.astimezone(timezone.utc)


def _product_dict(row: ProductRow) -> dict:
    return {
        "id": row.id,
        "name": row.name,
        "price": row.price,
        "stock": row.stock,
        "created_at": row.created_at,
        "updated_at": row.updated_at,
    }


def _transaction_dict(row: TransactionRow) -> dict:
    return {
        "id": row.id,
        "transaction_number": row.transaction_number,
        "total": row.total,
        "payment_method": row.payment_method,
        "cash_received": row.cash_received,
        "change_amount": row.change_amount,
        "created_at": row.created_at,
        "transaction_items": [
            {
                "id": item.id,
                "transaction_id": item.transaction_id,
                "product_id": item.product_id,
                "product_name": item.product_name,
                "price": item.price,
                "quantity": item.quantity,
                "subtotal": item.subtotal,
            }
            for item in row.items
        ],
    }


class SQLRepository:
    """CRUD helpers wrapping the SQLAlchemy session."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    @property
    def configured(self) -> bool:
        return self.settings.remote_configured

    def _session(self):
        return get_session(self.settings.remote_url, self.settings.remote_key)

    def _run(self, operation: str, fn) -> RemoteResult:
        if not self.configured:
            return RemoteResult(error=NOT_CONFIGURED)
        try:
            with self._session() as session:
                return RemoteResult(data=fn(session))
        except SQLAlchemyError as exc:
            logger.error("remote_operation_failed", operation=operation, error=str(exc))
            return RemoteResult(error=str(exc))

    # -------------------------- products --------------------------
    def list_products(self) -> RemoteResult:
        def fn(session):
            rows = session.execute(select(ProductRow).order_by(ProductRow.name)).scalars().all()
            return [_product_dict(row) for row in rows]

        return self._run("list_products", fn)

    def insert_product(self, record: dict) -> RemoteResult:
        def fn(session):
            now = datetime.now(timezone.utc)
            row = ProductRow(
                id=record["id"],
                name=record["name"],
                price=record["price"],
                stock=record.get("stock"),
                created_at=now,
                updated_at=now,
            )
            session.add(row)
            session.commit()
            session.refresh(row)
            return _product_dict(row)

        return self._run("insert_product", fn)

    def update_product(self, product_id: str, values: dict) -> RemoteResult:
        def fn(session):
            stmt = (
                update(ProductRow)
                .where(ProductRow.id == product_id)
                .values(**values, updated_at=datetime.now(timezone.utc))
            )
            session.execute(stmt)
            session.commit()
            row = session.get(ProductRow, product_id)
            return _product_dict(row) if row else None

        return self._run("update_product", fn)

    def delete_product(self, product_id: str) -> RemoteResult:
        def fn(session):
            result = session.execute(delete(ProductRow).where(ProductRow.id == product_id))
            session.commit()
            return result.rowcount

        return self._run("delete_product", fn)

    # -------------------------- transactions --------------------------
    def select_transactions(
        self,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: Optional[int] = None,
        transaction_id: Optional[str] = None,
    ) -> RemoteResult:
        """Filtered select: id equality, created_at >= start, created_at < end, newest first."""

        def fn(session):
            stmt = select(TransactionRow).options(selectinload(TransactionRow.items))
            if transaction_id is not None:
                stmt = stmt.where(TransactionRow.id == transaction_id)
            if start is not None:
                stmt = stmt.where(TransactionRow.created_at >= _utc(start))
            if end is not None:
                stmt = stmt.where(TransactionRow.created_at < _utc(end))
            stmt = stmt.order_by(TransactionRow.created_at.desc())
            if limit:
                stmt = stmt.limit(limit)
            return [_transaction_dict(row) for row in session.execute(stmt).scalars().all()]

        return self._run("select_transactions", fn)

    def list_transactions(self, limit: Optional[int] = None) -> RemoteResult:
        return self.select_transactions(limit=limit)

    def get_transaction(self, transaction_id: str) -> RemoteResult:
        result = self.select_transactions(transaction_id=transaction_id)
        if not result.ok:
            return result
        return RemoteResult(data=result.data[0] if result.data else None)

    def upsert_transaction(self, record: dict, items: list[dict]) -> RemoteResult:
        """Header and items are written in one database transaction; an existing id is fully replaced."""

        def fn(session):
            tx_id = record["id"]
            row = session.get(TransactionRow, tx_id)
            if row is None:
                row = TransactionRow(id=tx_id)
                session.add(row)
            else:
                session.execute(delete(TransactionItemRow).where(TransactionItemRow.transaction_id == tx_id))
                session.expire(row, ["items"])
            row.transaction_number = record["transaction_number"]
            row.total = record["total"]
            row.payment_method = record["payment_method"]
            row.cash_received = record.get("cash_received")
            row.change_amount = record.get("change_amount")
            row.created_at = _utc(record["created_at"])
            for position, item in enumerate(items):
                session.add(
                    TransactionItemRow(
                        id=f"{tx_id}-{position}",
                        transaction_id=tx_id,
                        position=position,
                        product_id=item.get("product_id"),
                        product_name=item["product_name"],
                        price=item["price"],
                        quantity=item["quantity"],
                        subtotal=item["subtotal"],
                    )
                )
            try:
                session.commit()
            except SQLAlchemyError:
                session.rollback()
                raise
            session.expire_all()
            stored = session.execute(
                select(TransactionRow).options(selectinload(TransactionRow.items)).where(TransactionRow.id == tx_id)
            ).scalar_one()
            return _transaction_dict(stored)

        return self._run("upsert_transaction", fn)

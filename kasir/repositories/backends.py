"""
Storage strategies behind the persistence facade.

Both backends expose the same operations and return canonical entities from
kasir.domain.models; the differences between the local JSON shape and the
remote row shape stay inside this module.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Optional

from kasir.core.errors import RemoteOperationFailed, ValidationFailed
from kasir.core.logging import get_logger
from kasir.domain.aggregates import dedupe_by_id
from kasir.domain.models import (
    LineItem,
    Product,
    Transaction,
    money_json,
    parse_timestamp,
    to_money,
)
from kasir.repositories.json_storage import PRODUCTS, TRANSACTIONS, LocalStore
from kasir.repositories.sql_repository import RemoteResult, SQLRepository

logger = get_logger(__name__)

DEFAULT_PRODUCTS = [
    {"id": "1", "name": "Roti Tawar", "price": 12000},
    {"id": "2", "name": "Roti Coklat", "price": 15000},
    {"id": "3", "name": "Roti Keju", "price": 18000},
    {"id": "4", "name": "Croissant", "price": 25000},
    {"id": "5", "name": "Donat Gula", "price": 8000},
    {"id": "6", "name": "Donat Coklat", "price": 10000},
    {"id": "7", "name": "Roti Pisang", "price": 13000},
    {"id": "8", "name": "Roti Abon", "price": 16000},
]

PRODUCT_FIELDS = {"name", "price", "stock"}


def clean_product_changes(changes: dict) -> dict:
    """Validate a partial product update. Unknown fields are rejected."""
    unknown = set(changes) - PRODUCT_FIELDS
    if unknown:
        raise ValidationFailed(f"unknown product fields: {', '.join(sorted(unknown))}")
    cleaned: dict = {}
    if "name" in changes:
        name = (changes["name"] or "").strip()
        if not name:
            raise ValidationFailed("product name is required")
        cleaned["name"] = name
    if "price" in changes:
        try:
            price = to_money(changes["price"])
        except ValueError as exc:
            raise ValidationFailed(f"price: {exc}") from exc
        if price < 0:
            raise ValidationFailed("price must not be negative")
        cleaned["price"] = price
    if "stock" in changes:
        stock = changes["stock"]
        if stock is not None:
            stock = int(stock)
            if stock < 0:
                raise ValidationFailed("stock must not be negative")
        cleaned["stock"] = stock
    return cleaned


def _newest_first(transactions: list[Transaction], limit: Optional[int] = None) -> list[Transaction]:
    ordered = sorted(transactions, key=lambda t: t.created_at, reverse=True)
    return ordered[:limit] if limit else ordered


def _in_range(tx: Transaction, start: Optional[datetime], end: Optional[datetime]) -> bool:
    if start is not None and tx.created_at < start.astimezone():
        return False
    if end is not None and tx.created_at >= end.astimezone():
        return False
    return True


class Backend(ABC):
    name = ""

    @abstractmethod
    def list_products(self) -> list[Product]: ...

    @abstractmethod
    def create_product(self, product: Product) -> Product: ...

    @abstractmethod
    def update_product(self, product_id: str, changes: dict) -> Optional[Product]: ...

    @abstractmethod
    def delete_product(self, product_id: str) -> bool: ...

    @abstractmethod
    def list_transactions(self, limit: Optional[int] = None) -> list[Transaction]: ...

    @abstractmethod
    def get_transaction(self, transaction_id: str) -> Optional[Transaction]: ...

    @abstractmethod
    def save_transaction(self, tx: Transaction) -> Transaction: ...

    @abstractmethod
    def transactions_between(self, start: Optional[datetime], end: Optional[datetime]) -> list[Transaction]: ...

    def get_product(self, product_id: str) -> Optional[Product]:
        for product in self.list_products():
            if product.id == product_id:
                return product
        return None


# -------------------------- local --------------------------
def product_to_local(product: Product) -> dict:
    record = {"id": product.id, "name": product.name, "price": money_json(product.price)}
    if product.stock is not None:
        record["stock"] = product.stock
    if product.created_at:
        record["created_at"] = product.created_at.isoformat()
    if product.updated_at:
        record["updated_at"] = product.updated_at.isoformat()
    return record


def product_from_local(record: dict) -> Product:
    return Product(
        id=str(record["id"]),
        name=record["name"],
        price=record["price"],
        stock=record.get("stock"),
        created_at=parse_timestamp(record["created_at"]) if record.get("created_at") else None,
        updated_at=parse_timestamp(record["updated_at"]) if record.get("updated_at") else None,
    )


def transaction_to_local(tx: Transaction) -> dict:
    items = []
    for item in tx.items:
        entry = {"name": item.product_name, "price": money_json(item.price), "quantity": item.quantity}
        if item.product_id:
            entry["productId"] = item.product_id
        items.append(entry)
    record = {
        "id": tx.id,
        "date": tx.created_at.isoformat(),
        "items": items,
        "total": money_json(tx.total),
        "paymentMethod": tx.payment_method,
    }
    if tx.cash_received is not None:
        record["cashReceived"] = money_json(tx.cash_received)
    if tx.change is not None:
        record["change"] = money_json(tx.change)
    return record


def transaction_from_local(record: dict) -> Transaction:
    items = [
        LineItem(
            product_name=item["name"],
            price=item["price"],
            quantity=item["quantity"],
            product_id=item.get("productId"),
        )
        for item in record.get("items") or []
    ]
    return Transaction(
        id=str(record["id"]),
        created_at=parse_timestamp(record["date"]),
        items=items,
        total=record["total"],
        payment_method=str(record.get("paymentMethod") or ""),
        cash_received=record.get("cashReceived"),
        change=record.get("change"),
    )


def _parse_all(records: list, parser, collection: str) -> list:
    parsed = []
    for record in records:
        try:
            parsed.append(parser(record))
        except (KeyError, TypeError, ValueError, ValidationFailed) as exc:
            logger.warning("local_record_skipped", collection=collection, error=str(exc))
    return parsed


def _record_id(record) -> object:
    return record.get("id") if isinstance(record, dict) else None


class LocalBackend(Backend):
    name = "local"

    def __init__(self, store: LocalStore, *, seed_defaults: bool = True) -> None:
        self.store = store
        self.seed_defaults = seed_defaults

    # raw records, used by backup/export
    def product_records(self) -> list[dict]:
        result = self.store.read(PRODUCTS)
        if not result.present and self.seed_defaults:
            records = [dict(p) for p in DEFAULT_PRODUCTS]
            self.store.write(PRODUCTS, records)
            return records
        return result.records

    def transaction_records(self) -> list[dict]:
        """Stored transactions with duplicate ids removed; the cleaned list is written back."""
        records = self.store.read(TRANSACTIONS).records
        unique, removed = dedupe_by_id(records, _record_id)
        if removed:
            logger.info("local_duplicates_removed", collection=TRANSACTIONS, removed=removed)
            self.store.write(TRANSACTIONS, unique)
        return unique

    def list_products(self) -> list[Product]:
        return _parse_all(self.product_records(), product_from_local, PRODUCTS)

    def create_product(self, product: Product) -> Product:
        now = datetime.now().astimezone()
        product.created_at = product.created_at or now
        product.updated_at = product.updated_at or now
        records = self.product_records()
        records.append(product_to_local(product))
        self.store.write(PRODUCTS, records)
        return product

    def update_product(self, product_id: str, changes: dict) -> Optional[Product]:
        records = self.product_records()
        for index, record in enumerate(records):
            if _record_id(record) != product_id:
                continue
            current = product_from_local(record)
            for key, value in clean_product_changes(changes).items():
                setattr(current, key, value)
            current.updated_at = datetime.now().astimezone()
            records[index] = product_to_local(current)
            self.store.write(PRODUCTS, records)
            return current
        return None

    def delete_product(self, product_id: str) -> bool:
        records = self.product_records()
        kept = [r for r in records if _record_id(r) != product_id]
        if len(kept) == len(records):
            return False
        self.store.write(PRODUCTS, kept)
        return True

    def list_transactions(self, limit: Optional[int] = None) -> list[Transaction]:
        parsed = _parse_all(self.transaction_records(), transaction_from_local, TRANSACTIONS)
        return _newest_first(parsed, limit)

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        for record in self.transaction_records():
            if _record_id(record) == transaction_id:
                parsed = _parse_all([record], transaction_from_local, TRANSACTIONS)
                return parsed[0] if parsed else None
        return None

    def save_transaction(self, tx: Transaction) -> Transaction:
        records = self.transaction_records()
        record = transaction_to_local(tx)
        for index, existing in enumerate(records):
            if _record_id(existing) == tx.id:
                records[index] = record
                logger.info("local_transaction_replaced", transaction_id=tx.id)
                break
        else:
            records.append(record)
            logger.info("local_transaction_added", transaction_id=tx.id)
        self.store.write(TRANSACTIONS, records)
        return tx

    def transactions_between(self, start: Optional[datetime], end: Optional[datetime]) -> list[Transaction]:
        return [tx for tx in self.list_transactions() if _in_range(tx, start, end)]


# -------------------------- remote --------------------------
def _remote_time(value) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime) and value.tzinfo is None:
        # sqlite drops the offset; rows are written in UTC
        value = value.replace(tzinfo=timezone.utc)
    return parse_timestamp(value)


def product_from_remote(row: dict) -> Product:
    return Product(
        id=str(row["id"]),
        name=row["name"],
        price=row["price"],
        stock=row.get("stock"),
        created_at=_remote_time(row.get("created_at")),
        updated_at=_remote_time(row.get("updated_at")),
    )


def transaction_from_remote(row: dict) -> Transaction:
    items = [
        LineItem(
            product_name=item["product_name"],
            price=item["price"],
            quantity=item["quantity"],
            product_id=item.get("product_id"),
            subtotal=item.get("subtotal"),
        )
        for item in row.get("transaction_items") or []
    ]
    return Transaction(
        id=str(row["id"]),
        created_at=_remote_time(row["created_at"]),
        items=items,
        total=row["total"],
        payment_method=row["payment_method"],
        cash_received=row.get("cash_received"),
        change=row.get("change_amount"),
        transaction_number=row.get("transaction_number") or "",
    )


def transaction_to_remote(tx: Transaction) -> tuple[dict, list[dict]]:
    record = {
        "id": tx.id,
        "transaction_number": tx.transaction_number,
        "total": tx.total,
        "payment_method": tx.payment_method,
        "cash_received": tx.cash_received,
        "change_amount": tx.change,
        "created_at": tx.created_at,
    }
    items = [
        {
            "product_id": item.product_id,
            "product_name": item.product_name,
            "price": item.price,
            "quantity": item.quantity,
            "subtotal": item.subtotal,
        }
        for item in tx.items
    ]
    return record, items


def _unwrap(result: RemoteResult, operation: str):
    if not result.ok:
        raise RemoteOperationFailed(f"{operation}: {result.error}")
    return result.data


def _parse_remote(parser, rows, operation: str) -> list:
    """Map remote rows to entities; a row that fails validation fails the whole call."""
    try:
        return [parser(row) for row in rows]
    except (KeyError, TypeError, ValueError, ValidationFailed) as exc:
        logger.warning("remote_row_rejected", operation=operation, error=str(exc))
        raise RemoteOperationFailed(f"{operation}: malformed row: {exc}") from exc


class RemoteBackend(Backend):
    name = "remote"

    def __init__(self, repository: SQLRepository) -> None:
        self.repository = repository

    def list_products(self) -> list[Product]:
        rows = _unwrap(self.repository.list_products(), "list_products")
        return _parse_remote(product_from_remote, rows or [], "list_products")

    def create_product(self, product: Product) -> Product:
        record = {"id": product.id, "name": product.name, "price": product.price, "stock": product.stock}
        row = _unwrap(self.repository.insert_product(record), "create_product")
        return _parse_remote(product_from_remote, [row], "create_product")[0]

    def update_product(self, product_id: str, changes: dict) -> Optional[Product]:
        row = _unwrap(self.repository.update_product(product_id, clean_product_changes(changes)), "update_product")
        return _parse_remote(product_from_remote, [row], "update_product")[0] if row else None

    def delete_product(self, product_id: str) -> bool:
        return bool(_unwrap(self.repository.delete_product(product_id), "delete_product"))

    def list_transactions(self, limit: Optional[int] = None) -> list[Transaction]:
        rows = _unwrap(self.repository.list_transactions(limit), "list_transactions")
        unique, _ = dedupe_by_id(
            _parse_remote(transaction_from_remote, rows or [], "list_transactions"), lambda t: t.id
        )
        return unique

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        row = _unwrap(self.repository.get_transaction(transaction_id), "get_transaction")
        return _parse_remote(transaction_from_remote, [row], "get_transaction")[0] if row else None

    def save_transaction(self, tx: Transaction) -> Transaction:
        record, items = transaction_to_remote(tx)
        row = _unwrap(self.repository.upsert_transaction(record, items), "save_transaction")
        return _parse_remote(transaction_from_remote, [row], "save_transaction")[0]

    def transactions_between(self, start: Optional[datetime], end: Optional[datetime]) -> list[Transaction]:
        rows = _unwrap(self.repository.select_transactions(start=start, end=end), "transactions_between")
        return _parse_remote(transaction_from_remote, rows or [], "transactions_between")

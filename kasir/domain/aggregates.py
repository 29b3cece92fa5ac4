"""Derived values computed from already-loaded data. Nothing here performs I/O."""
from __future__ import annotations

import secrets
import time
from datetime import date, datetime
from decimal import Decimal
from typing import Callable, Iterable, Optional, Sequence, TypeVar

from kasir.domain.models import DailyStats, Transaction, to_money

T = TypeVar("T")


def new_record_id() -> str:
    """Millisecond timestamp as text."""
    return str(int(time.time() * 1000))


def new_transaction_id() -> str:
    """
    Millisecond timestamp followed by a 3-digit random suffix.

    Collisions inside the same millisecond are unlikely but possible; readers
    drop duplicate ids (see dedupe_by_id).
    """
    return f"{new_record_id()}{secrets.randbelow(1000):03d}"


def dedupe_by_id(records: Sequence[T], key: Callable[[T], object]) -> tuple[list[T], int]:
    """Keep the first record for every id, preserving encounter order."""
    seen: set = set()
    unique: list[T] = []
    for record in records:
        ident = key(record)
        if ident in seen:
            continue
        seen.add(ident)
        unique.append(record)
    return unique, len(records) - len(unique)


def cart_total(lines: Iterable) -> Decimal:
    return sum((to_money(line.subtotal) for line in lines), Decimal(0))


def change_due(cash_received, total) -> Decimal:
    """Negative when the customer has not paid enough."""
    return to_money(cash_received) - to_money(total)


def local_day(moment: datetime) -> date:
    return moment.astimezone().date()


def today_stats(transactions: Iterable[Transaction], now: Optional[datetime] = None) -> DailyStats:
    """Sales total and count for the current local calendar day."""
    today = local_day(now) if now else datetime.now().astimezone().date()
    todays = [t for t in transactions if local_day(t.created_at) == today]
    return DailyStats(
        total_sales=sum((t.total for t in todays), Decimal(0)),
        count=len(todays),
        transactions=todays,
    )


def matches_query(tx: Transaction, query: str) -> bool:
    needle = (query or "").strip().lower()
    if not needle:
        return True
    if needle in tx.id.lower():
        return True
    return any(needle in item.product_name.lower() for item in tx.items)


def filter_history(
    transactions: Iterable[Transaction],
    query: str = "",
    day: Optional[date] = None,
) -> list[Transaction]:
    """Text and calendar-day filters, combined with AND. Empty filters match everything."""
    result = []
    for tx in transactions:
        if not matches_query(tx, query):
            continue
        if day is not None and local_day(tx.created_at) != day:
            continue
        result.append(tx)
    return result


def sales_summary(transactions: Sequence[Transaction]) -> dict:
    """Count, total and average ticket of an already filtered history."""
    total = sum((t.total for t in transactions), Decimal(0))
    count = len(transactions)
    average = (total / count) if count else Decimal(0)
    return {"count": count, "total": total, "average": average}

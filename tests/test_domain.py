from __future__ import annotations

import sys
from datetime import datetime, timedelta
from decimal import Decimal
from pathlib import Path

import pytest

# Make the kasir package importable during local test runs
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from kasir.core.errors import ValidationFailed  # noqa: E402
from kasir.domain import aggregates  # noqa: E402
from kasir.domain.cart import Cart  # noqa: E402
from kasir.domain.formatting import format_rupiah, short_number  # noqa: E402
from kasir.domain.models import CASH, LineItem, Product, Transaction, normalize_payment_method, to_money  # noqa: E402

ROTI = Product(id="1", name="Roti Tawar", price=12000)
CROISSANT = Product(id="4", name="Croissant", price=25000)


def _cart() -> Cart:
    cart = Cart()
    cart.add(ROTI, 2)
    cart.add(CROISSANT, 1)
    return cart


def _tx(tx_id: str, when: datetime, name: str = "Roti Tawar", price: int = 12000, qty: int = 1) -> Transaction:
    item = LineItem(product_name=name, price=price, quantity=qty)
    return Transaction(id=tx_id, created_at=when.astimezone(), items=[item], total=item.subtotal, payment_method="qris")


def test_cart_total_and_cash_change():
    cart = _cart()
    assert cart.total == Decimal(49000)

    tx = cart.to_transaction("tunai", 50000)
    assert tx.total == Decimal(49000)
    assert tx.change == Decimal(1000)
    assert tx.cash_received == Decimal(50000)
    assert tx.total == sum(item.subtotal for item in tx.items)
    assert all(item.subtotal == item.price * item.quantity for item in tx.items)


def test_insufficient_cash_is_rejected():
    with pytest.raises(ValidationFailed) as exc:
        _cart().to_transaction("tunai", 40000)
    assert "insufficient" in exc.value.message


def test_cash_without_amount_is_rejected():
    with pytest.raises(ValidationFailed):
        _cart().to_transaction(CASH)


def test_non_cash_skips_change_check():
    tx = _cart().to_transaction("qris", 10)
    assert tx.cash_received is None
    assert tx.change is None


def test_empty_cart_is_rejected():
    with pytest.raises(ValidationFailed):
        Cart().to_transaction("qris")


def test_adding_same_product_increments_quantity():
    cart = Cart()
    cart.add(ROTI)
    cart.add(ROTI, 2)
    assert len(cart) == 1
    assert cart.get("1").quantity == 3
    assert cart.get("1").subtotal == Decimal(36000)


def test_cart_keeps_price_snapshot():
    product = Product(id="9", name="Donat Gula", price=8000)
    cart = Cart()
    cart.add(product)
    product.price = Decimal(9000)
    assert cart.total == Decimal(8000)


def test_set_quantity_zero_removes_line():
    cart = _cart()
    cart.set_quantity("1", 0)
    assert "1" not in cart
    assert [line.product_id for line in cart] == ["4"]


def test_line_item_subtotal_must_match():
    with pytest.raises(ValidationFailed):
        LineItem(product_name="Croissant", price=25000, quantity=2, subtotal=25000)


def test_transaction_total_must_match_items():
    item = LineItem(product_name="Croissant", price=25000, quantity=1)
    with pytest.raises(ValidationFailed):
        Transaction(id="1", created_at=datetime.now().astimezone(), items=[item], total=30000, payment_method="qris")


def test_money_allows_at_most_two_decimal_places():
    assert to_money("0.25") == Decimal("0.25")
    assert to_money(Decimal("12000.00")) == Decimal(12000)
    assert to_money(Decimal("0.120")) == Decimal("0.12")
    for bad in (Decimal("0.125"), "0.125", 0.125, "NaN", "abc"):
        with pytest.raises(ValueError):
            to_money(bad)
    with pytest.raises(ValidationFailed):
        Product(id="9", name="Roti Mini", price=Decimal("0.125"))
    with pytest.raises(ValidationFailed):
        LineItem(product_name="Roti Mini", price=Decimal("0.125"), quantity=2)


def test_cash_with_sub_cent_amount_is_rejected():
    with pytest.raises(ValidationFailed):
        _cart().to_transaction(CASH, "50000.005")


def test_strict_payment_methods():
    assert normalize_payment_method("Cash") == CASH
    assert normalize_payment_method("ovo") == "ovo"
    with pytest.raises(ValidationFailed):
        normalize_payment_method("ovo", strict=True)


def test_today_stats_uses_local_calendar_day():
    now = datetime.now().astimezone().replace(hour=12, minute=0, second=0, microsecond=0)
    txs = [
        _tx("a", now, price=12000),
        _tx("b", now.replace(hour=0, minute=0, second=1), price=15000),
        _tx("c", now - timedelta(days=1), price=99000),
    ]
    stats = aggregates.today_stats(txs, now=now)
    assert stats.count == 2
    assert stats.total_sales == Decimal(27000)


def test_filter_history_combines_text_and_day():
    now = datetime.now().astimezone()
    yesterday = now - timedelta(days=1)
    txs = [
        _tx("1700000000001", now, name="Roti Keju"),
        _tx("1700000000002", yesterday, name="Roti Keju"),
        _tx("1700000000003", now, name="Croissant"),
    ]
    assert [t.id for t in aggregates.filter_history(txs, "KEJU")] == ["1700000000001", "1700000000002"]
    assert [t.id for t in aggregates.filter_history(txs, "keju", now.date())] == ["1700000000001"]
    assert [t.id for t in aggregates.filter_history(txs, "0003")] == ["1700000000003"]
    assert len(aggregates.filter_history(txs)) == 3


def test_dedupe_keeps_first_occurrence():
    records = [{"id": "a", "v": 1}, {"id": "b"}, {"id": "a", "v": 2}]
    unique, removed = aggregates.dedupe_by_id(records, lambda r: r["id"])
    assert removed == 1
    assert unique == [{"id": "a", "v": 1}, {"id": "b"}]


def test_transaction_id_is_timestamp_based():
    tx_id = aggregates.new_transaction_id()
    assert tx_id.isdigit()
    assert len(tx_id) == len(aggregates.new_record_id()) + 3


def test_change_due_can_be_negative():
    assert aggregates.change_due(40000, 49000) == Decimal(-9000)


def test_formatting():
    assert format_rupiah(Decimal(49000)) == "Rp 49.000"
    assert format_rupiah(1250000) == "Rp 1.250.000"
    assert format_rupiah(-1500) == "-Rp 1.500"
    assert short_number("1700000000123456") == "#123456"

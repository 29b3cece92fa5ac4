"""Canonical entities returned by the persistence facade, whatever backend served them."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from kasir.core.errors import ValidationFailed

CASH = "tunai"
QRIS = "qris"
TRANSFER = "transfer"
PAYMENT_METHODS = (CASH, QRIS, TRANSFER)
_PAYMENT_ALIASES = {"cash": CASH, "bank_transfer": TRANSFER, "bank transfer": TRANSFER}


MONEY_PLACES = 2


def to_money(value: Any) -> Decimal:
    """
    Coerce a stored or user-supplied amount into a Decimal.

    Amounts with more than MONEY_PLACES decimals are rejected; the remote
    schema stores Numeric(14, 2) and both backends must hold the same value.
    """
    if isinstance(value, bool) or value is None:
        raise ValueError(f"invalid amount: {value!r}")
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation as exc:
            raise ValueError(f"invalid amount: {value!r}") from exc
    if not amount.is_finite():
        raise ValueError(f"invalid amount: {value!r}")
    if amount.normalize().as_tuple().exponent < -MONEY_PLACES:
        raise ValueError(f"amount has more than {MONEY_PLACES} decimal places: {value!r}")
    return amount


def _money_field(value: Any, label: str) -> Decimal:
    try:
        return to_money(value)
    except ValueError as exc:
        raise ValidationFailed(f"{label}: {exc}") from exc


def money_json(value: Decimal | None) -> int | float | None:
    """Numeric form used in JSON documents: ints for whole amounts."""
    if value is None:
        return None
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def parse_timestamp(value: Any) -> datetime:
    """Parse ISO-8601 text (``Z`` suffix included) into an aware local datetime."""
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value or "").strip()
        if not text:
            raise ValueError("missing timestamp")
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    # naive values are taken as local wall-clock time
    return parsed.astimezone()


def normalize_payment_method(value: str | None, *, strict: bool = False) -> str:
    method = (value or "").strip().lower()
    method = _PAYMENT_ALIASES.get(method, method)
    if not method:
        raise ValidationFailed("payment method is required")
    if strict and method not in PAYMENT_METHODS:
        raise ValidationFailed(f"unsupported payment method: {method}")
    return method


@dataclass
class Product:
    id: str
    name: str
    price: Decimal
    stock: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        self.name = (self.name or "").strip()
        self.price = _money_field(self.price, "price")
        if not self.name:
            raise ValidationFailed("product name is required")
        if self.price < 0:
            raise ValidationFailed("price must not be negative")
        if self.stock is not None:
            self.stock = int(self.stock)
            if self.stock < 0:
                raise ValidationFailed("stock must not be negative")


@dataclass
class LineItem:
    product_name: str
    price: Decimal
    quantity: int
    product_id: Optional[str] = None
    subtotal: Optional[Decimal] = None

    def __post_init__(self):
        self.price = _money_field(self.price, "price")
        self.quantity = int(self.quantity)
        if self.quantity < 1:
            raise ValidationFailed("quantity must be a positive integer")
        expected = self.price * self.quantity
        if self.subtotal is None:
            self.subtotal = expected
        else:
            self.subtotal = _money_field(self.subtotal, "subtotal")
            if self.subtotal != expected:
                raise ValidationFailed(f"subtotal for {self.product_name!r} does not match price x quantity")


@dataclass
class Transaction:
    id: str
    created_at: datetime
    items: list[LineItem]
    total: Decimal
    payment_method: str
    cash_received: Optional[Decimal] = None
    change: Optional[Decimal] = None
    transaction_number: str = ""

    def __post_init__(self):
        self.total = _money_field(self.total, "total")
        if self.total < 0:
            raise ValidationFailed("total must not be negative")
        if self.total != sum((item.subtotal for item in self.items), Decimal(0)):
            raise ValidationFailed("total does not match the sum of line items")
        if self.cash_received is not None:
            self.cash_received = _money_field(self.cash_received, "cash received")
        if self.change is not None:
            self.change = _money_field(self.change, "change")
        if self.is_cash and self.cash_received is not None:
            expected = self.cash_received - self.total
            if self.change is None:
                self.change = expected
            elif self.change != expected:
                raise ValidationFailed("change does not match cash received minus total")
        if not self.transaction_number:
            self.transaction_number = f"TRX{self.id}"

    @property
    def is_cash(self) -> bool:
        return self.payment_method == CASH


@dataclass
class DailyStats:
    total_sales: Decimal = Decimal(0)
    count: int = 0
    transactions: list[Transaction] = field(default_factory=list)

"""Transient cart used during transaction entry."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Iterator, Optional

from kasir.core.errors import ValidationFailed
from kasir.domain.aggregates import cart_total, change_due, new_transaction_id
from kasir.domain.models import CASH, LineItem, Product, Transaction, normalize_payment_method, to_money


@dataclass
class CartLine:
    product_id: str
    name: str
    price: Decimal
    quantity: int

    @property
    def subtotal(self) -> Decimal:
        return self.price * self.quantity


class Cart:
    """Ordered mapping product id -> line. At most one line per product."""

    def __init__(self) -> None:
        self._lines: dict[str, CartLine] = {}

    def __iter__(self) -> Iterator[CartLine]:
        return iter(list(self._lines.values()))

    def __len__(self) -> int:
        return len(self._lines)

    def __contains__(self, product_id: str) -> bool:
        return product_id in self._lines

    @property
    def total(self) -> Decimal:
        return cart_total(self._lines.values())

    def get(self, product_id: str) -> Optional[CartLine]:
        return self._lines.get(product_id)

    def add(self, product: Product, quantity: int = 1) -> CartLine:
        quantity = int(quantity)
        if quantity < 1:
            raise ValidationFailed("quantity must be a positive integer")
        line = self._lines.get(product.id)
        if line:
            line.quantity += quantity
            return line
        # price is a snapshot; later catalog edits do not touch the cart
        line = CartLine(product_id=product.id, name=product.name, price=product.price, quantity=quantity)
        self._lines[product.id] = line
        return line

    def set_quantity(self, product_id: str, quantity: int) -> None:
        if int(quantity) <= 0:
            self.remove(product_id)
            return
        line = self._lines.get(product_id)
        if line:
            line.quantity = int(quantity)

    def remove(self, product_id: str) -> None:
        self._lines.pop(product_id, None)

    def clear(self) -> None:
        self._lines.clear()

    def to_transaction(
        self,
        payment_method: str,
        cash_received=None,
        *,
        now: Optional[datetime] = None,
        strict_methods: bool = False,
    ) -> Transaction:
        """Freeze the cart into a Transaction. Raises ValidationFailed before anything is stored."""
        if not self._lines:
            raise ValidationFailed("cart is empty")
        method = normalize_payment_method(payment_method, strict=strict_methods)
        total = self.total
        cash: Optional[Decimal] = None
        change: Optional[Decimal] = None
        if method == CASH:
            if cash_received in (None, ""):
                raise ValidationFailed("insufficient payment")
            try:
                cash = to_money(cash_received)
            except ValueError as exc:
                raise ValidationFailed(f"cash received: {exc}") from exc
            change = change_due(cash, total)
            if change < 0:
                raise ValidationFailed("insufficient payment")
        items = [
            LineItem(product_name=line.name, price=line.price, quantity=line.quantity, product_id=line.product_id)
            for line in self._lines.values()
        ]
        return Transaction(
            id=new_transaction_id(),
            created_at=(now or datetime.now()).astimezone(),
            items=items,
            total=total,
            payment_method=method,
            cash_received=cash,
            change=change,
        )

"""Checkout use case: validated cart -> stored transaction."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from kasir.core.errors import NotFound, ValidationFailed
from kasir.core.logging import get_logger
from kasir.domain.cart import Cart
from kasir.domain.models import Transaction
from kasir.services.persistence import PersistenceFacade

logger = get_logger(__name__)


@dataclass
class CheckoutService:
    facade: PersistenceFacade

    def build_cart(self, lines: Iterable[tuple[str, int]]) -> Cart:
        """Cart from (product_id, quantity) pairs, priced from the current catalog."""
        catalog = {p.id: p for p in self.facade.list_products()}
        cart = Cart()
        for product_id, quantity in lines:
            product = catalog.get(product_id)
            if not product:
                raise NotFound(f"product {product_id} not found")
            cart.add(product, quantity)
        return cart

    def checkout(
        self,
        cart: Cart,
        payment_method: str,
        cash_received=None,
        *,
        now: Optional[datetime] = None,
    ) -> Transaction:
        tx = cart.to_transaction(
            payment_method,
            cash_received,
            now=now,
            strict_methods=self.facade.settings.strict_payment_methods,
        )
        saved = self.facade.save_transaction(tx)
        logger.info("checkout_completed", transaction_id=saved.id, total=str(saved.total), method=saved.payment_method)
        cart.clear()
        return saved

    def checkout_lines(self, lines, payment_method: str, cash_received=None) -> Transaction:
        lines = list(lines)
        if not lines:
            raise ValidationFailed("cart is empty")
        return self.checkout(self.build_cart(lines), payment_method, cash_received)

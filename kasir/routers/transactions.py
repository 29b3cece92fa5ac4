from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request
from pydantic import BaseModel, Field

from kasir.domain.aggregates import sales_summary
from kasir.domain.models import money_json
from kasir.routers.common import get_checkout, get_facade, service_errors, transaction_out

router = APIRouter(prefix="/transactions", tags=["transactions"])


class CartLineIn(BaseModel):
    product_id: str
    quantity: int = Field(1, ge=1)


class CheckoutIn(BaseModel):
    items: list[CartLineIn]
    payment_method: str
    cash_received: Optional[Decimal] = None


@router.get("")
def list_transactions(
    request: Request,
    limit: Optional[int] = Query(None, ge=1),
    q: str = "",
    day: Optional[date] = Query(None, alias="date"),
):
    facade = get_facade(request)
    if q or day:
        found = facade.search_history(q, day)
        if limit is not None:
            found = found[:limit]
    else:
        found = facade.list_transactions(limit)
    summary = sales_summary(found)
    return {
        "transactions": [transaction_out(tx) for tx in found],
        "count": summary["count"],
        "total": money_json(summary["total"]),
        "average": money_json(summary["average"]),
    }


@router.get("/{transaction_id}")
def get_transaction(transaction_id: str, request: Request):
    tx = get_facade(request).get_transaction(transaction_id)
    if not tx:
        raise HTTPException(404, "Transaksi tidak ditemukan")
    return transaction_out(tx)


@router.post("/checkout", status_code=201)
def checkout(payload: CheckoutIn, request: Request):
    lines = [(line.product_id, line.quantity) for line in payload.items]
    with service_errors():
        tx = get_checkout(request).checkout_lines(lines, payload.payment_method, payload.cash_received)
    return transaction_out(tx)

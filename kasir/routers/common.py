"""Helpers shared by the routers: service lookup, JSON shapes, error mapping."""

from __future__ import annotations

from contextlib import contextmanager

from fastapi import HTTPException, Request

from kasir.core.errors import NotFound, RemoteOperationFailed, ValidationFailed
from kasir.domain.models import Product, Transaction, money_json
from kasir.services.backup_service import BackupService
from kasir.services.checkout_service import CheckoutService
from kasir.services.persistence import PersistenceFacade


def _state(request: Request, name: str):
    svc = getattr(getattr(request.app, "state", None), name, None)
    if not svc:
        raise RuntimeError(f"{name} is not configured")
    return svc


def get_facade(request: Request) -> PersistenceFacade:
    return _state(request, "facade")


def get_checkout(request: Request) -> CheckoutService:
    return _state(request, "checkout_service")


def get_backup(request: Request) -> BackupService:
    return _state(request, "backup_service")


@contextmanager
def service_errors():
    """Translate service exceptions into HTTP responses."""
    try:
        yield
    except ValidationFailed as exc:
        raise HTTPException(400, exc.message) from exc
    except NotFound as exc:
        raise HTTPException(404, exc.message) from exc
    except RemoteOperationFailed as exc:
        raise HTTPException(503, "Gagal menyimpan ke server. Silakan coba lagi.") from exc


def product_out(product: Product) -> dict:
    return {
        "id": product.id,
        "name": product.name,
        "price": money_json(product.price),
        "stock": product.stock,
    }


def transaction_out(tx: Transaction) -> dict:
    return {
        "id": tx.id,
        "transaction_number": tx.transaction_number,
        "created_at": tx.created_at.isoformat(),
        "items": [
            {
                "product_id": item.product_id,
                "product_name": item.product_name,
                "price": money_json(item.price),
                "quantity": item.quantity,
                "subtotal": money_json(item.subtotal),
            }
            for item in tx.items
        ],
        "total": money_json(tx.total),
        "payment_method": tx.payment_method,
        "cash_received": money_json(tx.cash_received),
        "change": money_json(tx.change),
    }

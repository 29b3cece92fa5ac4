from __future__ import annotations

from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from kasir.routers.common import get_facade, product_out, service_errors

router = APIRouter(prefix="/products", tags=["products"])


class ProductIn(BaseModel):
    name: str
    price: Decimal
    stock: Optional[int] = None


class ProductPatch(BaseModel):
    name: Optional[str] = None
    price: Optional[Decimal] = None
    stock: Optional[int] = None


@router.get("")
def list_products(request: Request):
    return [product_out(p) for p in get_facade(request).list_products()]


@router.post("", status_code=201)
def create_product(payload: ProductIn, request: Request):
    with service_errors():
        product = get_facade(request).create_product(payload.name, payload.price, payload.stock)
    return product_out(product)


@router.put("/{product_id}")
def update_product(product_id: str, payload: ProductPatch, request: Request):
    changes = payload.model_dump(exclude_unset=True)
    with service_errors():
        product = get_facade(request).update_product(product_id, **changes)
    if not product:
        raise HTTPException(404, "Produk tidak ditemukan")
    return product_out(product)


@router.delete("/{product_id}")
def delete_product(product_id: str, request: Request):
    with service_errors():
        deleted = get_facade(request).delete_product(product_id)
    if not deleted:
        raise HTTPException(404, "Produk tidak ditemukan")
    return {"ok": True}

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import HTMLResponse, PlainTextResponse
from fastapi.templating import Jinja2Templates

from kasir.routers.common import get_facade
from kasir.services.receipt_service import build_receipt, share_text

router = APIRouter(prefix="/receipts", tags=["receipts"])


def _get_templates(request: Request) -> Jinja2Templates:
    tpl = getattr(getattr(request.app, "state", None), "templates", None)
    if tpl:
        return tpl
    raise RuntimeError("Templates are not configured")


def _load(request: Request, transaction_id: str):
    tx = get_facade(request).get_transaction(transaction_id)
    if not tx:
        raise HTTPException(404, "Transaksi tidak ditemukan")
    return tx


@router.get("/{transaction_id}", response_class=HTMLResponse)
def receipt_page(transaction_id: str, request: Request):
    tx = _load(request, transaction_id)
    store_name = get_facade(request).settings.store_name
    return _get_templates(request).TemplateResponse(
        request,
        "receipt.html",
        {"receipt": build_receipt(tx, store_name)},
    )


@router.get("/{transaction_id}/text", response_class=PlainTextResponse)
def receipt_text(transaction_id: str, request: Request):
    tx = _load(request, transaction_id)
    return share_text(tx, get_facade(request).settings.store_name)

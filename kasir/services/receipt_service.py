"""Receipt view-model and plain-text share format."""

from __future__ import annotations

from kasir.domain.formatting import format_local, format_rupiah, short_number
from kasir.domain.models import Transaction


def build_receipt(tx: Transaction, store_name: str = "Toko Roti") -> dict:
    return {
        "store_name": store_name,
        "id": tx.id,
        "number": short_number(tx.id),
        "transaction_number": tx.transaction_number,
        "date": format_local(tx.created_at),
        "lines": [
            {
                "name": item.product_name,
                "quantity": item.quantity,
                "price": format_rupiah(item.price),
                "subtotal": format_rupiah(item.subtotal),
            }
            for item in tx.items
        ],
        "total": format_rupiah(tx.total),
        "payment_method": tx.payment_method.upper(),
        "is_cash": tx.is_cash,
        "cash_received": format_rupiah(tx.cash_received or 0),
        "change": format_rupiah(tx.change or 0),
    }


def share_text(tx: Transaction, store_name: str = "Toko Roti") -> str:
    receipt = build_receipt(tx, store_name)
    lines = "\n".join(f"{line['name']} x{line['quantity']} = {line['subtotal']}" for line in receipt["lines"])
    return (
        f"Struk Belanja {store_name}\n\n"
        f"No: {receipt['number']}\n"
        f"Tanggal: {receipt['date']}\n\n"
        f"Item:\n{lines}\n\n"
        f"Total: {receipt['total']}\n"
        f"Pembayaran: {receipt['payment_method']}\n\n"
        "Terima kasih!"
    )

"""Display helpers (IDR amounts, receipt numbers, local dates)."""
from __future__ import annotations

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal


def format_rupiah(amount) -> str:
    """Format like id-ID currency: ``Rp 49.000``, ``-Rp 1.500``."""
    value = Decimal(str(amount)).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    digits = f"{abs(int(value)):,}".replace(",", ".")
    return f"{sign}Rp {digits}"


def short_number(tx_id: str) -> str:
    return "#" + (tx_id or "")[-6:]


def format_local(moment: datetime) -> str:
    """id-ID style ``d/m/yyyy, HH.MM.SS`` in local time."""
    local = moment.astimezone()
    return f"{local.day}/{local.month}/{local.year}, {local:%H.%M.%S}"

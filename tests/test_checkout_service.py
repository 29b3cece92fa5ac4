from __future__ import annotations

import sys
from dataclasses import replace
from decimal import Decimal
from pathlib import Path

import pytest

# Make the kasir package importable during local test runs
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from kasir.core.config import Settings  # noqa: E402
from kasir.core.errors import NotFound, ValidationFailed  # noqa: E402
from kasir.repositories.json_storage import TRANSACTIONS, LocalStore  # noqa: E402
from kasir.repositories.sql_repository import SQLRepository  # noqa: E402
from kasir.services.checkout_service import CheckoutService  # noqa: E402
from kasir.services.persistence import PersistenceFacade  # noqa: E402
from kasir.services.receipt_service import build_receipt, share_text  # noqa: E402


@pytest.fixture()
def service(tmp_path):
    settings = Settings(
        app_env="test",
        store_name="Toko Roti",
        local_data_dir=str(tmp_path),
        remote_url="",
        remote_key="",
        mirror_to_local=False,
        strict_payment_methods=False,
        log_level="WARNING",
    )
    facade = PersistenceFacade(settings, LocalStore(tmp_path), SQLRepository(settings))
    return CheckoutService(facade)


def test_cash_checkout_is_stored_with_change(service, tmp_path):
    tx = service.checkout_lines([("1", 2), ("4", 1)], "tunai", 50000)

    assert tx.total == Decimal(49000)
    assert tx.change == Decimal(1000)
    stored = service.facade.get_transaction(tx.id)
    assert stored == tx
    assert [(i.product_name, i.quantity) for i in stored.items] == [("Roti Tawar", 2), ("Croissant", 1)]


def test_insufficient_cash_writes_nothing(service, tmp_path):
    with pytest.raises(ValidationFailed):
        service.checkout_lines([("1", 2), ("4", 1)], "tunai", 40000)
    assert LocalStore(tmp_path).read(TRANSACTIONS).present is False


def test_unknown_product_is_rejected(service):
    with pytest.raises(NotFound):
        service.checkout_lines([("999", 1)], "qris")


def test_checkout_clears_cart(service):
    cart = service.build_cart([("2", 1)])
    service.checkout(cart, "transfer")
    assert len(cart) == 0


def test_strict_mode_rejects_unknown_method(service):
    service.facade.settings = replace(service.facade.settings, strict_payment_methods=True)
    with pytest.raises(ValidationFailed):
        service.checkout_lines([("2", 1)], "ovo")


def test_receipt_formats(service):
    tx = service.checkout_lines([("1", 2), ("4", 1)], "tunai", 50000)
    receipt = build_receipt(tx)
    assert receipt["number"] == "#" + tx.id[-6:]
    assert receipt["total"] == "Rp 49.000"
    assert receipt["change"] == "Rp 1.000"
    assert receipt["lines"][0]["subtotal"] == "Rp 24.000"

    text = share_text(tx)
    assert text.startswith("Struk Belanja Toko Roti")
    assert "Roti Tawar x2 = Rp 24.000" in text
    assert "Pembayaran: TUNAI" in text
    assert text.endswith("Terima kasih!")

from __future__ import annotations

import json
import sys
from datetime import datetime
from pathlib import Path

import pytest

# Make the kasir package importable during local test runs
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from kasir.core.errors import ValidationFailed  # noqa: E402
from kasir.repositories.backends import LocalBackend  # noqa: E402
from kasir.repositories.json_storage import PRODUCTS, TRANSACTIONS, LocalStore  # noqa: E402
from kasir.services.backup_service import BackupService, backup_filename  # noqa: E402

TX = {
    "id": "1700000000000123",
    "date": "2024-05-01T09:30:00+07:00",
    "items": [{"name": "Roti Tawar", "price": 12000, "quantity": 2}],
    "total": 24000,
    "paymentMethod": "qris",
}


def _service(path) -> BackupService:
    return BackupService(LocalBackend(LocalStore(path)))


def test_export_import_round_trip(tmp_path):
    source = _service(tmp_path / "a")
    source.local.store.write(TRANSACTIONS, [TX])
    document = json.loads(source.export_json())
    assert set(document) == {"products", "transactions", "exportDate"}

    target = _service(tmp_path / "b")
    assert target.import_data(document) == [PRODUCTS, TRANSACTIONS]
    assert target.local.product_records() == source.local.product_records()
    assert target.local.transaction_records() == [TX]


def test_import_accepts_text_and_skips_missing_collections(tmp_path):
    svc = _service(tmp_path)
    svc.local.store.write(PRODUCTS, [{"id": "1", "name": "Roti Tawar", "price": 12000}])
    assert svc.import_data(json.dumps({"transactions": [TX], "products": "nope"})) == [TRANSACTIONS]
    assert [p.name for p in svc.local.list_products()] == ["Roti Tawar"]


def test_import_rejects_bad_documents(tmp_path):
    svc = _service(tmp_path)
    with pytest.raises(ValidationFailed):
        svc.import_data("{broken")
    with pytest.raises(ValidationFailed):
        svc.import_data([TX])


def test_imported_duplicates_are_cleaned_up(tmp_path):
    svc = _service(tmp_path)
    svc.import_data({"transactions": [TX, dict(TX, total=0, items=[])]})
    assert svc.cleanup_duplicate_transactions() == 1
    assert svc.cleanup_duplicate_transactions() == 0
    assert svc.local.store.read(TRANSACTIONS).records == [TX]


def test_clear_all_data(tmp_path):
    svc = _service(tmp_path)
    svc.import_data({"products": [], "transactions": [TX]})
    svc.clear_all_data()
    assert svc.local.store.read(PRODUCTS).present is False
    assert svc.local.list_transactions() == []


def test_backup_filename():
    assert backup_filename(datetime(2024, 5, 1, 10, 0)) == "kasir-backup-2024-05-01.json"

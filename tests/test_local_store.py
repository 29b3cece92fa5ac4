from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Make the kasir package importable during local test runs
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from kasir.repositories.json_storage import PRODUCTS, TRANSACTIONS, LocalStore  # noqa: E402


def test_missing_blob_reads_as_empty(tmp_path):
    store = LocalStore(tmp_path)
    result = store.read(TRANSACTIONS)
    assert result.records == []
    assert result.present is False
    assert result.ok


def test_corrupt_blob_reads_as_empty_without_raising(tmp_path):
    (tmp_path / "transactions.json").write_text("{not json", encoding="utf-8")
    result = LocalStore(tmp_path).read(TRANSACTIONS)
    assert result.records == []
    assert result.present is True
    assert not result.ok


def test_non_list_blob_is_treated_as_empty(tmp_path):
    (tmp_path / "products.json").write_text('{"id": "1"}', encoding="utf-8")
    result = LocalStore(tmp_path).read(PRODUCTS)
    assert result.records == []
    assert result.error


def test_write_then_read(tmp_path):
    store = LocalStore(tmp_path / "nested")
    records = [{"id": "1", "name": "Roti Tawar", "price": 12000}]
    assert store.write(PRODUCTS, records) is True
    assert store.read(PRODUCTS).records == records
    assert not list((tmp_path / "nested").glob("*.tmp"))


def test_write_failure_is_reported_not_raised(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("x", encoding="utf-8")
    store = LocalStore(blocker / "data")
    assert store.write(PRODUCTS, [{"id": "1"}]) is False


def test_remove_missing_blob_is_noop(tmp_path):
    store = LocalStore(tmp_path)
    store.remove(PRODUCTS)
    store.write(PRODUCTS, [])
    store.remove(PRODUCTS)
    assert store.read(PRODUCTS).present is False


def test_unknown_collection_is_rejected(tmp_path):
    with pytest.raises(ValueError):
        LocalStore(tmp_path).read("customers")

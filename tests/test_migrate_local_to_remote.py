from __future__ import annotations

import sys
from dataclasses import replace
from decimal import Decimal
from pathlib import Path

import pytest

# Make the kasir package and the scripts importable during local test runs
ROOT = Path(__file__).resolve().parents[1]
for path in (ROOT, ROOT / "scripts"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from kasir.core.config import Settings  # noqa: E402
from kasir.db import session as db_session  # noqa: E402
from kasir.db.create_tables import create_all  # noqa: E402
from kasir.repositories.json_storage import PRODUCTS, TRANSACTIONS, LocalStore  # noqa: E402
from kasir.repositories.sql_repository import SQLRepository  # noqa: E402
import migrate_local_to_remote  # noqa: E402


@pytest.fixture()
def settings(tmp_path):
    url = f"sqlite:///{tmp_path / 'remote.db'}"
    db_session.get_engine.cache_clear()
    db_session._get_sessionmaker.cache_clear()  # type: ignore[attr-defined]
    create_all(url, "test-key")
    yield Settings(
        app_env="test",
        store_name="Toko Roti",
        local_data_dir=str(tmp_path / "local"),
        remote_url=url,
        remote_key="test-key",
        mirror_to_local=False,
        strict_payment_methods=False,
        log_level="WARNING",
    )
    db_session.get_engine(url, "test-key").dispose()
    db_session.get_engine.cache_clear()
    db_session._get_sessionmaker.cache_clear()  # type: ignore[attr-defined]


def test_migrate_copies_products_and_transactions(settings):
    store = LocalStore(settings.local_data_dir)
    store.write(PRODUCTS, [{"id": "1", "name": "Roti Tawar", "price": 12000}])
    store.write(
        TRANSACTIONS,
        [
            {
                "id": "42",
                "date": "2024-05-01T09:30:00+07:00",
                "items": [{"name": "Roti Tawar", "price": 12000, "quantity": 3}],
                "total": 36000,
                "paymentMethod": "tunai",
                "cashReceived": 40000,
                "change": 4000,
            }
        ],
    )

    assert migrate_local_to_remote.migrate(settings) == {"products": 1, "transactions": 1}
    # a second run replaces instead of duplicating
    assert migrate_local_to_remote.migrate(settings) == {"products": 1, "transactions": 1}

    repo = SQLRepository(settings)
    assert [p["name"] for p in repo.list_products().data] == ["Roti Tawar"]
    rows = repo.list_transactions().data
    assert [r["id"] for r in rows] == ["42"]
    assert rows[0]["change_amount"] == Decimal(4000)


def test_migrate_requires_remote_configuration(settings):
    with pytest.raises(SystemExit):
        migrate_local_to_remote.migrate(replace(settings, remote_key=""))

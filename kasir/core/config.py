"""
Configuration helpers for the Kasir backend.

Settings are read from environment variables once per process so that
services and routers never touch os.environ directly. The Settings object is
passed explicitly into the persistence facade.
"""

from dataclasses import dataclass
from functools import lru_cache
import os


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    store_name: str
    local_data_dir: str
    remote_url: str
    remote_key: str
    mirror_to_local: bool
    strict_payment_methods: bool
    log_level: str

    @property
    def remote_configured(self) -> bool:
        """Endpoint and credential are both present. No I/O is performed."""
        return bool(self.remote_url.strip() and self.remote_key.strip())


def _bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        store_name=os.getenv("KASIR_STORE_NAME", "Toko Roti"),
        local_data_dir=os.getenv("KASIR_LOCAL_DIR", "data"),
        remote_url=os.getenv("KASIR_REMOTE_URL", ""),
        remote_key=os.getenv("KASIR_REMOTE_KEY", ""),
        mirror_to_local=_bool(os.getenv("KASIR_MIRROR_TO_LOCAL"), False),
        strict_payment_methods=_bool(os.getenv("KASIR_STRICT_PAYMENT_METHODS"), False),
        log_level=(os.getenv("LOG_LEVEL") or "info").upper(),
    )

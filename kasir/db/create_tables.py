"""Utility script to create the remote database schema."""
from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError

from kasir.core.config import get_settings
from .session import Base, get_engine
from . import models  # noqa: F401  # ensure models are imported for metadata


def create_all(endpoint: str | None = None, credential: str | None = None) -> None:
    settings = get_settings()
    engine = get_engine(endpoint or settings.remote_url, credential or settings.remote_key)
    Base.metadata.create_all(bind=engine)


if __name__ == "__main__":
    try:
        create_all()
        print("Database tables created successfully.")
    except SQLAlchemyError as exc:
        raise SystemExit(f"Failed to create tables: {exc}") from exc

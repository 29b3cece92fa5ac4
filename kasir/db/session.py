"""Engine/session helpers for the remote SQL backend."""
from __future__ import annotations

from contextlib import contextmanager
from functools import lru_cache

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import declarative_base, sessionmaker, Session

Base = declarative_base()


def build_url(endpoint: str, credential: str):
    url = make_url(endpoint.strip())
    # sqlite has no notion of credentials
    if credential and url.password is None and not url.drivername.startswith("sqlite"):
        url = url.set(password=credential)
    return url


@lru_cache
def get_engine(endpoint: str, credential: str) -> Engine:
    if not (endpoint or "").strip():
        raise RuntimeError("KASIR_REMOTE_URL must be configured to use the SQL backend.")
    return create_engine(build_url(endpoint, credential), future=True, pool_pre_ping=True)


@lru_cache
def _get_sessionmaker(endpoint: str, credential: str):
    return sessionmaker(bind=get_engine(endpoint, credential), autoflush=False, autocommit=False, future=True)


@contextmanager
def get_session(endpoint: str, credential: str) -> Session:
    session: Session = _get_sessionmaker(endpoint, credential)()
    try:
        yield session
    finally:
        session.close()

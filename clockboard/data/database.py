"""Database engine and session helpers for the preference store."""
from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from clockboard.config.settings import get_settings
from clockboard.data.models import Base

_MEMORY_URLS = {"sqlite://", "sqlite:///:memory:"}


def build_engine(database_url: str | None = None) -> Engine:
    url = database_url or get_settings().database_url
    if not url.startswith("sqlite"):
        return create_engine(url)
    if url in _MEMORY_URLS:
        # One shared connection so every session sees the same database
        return create_engine(url, connect_args={"check_same_thread": False}, poolclass=StaticPool)
    return create_engine(url, connect_args={"check_same_thread": False})


def build_sessionmaker(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(engine, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    Base.metadata.create_all(engine)


@contextmanager
def session_scope(factory: sessionmaker[Session]) -> Iterator[Session]:
    """Commit on success, roll back on error."""
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()

"""Query helpers for the preference table."""
from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from clockboard.data import models


def get_preference(session: Session, key: str) -> Any | None:
    row = session.get(models.Preference, key)
    return row.value if row else None


def upsert_preference(session: Session, key: str, value: Any) -> None:
    row = session.get(models.Preference, key)
    if row is None:
        session.add(models.Preference(key=key, value=value))
    else:
        row.value = value
    session.flush()


def list_preferences(session: Session) -> dict[str, Any]:
    rows = session.scalars(select(models.Preference).order_by(models.Preference.key))
    return {row.key: row.value for row in rows}

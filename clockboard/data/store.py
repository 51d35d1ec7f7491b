"""Key/value stores for persisted UI state (``clocks``, ``theme``, ``displayMode``)."""
from __future__ import annotations

import copy
import logging
from typing import Any, Protocol

from sqlalchemy.orm import Session, sessionmaker

from clockboard.data import repositories
from clockboard.data.database import session_scope

logger = logging.getLogger("clockboard.store")

CLOCKS_KEY = "clocks"
THEME_KEY = "theme"
DISPLAY_MODE_KEY = "displayMode"


class KeyValueStore(Protocol):
    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any) -> None: ...


class InMemoryStore:
    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = copy.deepcopy(initial or {})

    def get(self, key: str) -> Any | None:
        return copy.deepcopy(self._data.get(key))

    def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)


class SqlPreferenceStore:
    """JSON values keyed by name in the ``preferences`` table."""

    def __init__(self, factory: sessionmaker[Session]) -> None:
        self._factory = factory

    def get(self, key: str) -> Any | None:
        with session_scope(self._factory) as session:
            return repositories.get_preference(session, key)

    def set(self, key: str, value: Any) -> None:
        with session_scope(self._factory) as session:
            repositories.upsert_preference(session, key, value)
        logger.debug("Stored preference %s", key)

    def all(self) -> dict[str, Any]:
        with session_scope(self._factory) as session:
            return repositories.list_preferences(session)

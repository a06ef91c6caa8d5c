"""Local key/value persistence for state that must survive a reload."""
from __future__ import annotations

import json
from typing import Any, Dict, Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Field, Session, SQLModel

from .exceptions import QueryFailureError
from .store import build_engine


class CacheEntry(SQLModel, table=True):
    __tablename__ = "local_cache"

    k: str = Field(primary_key=True)
    v: str


class LocalCache(Protocol):
    """Load/save JSON payloads under fixed string keys."""

    def load(self, key: str, default: Any = None) -> Any: ...

    def save(self, key: str, value: Any) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryCache:
    """Process-local cache; payloads still round-trip through JSON."""

    def __init__(self) -> None:
        self._data: Dict[str, str] = {}

    def load(self, key: str, default: Any = None) -> Any:
        raw = self._data.get(key)
        return default if raw is None else json.loads(raw)

    def save(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value, sort_keys=True)

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> tuple[str, ...]:
        return tuple(sorted(self._data))


class SQLiteCache:
    """Cache persisted in a small SQLite file next to the application."""

    def __init__(self, path: str) -> None:
        self._engine = build_engine(f"sqlite:///{path}" if path != ":memory:" else "sqlite://")
        CacheEntry.__table__.create(self._engine, checkfirst=True)

    def load(self, key: str, default: Any = None) -> Any:
        try:
            with Session(self._engine) as session:
                entry: Optional[CacheEntry] = session.get(CacheEntry, key)
                raw = entry.v if entry else None
        except SQLAlchemyError as exc:
            raise QueryFailureError("load_cache", str(exc)) from exc
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            return default

    def save(self, key: str, value: Any) -> None:
        payload = json.dumps(value, sort_keys=True)
        try:
            with Session(self._engine) as session:
                entry = session.get(CacheEntry, key)
                if entry is None:
                    entry = CacheEntry(k=key, v=payload)
                else:
                    entry.v = payload
                session.add(entry)
                session.commit()
        except SQLAlchemyError as exc:
            raise QueryFailureError("save_cache", str(exc)) from exc

    def remove(self, key: str) -> None:
        try:
            with Session(self._engine) as session:
                entry = session.get(CacheEntry, key)
                if entry is not None:
                    session.delete(entry)
                    session.commit()
        except SQLAlchemyError as exc:
            raise QueryFailureError("remove_cache", str(exc)) from exc


__all__ = ["CacheEntry", "LocalCache", "MemoryCache", "SQLiteCache"]

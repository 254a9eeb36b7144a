from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Protocol

from dealscout.config.settings import settings


class KeyValueStore(Protocol):
    def get(self, key: str, default: str | None = None) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS kv (
  k TEXT PRIMARY KEY,
  v TEXT
);
"""


class SqliteKVStore:
    """
    Estado persistente del cliente (última ubicación importada, ubicación del usuario).
    Una conexión corta por operación; el esquema se crea en el primer uso.
    """

    def __init__(self, db_path: Path | None = None):
        self.db_path = Path(db_path or settings.DB_PATH)
        self._ready = False

    def _connect(self) -> sqlite3.Connection:
        db_file = self.db_path
        # si llega un directorio, usa dealscout.db dentro
        if db_file.exists() and db_file.is_dir():
            db_file = db_file / "dealscout.db"
        db_file.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(db_file, isolation_level=None, timeout=30)
        conn.execute("PRAGMA journal_mode=WAL;")
        conn.execute("PRAGMA synchronous=NORMAL;")
        if not self._ready:
            conn.executescript(SCHEMA_SQL)
            self._ready = True
        return conn

    def get(self, key: str, default: str | None = None) -> str | None:
        conn = self._connect()
        try:
            row = conn.execute("SELECT v FROM kv WHERE k=?", (key,)).fetchone()
        finally:
            conn.close()
        return row[0] if row and row[0] is not None else default

    def set(self, key: str, value: str) -> None:
        conn = self._connect()
        try:
            conn.execute(
                "INSERT INTO kv(k,v) VALUES(?,?) ON CONFLICT(k) DO UPDATE SET v=excluded.v",
                (key, value),
            )
        finally:
            conn.close()

    def delete(self, key: str) -> None:
        conn = self._connect()
        try:
            conn.execute("DELETE FROM kv WHERE k=?", (key,))
        finally:
            conn.close()


class MemoryKVStore:
    def __init__(self, initial: dict[str, str] | None = None):
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str, default: str | None = None) -> str | None:
        return self.data.get(key, default)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)


# ---------- Ubicación del usuario ----------
def get_user_location(store: KeyValueStore) -> str | None:
    value = store.get(settings.LOCATION_KEY_NAME)
    return (value.strip() or None) if value else None


def set_user_location(store: KeyValueStore, location: str | None) -> None:
    location = (location or "").strip()
    if location:
        store.set(settings.LOCATION_KEY_NAME, location)
    else:
        store.delete(settings.LOCATION_KEY_NAME)


def clear_user_location(store: KeyValueStore) -> None:
    set_user_location(store, None)

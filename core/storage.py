"""SQLite storage layer for the song catalog and global app state.

Design:
 - SQLite stores the song catalog used to validate restored assignments.
 - The app_state table holds global (non-profile) values such as the active
   profile, plus settings written by single-profile installs before profiles
   existed.
 - Each call opens a short-lived connection (thread-safe, WAL mode).
"""
from __future__ import annotations

import contextlib
import json
import os
import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator

from core.paths import user_data_dir

_MISSING = object()


def _db_path() -> Path:
    """Resolve SQLite DB path from environment or default."""
    return Path(os.environ.get("APP_DB_PATH", user_data_dir() / "library.db"))


@dataclass(frozen=True)
class SongRecord:
    id: str
    title: str | None
    artist: str | None
    duration: str | None
    filename: str | None

    @property
    def label(self) -> str:
        title = self.title or "[Unknown Title]"
        artist = self.artist or "[Unknown Artist]"
        duration = self.duration or "[??:??]"
        return f"{title} by {artist} ({duration})"


def init_db() -> None:
    """Initialize SQLite schema and enable WAL mode."""
    db_path = _db_path()
    db_path.parent.mkdir(parents=True, exist_ok=True)
    with connect() as conn:
        conn.execute("PRAGMA journal_mode=WAL")
        conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS songs (
                id TEXT PRIMARY KEY,
                title TEXT,
                artist TEXT,
                duration TEXT,
                filename TEXT
            );
            CREATE TABLE IF NOT EXISTS app_state (
                key TEXT PRIMARY KEY,
                value TEXT
            );
            """
        )


@contextlib.contextmanager
def connect() -> Iterator[sqlite3.Connection]:
    """Yield a short-lived SQLite connection (thread-safe)."""
    conn = sqlite3.connect(_db_path(), timeout=10, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
        conn.commit()
    finally:
        conn.close()


def add_song(
    song_id: str,
    title: str | None = None,
    artist: str | None = None,
    duration: str | None = None,
    filename: str | None = None,
) -> None:
    """Insert or replace a catalog entry."""
    init_db()
    with connect() as conn:
        conn.execute(
            "INSERT OR REPLACE INTO songs (id, title, artist, duration, filename)"
            " VALUES (?, ?, ?, ?, ?)",
            (str(song_id), title, artist, duration, filename),
        )


def get_song(song_id: str) -> SongRecord | None:
    """Return a catalog entry by id."""
    init_db()
    with connect() as conn:
        row = conn.execute("SELECT * FROM songs WHERE id = ?", (str(song_id),)).fetchone()
    if not row:
        return None
    return SongRecord(**dict(row))


def delete_songs(song_ids: Iterable[str]) -> None:
    """Delete catalog entries by id."""
    id_list = [str(song_id) for song_id in song_ids]
    if not id_list:
        return
    init_db()
    with connect() as conn:
        conn.execute(
            f"DELETE FROM songs WHERE id IN ({','.join('?' for _ in id_list)})",
            id_list,
        )


class SongCatalog:
    """Catalog adapter exposing ``lookup`` for session restores."""

    def lookup(self, item_id: str) -> SongRecord | None:
        return get_song(item_id)


def set_app_state(key: str, value: str | None) -> None:
    """Persist a single app state value."""
    init_db()
    with connect() as conn:
        if value is None:
            conn.execute("DELETE FROM app_state WHERE key = ?", (key,))
        else:
            conn.execute(
                "INSERT INTO app_state (key, value) VALUES (?, ?)"
                " ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, value),
            )


def get_app_state(key: str) -> str | None:
    """Fetch a stored app state value."""
    init_db()
    with connect() as conn:
        row = conn.execute("SELECT value FROM app_state WHERE key = ?", (key,)).fetchone()
    return row["value"] if row else None


class LegacySettings:
    """Read-only view of settings stored before per-profile preferences existed.

    Values are JSON-encoded in the ``app_state`` table. ``get`` raises
    ``ValueError`` for a value that cannot be decoded so callers can skip it.
    """

    def has(self, key: str) -> bool:
        return get_app_state(key) is not None

    def get(self, key: str, default=_MISSING):
        raw = get_app_state(key)
        if raw is None:
            if default is _MISSING:
                raise KeyError(key)
            return default
        try:
            return json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Legacy setting {key!r} is not valid JSON") from exc


def set_legacy_setting(key: str, value: object) -> None:
    """Store a JSON-encoded global setting (used by imports and tests)."""
    set_app_state(key, json.dumps(value))

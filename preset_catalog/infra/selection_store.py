"""Persisted optional-mod selections keyed by preset identifier."""

from __future__ import annotations

from pathlib import Path
from threading import Lock
from typing import Mapping

from .storage import SQLiteManager


class SelectionStore:
    """Key → set-of-links store; an unknown key reads as an empty mapping."""

    def __init__(self, manager: SQLiteManager, db_path: Path) -> None:
        self.manager = manager
        self.db_path = db_path
        self._lock = Lock()
        self._conn = self.manager.connect(db_path)

    def get(self, key: str) -> dict[str, bool]:
        with self._lock:
            cur = self._conn.execute(
                "SELECT link FROM selections WHERE preset_key = ? ORDER BY rowid", (key,)
            )
            return {row["link"]: True for row in cur.fetchall()}

    def set(self, key: str, value: Mapping[str, bool]) -> None:
        links = [link for link, selected in value.items() if selected]
        with self._lock:
            self._conn.execute("DELETE FROM selections WHERE preset_key = ?", (key,))
            self._conn.executemany(
                "INSERT OR IGNORE INTO selections(preset_key, link) VALUES (?, ?)",
                [(key, link) for link in links],
            )
            self._conn.commit()

    def toggle(self, key: str, link: str, selected: bool) -> dict[str, bool]:
        current = self.get(key)
        if selected:
            current[link] = True
        else:
            current.pop(link, None)
        self.set(key, current)
        return current

    def reset(self, key: str) -> None:
        self.set(key, {})


__all__ = ["SelectionStore"]

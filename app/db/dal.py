"""Data Access Layer for the persisted calculator fields.

Responsibilities
----------------
- Read a batch of keys from the metadata table.
- Write a batch of keys in a single transaction so related fields (the three
  members of a currency triple, their active marker) are never observed half
  written.
"""

from __future__ import annotations

from pathlib import Path
import sqlite3
from typing import Dict, Iterable, Mapping

UTC_NOW_SQL = "strftime('%Y-%m-%dT%H:%M:%fZ','now')"

_UPSERT_SQL = f"""
INSERT INTO metadata (key, value)
VALUES (?, ?)
ON CONFLICT(key) DO UPDATE SET
    value = excluded.value,
    updated_at = ({UTC_NOW_SQL})
"""


class Database:
    def __init__(self, db_path: Path):
        self.db_path = db_path

    # ------------------------------------------------------------------
    # Connection helpers
    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    # ------------------------------------------------------------------
    # Key/value access
    def get_values(self, keys: Iterable[str]) -> Dict[str, str]:
        keys = list(keys)
        if not keys:
            return {}
        placeholders = ",".join("?" for _ in keys)
        conn = self._connect()
        try:
            cur = conn.cursor()
            cur.execute(
                f"SELECT key, value FROM metadata WHERE key IN ({placeholders})",
                keys,
            )
            return {r["key"]: r["value"] for r in cur.fetchall()}
        finally:
            conn.close()

    def set_values(self, values: Mapping[str, str]) -> None:
        """Upsert every entry atomically (all or nothing)."""
        conn = self._connect()
        try:
            with conn:
                conn.executemany(_UPSERT_SQL, list(values.items()))
        finally:
            conn.close()

    def delete_values(self, keys: Iterable[str]) -> int:
        keys = list(keys)
        if not keys:
            return 0
        placeholders = ",".join("?" for _ in keys)
        conn = self._connect()
        try:
            with conn:
                cur = conn.execute(
                    f"DELETE FROM metadata WHERE key IN ({placeholders})", keys
                )
                return cur.rowcount
        finally:
            conn.close()

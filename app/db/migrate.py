"""Database migration utilities.

Handles schema evolution by applying idempotent migrations keyed by an integer
`schema_version` stored in the metadata table. Each migration upgrades the
SQLite schema in-place while preserving the stored calculator fields.
"""

from __future__ import annotations
from pathlib import Path
import sqlite3
from typing import Callable, Dict, Optional

from . import schema as schema_def
from .schema import init_db

CURRENT_SCHEMA_VERSION = 1
SCHEMA_VERSION_KEY = "schema_version"


def _get_schema_version(conn: sqlite3.Connection) -> Optional[int]:
    try:
        cur = conn.cursor()
        cur.execute("SELECT value FROM metadata WHERE key=?", (SCHEMA_VERSION_KEY,))
        row = cur.fetchone()
        if row:
            return int(row[0])
    except sqlite3.OperationalError:
        # metadata table may not exist yet (first run before init_db)
        return None
    return None


def _set_schema_version(conn: sqlite3.Connection, version: int) -> None:
    cur = conn.cursor()
    cur.execute(
        "INSERT INTO metadata (key, value) VALUES (?, ?) "
        "ON CONFLICT(key) DO UPDATE SET value=excluded.value, "
        f"updated_at=({schema_def.BASIC_UTC_NOW})",
        (SCHEMA_VERSION_KEY, str(version)),
    )


def _migrate_to_v1(conn: sqlite3.Connection) -> None:
    """Baseline: the metadata table created by init_db is the whole schema."""
    conn.execute(schema_def.METADATA_DDL)


# version -> upgrade step producing that version
MIGRATIONS: Dict[int, Callable[[sqlite3.Connection], None]] = {
    1: _migrate_to_v1,
}


def apply_migrations(db_path: Path) -> int:
    """Apply required migrations and return resulting schema version."""
    init_db(db_path)
    conn = sqlite3.connect(db_path)
    try:
        version = _get_schema_version(conn) or 0
        if version > CURRENT_SCHEMA_VERSION:
            raise RuntimeError(
                f"Database schema v{version} is newer than supported v{CURRENT_SCHEMA_VERSION}"
            )
        for target in range(version + 1, CURRENT_SCHEMA_VERSION + 1):
            try:
                MIGRATIONS[target](conn)
            except Exception:
                conn.rollback()
                raise
            version = target
        _set_schema_version(conn, version)
        conn.commit()
        return version
    finally:
        conn.close()


def get_schema_version(db_path: Path) -> Optional[int]:
    conn = sqlite3.connect(db_path)
    try:
        return _get_schema_version(conn)
    finally:
        conn.close()

"""
SQLite connection helpers and the schema migration runner.

Clinics, doctors and health services are stored one table per
collection.  Relationship fields are TEXT columns holding JSON arrays of
ids; the document store in ``documents.py`` reads and writes them and
uses SQLite's ``json_each`` to filter on membership.

Applied migration versions are recorded in the ``migrations`` table and
new migrations run in order on start‑up.
"""

import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from .config import settings


MIGRATIONS: list[tuple[int, str]] = [
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS clinics (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            doctors TEXT NOT NULL DEFAULT '[]',
            health_services TEXT NOT NULL DEFAULT '[]',
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS doctors (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            clinics TEXT NOT NULL DEFAULT '[]',
            health_services TEXT NOT NULL DEFAULT '[]',
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS health_services (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );
        """,
    ),
    (
        2,
        """
        -- Health service names are unique across the whole directory.
        CREATE UNIQUE INDEX IF NOT EXISTS ux_health_services_name ON health_services(name);
        CREATE INDEX IF NOT EXISTS ix_clinics_name ON clinics(name);
        CREATE INDEX IF NOT EXISTS ix_doctors_name ON doctors(name);
        """,
    ),
]


def get_database_path(database_url: Optional[str] = None) -> str:
    """Resolve the SQLite database file path.

    Absolute paths are returned unchanged; relative ones are resolved
    against the project root.
    """
    db_url = database_url or settings.database_url
    if os.path.isabs(db_url):
        return db_url
    base_dir = Path(__file__).resolve().parent.parent.parent.parent
    return str((base_dir / db_url).resolve())


def get_connection(database_path: Optional[str] = None) -> sqlite3.Connection:
    """Open a new connection with rows addressable by column name."""
    conn = sqlite3.connect(get_database_path(database_path))
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def get_cursor(database_path: Optional[str] = None) -> Iterator[sqlite3.Cursor]:
    """Yield a cursor, commit on success and always close the connection."""
    conn = get_connection(database_path)
    try:
        yield conn.cursor()
        conn.commit()
    finally:
        conn.close()


def init_db(database_path: Optional[str] = None) -> int:
    """Apply pending migrations and return the resulting schema version."""
    with get_cursor(database_path) as cursor:
        cursor.execute("CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)")
        cursor.execute("SELECT MAX(version) AS version FROM migrations")
        row = cursor.fetchone()
        current_version = row["version"] if row and row["version"] is not None else 0

        for version, sql in MIGRATIONS:
            if version > current_version:
                cursor.executescript(sql)
                cursor.execute("INSERT INTO migrations (version) VALUES (?)", (version,))
                current_version = version
    return current_version

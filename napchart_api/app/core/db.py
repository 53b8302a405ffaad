"""
SQLite database integration and simple migration system.

This module provides functions for obtaining a database connection
(``get_connection``) and applying migrations on application start
(``init_db``).  It uses SQLite as a lightweight embedded database; to
switch to another DBMS you would replace connection logic and adapt
SQL syntax accordingly.

The per-day duration summaries and the duration/rating aggregates are
SQL views over the ``naps`` table, so they are always consistent with
the naps they summarise and can never be written through the API.

The migration mechanism stores applied migration versions in the
``migrations`` table and executes new migrations in order.
"""

import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from .config import settings


MIGRATIONS: list[tuple[int, str]] = [
    # Migration 1: users, authorities and naps
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            login TEXT NOT NULL UNIQUE,
            email TEXT,
            activated INTEGER NOT NULL DEFAULT 1,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS user_authorities (
            user_id INTEGER NOT NULL,
            authority TEXT NOT NULL,
            PRIMARY KEY (user_id, authority),
            FOREIGN KEY(user_id) REFERENCES users(id) ON DELETE CASCADE
        );

        CREATE TABLE IF NOT EXISTS naps (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id INTEGER NOT NULL,
            start_time TIMESTAMP NOT NULL,
            end_time TIMESTAMP,
            rating INTEGER CHECK (rating IS NULL OR rating BETWEEN 0 AND 10),
            notes TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            FOREIGN KEY(user_id) REFERENCES users(id)
        );
        """,
    ),
    # Migration 2: per-day duration summaries
    (
        2,
        """
        -- One row per (login, calendar date); the id is built from both so
        -- it is unique by construction.  Durations are expressed in hours.
        CREATE VIEW IF NOT EXISTS date_durations AS
        SELECT
            u.login || ':' || date(n.start_time) AS id,
            date(n.start_time) AS local_date,
            SUM((julianday(n.end_time) - julianday(n.start_time)) * 24.0) AS total_duration,
            u.login AS login
        FROM naps n
        JOIN users u ON u.id = n.user_id
        WHERE n.end_time IS NOT NULL
        GROUP BY u.login, date(n.start_time);
        """,
    ),
    # Migration 3: average rating by nap length
    (
        3,
        """
        -- Rated, finished naps bucketed by their length rounded to whole hours.
        CREATE VIEW IF NOT EXISTS duration_ratings AS
        SELECT
            login || ':' || duration AS id,
            duration,
            AVG(rating) AS average_rating,
            login
        FROM (
            SELECT
                u.login AS login,
                CAST(ROUND((julianday(n.end_time) - julianday(n.start_time)) * 24.0) AS INTEGER) AS duration,
                n.rating AS rating
            FROM naps n
            JOIN users u ON u.id = n.user_id
            WHERE n.end_time IS NOT NULL AND n.rating IS NOT NULL
        )
        GROUP BY login, duration;
        """,
    ),
    # Migration 4: indices for owner lookups
    (
        4,
        """
        CREATE INDEX IF NOT EXISTS idx_naps_user_id ON naps(user_id);
        CREATE INDEX IF NOT EXISTS idx_naps_start_time ON naps(start_time);
        """,
    ),
    # Migration 5: group day totals by the wall-clock date of the nap
    (
        5,
        """
        -- date() shifts offset-carrying times to UTC; the first ten
        -- characters are the date the nap was recorded in.
        DROP VIEW IF EXISTS date_durations;
        CREATE VIEW date_durations AS
        SELECT
            u.login || ':' || substr(n.start_time, 1, 10) AS id,
            substr(n.start_time, 1, 10) AS local_date,
            SUM((julianday(n.end_time) - julianday(n.start_time)) * 24.0) AS total_duration,
            u.login AS login
        FROM naps n
        JOIN users u ON u.id = n.user_id
        WHERE n.end_time IS NOT NULL
        GROUP BY u.login, substr(n.start_time, 1, 10);
        """,
    ),
]


def get_database_path() -> str:
    """Compute the path to the SQLite database file.

    If ``settings.database_url`` is an absolute path, use it directly.
    Otherwise resolve it relative to the project root.
    """
    db_url = settings.database_url
    if os.path.isabs(db_url):
        return db_url
    base_dir = Path(__file__).resolve().parent.parent.parent  # napchart_api/
    return str((base_dir / db_url).resolve())


def get_connection() -> sqlite3.Connection:
    """Create and return a new SQLite connection.

    The connection uses a row factory to access columns by name and
    has foreign key enforcement switched on, which SQLite leaves
    disabled by default.  Timestamps are returned as the ISO strings
    they were stored as.
    """
    conn = sqlite3.connect(get_database_path())
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextmanager
def get_cursor() -> Iterator[sqlite3.Cursor]:
    """Context manager that yields a cursor and closes the connection on exit."""
    conn = get_connection()
    try:
        yield conn.cursor()
        conn.commit()
    finally:
        conn.close()


def init_db() -> None:
    """Initialise the database and apply pending migrations.

    Creates the ``migrations`` table if it does not exist, checks the
    current schema version, and applies any new migrations defined in
    ``MIGRATIONS``.  If you add a new migration, append it with an
    incremented version number.
    """
    with get_cursor() as cursor:
        cursor.execute(
            "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
        )
        cursor.execute("SELECT MAX(version) as version FROM migrations")
        row = cursor.fetchone()
        current_version = row["version"] if row and row["version"] is not None else 0

        for version, sql in MIGRATIONS:
            if version > current_version:
                cursor.executescript(sql)
                cursor.execute(
                    "INSERT INTO migrations (version) VALUES (?)", (version,)
                )
                current_version = version

"""Shared SQLite helpers: WAL mode, row_factory defaults, closing connections, write-locked transactions."""

import sqlite3
from contextlib import closing, contextmanager
from pathlib import Path


def wal_connect(db_path: str | Path, row_factory: bool = False) -> sqlite3.Connection:
    """Open SQLite connection with WAL journal mode.

    Args:
        db_path: Path to database file.
        row_factory: If True, set conn.row_factory = sqlite3.Row.
    """
    conn = sqlite3.connect(str(db_path))
    conn.execute("PRAGMA journal_mode=WAL")
    if row_factory:
        conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def wal_connection(db_path: str | Path, row_factory: bool = False):
    """Yield a WAL connection that commits on success, rolls back on error and is always closed."""
    with closing(wal_connect(db_path, row_factory=row_factory)) as conn:
        with conn:
            yield conn


@contextmanager
def immediate_transaction(db_path: str | Path):
    """Yield a connection holding the database write lock until commit.

    Reads issued inside the block see a snapshot no other writer can change,
    so read-merge-write sequences on one record cannot lose updates.
    Rolls back on any exception.
    """
    conn = wal_connect(db_path, row_factory=True)
    try:
        conn.execute("BEGIN IMMEDIATE")
        try:
            yield conn
        except BaseException:
            conn.rollback()
            raise
        conn.commit()
    finally:
        conn.close()

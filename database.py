import logging
import sqlite3
from typing import Optional

from config import settings

logger = logging.getLogger(__name__)

BOOKS_TABLE = "books"


def _casefold(value: Optional[str]) -> Optional[str]:
    return value.casefold() if value is not None else None


def get_db_connection(db_file: Optional[str] = None) -> sqlite3.Connection:
    """Opens a connection to the SQLite database.

    The caller owns the connection and must close it. A ``casefold`` SQL
    function is registered so case-insensitive comparisons work beyond ASCII,
    which SQLite's built-in ``lower()`` does not.
    """
    conn = sqlite3.connect(db_file or settings.database_file, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.create_function("casefold", 1, _casefold, deterministic=True)
    return conn


def create_tables(conn: sqlite3.Connection) -> None:
    """Creates the books table and its unique index if they don't exist."""
    cursor = conn.cursor()
    cursor.execute(f"""
        CREATE TABLE IF NOT EXISTS {BOOKS_TABLE} (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            title TEXT,
            author TEXT,
            year INTEGER,
            publisher TEXT,
            description TEXT
        )
    """)
    # A (title, author, year) triple may appear only once
    cursor.execute(
        f"CREATE UNIQUE INDEX IF NOT EXISTS ix_books_title_author_year ON {BOOKS_TABLE}(title, author, year)"
    )
    conn.commit()


def initialize_database(db_file: Optional[str] = None) -> None:
    """Initializes the database file, creating the schema if needed."""
    path = db_file or settings.database_file
    conn = get_db_connection(path)
    try:
        create_tables(conn)
    finally:
        conn.close()
    logger.info("Database initialized at %s", path)

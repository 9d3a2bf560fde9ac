import logging
import sqlite3
from typing import Any, List, Optional

from book import Book
from database import BOOKS_TABLE

logger = logging.getLogger(__name__)

_COLUMNS = "id, title, author, year, publisher, description"


class BookStore:
    """Data access for the books table over a caller-owned connection."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    # ------------------------- Queries ------------------------- #
    def list_books(self, author: Optional[str] = None, year: Optional[int] = None,
                   publisher: Optional[str] = None) -> List[Book]:
        """List books matching every provided filter.

        Author and publisher compare case-insensitively, year exactly.
        Filters left as None impose no constraint.
        """
        query = f"SELECT {_COLUMNS} FROM {BOOKS_TABLE}"
        where: List[str] = []
        params: List[Any] = []
        if author is not None:
            where.append("casefold(author) = casefold(?)")
            params.append(author)
        if year is not None:
            where.append("year = ?")
            params.append(year)
        if publisher is not None:
            where.append("casefold(publisher) = casefold(?)")
            params.append(publisher)
        if where:
            query += " WHERE " + " AND ".join(where)
        query += " ORDER BY id"

        rows = self.conn.execute(query, params).fetchall()
        return [Book.from_dict(dict(row)) for row in rows]

    def get_book(self, book_id: int) -> Optional[Book]:
        row = self.conn.execute(
            f"SELECT {_COLUMNS} FROM {BOOKS_TABLE} WHERE id = ?", (book_id,)
        ).fetchone()
        return Book.from_dict(dict(row)) if row else None

    def count(self) -> int:
        return self.conn.execute(f"SELECT COUNT(*) FROM {BOOKS_TABLE}").fetchone()[0]

    # ------------------------- Mutations ------------------------- #
    def add_book(self, book: Book) -> Book:
        """Insert a book and return a copy carrying the assigned id.

        Any storage failure, including a duplicate (title, author, year),
        rolls back and raises PersistenceError.
        """
        try:
            cursor = self.conn.execute(
                f"INSERT INTO {BOOKS_TABLE} (title, author, year, publisher, description) VALUES (?, ?, ?, ?, ?)",
                (book.title, book.author, book.year, book.publisher, book.description),
            )
            self.conn.commit()
        except sqlite3.IntegrityError as e:
            self.conn.rollback()
            raise DuplicateBookError(
                f"Book '{book.title}' by {book.author} ({book.year}) already exists."
            ) from e
        except (sqlite3.Error, OverflowError) as e:
            self.conn.rollback()
            raise PersistenceError(f"Could not store book: {e}") from e

        created = Book.from_dict(book.to_dict())
        created.id = cursor.lastrowid
        logger.info("Book %s stored with id %s", created.title, created.id)
        return created

    def remove_book(self, book_id: int) -> bool:
        cursor = self.conn.execute(f"DELETE FROM {BOOKS_TABLE} WHERE id = ?", (book_id,))
        self.conn.commit()
        if cursor.rowcount > 0:
            logger.info("Book %s removed", book_id)
            return True
        return False

    def clear(self) -> None:
        """Delete every book and reset the id sequence so the next insert gets id 1."""
        self.conn.execute(f"DELETE FROM {BOOKS_TABLE}")
        self.conn.execute("DELETE FROM sqlite_sequence WHERE name = ?", (BOOKS_TABLE,))
        self.conn.commit()
        logger.warning("All books deleted and id sequence reset")


class PersistenceError(Exception):
    pass


class DuplicateBookError(PersistenceError):
    pass

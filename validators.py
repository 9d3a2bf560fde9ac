import re
from typing import List, Optional

from book import Book

INT32_MIN = -2**31
INT32_MAX = 2**31 - 1

_INT_PATTERN = re.compile(r"^\s*[+-]?[0-9]+\s*$")


class BookValidator:
    """Required-field checks applied to a Book before it is persisted."""

    @staticmethod
    def _is_not_empty(text: Optional[str]) -> bool:
        if text is None:
            return False
        return bool(text.strip())

    @staticmethod
    def _is_empty_string(text: Optional[str]) -> bool:
        # Only "" fails; None and whitespace pass.
        return text is not None and len(text) == 0

    @staticmethod
    def validate(book: Book) -> List[str]:
        """Return the list of failed rules; empty when the book is valid."""
        errors: List[str] = []
        if not BookValidator._is_not_empty(book.title):
            errors.append("'title' must not be empty.")
        if not BookValidator._is_not_empty(book.author):
            errors.append("'author' must not be empty.")
        if book.year is None:
            errors.append("'year' must not be empty.")
        if BookValidator._is_empty_string(book.publisher):
            errors.append("'publisher' must be null or non-empty.")
        return errors

    @staticmethod
    def is_valid(book: Book) -> bool:
        return not BookValidator.validate(book)


def parse_int32(raw: Optional[str]) -> Optional[int]:
    """Parse an optionally signed decimal integer that fits in 32 bits.

    Surrounding whitespace is allowed; decimals, exponents and digit
    separators are not. Returns None for anything else.
    """
    if raw is None or not _INT_PATTERN.match(raw):
        return None
    value = int(raw.strip())
    if value < INT32_MIN or value > INT32_MAX:
        return None
    return value


def parse_book_id(raw: Optional[str]) -> Optional[int]:
    """Parse a path segment into a book id, or None if it is not one."""
    return parse_int32(raw)

from __future__ import annotations


class Book:
    """A single book record. Instances are detached copies of stored rows."""

    def __init__(self, title: str | None = None, author: str | None = None, year: int | None = None,
                 publisher: str | None = None, description: str | None = None,
                 id: int | None = None) -> None:
        self.id = id
        self.title = title
        self.author = author
        self.year = year
        self.publisher = publisher
        self.description = description

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return f"{self.title} by {self.author} ({self.year})"

    def __repr__(self) -> str:  # pragma: no cover
        return f"Book(id={self.id!r}, title={self.title!r}, author={self.author!r}, year={self.year!r})"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "year": self.year,
            "publisher": self.publisher,
            "description": self.description,
        }

    @staticmethod
    def from_dict(data: dict) -> "Book":
        # sqlite3.Row and plain dicts both land here
        return Book(
            id=data.get("id"),
            title=data.get("title"),
            author=data.get("author"),
            year=data.get("year"),
            publisher=data.get("publisher"),
            description=data.get("description"),
        )

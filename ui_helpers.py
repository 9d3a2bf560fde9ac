import os
import json
from typing import Any, List
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.markup import escape

# Environment variable controlling CLI output
# Allowed values: 'plain' (default), 'json', 'rich'
OUTPUT_MODE_ENV = "BOOKS_CLI_OUTPUT"

_console = Console()


def set_output_mode(mode: str) -> None:
    mode = (mode or "").lower().strip()
    if mode in {"plain", "json", "rich"}:
        os.environ[OUTPUT_MODE_ENV] = mode


def get_output_mode() -> str:
    return os.environ.get(OUTPUT_MODE_ENV, "plain").lower()


def _fmt(value: Any) -> str:
    return "" if value is None else str(value)


def print_list_result(books: List[Any]) -> None:
    """Print a list of books in the current output mode.
    - plain: 'ID - Title by Author (Year)' lines, or 'No books found.'
    - json: JSON array of book objects
    - rich: Rich table
    """
    mode = get_output_mode()

    if mode == "json":
        print(json.dumps([b.to_dict() for b in books], ensure_ascii=False))
        return

    if not books:
        print("No books found.")
        return

    if mode == "rich":
        table = Table(title="📚 Books", show_lines=True, header_style="bold cyan")
        table.add_column("ID", style="magenta", no_wrap=True)
        table.add_column("Title", style="white")
        table.add_column("Author", style="white")
        table.add_column("Year", style="white")
        table.add_column("Publisher", style="white")
        for b in books:
            table.add_row(*(escape(_fmt(v)) for v in (b.id, b.title, b.author, b.year, b.publisher)))
        _console.print(table)
    else:
        for b in books:
            print(f"{b.id} - {b.title} by {b.author} ({_fmt(b.year)})")


def print_book_result(book: Any) -> None:
    """Print a single book's details in the current output mode."""
    mode = get_output_mode()

    if mode == "json":
        print(json.dumps(book.to_dict(), ensure_ascii=False))
    elif mode == "rich":
        content = "\n".join(
            f"[bold]{key.capitalize()}:[/] {escape(_fmt(value))}" for key, value in book.to_dict().items()
        )
        _console.print(Panel.fit(content, title="📖 Book", border_style="blue"))
    else:
        print("Book Found")
        print(f"ID: {book.id}")
        print(f"Title: {_fmt(book.title)}")
        print(f"Author: {_fmt(book.author)}")
        print(f"Year: {_fmt(book.year)}")
        print(f"Publisher: {_fmt(book.publisher)}")
        print(f"Description: {_fmt(book.description)}")

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

import typer
import uvicorn

from book import Book
from config import settings
from database import get_db_connection, initialize_database
from store import BookStore, PersistenceError
from ui_helpers import print_book_result, print_list_result, set_output_mode
from validators import BookValidator, parse_book_id

logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger(__name__)

app = typer.Typer(help="Books CLI")


@contextmanager
def open_store() -> Iterator[BookStore]:
    """Open the configured database, creating the schema on first use."""
    initialize_database()
    conn = get_db_connection()
    try:
        yield BookStore(conn)
    finally:
        conn.close()


@app.callback()
def _global_options(
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output format: plain | json | rich (default: plain)",
    )
):
    """Global CLI options (e.g. output mode)."""
    if output:
        set_output_mode(output)


@app.command("init-db")
def cli_init_db():
    """Create the books table and its unique index."""
    initialize_database()
    print(f"Database ready: {settings.database_file}")


@app.command("list")
def cli_list(
    author: Optional[str] = typer.Option(None, "--author", "-a", help="Filter by author (case-insensitive)"),
    year: Optional[int] = typer.Option(None, "--year", "-y", help="Filter by year"),
    publisher: Optional[str] = typer.Option(None, "--publisher", "-p", help="Filter by publisher (case-insensitive)"),
):
    """List books, optionally filtered."""
    if author == "" or publisher == "":
        print("Error: author and publisher filters must not be empty.")
        return
    with open_store() as store:
        books = store.list_books(author=author, year=year, publisher=publisher)
    print_list_result(books)


@app.command("find")
def cli_find(book_id: str):
    """Show one book by id."""
    parsed = parse_book_id(book_id)
    book = None
    if parsed is not None:
        with open_store() as store:
            book = store.get_book(parsed)
    if book:
        print_book_result(book)
    else:
        print(f"Book with id {book_id} not found.")


@app.command("add")
def cli_add(
    title: Optional[str] = typer.Option(None, "--title", "-t"),
    author: Optional[str] = typer.Option(None, "--author", "-a"),
    year: Optional[int] = typer.Option(None, "--year", "-y"),
    publisher: Optional[str] = typer.Option(None, "--publisher", "-p"),
    description: Optional[str] = typer.Option(None, "--description", "-d"),
):
    """Validate and add a book."""
    book = Book(title=title, author=author, year=year, publisher=publisher, description=description)
    errors = BookValidator.validate(book)
    if errors:
        print("Invalid book:")
        for error in errors:
            print(f"  {error}")
        return
    try:
        with open_store() as store:
            created = store.add_book(book)
    except PersistenceError as e:
        print(f"Error: {e}")
        return
    print(f"Successfully added: {created.title} by {created.author} (id {created.id})")


@app.command("remove")
def cli_remove(book_id: str):
    """Remove a book by id."""
    parsed = parse_book_id(book_id)
    removed = False
    if parsed is not None:
        with open_store() as store:
            removed = store.remove_book(parsed)
    if removed:
        print(f"Book with id {parsed} has been removed.")
    else:
        print(f"Book with id {book_id} not found.")


@app.command("clear")
def cli_clear(yes: bool = typer.Option(False, "--yes", help="Skip the confirmation prompt")):
    """Delete every book and reset ids."""
    if not yes and not typer.confirm(f"Delete ALL books in {settings.database_file}?"):
        print("Aborted.")
        return
    with open_store() as store:
        store.clear()
    print("All books deleted.")


@app.command("serve")
def cli_serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind host (default: API_HOST)"),
    port: Optional[int] = typer.Option(None, "--port", help="Bind port (default: API_PORT)"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
):
    """Run the HTTP API with uvicorn."""
    host = host or settings.api_host
    port = port or int(settings.api_port)
    print(f"Starting Books API on http://{host}:{port}/")
    uvicorn.run("api:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    app()

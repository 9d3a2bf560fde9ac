import json
from unittest.mock import MagicMock

from typer.testing import CliRunner

import main
from book import Book
from main import app

runner = CliRunner()


def _add(*args):
    return runner.invoke(app, ["add", *args])


def test_list_no_books(db_file):
    result = runner.invoke(app, ["list"])
    assert result.exit_code == 0
    assert "No books found." in result.stdout


def test_add_and_list(db_file):
    result = _add("--title", "Dune", "--author", "Frank Herbert", "--year", "1965", "--publisher", "Chilton")
    assert result.exit_code == 0
    assert "Successfully added: Dune by Frank Herbert (id 1)" in result.stdout

    result = runner.invoke(app, ["list"])
    assert "1 - Dune by Frank Herbert (1965)" in result.stdout


def test_add_invalid_book(store):
    result = _add("--title", "Dune", "--author", "Frank Herbert", "--publisher", "")
    assert result.exit_code == 0
    assert "Invalid book:" in result.stdout
    assert "'year' must not be empty." in result.stdout
    assert "'publisher' must be null or non-empty." in result.stdout
    assert store.count() == 0


def test_add_duplicate(store):
    store.add_book(Book("Dune", "Frank Herbert", 1965))
    result = _add("--title", "Dune", "--author", "Frank Herbert", "--year", "1965")
    assert "Error:" in result.stdout
    assert store.count() == 1


def test_list_with_filters(store):
    store.add_book(Book("Dune", "Frank Herbert", 1965))
    store.add_book(Book("Neuromancer", "William Gibson", 1984, "Ace"))
    result = runner.invoke(app, ["list", "--author", "WILLIAM GIBSON"])
    assert "Neuromancer" in result.stdout
    assert "Dune" not in result.stdout

    result = runner.invoke(app, ["list", "--year", "1965"])
    assert "Dune" in result.stdout
    assert "Neuromancer" not in result.stdout


def test_list_rejects_empty_filter(db_file):
    result = runner.invoke(app, ["list", "--publisher", ""])
    assert "must not be empty" in result.stdout


def test_list_json_output(store):
    store.add_book(Book("Dune", "Frank Herbert", 1965, "Chilton"))
    result = runner.invoke(app, ["--output", "json", "list"])
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload == [{
        "id": 1,
        "title": "Dune",
        "author": "Frank Herbert",
        "year": 1965,
        "publisher": "Chilton",
        "description": None,
    }]


def test_find(store):
    store.add_book(Book("Dune", "Frank Herbert", 1965))
    result = runner.invoke(app, ["find", "1"])
    assert "Book Found" in result.stdout
    assert "Title: Dune" in result.stdout

    result = runner.invoke(app, ["find", "abc"])
    assert "Book with id abc not found." in result.stdout


def test_remove(store):
    store.add_book(Book("Dune", "Frank Herbert", 1965))
    result = runner.invoke(app, ["remove", "1"])
    assert "Book with id 1 has been removed." in result.stdout
    assert store.count() == 0

    result = runner.invoke(app, ["remove", "1"])
    assert "Book with id 1 not found." in result.stdout


def test_clear_requires_confirmation(store):
    store.add_book(Book("Dune", "Frank Herbert", 1965))
    result = runner.invoke(app, ["clear"], input="n\n")
    assert "Aborted." in result.stdout
    assert store.count() == 1


def test_clear_with_yes_resets_ids(store):
    store.add_book(Book("Dune", "Frank Herbert", 1965))
    store.add_book(Book("Emma", "Jane Austen", 1815))
    result = runner.invoke(app, ["clear", "--yes"])
    assert "All books deleted." in result.stdout
    assert store.count() == 0
    assert store.add_book(Book("Emma", "Jane Austen", 1815)).id == 1


def test_serve_runs_uvicorn(db_file, monkeypatch):
    run_mock = MagicMock()
    monkeypatch.setattr(main.uvicorn, "run", run_mock)
    result = runner.invoke(app, ["serve", "--port", "9001"])
    assert result.exit_code == 0
    run_mock.assert_called_once_with("api:app", host=main.settings.api_host, port=9001, reload=False)

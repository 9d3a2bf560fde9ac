import pytest
from fastapi.testclient import TestClient

from config import settings
from database import get_db_connection, initialize_database
from store import BookStore
from ui_helpers import OUTPUT_MODE_ENV


@pytest.fixture
def db_file(tmp_path, monkeypatch, request):
    # Each test gets its own database file
    path = str(tmp_path / f"books_{request.node.name}.db")
    monkeypatch.setattr(settings, "database_file", path)
    # CLI output mode is kept in the environment; start every test in plain mode
    monkeypatch.setenv(OUTPUT_MODE_ENV, "plain")
    initialize_database(path)
    return path


@pytest.fixture
def store(db_file):
    conn = get_db_connection(db_file)
    yield BookStore(conn)
    conn.close()


@pytest.fixture
def client(db_file, monkeypatch):
    monkeypatch.setattr(settings, "enable_delete_all", True)
    from api import app

    with TestClient(app) as test_client:
        yield test_client

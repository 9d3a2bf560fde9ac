import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Annotated, Iterator, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import Response
from pydantic import BaseModel, Field, StrictInt, StrictStr
from starlette.exceptions import HTTPException as StarletteHTTPException

from book import Book
from config import settings
from database import get_db_connection, initialize_database
from store import BookStore, PersistenceError
from validators import INT32_MAX, INT32_MIN, BookValidator, parse_book_id, parse_int32

logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger(__name__)

Int32 = Annotated[StrictInt, Field(ge=INT32_MIN, le=INT32_MAX)]


@asynccontextmanager
async def lifespan(app: FastAPI):
    initialize_database()
    if settings.delete_all_enabled:
        logger.warning("DELETE /books is enabled (environment=%s); never enable it in production", settings.environment)
    yield


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    lifespan=lifespan,
    # Interactive docs only while debugging
    docs_url="/docs" if settings.debug else None,
    redoc_url=None,
    openapi_url="/openapi.json" if settings.debug else None,
)


# --- Errors ---
# Failures are reported by status code alone; details go to the log only.
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.detail)
    return Response(status_code=exc.status_code, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.info("%s %s -> 400: %s", request.method, request.url.path, exc.errors())
    return Response(status_code=400)


# --- Dependencies ---
def get_store() -> Iterator[BookStore]:
    """One connection per request, closed whatever the outcome."""
    conn = get_db_connection()
    try:
        yield BookStore(conn)
    finally:
        conn.close()


# --- Models ---
class BookModel(BaseModel):
    id: int
    title: Optional[str] = None
    author: Optional[str] = None
    year: Optional[int] = None
    publisher: Optional[str] = None
    description: Optional[str] = None


class BookCreateModel(BaseModel):
    title: Optional[StrictStr] = None
    author: Optional[StrictStr] = None
    year: Optional[Int32] = None
    publisher: Optional[StrictStr] = None
    description: Optional[StrictStr] = None


class BookCreatedModel(BaseModel):
    id: int


# --- API Endpoints ---
@app.get("/books", response_model=List[BookModel])
def get_books(
    author: Optional[str] = Query(None, description="Exact author, case-insensitive; must not be empty"),
    year: Optional[str] = Query(None, description="Exact publication year; must be an integer"),
    publisher: Optional[str] = Query(None, description="Exact publisher, case-insensitive; must not be empty"),
    store: BookStore = Depends(get_store),
):
    """List books, optionally filtered by author, year and publisher."""
    if author is not None and len(author) == 0:
        raise HTTPException(status_code=400, detail="author filter must not be empty")
    if publisher is not None and len(publisher) == 0:
        raise HTTPException(status_code=400, detail="publisher filter must not be empty")
    # An empty year= binds to "no filter", unlike author/publisher
    year_filter = None
    if year:
        year_filter = parse_int32(year)
        if year_filter is None:
            raise HTTPException(status_code=400, detail=f"year filter '{year}' is not an integer")

    books = store.list_books(author=author, year=year_filter, publisher=publisher)
    return [BookModel(**b.to_dict()) for b in books]


@app.get("/books/{book_id}", response_model=BookModel)
def get_book(book_id: str, store: BookStore = Depends(get_store)):
    """Get a single book by id. A non-integer id is reported as not found."""
    parsed = parse_book_id(book_id)
    if parsed is None:
        raise HTTPException(status_code=404, detail=f"'{book_id}' is not a book id")
    book = store.get_book(parsed)
    if not book:
        raise HTTPException(status_code=404, detail=f"Book {parsed} not found")
    return BookModel(**book.to_dict())


@app.post("/books", response_model=BookCreatedModel)
def add_book(payload: BookCreateModel, store: BookStore = Depends(get_store)):
    """Add a book and return its new id."""
    book = Book(**payload.model_dump())
    errors = BookValidator.validate(book)
    if errors:
        raise HTTPException(status_code=400, detail=" ".join(errors))
    try:
        created = store.add_book(book)
    except PersistenceError as e:
        # Duplicates and storage failures look the same to the client
        logger.warning("Insert rejected: %s", e)
        raise HTTPException(status_code=400, detail=str(e))
    return BookCreatedModel(id=created.id)


@app.delete("/books/{book_id}", status_code=204)
def delete_book(book_id: str, store: BookStore = Depends(get_store)):
    """Delete a book by id."""
    parsed = parse_book_id(book_id)
    if parsed is None:
        raise HTTPException(status_code=404, detail=f"'{book_id}' is not a book id")
    if not store.remove_book(parsed):
        raise HTTPException(status_code=404, detail=f"Book {parsed} not found")
    return Response(status_code=204)


@app.delete("/books", status_code=204)
def delete_all_books(store: BookStore = Depends(get_store)):
    """Delete every book and reset ids. Test environments only."""
    if not settings.delete_all_enabled:
        raise HTTPException(
            status_code=405,
            detail="Deleting all books is disabled in this environment",
            headers={"Allow": "GET, POST"},
        )
    store.clear()
    return Response(status_code=204)


# --- Health Check ---
@app.get("/health")
def health_check(store: BookStore = Depends(get_store)):
    """Health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "total_books": store.count(),
    }

"""
Route definitions for the book catalogue.

Endpoints:
- GET  /               : list every book
- GET  /get/{isbn}     : one book by ISBN
- GET  /search/{q}     : books whose title contains ``q`` (case-sensitive)
- POST /add            : raw ISBN body; look it up on Google Books and store it
- POST /remove         : raw ISBN body; delete the book

Handlers are plain ``def`` functions, so FastAPI runs them on its thread
pool. Each one touches the registry only inside ``guard.access()``. The
add route does its Google Books call before taking the lock so that
readers are not held up by the network round trip.
"""

from __future__ import annotations

from typing import Callable, List

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from ..models import Book, ErrorMessage
from ..storage import (
    BookExistsError,
    BookNotFoundError,
    GuardedRegistry,
    PersistenceError,
)
from .googlebooks_service import LookupFailedError


router = APIRouter(tags=["catalog"])

SUCCESS = "Success"


def _get_registry(request: Request) -> GuardedRegistry:
    guard = getattr(request.app.state, "registry", None)
    if guard is None:
        raise RuntimeError("Book registry not loaded")
    return guard


def _get_lookup(request: Request) -> Callable[[str], Book]:
    lookup = getattr(request.app.state, "book_lookup", None)
    if lookup is None:
        raise RuntimeError("Book lookup not configured")
    return lookup


async def _read_isbn(request: Request) -> str:
    """Read the raw request body as an ISBN."""
    body = await request.body()
    try:
        isbn = body.decode("utf-8").strip()
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="ISBN must be UTF-8 text")
    if not isbn:
        raise HTTPException(status_code=400, detail="ISBN is required")
    return isbn


def _bad_request(message: str) -> JSONResponse:
    return JSONResponse(status_code=400, content=ErrorMessage(message=message).model_dump())


@router.get("/", response_model=List[Book])
def list_books(guard: GuardedRegistry = Depends(_get_registry)) -> List[Book]:
    with guard.access() as registry:
        return registry.list_books()


@router.get(
    "/get/{isbn}",
    response_model=Book,
    responses={400: {"model": ErrorMessage}},
)
def get_book(isbn: str, guard: GuardedRegistry = Depends(_get_registry)):
    try:
        with guard.access() as registry:
            return registry.find(isbn)
    except BookNotFoundError as exc:
        return _bad_request(str(exc))


@router.get(
    "/search/{q}",
    response_model=List[Book],
    responses={400: {"model": ErrorMessage}},
)
def search_books(q: str, guard: GuardedRegistry = Depends(_get_registry)):
    try:
        with guard.access() as registry:
            return registry.search(q)
    except BookNotFoundError as exc:
        return _bad_request(str(exc))


@router.post("/add", response_class=PlainTextResponse)
def add_book(
    isbn: str = Depends(_read_isbn),
    guard: GuardedRegistry = Depends(_get_registry),
    lookup: Callable[[str], Book] = Depends(_get_lookup),
) -> PlainTextResponse:
    try:
        book = lookup(isbn)
    except LookupFailedError as exc:
        return PlainTextResponse(str(exc), status_code=502)
    try:
        with guard.access() as registry:
            registry.add(book)
    except BookExistsError as exc:
        return PlainTextResponse(str(exc), status_code=400)
    except PersistenceError as exc:
        return PlainTextResponse(str(exc), status_code=500)
    return PlainTextResponse(SUCCESS)


@router.post("/remove", response_class=PlainTextResponse)
def remove_book(
    isbn: str = Depends(_read_isbn),
    guard: GuardedRegistry = Depends(_get_registry),
) -> PlainTextResponse:
    try:
        with guard.access() as registry:
            registry.remove(isbn)
    except BookNotFoundError as exc:
        return PlainTextResponse(str(exc), status_code=400)
    except PersistenceError as exc:
        return PlainTextResponse(str(exc), status_code=500)
    return PlainTextResponse(SUCCESS)

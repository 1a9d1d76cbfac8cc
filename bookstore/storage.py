"""
In-memory book registry backed by a single JSON file.

``BookRegistry`` keeps the books in insertion order, enforces one
record per ISBN and rewrites the whole file after every successful
``add`` or ``remove``. Lookups are plain linear scans; the collection
is expected to stay small.

The registry itself is not thread-safe. Route handlers reach it only
through ``GuardedRegistry.access()``, which serialises every call
(reads included) behind one lock.
"""

from __future__ import annotations

import json
import logging
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterable, Iterator, List, Optional, Union

from pydantic import TypeAdapter, ValidationError

from .models import Book


logger = logging.getLogger(__name__)

PERSIST_FAILURE_POLICIES = ("log", "raise", "rollback")

_BOOK_LIST = TypeAdapter(List[Book])


class RegistryError(Exception):
    """Base exception for registry operations."""


class BookNotFoundError(RegistryError):
    """Raised when a lookup, search or removal matches nothing."""

    def __init__(self, message: str, isbn: Optional[str] = None) -> None:
        super().__init__(message)
        self.isbn = isbn

    @classmethod
    def for_isbn(cls, isbn: str) -> "BookNotFoundError":
        return cls(f"Book with ISBN {isbn} not found", isbn=isbn)


class BookExistsError(RegistryError):
    """Raised when adding a book whose ISBN is already registered."""

    def __init__(self, isbn: str) -> None:
        super().__init__("Book already exists in DB")
        self.isbn = isbn


class PersistenceError(RegistryError):
    """Raised when the registry file cannot be written."""

    def __init__(self, path: Path, cause: Exception) -> None:
        super().__init__(f"Could not write {path}: {cause}")
        self.path = path
        self.cause = cause


class RegistryLoadError(RegistryError):
    """Raised when the registry file cannot be read at startup."""


class BookRegistry:
    """Ordered collection of books keyed by ISBN.

    Parameters
    ----------
    path : Path
        File the registry is written to after each mutation.
    books : Iterable[Book]
        Initial contents, in order. ISBNs must be unique.
    on_persist_failure : str
        What to do when the file cannot be written: ``"log"`` keeps the
        in-memory change and reports success, ``"raise"`` keeps it and
        raises ``PersistenceError``, ``"rollback"`` undoes it and
        raises ``PersistenceError``.
    """

    def __init__(
        self,
        path: Union[str, Path],
        books: Iterable[Book] = (),
        on_persist_failure: str = "log",
    ) -> None:
        if on_persist_failure not in PERSIST_FAILURE_POLICIES:
            raise ValueError(f"Unknown persistence failure policy: {on_persist_failure!r}")
        self.path = Path(path)
        self.on_persist_failure = on_persist_failure
        self._books: List[Book] = []
        for book in books:
            if self._index_of(book.isbn) is not None:
                raise ValueError(f"Duplicate ISBN {book.isbn}")
            self._books.append(book)

    @classmethod
    def load(cls, path: Union[str, Path], on_persist_failure: str = "log") -> "BookRegistry":
        """Build a registry from the JSON file at ``path``.

        Any problem with the file (missing, unreadable, not JSON, wrong
        shape, repeated ISBN) raises ``RegistryLoadError``; there is no
        partial load.
        """
        path = Path(path)
        try:
            with path.open("r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, ValueError) as exc:
            raise RegistryLoadError(f"Cannot read book registry {path}: {exc}") from exc
        try:
            # Only the on-disk key "name" is accepted for the title.
            books = _BOOK_LIST.validate_python(raw, by_alias=True, by_name=False)
        except ValidationError as exc:
            raise RegistryLoadError(f"Invalid book registry {path}: {exc}") from exc
        try:
            registry = cls(path, books, on_persist_failure=on_persist_failure)
        except ValueError as exc:
            raise RegistryLoadError(f"Invalid book registry {path}: {exc}") from exc
        logger.info("Loaded %d books from %s", len(registry), path)
        return registry

    def __len__(self) -> int:
        return len(self._books)

    def _index_of(self, isbn: str) -> Optional[int]:
        for i, book in enumerate(self._books):
            if book.isbn == isbn:
                return i
        return None

    def list_books(self) -> List[Book]:
        return list(self._books)

    def find(self, isbn: str) -> Book:
        index = self._index_of(isbn)
        if index is None:
            raise BookNotFoundError.for_isbn(isbn)
        return self._books[index]

    def search(self, text: str) -> List[Book]:
        """Return books whose title contains ``text``.

        Matching is case-sensitive and needs ``text`` as one contiguous
        run of characters: ``"Harry"`` finds ``"Harry Potter"`` but not
        ``"harry potter"``.
        """
        found = [book for book in self._books if text in book.title]
        if not found:
            raise BookNotFoundError("No book found")
        return found

    def add(self, book: Book) -> None:
        try:
            self.find(book.isbn)
        except BookNotFoundError:
            pass
        else:
            raise BookExistsError(book.isbn)
        self._books.append(book)
        logger.info("Added book %s", book.isbn)
        self._commit(undo=self._books.pop)

    def remove(self, isbn: str) -> None:
        index = self._index_of(isbn)
        if index is None:
            raise BookNotFoundError.for_isbn(isbn)
        removed = self._books.pop(index)
        logger.info("Removed book %s", isbn)
        self._commit(undo=lambda: self._books.insert(index, removed))

    def to_json(self) -> str:
        return _BOOK_LIST.dump_json(self._books, by_alias=True, indent=2).decode("utf-8")

    def save(self) -> None:
        """Rewrite the whole registry file. Errors propagate."""
        self.path.write_text(self.to_json(), encoding="utf-8")

    def _commit(self, undo: Callable[[], object]) -> None:
        try:
            self.save()
        except OSError as exc:
            logger.error("Failed to write book registry %s: %s", self.path, exc)
            if self.on_persist_failure == "log":
                return
            if self.on_persist_failure == "rollback":
                undo()
            raise PersistenceError(self.path, exc) from exc


class GuardedRegistry:
    """Hands out the registry one caller at a time.

    ``with guard.access() as registry:`` holds the lock for the body of
    the ``with`` block. Keep the block to a single registry call and do
    no network I/O inside it.
    """

    def __init__(self, registry: BookRegistry) -> None:
        self._registry = registry
        self._lock = threading.Lock()

    @contextmanager
    def access(self) -> Iterator[BookRegistry]:
        with self._lock:
            yield self._registry

    def locked(self) -> bool:
        return self._lock.locked()

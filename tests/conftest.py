import json

import pytest
from fastapi.testclient import TestClient

from bookstore.config import Settings
from bookstore.catalog.googlebooks_service import LookupFailedError
from bookstore.main import create_app
from bookstore.models import Book


HARRY = {"isbn": "9780747532743", "name": "Harry Potter", "author": "J. K. Rowling"}
DUNE = {"isbn": "9780441013593", "name": "Dune", "author": "Frank Herbert"}


def write_books(path, entries):
    path.write_text(json.dumps(entries), encoding="utf-8")
    return path


def read_books(path):
    return json.loads(path.read_text(encoding="utf-8"))


@pytest.fixture()
def books_file(tmp_path):
    """A registry file holding two books."""
    return write_books(tmp_path / "books.json", [HARRY, DUNE])


class FakeLookup:
    def __init__(self):
        self.books = {}
        self.calls = []

    def __call__(self, isbn):
        self.calls.append(isbn)
        if isbn not in self.books:
            raise LookupFailedError(isbn, "no volume found")
        return self.books[isbn]


@pytest.fixture()
def fake_lookup():
    lookup = FakeLookup()
    lookup.books["111"] = Book(isbn="111", title="A", author="X")
    return lookup


@pytest.fixture()
def app(books_file, fake_lookup):
    app = create_app(Settings(books_file=str(books_file)))
    app.state.book_lookup = fake_lookup
    return app


@pytest.fixture()
def client(app):
    with TestClient(app) as c:
        yield c

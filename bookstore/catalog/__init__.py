"""
Catalog package for the bookstore API.

This package holds the HTTP routes that expose the book registry and
the Google Books client used to fill in title and author when a book
is added by ISBN alone.
"""

from .router import router as catalog_router  # noqa: F401

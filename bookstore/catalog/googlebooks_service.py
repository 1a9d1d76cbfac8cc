"""
Google Books integration used when a book is added by ISBN.

``lookup_isbn()`` queries the public volumes endpoint with
``q=isbn:<isbn>`` and turns the first result into a ``Book``. Only the
title and the first listed author are kept. There is no cache and no
retry: every call goes to the network, and any failure is reported as
``LookupFailedError`` so the caller can answer the request instead of
crashing it.

Only the Python standard library is used for HTTP requests.
"""

from __future__ import annotations

import http.client
import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, Dict, Optional

from ..models import Book


logger = logging.getLogger(__name__)

GOOGLE_BOOKS_URL = "https://www.googleapis.com/books/v1/volumes"

# Transport timeout in seconds; not exposed as a setting.
REQUEST_TIMEOUT = 10


class LookupFailedError(Exception):
    """Raised when an ISBN cannot be turned into a book record."""

    def __init__(self, isbn: str, cause: str) -> None:
        super().__init__(f"Lookup failed for ISBN {isbn}: {cause}")
        self.isbn = isbn
        self.cause = cause


def _http_get_json(url: str) -> Dict[str, Any]:
    """Perform an HTTP GET and return the decoded JSON body.

    Network errors, non-200 responses and bodies that are not a JSON
    object raise ``ValueError``, ``OSError`` (``URLError`` is one) or
    ``http.client.HTTPException`` for a broken response.
    """
    request = urllib.request.Request(
        url,
        headers={
            'User-Agent': 'bookstore/1.0 (+https://www.googleapis.com/books)',
            'Accept': 'application/json',
        },
    )
    with urllib.request.urlopen(request, timeout=REQUEST_TIMEOUT) as response:
        if response.status != 200:
            raise ValueError(f"HTTP {response.status} from {url}")
        data = json.loads(response.read().decode('utf-8', errors='ignore'))
    if not isinstance(data, dict):
        raise ValueError("response is not a JSON object")
    return data


def _volume_url(isbn: str, base_url: str) -> str:
    return f"{base_url}?{urllib.parse.urlencode({'q': f'isbn:{isbn}'})}"


def _book_from_volume(isbn: str, data: Dict[str, Any]) -> Book:
    items = data.get('items')
    if not isinstance(items, list) or not items:
        raise LookupFailedError(isbn, "no volume found")
    first = items[0]
    volume_info: Optional[dict] = first.get('volumeInfo') if isinstance(first, dict) else None
    if not isinstance(volume_info, dict):
        raise LookupFailedError(isbn, "volume has no volumeInfo")
    title = volume_info.get('title')
    if not isinstance(title, str):
        raise LookupFailedError(isbn, "volume has no title")
    authors = volume_info.get('authors')
    if not isinstance(authors, list) or not authors or not isinstance(authors[0], str):
        raise LookupFailedError(isbn, "volume has no author")
    return Book(isbn=isbn, title=title, author=authors[0])


def lookup_isbn(isbn: str, base_url: str = GOOGLE_BOOKS_URL) -> Book:
    """Fetch title and first author for ``isbn`` from Google Books.

    Parameters
    ----------
    isbn : str
        Passed through unchanged as the record's key and in the query.
    base_url : str
        Volumes endpoint; overridable for tests or a proxy.

    Returns
    -------
    Book
        A fully populated record carrying the given ``isbn``.

    Raises
    ------
    LookupFailedError
        If the request fails, no volume matches, or the first volume
        lacks a title or author.
    """
    url = _volume_url(isbn, base_url)
    logger.debug("Looking up ISBN %s via %s", isbn, url)
    try:
        data = _http_get_json(url)
    except (OSError, ValueError, http.client.HTTPException) as exc:
        logger.warning("Google Books request for ISBN %s failed: %s", isbn, exc)
        raise LookupFailedError(isbn, str(exc)) from exc
    try:
        return _book_from_volume(isbn, data)
    except LookupFailedError as exc:
        logger.warning("Google Books returned no usable volume for ISBN %s: %s", isbn, exc.cause)
        raise

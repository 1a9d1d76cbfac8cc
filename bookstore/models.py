"""
Pydantic models shared by the registry, the lookup client and the routes.

The ``Book`` model is what gets stored in memory, written to the JSON
file and returned to clients. The title travels under the key ``name``
on the wire and on disk; Python code reads it as ``book.title``.
"""

from pydantic import BaseModel, ConfigDict, Field


class Book(BaseModel):
    """A single catalogue entry.

    Books are frozen once built: the registry replaces whole records
    and never edits one in place. ``author`` holds a single name even
    when the lookup source lists several.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    isbn: str
    title: str = Field(alias="name")
    author: str


class ErrorMessage(BaseModel):
    message: str

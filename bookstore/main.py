# bookstore/main.py
import logging
from contextlib import asynccontextmanager
from functools import partial
from typing import Optional

from fastapi import FastAPI

from . import __version__
from .catalog import catalog_router
from .catalog.googlebooks_service import lookup_isbn
from .config import Settings, get_settings
from .storage import BookRegistry, GuardedRegistry


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    # A RegistryLoadError here aborts startup; the service never runs without its file.
    registry = BookRegistry.load(settings.books_file, on_persist_failure=settings.persist_failure)
    app.state.registry = GuardedRegistry(registry)
    yield


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Bookstore",
        description="ISBN-keyed book catalogue, enriched from Google Books on insert.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.book_lookup = partial(lookup_isbn, base_url=settings.lookup_url)
    app.include_router(catalog_router)
    return app


app = create_app()

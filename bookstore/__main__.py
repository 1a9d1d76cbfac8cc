"""Run the bookstore API with uvicorn: ``python -m bookstore``."""

import uvicorn

from .config import get_settings
from .main import app


def main() -> None:
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()

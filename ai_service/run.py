"""
run.py

This file is a simple entry point to run the FastAPI application
using Uvicorn.

It allows developers to start the server using:
    python run.py
or, once installed:
    maxocr-serve

No business logic should be written here.
"""

import uvicorn

from app.config import Settings, get_settings


def uvicorn_options(settings: Settings) -> dict:
    # host="0.0.0.0" allows access from other devices if needed
    return {
        "host": settings.host,
        "port": settings.port,
        "reload": settings.reload,
    }


def main() -> None:
    uvicorn.run("app.main:app", **uvicorn_options(get_settings()))


if __name__ == "__main__":
    main()

"""
main.py

This is the main entry point of the FastAPI application.
Here we create the FastAPI app and register all API routes.

This file does NOT contain business logic.
It only wires everything together.
"""

from fastapi import FastAPI

from app.api.health import router as health_router
from app.api.ocr import router as ocr_router
from app.config import configure_logging, get_settings


def create_app() -> FastAPI:
    """
    Creates and returns the FastAPI application instance.
    This function helps keep the app creation clean and testable.
    """
    configure_logging(get_settings().log_level)

    app = FastAPI(
        title="MaxOCR Service",
        description="Thai document OCR backed by the Typhoon OCR API",
        version="1.0.0"
    )

    # Register API routes
    app.include_router(health_router, prefix="/health", tags=["Health"])
    app.include_router(ocr_router, prefix="/ocr", tags=["OCR"])

    return app


# Create the FastAPI app instance
app = create_app()

"""
config.py

Central place to load environment variables.

Only this module reads the process environment. Services receive a
Settings object and never look at os.environ themselves.
"""

import logging
import os
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load variables from .env file into environment
load_dotenv()


class Settings(BaseModel):
    """
    Runtime configuration for the OCR service and the benchmark.
    """

    typhoon_api_key: Optional[str] = Field(
        default=None,
        description="API key for the Typhoon OCR endpoint"
    )
    typhoon_base_url: str = Field(
        default="https://api.opentyphoon.ai/v1",
        description="Base URL of the OpenAI-compatible OCR endpoint"
    )
    request_timeout: float = Field(
        default=120.0,
        gt=0,
        description="Timeout in seconds for a single OCR attempt"
    )
    max_retries: int = Field(
        default=3,
        ge=1,
        description="Maximum number of OCR attempts per request"
    )
    datasets_dir: str = Field(
        default="tests/datasets",
        description="Directory holding the benchmark categories"
    )
    log_level: str = Field(default="INFO")
    host: str = Field(default="0.0.0.0", description="Address uvicorn binds to")
    port: int = Field(default=8000, ge=1, le=65535)
    reload: bool = Field(default=False, description="Auto-reload on code changes (development)")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Build Settings from the environment once and reuse it.
    """

    return Settings(
        typhoon_api_key=os.getenv("TYPHOON_API_KEY") or None,
        typhoon_base_url=os.getenv("TYPHOON_BASE_URL", "https://api.opentyphoon.ai/v1"),
        request_timeout=float(os.getenv("TYPHOON_TIMEOUT", "120")),
        max_retries=int(os.getenv("TYPHOON_MAX_RETRIES", "3")),
        datasets_dir=os.getenv("MAXOCR_DATASETS_DIR", "tests/datasets"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("RELOAD", "0") == "1",
    )


def configure_logging(level: str = "INFO") -> None:
    """
    Install a basic log format for the API and the benchmark CLI.
    """

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

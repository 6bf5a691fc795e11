"""
ocr.py

This file sends images to the Typhoon OCR endpoint
and returns the text it recognised.

The endpoint speaks the OpenAI chat completions protocol, so the
official OpenAI SDK is used as the transport, pointed at Typhoon.

Uses:
1. app/services/prompts.py to build the instruction and decode the reply
2. app/services/errors.py to classify every failure once

This file:
- Owns the retry loop with exponential backoff (1s, 2s, 4s, ...)
- Does NOT read environment variables (gets Settings injected)
- Does NOT contain FastAPI routes
"""

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Mapping, Optional

import httpx
import openai
from openai import AsyncOpenAI

from app.config import Settings
from app.schemas.ocr import FigureLanguage, OCRMetadata, OCRMode, OCRResponse
from app.services.errors import (
    AuthError,
    OCRServiceError,
    TransientProviderError,
    error_for_status,
    missing_api_key,
    missing_image,
)
from app.services.prompts import build_prompt, decode_response, get_mode_config

logger = logging.getLogger(__name__)

PROVIDER_NAME = "typhoon"

# Sampling parameters sent with every request
MAX_TOKENS = 16384
TEMPERATURE = 0.1
TOP_P = 0.6

SleepFn = Callable[[float], Awaitable[Any]]


def backoff_delay(attempt: int) -> float:
    """Seconds to wait after a failed attempt (attempt starts at 0)."""
    return float(2 ** attempt)


def _provider_message(body: Any) -> Optional[str]:
    """
    Pull the provider's error message out of an error body.

    The SDK usually hands over the inner "error" object, but some
    gateways answer with the full {"error": {...}} envelope.
    """

    if not isinstance(body, Mapping):
        return None

    error = body.get("error")
    if isinstance(error, Mapping):
        body = error
    elif isinstance(error, str) and error:
        return error

    message = body.get("message")
    if isinstance(message, str) and message:
        return message
    return None


class TyphoonOCRService:
    """
    TyphoonOCRService is responsible for one job only:
    turning one image into text through the Typhoon OCR API.

    One call to process_with_retry() owns its own retry loop.
    There is no sharing between concurrent requests.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        sleep: SleepFn = asyncio.sleep
    ):
        """
        Initialize OCR service.

        Parameters:
        - settings: API key, endpoint URL, timeout and retry ceiling
        - http_client: optional httpx client (tests pass a mock transport)
        - sleep: coroutine used for backoff delays
        """

        self.settings = settings
        self._sleep = sleep
        self._client: Optional[AsyncOpenAI] = None

        # Without a key the service can still be built; calls fail fast
        if settings.typhoon_api_key:
            self._client = AsyncOpenAI(
                api_key=settings.typhoon_api_key,
                base_url=settings.typhoon_base_url,
                timeout=settings.request_timeout,
                # Retries are handled by process_with_retry()
                max_retries=0,
                http_client=http_client,
            )

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()

    def _build_messages(self, prompt: str, image_base64: str, mime_type: str) -> list:
        return [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": prompt},
                    {
                        "type": "image_url",
                        "image_url": {"url": f"data:{mime_type};base64,{image_base64}"},
                    },
                ],
            }
        ]

    async def process(
        self,
        image_base64: str,
        *,
        mode: OCRMode = OCRMode.V1_5,
        language: FigureLanguage = FigureLanguage.THAI,
        mime_type: str = "image/png"
    ) -> OCRResponse:
        """
        Run a single OCR attempt.

        What happens here:
        1. Build the prompt for the mode
        2. Send one chat completion request with the image as a data URI
        3. Decode the reply (plain markdown or JSON envelope)
        4. Return text plus timing metadata

        Raises:
        - ClientInputError when the image or API key is missing
        - AuthError, RateLimitError or TransientProviderError on provider failure
        """

        if not image_base64:
            raise missing_image()

        if self._client is None:
            raise missing_api_key()

        mode = OCRMode(mode)
        config = get_mode_config(mode)
        prompt = build_prompt(mode, language)
        messages = self._build_messages(prompt, image_base64, mime_type)

        start = time.perf_counter()

        try:
            completion = await self._client.chat.completions.create(
                model=config.model,
                messages=messages,
                max_tokens=MAX_TOKENS,
                temperature=TEMPERATURE,
                top_p=TOP_P,
                extra_body={"repetition_penalty": config.repetition_penalty},
            )
        except openai.APIStatusError as error:
            # Classified here, once, from the status code
            raise error_for_status(error.status_code, _provider_message(error.body)) from error
        except openai.APIConnectionError as error:
            # Also covers APITimeoutError
            raise TransientProviderError(f"Connection to OCR provider failed: {error}", status_code=502) from error

        if not completion.choices or completion.choices[0].message.content is None:
            raise TransientProviderError("OCR provider returned an empty completion")

        text = decode_response(completion.choices[0].message.content, mode)
        elapsed_ms = (time.perf_counter() - start) * 1000

        return OCRResponse(
            text=text,
            metadata=OCRMetadata(
                processing_time=round(elapsed_ms, 2),
                mode=mode,
                provider=PROVIDER_NAME,
                model=config.model,
            ),
        )

    async def process_with_retry(
        self,
        image_base64: str,
        *,
        mode: OCRMode = OCRMode.V1_5,
        language: FigureLanguage = FigureLanguage.THAI,
        mime_type: str = "image/png",
        max_retries: Optional[int] = None
    ) -> OCRResponse:
        """
        Run OCR with retries and exponential backoff.

        Retry rules:
        - Client input and auth errors are raised immediately
        - Rate limits and every other provider failure are retried
        - Waits 2^attempt seconds between attempts (1s, 2s, 4s, ...)
        - After the last attempt the last error is raised

        Parameters:
        - max_retries: total attempts, defaults to settings.max_retries
        """

        attempts = max_retries if max_retries is not None else self.settings.max_retries
        if attempts < 1:
            raise ValueError("max_retries must be at least 1")

        attempt = 0
        while True:
            try:
                return await self.process(
                    image_base64,
                    mode=mode,
                    language=language,
                    mime_type=mime_type,
                )
            except OCRServiceError as error:
                if not error.retryable:
                    if isinstance(error, AuthError):
                        logger.error("OCR provider rejected credentials (%s)", error.provider_status)
                    raise

                logger.warning(
                    "OCR attempt %d/%d failed [%s]: %s",
                    attempt + 1, attempts, error.code, error.message
                )

                # Last attempt: surface this error
                if attempt >= attempts - 1:
                    raise

            delay = backoff_delay(attempt)
            logger.info("Retrying OCR in %.0fs", delay)
            await self._sleep(delay)
            attempt += 1

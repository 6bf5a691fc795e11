"""
ocr.py (API Route)

This file defines the OCR API endpoints for the MaxOCR service.

What this file does:
- Defines the /ocr/extract and /ocr/batch endpoints
- Takes the API key from server settings (never from the request)
- Calls TyphoonOCRService to extract text
- Maps classified OCR failures to HTTP status codes

What this file does NOT do:
- Build prompts or parse provider output
- Decide whether a failure is retried

Flow:
Client sends base64 image → This API → TyphoonOCRService → Typhoon → Return JSON
"""

import logging
import time
from typing import AsyncIterator

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from app.config import Settings, get_settings
from app.schemas.ocr import (
    BatchOCRRequest,
    BatchOCRResponse,
    BatchOCRResult,
    BatchOCRSummary,
    OCRErrorResponse,
    OCRRequest,
    OCRResponse,
)
from app.services.errors import OCRServiceError, missing_api_key, missing_image
from app.services.ocr import TyphoonOCRService

logger = logging.getLogger(__name__)

# Create a router for OCR-related endpoints
# This router will be registered in main.py
router = APIRouter()

ERROR_RESPONSES = {
    400: {"model": OCRErrorResponse, "description": "Image is missing"},
    401: {"model": OCRErrorResponse, "description": "Invalid API key"},
    429: {"model": OCRErrorResponse, "description": "Rate limit exceeded"},
    500: {"model": OCRErrorResponse, "description": "OCR failed or API key not configured"},
}

# Friendlier text for errors the client can act on
PUBLIC_MESSAGES = {
    "AUTH_ERROR": "Invalid API key",
    "RATE_LIMIT": "Rate limit exceeded. Please try again later.",
}


async def get_ocr_service(
    settings: Settings = Depends(get_settings),
) -> AsyncIterator[TyphoonOCRService]:
    """
    Dependency that creates one OCR service per request.
    Tests override this to plug in a mock transport.
    """

    service = TyphoonOCRService(settings)
    try:
        yield service
    finally:
        await service.close()


def error_response(error: OCRServiceError) -> JSONResponse:
    body = OCRErrorResponse(
        error=PUBLIC_MESSAGES.get(error.code, error.message),
        code=error.code,
    )
    return JSONResponse(status_code=error.status_code, content=body.model_dump())


@router.post(
    "/extract",
    response_model=OCRResponse,
    status_code=status.HTTP_200_OK,
    responses=ERROR_RESPONSES,
    summary="Extract text from a Thai document image",
    description=(
        "Send a base64 encoded image and get back the page as markdown. "
        "Modes: v1.5 (markdown), default and structure (JSON wrapped)."
    )
)
async def extract_text_from_image(
    body: OCRRequest,
    service: TyphoonOCRService = Depends(get_ocr_service),
    settings: Settings = Depends(get_settings),
):
    """
    OCR extraction endpoint.

    Errors:
    - 400 MISSING_IMAGE: image field empty
    - 401 AUTH_ERROR: provider rejected the API key
    - 429 RATE_LIMIT: provider kept throttling after all retries
    - 500 MISSING_API_KEY / OCR_ERROR: configuration or provider failure
    """

    try:
        if not body.image:
            raise missing_image()

        if not settings.typhoon_api_key:
            raise missing_api_key()

        return await service.process_with_retry(
            body.image,
            mode=body.mode,
            language=body.language,
            mime_type=body.mime_type,
        )

    except OCRServiceError as error:
        logger.error("OCR request failed [%s]: %s", error.code, error.message)
        return error_response(error)


@router.post(
    "/batch",
    response_model=BatchOCRResponse,
    status_code=status.HTTP_200_OK,
    responses={500: ERROR_RESPONSES[500]},
    summary="Extract text from several images",
    description=(
        "Files are processed one after another. A failing file is "
        "reported in its result entry and does not stop the batch."
    )
)
async def extract_text_batch(
    body: BatchOCRRequest,
    service: TyphoonOCRService = Depends(get_ocr_service),
    settings: Settings = Depends(get_settings),
):
    if not settings.typhoon_api_key:
        return error_response(missing_api_key())

    batch_start = time.perf_counter()
    results = []

    for file in body.files:
        try:
            response = await service.process_with_retry(
                file.content,
                mode=body.mode,
                language=body.language,
                mime_type=file.mime_type or "image/png",
            )
        except OCRServiceError as error:
            logger.warning("Batch file %s failed [%s]: %s", file.name, error.code, error.message)
            results.append(
                BatchOCRResult(
                    filename=file.name,
                    status="error",
                    error=error.message,
                    code=error.code,
                )
            )
            continue

        results.append(
            BatchOCRResult(
                filename=file.name,
                text=response.text,
                status="success",
                processing_time=response.metadata.processing_time,
            )
        )

    success = sum(1 for result in results if result.status == "success")

    return BatchOCRResponse(
        results=results,
        summary=BatchOCRSummary(
            total=len(results),
            success=success,
            failed=len(results) - success,
            processing_time=round((time.perf_counter() - batch_start) * 1000, 2),
        ),
    )

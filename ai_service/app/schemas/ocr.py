"""
ocr.py (Schemas)

This file defines the data structure (schemas) used for OCR-related APIs.

Purpose of this file:
- Define the recognition modes and figure languages
- Clearly define what data the OCR API accepts and returns
- Help FastAPI generate clean and user-friendly API documentation

This file does NOT:
- Call the OCR provider
- Build prompts or parse provider output
"""

from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class OCRMode(str, Enum):
    """
    Recognition modes supported by the Typhoon OCR endpoint.

    Each mode is bound to one model, one prompt and one
    repetition penalty (see app/services/prompts.py).
    """

    V1_5 = "v1.5"
    DEFAULT = "default"
    STRUCTURE = "structure"


class FigureLanguage(str, Enum):
    """Language used when describing figures inside the page."""

    THAI = "Thai"
    ENGLISH = "English"


class OCRRequest(BaseModel):
    """
    OCRRequest

    Body of POST /ocr/extract. The API key is never part of it.
    """

    image: str = Field(
        default="",
        description="Base64 encoded image (without the data: prefix)",
        example="iVBORw0KGgoAAAANSUhEUgAA..."
    )
    mode: OCRMode = Field(default=OCRMode.V1_5)
    language: FigureLanguage = Field(default=FigureLanguage.THAI)
    mime_type: str = Field(
        default="image/png",
        description="MIME type of the uploaded image",
        example="image/jpeg"
    )


class OCRMetadata(BaseModel):
    """
    Details about how a result was produced.
    """

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    processing_time: float = Field(
        ...,
        ge=0,
        description="Milliseconds from sending the request to having the decoded text"
    )
    mode: OCRMode
    provider: Literal["typhoon"] = "typhoon"
    model: str = Field(..., example="typhoon-ocr")


class OCRResponse(BaseModel):
    """
    OCRResponse

    Returned after successfully extracting text from an image.
    Immutable once created.
    """

    model_config = ConfigDict(frozen=True)

    text: str = Field(
        ...,
        description="Extracted text (markdown with inline HTML for tables and figures)",
        example="# ใบแจ้งหนี้\n\nเลขที่ 001"
    )
    metadata: OCRMetadata


class OCRErrorResponse(BaseModel):
    """Error body returned by the OCR endpoints."""

    error: str = Field(..., example="Rate limit exceeded. Please try again later.")
    code: str = Field(..., example="RATE_LIMIT")


class BatchOCRFile(BaseModel):
    """One image inside a batch request."""

    name: str = Field(..., min_length=1, example="page-01.png")
    content: str = Field(default="", description="Base64 encoded image")
    mime_type: Optional[str] = Field(default=None, example="image/png")


class BatchOCRRequest(BaseModel):
    """
    Body of POST /ocr/batch.

    All files share the same mode and figure language.
    """

    files: List[BatchOCRFile] = Field(..., min_length=1)
    mode: OCRMode = Field(default=OCRMode.V1_5)
    language: FigureLanguage = Field(default=FigureLanguage.THAI)


class BatchOCRResult(BaseModel):
    """Outcome for a single file in a batch."""

    filename: str
    text: str = ""
    status: Literal["success", "error"]
    error: Optional[str] = None
    code: Optional[str] = None
    processing_time: Optional[float] = None


class BatchOCRSummary(BaseModel):
    total: int
    success: int
    failed: int
    processing_time: float = Field(..., description="Milliseconds for the whole batch")


class BatchOCRResponse(BaseModel):
    results: List[BatchOCRResult]
    summary: BatchOCRSummary

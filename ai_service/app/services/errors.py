"""
errors.py

Typed failures raised by the OCR service.

Every failure carries a stable code, the HTTP status the API layer
should answer with, and whether the retry loop may try again.
The kind is decided once, where the provider call fails.
"""

from typing import Optional


class OCRServiceError(Exception):
    """
    Base class for all classified OCR failures.
    """

    code = "OCR_ERROR"
    status_code = 500
    retryable = False

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        provider_status: Optional[int] = None
    ):
        super().__init__(message)
        self.message = message
        # Status the provider answered with, if any
        self.provider_status = provider_status
        if status_code is not None:
            self.status_code = status_code

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, status_code={self.status_code}, message={self.message!r})"


class ClientInputError(OCRServiceError):
    """
    The caller sent something unusable (no image) or the server
    has no API key configured. Never retried.
    """

    def __init__(self, message: str, *, code: str = "MISSING_IMAGE", status_code: int = 400):
        super().__init__(message, status_code=status_code)
        self.code = code


class AuthError(OCRServiceError):
    """Provider rejected the credentials (401 / 403)."""

    code = "AUTH_ERROR"
    status_code = 401


class RateLimitError(OCRServiceError):
    """Provider is throttling us (429)."""

    code = "RATE_LIMIT"
    status_code = 429
    retryable = True


class TransientProviderError(OCRServiceError):
    """Any other provider or transport failure."""

    code = "OCR_ERROR"
    status_code = 500
    retryable = True


def missing_image() -> ClientInputError:
    return ClientInputError("Image is required", code="MISSING_IMAGE", status_code=400)


def missing_api_key() -> ClientInputError:
    return ClientInputError("API key not configured", code="MISSING_API_KEY", status_code=500)


def error_for_status(status: int, message: Optional[str]) -> OCRServiceError:
    """
    Map a provider HTTP status to the matching error type.

    Parameters:
    - status: HTTP status returned by the provider
    - message: provider error message, if the body carried one

    Returns:
    - classified OCRServiceError (not raised)
    """

    text = message or f"API Error: {status}"

    if status in (401, 403):
        return AuthError(text, provider_status=status)

    if status == 429:
        return RateLimitError(text, provider_status=status)

    return TransientProviderError(text, provider_status=status)

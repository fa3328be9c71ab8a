"""
Error taxonomy for media generation.

Every failure raised by this package derives from MediaGenerationError and
carries an ErrorClassification. Auth failures are detected first from the
structured status the service returns and then, as a fallback, from known
phrases in the error text. The phrases are service-specific and may change.
"""

import asyncio
from typing import Optional

import httpx
from google.genai import errors as genai_errors

from .models import ErrorClassification

# Error text the service has been observed to return for a bad or revoked key
AUTH_FAILURE_PATTERNS = (
    "API key not valid",
    "Requested entity was not found",
)

AUTH_FAILURE_STATUSES = ("UNAUTHENTICATED", "PERMISSION_DENIED")

AUTH_FAILURE_MESSAGE = "API Key validation failed. Please select a valid API key and try again."
UNKNOWN_ERROR_MESSAGE = "An unknown error occurred."


class MediaGenerationError(Exception):
    """Base class for all generation failures."""

    default_classification = ErrorClassification.UNKNOWN

    def __init__(self, message: str, classification: Optional[ErrorClassification] = None):
        self.classification = classification or self.default_classification
        super().__init__(message)

    @property
    def is_auth_failure(self) -> bool:
        return self.classification == ErrorClassification.AUTH_FAILURE


class ValidationError(MediaGenerationError):
    """Required input missing or malformed. Reported to the user as-is."""


class EncodingError(MediaGenerationError):
    """The reference file could not be read or encoded."""


class CredentialError(MediaGenerationError):
    """No usable API key is available."""

    default_classification = ErrorClassification.AUTH_FAILURE


class RemoteError(MediaGenerationError):
    """A call to the generation service failed."""

    @classmethod
    def from_exception(cls, error: BaseException, action: str) -> "RemoteError":
        text = str(error) or type(error).__name__
        return cls(f"{action} failed: {text}", classify_error(error))


class EmptyResultError(MediaGenerationError):
    """Image generation succeeded but returned no image."""


class MissingResultError(MediaGenerationError):
    """Video operation finished without a result URI."""


class FetchError(MediaGenerationError):
    """Downloading the finished artifact failed."""


class GenerationCancelled(MediaGenerationError):
    """The caller cancelled the workflow before it finished."""


def classify_error(error: BaseException) -> ErrorClassification:
    """
    Classify an exception raised by a remote call.

    Args:
        error: The exception to inspect

    Returns:
        AUTH_FAILURE, TRANSIENT or UNKNOWN
    """
    if isinstance(error, MediaGenerationError):
        return error.classification

    if isinstance(error, genai_errors.APIError):
        if error.status in AUTH_FAILURE_STATUSES or error.code == 401:
            return ErrorClassification.AUTH_FAILURE

    text = str(error)
    if any(pattern in text for pattern in AUTH_FAILURE_PATTERNS):
        return ErrorClassification.AUTH_FAILURE

    if isinstance(error, genai_errors.ServerError):
        return ErrorClassification.TRANSIENT
    if isinstance(error, genai_errors.APIError) and error.code == 429:
        return ErrorClassification.TRANSIENT
    if isinstance(error, (httpx.TransportError, asyncio.TimeoutError)):
        return ErrorClassification.TRANSIENT

    return ErrorClassification.UNKNOWN


def user_message(error: BaseException) -> str:
    """
    Message shown to the user for a failed run.

    Only a rejection from the service gets the generic key-validation text;
    the package's own errors (a missing key, for one) keep their message.
    """
    local = isinstance(error, MediaGenerationError) and not isinstance(error, RemoteError)
    if not local and classify_error(error) == ErrorClassification.AUTH_FAILURE:
        return AUTH_FAILURE_MESSAGE
    return str(error) or UNKNOWN_ERROR_MESSAGE

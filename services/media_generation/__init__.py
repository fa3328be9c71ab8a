"""
Media Generation Service

Prompt-to-media generation against the Gemini API:
- Image path: Imagen, single request/response
- Video path: Veo long-running operation, polled until done, then downloaded

Callers normally go through GenerationWorkflow, which never raises and
reports failures as classified ErrorOutcome values.
"""

from .client import GenerationClient
from .credentials import CredentialProvider, CredentialSession, EnvCredentialProvider
from .encoder import decode_media, encode_media, strip_data_uri
from .errors import (
    CredentialError,
    EmptyResultError,
    EncodingError,
    FetchError,
    GenerationCancelled,
    MediaGenerationError,
    MissingResultError,
    RemoteError,
    ValidationError,
    classify_error,
)
from .fetcher import ResultFetcher
from .models import (
    AspectRatio,
    EncodedMedia,
    ErrorClassification,
    ErrorOutcome,
    GenerationJob,
    GenerationMode,
    GenerationOutcome,
    GenerationRequest,
    GenerationResult,
    GenerationStatus,
)
from .progress import LOADING_MESSAGES, ProgressTicker
from .workflow import GenerationWorkflow

__all__ = [
    # Workflow
    "GenerationWorkflow",
    # Components
    "GenerationClient",
    "ResultFetcher",
    "ProgressTicker",
    "LOADING_MESSAGES",
    # Credentials
    "CredentialProvider",
    "CredentialSession",
    "EnvCredentialProvider",
    # Encoding
    "encode_media",
    "decode_media",
    "strip_data_uri",
    # Models
    "AspectRatio",
    "EncodedMedia",
    "ErrorClassification",
    "ErrorOutcome",
    "GenerationJob",
    "GenerationMode",
    "GenerationOutcome",
    "GenerationRequest",
    "GenerationResult",
    "GenerationStatus",
    # Errors
    "MediaGenerationError",
    "ValidationError",
    "EncodingError",
    "CredentialError",
    "RemoteError",
    "EmptyResultError",
    "MissingResultError",
    "FetchError",
    "GenerationCancelled",
    "classify_error",
]

"""
Error classification tests.

Run with:
    python -m pytest tests/test_errors.py -v
"""

import asyncio
import os
import sys

import httpx
from google.genai import errors as genai_errors

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from services.media_generation.errors import (
    AUTH_FAILURE_MESSAGE,
    CredentialError,
    EncodingError,
    RemoteError,
    classify_error,
    user_message,
)
from services.media_generation.models import ErrorClassification


def api_error(cls, code, status, message):
    return cls(code, {"error": {"code": code, "status": status, "message": message}})


class TestClassifyError:
    """classify_error"""

    def test_invalid_key_text(self):
        error = api_error(
            genai_errors.ClientError, 400, "INVALID_ARGUMENT",
            "API key not valid. Please pass a valid API key.",
        )
        assert classify_error(error) == ErrorClassification.AUTH_FAILURE

    def test_entity_not_found_text(self):
        error = Exception("Requested entity was not found.")
        assert classify_error(error) == ErrorClassification.AUTH_FAILURE

    def test_structured_unauthenticated_status(self):
        error = api_error(genai_errors.ClientError, 401, "UNAUTHENTICATED", "Request had invalid credentials")
        assert classify_error(error) == ErrorClassification.AUTH_FAILURE

    def test_permission_denied_status(self):
        error = api_error(genai_errors.ClientError, 403, "PERMISSION_DENIED", "Caller lacks permission")
        assert classify_error(error) == ErrorClassification.AUTH_FAILURE

    def test_server_error_is_transient(self):
        error = api_error(genai_errors.ServerError, 503, "UNAVAILABLE", "The model is overloaded")
        assert classify_error(error) == ErrorClassification.TRANSIENT

    def test_rate_limit_is_transient(self):
        error = api_error(genai_errors.ClientError, 429, "RESOURCE_EXHAUSTED", "Quota exceeded")
        assert classify_error(error) == ErrorClassification.TRANSIENT

    def test_network_errors_are_transient(self):
        assert classify_error(httpx.ReadTimeout("timed out")) == ErrorClassification.TRANSIENT
        assert classify_error(asyncio.TimeoutError()) == ErrorClassification.TRANSIENT

    def test_other_errors_are_unknown(self):
        assert classify_error(ValueError("bad prompt")) == ErrorClassification.UNKNOWN

    def test_own_errors_keep_their_classification(self):
        assert classify_error(CredentialError("no key")) == ErrorClassification.AUTH_FAILURE
        assert classify_error(EncodingError("unreadable")) == ErrorClassification.UNKNOWN


class TestRemoteError:
    """RemoteError.from_exception"""

    def test_wraps_and_classifies(self):
        error = RemoteError.from_exception(Exception("Requested entity was not found."), "Video submission")

        assert error.is_auth_failure
        assert str(error).startswith("Video submission failed:")

    def test_empty_message_uses_type_name(self):
        error = RemoteError.from_exception(ConnectionError(), "Image generation")
        assert "ConnectionError" in str(error)


class TestUserMessage:
    """user_message"""

    def test_auth_failure_message(self):
        error = RemoteError.from_exception(Exception("API key not valid"), "Image generation")
        assert user_message(error) == AUTH_FAILURE_MESSAGE

    def test_missing_key_keeps_its_message(self):
        error = CredentialError("No API key selected. Please select an API key.")
        assert user_message(error) == "No API key selected. Please select an API key."

    def test_plain_message(self):
        assert user_message(ValueError("Something broke")) == "Something broke"

    def test_blank_message(self):
        assert user_message(ValueError()) == "An unknown error occurred."

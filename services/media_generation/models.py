"""
Data model for image and video generation.

Requests and results are pydantic models so invalid input is rejected at
construction time; the in-flight video job is a frozen dataclass rebuilt
from every status response.
"""

import base64
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Optional

import aiofiles
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

logger = logging.getLogger(__name__)


class AspectRatio(str, Enum):
    """Aspect ratios accepted by the generation service."""
    SQUARE = "1:1"
    PORTRAIT = "9:16"
    LANDSCAPE = "16:9"


class GenerationMode(str, Enum):
    """What the user asked for."""
    IMAGE = "image"
    VIDEO = "video"


class GenerationStatus(str, Enum):
    """Terminal status of a workflow run."""
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class ErrorClassification(str, Enum):
    """Coarse classification attached to every failure."""
    TRANSIENT = "transient"
    AUTH_FAILURE = "auth_failure"
    UNKNOWN = "unknown"


# Aspect ratios each mode may request
ALLOWED_ASPECT_RATIOS = {
    GenerationMode.IMAGE: (AspectRatio.SQUARE,),
    GenerationMode.VIDEO: (AspectRatio.PORTRAIT, AspectRatio.LANDSCAPE),
}

DEFAULT_FILENAMES = {
    GenerationMode.IMAGE: "generated-image.png",
    GenerationMode.VIDEO: "generated-video.mp4",
}


class EncodedMedia(BaseModel):
    """Base64 payload ready for JSON transport, without any data-URI prefix."""

    model_config = ConfigDict(frozen=True)

    data: str
    mime_type: str

    @field_validator("data")
    @classmethod
    def _reject_data_uri(cls, value: str) -> str:
        if value.startswith("data:"):
            raise ValueError("data must not carry a data-URI prefix")
        return value

    def to_bytes(self) -> bytes:
        """Decode back to the original bytes."""
        return base64.b64decode(self.data, validate=True)

    @property
    def size_bytes(self) -> int:
        """Decoded payload size, computed without decoding."""
        padding = self.data[-2:].count("=")
        return (len(self.data) * 3) // 4 - padding


class GenerationRequest(BaseModel):
    """A single prompt submission. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    prompt: str
    mode: GenerationMode
    aspect_ratio: AspectRatio
    reference_image: Optional[EncodedMedia] = None
    resolution: Optional[str] = None

    @field_validator("prompt")
    @classmethod
    def _prompt_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("prompt must not be empty")
        return value

    @model_validator(mode="after")
    def _check_mode_constraints(self) -> "GenerationRequest":
        allowed = ALLOWED_ASPECT_RATIOS[self.mode]
        if self.aspect_ratio not in allowed:
            choices = ", ".join(r.value for r in allowed)
            raise ValueError(
                f"aspect ratio {self.aspect_ratio.value} not supported for "
                f"{self.mode.value} generation (expected one of: {choices})"
            )

        if self.mode == GenerationMode.VIDEO:
            if self.reference_image is None:
                raise ValueError("video generation requires a reference image")
            if not self.resolution:
                raise ValueError("video generation requires a resolution")
        elif self.resolution is not None:
            raise ValueError("resolution only applies to video generation")

        return self


@dataclass(frozen=True)
class GenerationJob:
    """
    Snapshot of an asynchronous video operation.

    A new snapshot replaces the previous one after every status call; fields
    are never merged across responses.
    """
    name: str
    done: bool
    video_uri: Optional[str] = None
    error_message: Optional[str] = None
    operation: Any = None  # opaque SDK handle, sent back verbatim on refresh

    @classmethod
    def from_operation(cls, operation: Any) -> "GenerationJob":
        """Build a snapshot from a generate-videos operation response."""
        video_uri = None
        response = getattr(operation, "response", None)
        generated = getattr(response, "generated_videos", None) if response else None
        if generated:
            video = getattr(generated[0], "video", None)
            video_uri = getattr(video, "uri", None) if video else None

        error = getattr(operation, "error", None)
        error_message = None
        if error:
            error_message = error.get("message") if isinstance(error, dict) else str(error)

        return cls(
            name=getattr(operation, "name", None) or "",
            done=bool(getattr(operation, "done", False)),
            video_uri=video_uri,
            error_message=error_message,
            operation=operation,
        )


class GenerationResult(BaseModel):
    """The artifact handed back to the caller."""

    kind: GenerationMode
    mime_type: str
    data: Optional[bytes] = Field(default=None, repr=False)
    uri: Optional[str] = None

    @model_validator(mode="after")
    def _has_payload(self) -> "GenerationResult":
        if self.data is None and not self.uri:
            raise ValueError("result needs either a binary payload or a URI")
        return self

    def to_data_uri(self) -> str:
        """Render the payload as a displayable data URI."""
        if self.data is None:
            raise ValueError("result has no inline payload")
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"

    async def save(self, output_dir: str = "output", filename: Optional[str] = None) -> str:
        """
        Write the payload to local storage.

        Args:
            output_dir: Directory to write into (created if missing)
            filename: Custom filename (defaults by kind)

        Returns:
            Path of the written file
        """
        if self.data is None:
            raise ValueError("result has no inline payload")

        base_dir = Path(output_dir)
        base_dir.mkdir(parents=True, exist_ok=True)
        output_path = base_dir / (filename or DEFAULT_FILENAMES[self.kind])

        async with aiofiles.open(output_path, "wb") as f:
            await f.write(self.data)

        logger.info(f"Saved {self.kind.value}: {output_path} ({len(self.data) / 1024:.1f} KB)")
        return str(output_path)


@dataclass
class ErrorOutcome:
    """User-facing description of a failed run."""
    message: str
    classification: ErrorClassification
    error: Optional[BaseException] = None


@dataclass
class GenerationOutcome:
    """What a workflow run ends with: a result, or a classified error."""
    status: GenerationStatus
    result: Optional[GenerationResult] = None
    error: Optional[ErrorOutcome] = None

    @property
    def succeeded(self) -> bool:
        return self.status == GenerationStatus.COMPLETED and self.result is not None

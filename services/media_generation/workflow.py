"""
Generation Workflow

The boundary the presentation layer calls. It validates input, runs the
client and fetcher, and turns every failure into an ErrorOutcome instead of
raising. When the service rejects the key, the credential-invalid callback
fires once so the host can re-run key selection.
"""

import asyncio
import logging
from typing import Callable, Dict, Optional

from pydantic import ValidationError as PydanticValidationError

from core.config import Config, get_config

from .client import GenerationClient
from .credentials import CredentialProvider
from .encoder import MediaSource, encode_media
from .errors import (
    CredentialError,
    GenerationCancelled,
    ValidationError,
    classify_error,
    user_message,
)
from .fetcher import ResultFetcher
from .models import (
    AspectRatio,
    EncodedMedia,
    ErrorClassification,
    ErrorOutcome,
    GenerationMode,
    GenerationOutcome,
    GenerationRequest,
    GenerationResult,
    GenerationStatus,
)
from .progress import ProgressTicker

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str], GenerationClient]


class GenerationWorkflow:
    """
    Runs one image or video generation from raw user input to result.

    Usage:
        async with GenerationWorkflow(
            EnvCredentialProvider(),
            on_credential_invalid=session.invalidate,
            on_progress=print,
        ) as workflow:
            outcome = await workflow.generate_video("A frappe ad", "frappe.png")

        if outcome.succeeded:
            await outcome.result.save()
        else:
            print(outcome.error.message)
    """

    def __init__(
        self,
        credentials: CredentialProvider,
        config: Optional[Config] = None,
        client_factory: Optional[ClientFactory] = None,
        fetcher: Optional[ResultFetcher] = None,
        on_credential_invalid: Optional[Callable[[], None]] = None,
        on_progress: Optional[Callable[[str], None]] = None,
    ):
        """
        Args:
            credentials: Host capability that supplies the API key
            config: Optional config override
            client_factory: Builds a GenerationClient from an API key
            fetcher: Downloader for finished videos
            on_credential_invalid: Called when the service rejects the key
            on_progress: Receives human-readable progress messages
        """
        self.credentials = credentials
        self.config = config or get_config()
        self.client_factory = client_factory or (
            lambda api_key: GenerationClient(api_key, config=self.config)
        )
        self._owns_fetcher = fetcher is None
        self.fetcher = fetcher or ResultFetcher(
            timeout=self.config.generation.fetch_timeout_seconds
        )
        self._clients: Dict[str, GenerationClient] = {}
        self.on_credential_invalid = on_credential_invalid
        self.on_progress = on_progress

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        """Release the download client if this workflow created it."""
        self._clients.clear()
        if self._owns_fetcher:
            await self.fetcher.close()

    def _client_for(self, api_key: str) -> GenerationClient:
        """One client per API key, reused across runs."""
        client = self._clients.get(api_key)
        if client is None:
            client = self.client_factory(api_key)
            self._clients[api_key] = client
        return client

    async def generate_image(
        self,
        prompt: str,
        aspect_ratio: Optional[AspectRatio] = None,
    ) -> GenerationOutcome:
        """Generate one image from a prompt."""
        if not prompt or not prompt.strip():
            return self._failed(ValidationError("Please provide a prompt."))

        try:
            request = self._build_request(
                prompt=prompt,
                mode=GenerationMode.IMAGE,
                aspect_ratio=aspect_ratio or self.config.generation.default_image_aspect_ratio,
            )
            self._emit_progress("Creating your image...")
            api_key = await self._resolve_api_key()
            client = self._client_for(api_key)
            result = await client.generate_image(request)
        except Exception as e:
            return self._failed(e)

        logger.info("Image workflow completed")
        return GenerationOutcome(status=GenerationStatus.COMPLETED, result=result)

    async def generate_video(
        self,
        prompt: str,
        reference_image: Optional[MediaSource],
        aspect_ratio: Optional[AspectRatio] = None,
        mime_type: Optional[str] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> GenerationOutcome:
        """
        Generate a video from a prompt and a reference image.

        Args:
            prompt: Description of the ad
            reference_image: EncodedMedia, path, bytes, binary file or data URI
            aspect_ratio: 9:16 or 16:9 (config default when omitted)
            mime_type: Override for the reference image's mime type
            cancel_event: Set it to abandon the run while polling

        Returns:
            GenerationOutcome holding the downloaded video or the error
        """
        if reference_image is None or not prompt or not prompt.strip():
            return self._failed(ValidationError("Please upload an image and provide a prompt."))

        try:
            async with ProgressTicker(
                self.on_progress,
                interval=self.config.generation.progress_interval_seconds,
            ):
                result = await self._run_video(
                    prompt, reference_image, aspect_ratio, mime_type, cancel_event
                )
        except Exception as e:
            return self._failed(e)

        logger.info("Video workflow completed")
        return GenerationOutcome(status=GenerationStatus.COMPLETED, result=result)

    async def _run_video(
        self,
        prompt: str,
        reference_image: MediaSource,
        aspect_ratio: Optional[AspectRatio],
        mime_type: Optional[str],
        cancel_event: Optional[asyncio.Event],
    ) -> GenerationResult:
        encoded = await encode_media(reference_image, mime_type)
        self._check_reference(encoded)

        request = self._build_request(
            prompt=prompt,
            mode=GenerationMode.VIDEO,
            aspect_ratio=aspect_ratio or self.config.generation.default_video_aspect_ratio,
            reference_image=encoded,
            resolution=self.config.generation.video_resolution,
        )

        api_key = await self._resolve_api_key()
        client = self._client_for(api_key)
        job = await client.generate_video(request, cancel_event)

        data = await self.fetcher.fetch(job.video_uri, api_key)
        return GenerationResult(
            kind=GenerationMode.VIDEO,
            mime_type=self.config.generation.video_mime_type,
            data=data,
            uri=job.video_uri,
        )

    def _check_reference(self, encoded: EncodedMedia):
        if not encoded.mime_type.startswith("image/"):
            raise ValidationError(
                f"Reference must be an image, got {encoded.mime_type}."
            )
        limit = self.config.generation.max_reference_bytes
        if encoded.size_bytes > limit:
            raise ValidationError(
                f"Reference image is too large ({encoded.size_bytes / 1024 / 1024:.1f} MB, "
                f"limit {limit / 1024 / 1024:.0f} MB)."
            )

    @staticmethod
    def _build_request(**fields) -> GenerationRequest:
        try:
            return GenerationRequest(**fields)
        except PydanticValidationError as e:
            reasons = "; ".join(err["msg"] for err in e.errors())
            raise ValidationError(f"Invalid generation request: {reasons}") from e

    async def _resolve_api_key(self) -> str:
        if not await self.credentials.has_selected_key():
            raise CredentialError("No API key selected. Please select an API key.")
        return await self.credentials.get_api_key()

    def _emit_progress(self, message: str):
        """Emit progress update via callback."""
        if self.on_progress:
            try:
                self.on_progress(message)
            except Exception as e:
                logger.warning(f"Progress callback failed: {e}")

    def _failed(self, error: Exception) -> GenerationOutcome:
        """Convert an exception into a terminal outcome."""
        classification = classify_error(error)

        if isinstance(error, GenerationCancelled):
            logger.info("Generation cancelled by caller")
            status = GenerationStatus.CANCELLED
        else:
            logger.error(f"Generation failed: {type(error).__name__}: {error}")
            status = GenerationStatus.FAILED

        if classification == ErrorClassification.AUTH_FAILURE:
            self._notify_credential_invalid()

        return GenerationOutcome(
            status=status,
            error=ErrorOutcome(
                message=user_message(error),
                classification=classification,
                error=error,
            ),
        )

    def _notify_credential_invalid(self):
        if self.on_credential_invalid:
            try:
                self.on_credential_invalid()
            except Exception as e:
                logger.warning(f"Credential-invalid callback failed: {e}")

"""
Generation Client

Single interface to the remote generation service:
- Image: one request/response round trip (Imagen)
- Video: long-running operation submitted, then polled until done (Veo)

Remote failures surface as RemoteError with an auth/transient/unknown
classification. Nothing is retried.
"""

import asyncio
import logging
from typing import Any, Optional

from google import genai
from google.genai import types

from core.config import Config, get_config

from .encoder import decode_media
from .errors import (
    EmptyResultError,
    GenerationCancelled,
    MissingResultError,
    RemoteError,
)
from .models import (
    GenerationJob,
    GenerationMode,
    GenerationRequest,
    GenerationResult,
)

logger = logging.getLogger(__name__)


class GenerationClient:
    """
    Client for image and video generation.

    Usage:
        client = GenerationClient(api_key)

        # Image (synchronous-style)
        result = await client.generate_image(request)

        # Video (submit + poll)
        job = await client.generate_video(request)
        print(job.video_uri)
    """

    def __init__(
        self,
        api_key: str,
        config: Optional[Config] = None,
        genai_client: Optional[Any] = None,
    ):
        """
        Initialize the generation client.

        Args:
            api_key: Credential sent with every remote call
            config: Optional config override
            genai_client: Pre-built SDK client (tests inject a mock here)
        """
        self.config = config or get_config()
        self._client = genai_client or genai.Client(api_key=api_key)

    async def generate_image(self, request: GenerationRequest) -> GenerationResult:
        """
        Generate a single image.

        Raises:
            RemoteError: The service call failed
            EmptyResultError: The call succeeded without an image
        """
        if request.mode != GenerationMode.IMAGE:
            raise ValueError(f"Expected an image request, got {request.mode.value}")

        gen = self.config.generation
        logger.info(
            f"Image request: model={self.config.models.image_model}, "
            f"aspect_ratio={request.aspect_ratio.value}, prompt={request.prompt[:50]}..."
        )

        try:
            response = await self._client.aio.models.generate_images(
                model=self.config.models.image_model,
                prompt=request.prompt,
                config=types.GenerateImagesConfig(
                    number_of_images=gen.number_of_images,
                    output_mime_type=gen.image_output_mime_type,
                    aspect_ratio=request.aspect_ratio.value,
                ),
            )
        except Exception as e:
            logger.error(f"Image generation failed: {type(e).__name__}: {e}")
            raise RemoteError.from_exception(e, "Image generation") from e

        generated = getattr(response, "generated_images", None) or []
        image = generated[0].image if generated else None
        if image is None or not image.image_bytes:
            raise EmptyResultError("Image generation failed to produce an image.")

        logger.info(f"Image generated ({len(image.image_bytes) / 1024:.1f} KB)")
        return GenerationResult(
            kind=GenerationMode.IMAGE,
            mime_type=gen.image_output_mime_type,
            data=image.image_bytes,
        )

    async def submit_video(self, request: GenerationRequest) -> GenerationJob:
        """Submit a video generation operation and return its first snapshot."""
        if request.mode != GenerationMode.VIDEO:
            raise ValueError(f"Expected a video request, got {request.mode.value}")

        gen = self.config.generation
        reference = request.reference_image
        logger.info(
            f"Video request: model={self.config.models.video_model}, "
            f"aspect_ratio={request.aspect_ratio.value}, resolution={request.resolution}, "
            f"prompt={request.prompt[:50]}..."
        )

        image = types.Image(
            image_bytes=decode_media(reference),
            mime_type=reference.mime_type,
        )

        try:
            operation = await self._client.aio.models.generate_videos(
                model=self.config.models.video_model,
                prompt=request.prompt,
                image=image,
                config=types.GenerateVideosConfig(
                    number_of_videos=gen.number_of_videos,
                    resolution=request.resolution,
                    aspect_ratio=request.aspect_ratio.value,
                ),
            )
        except Exception as e:
            logger.error(f"Video submission failed: {type(e).__name__}: {e}")
            raise RemoteError.from_exception(e, "Video submission") from e

        job = GenerationJob.from_operation(operation)
        logger.info(f"Video operation created: {job.name} (done={job.done})")
        return job

    async def refresh_job(self, job: GenerationJob) -> GenerationJob:
        """Query the service for the latest state of a job."""
        try:
            operation = await self._client.aio.operations.get(job.operation)
        except Exception as e:
            logger.error(f"Polling {job.name} failed: {type(e).__name__}: {e}")
            raise RemoteError.from_exception(e, "Video status check") from e

        return GenerationJob.from_operation(operation)

    async def wait_for_video(
        self,
        job: GenerationJob,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> GenerationJob:
        """
        Poll a video job until the service reports it done.

        There is no poll limit; the loop ends when the job is done, a status
        call raises, or cancel_event is set.

        Args:
            job: Snapshot returned by submit_video
            cancel_event: Set it to stop waiting

        Returns:
            The terminal snapshot
        """
        poll_interval = self.config.generation.poll_interval_seconds
        polls = 0

        while not job.done:
            await self._sleep_unless_cancelled(poll_interval, cancel_event)

            polls += 1
            job = await self.refresh_job(job)
            logger.info(f"Poll {polls} for {job.name}: done={job.done}")

        return job

    async def generate_video(
        self,
        request: GenerationRequest,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> GenerationJob:
        """
        Submit a video request and wait for its result URI.

        Raises:
            RemoteError: Submission or a status call failed
            MissingResultError: The operation finished without a video
            GenerationCancelled: cancel_event was set while waiting
        """
        job = await self.submit_video(request)
        job = await self.wait_for_video(job, cancel_event)

        if not job.video_uri:
            message = "Video generation completed, but no download link was found."
            if job.error_message:
                message = f"{message} Service reported: {job.error_message}"
            raise MissingResultError(message)

        logger.info(f"Video ready: {job.name}")
        return job

    @staticmethod
    async def _sleep_unless_cancelled(
        seconds: float,
        cancel_event: Optional[asyncio.Event],
    ):
        """Sleep for the poll interval, waking early if cancellation is requested."""
        if cancel_event is None:
            await asyncio.sleep(seconds)
            return

        if cancel_event.is_set():
            raise GenerationCancelled("Video generation was cancelled.")

        try:
            await asyncio.wait_for(cancel_event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return

        raise GenerationCancelled("Video generation was cancelled.")

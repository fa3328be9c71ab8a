"""
Progress feedback while a video renders.

Cycles through a fixed list of friendly messages on its own timer. It has no
link to the poll loop; it only exists so the user sees something change.
"""

import asyncio
import logging
from typing import Callable, Optional, Sequence

logger = logging.getLogger(__name__)

LOADING_MESSAGES = (
    "Warming up the virtual cameras...",
    "Adjusting the lighting and focus...",
    "Directing the digital actors...",
    "Compositing the scenes...",
    "Rendering the final cut...",
    "Adding special effects...",
    "This might take a few minutes, great art takes time!",
)


class ProgressTicker:
    """
    Periodic message emitter, scoped to an `async with` block.

    Usage:
        async with ProgressTicker(print):
            await client.generate_video(request)

    The background task is cancelled when the block exits, whether it
    returns, raises, or is itself cancelled.
    """

    def __init__(
        self,
        on_message: Optional[Callable[[str], None]],
        messages: Sequence[str] = LOADING_MESSAGES,
        interval: float = 5.0,
    ):
        if not messages:
            raise ValueError("messages must not be empty")
        self.on_message = on_message
        self.messages = tuple(messages)
        self.interval = interval
        self._index = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def _emit(self, message: str):
        """Emit a message via callback."""
        if self.on_message:
            try:
                self.on_message(message)
            except Exception as e:
                logger.warning(f"Progress callback failed: {e}")

    async def _run(self):
        while True:
            await asyncio.sleep(self.interval)
            self._index = (self._index + 1) % len(self.messages)
            self._emit(self.messages[self._index])

    async def start(self):
        if self.running:
            return
        self._index = 0
        self._emit(self.messages[0])
        self._task = asyncio.create_task(self._run())

    async def stop(self):
        if self._task is None:
            return
        task, self._task = self._task, None
        task.cancel()
        # child cancellation is collected, not raised; ours still propagates
        await asyncio.gather(task, return_exceptions=True)

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.stop()
        return False

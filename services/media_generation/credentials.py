"""
Credential handshake

The generation workflow never stores keys itself. It is handed a
CredentialProvider, which a host environment implements (for example a
hosted notebook with its own key picker). EnvCredentialProvider covers the
plain case where the key comes from the environment.
"""

import logging
from typing import Optional, Protocol, runtime_checkable

from core.config import Config, get_config

from .errors import CredentialError

logger = logging.getLogger(__name__)


@runtime_checkable
class CredentialProvider(Protocol):
    """Capability set a host exposes for API key selection."""

    async def has_selected_key(self) -> bool:
        ...

    async def open_key_selection(self) -> None:
        """Show the host's key picker. Raises if it cannot be opened."""
        ...

    async def get_api_key(self) -> str:
        ...


class EnvCredentialProvider:
    """Reads the key from configuration; there is no interactive picker."""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or get_config()

    async def has_selected_key(self) -> bool:
        return bool(self.config.api.api_key)

    async def open_key_selection(self) -> None:
        raise CredentialError("API key selection is not available in this environment.")

    async def get_api_key(self) -> str:
        if not self.config.api.api_key:
            raise CredentialError("No API key configured. Set GEMINI_API_KEY or API_KEY.")
        return self.config.api.api_key


class CredentialSession:
    """
    Tracks whether a usable key has been selected.

    Usage:
        session = CredentialSession(provider)
        if not await session.check():
            await session.select_key()

        workflow = GenerationWorkflow(
            provider,
            on_credential_invalid=session.invalidate,
        )
    """

    def __init__(self, provider: CredentialProvider):
        self.provider = provider
        self.has_key = False
        self.checked = False

    async def check(self) -> bool:
        """Ask the provider whether a key is selected."""
        self.has_key = await self.provider.has_selected_key()
        self.checked = True
        return self.has_key

    async def select_key(self) -> bool:
        """
        Open the provider's key picker.

        A picker that returns without raising is treated as a successful
        selection; the provider is not asked again until the next check().
        """
        try:
            await self.provider.open_key_selection()
        except Exception as e:
            logger.error(f"Error opening API key selection: {e}")
            return False

        self.has_key = True
        self.checked = True
        return True

    def invalidate(self):
        """Mark the current key as rejected by the service."""
        logger.warning("API key rejected by the service; key selection required")
        self.has_key = False
        self.checked = True

    async def ensure_ready(self) -> str:
        """Return a usable key, opening the picker if none is selected."""
        if not self.checked:
            await self.check()
        if not self.has_key and not await self.select_key():
            raise CredentialError("An API key must be selected before generating.")
        return await self.provider.get_api_key()

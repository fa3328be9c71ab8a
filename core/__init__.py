"""
AI Ad Generator Core Components

Provides foundational infrastructure shared by the generation services:
- Configuration (credential, model ids, generation defaults)
"""

from .config import Config, get_config, reload_config

__all__ = ["Config", "get_config", "reload_config"]

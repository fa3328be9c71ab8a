"""
Configuration management for the AI Ad Generator.

Centralizes all configuration including:
- The API credential supplied by the host environment
- Model selections for image and video generation
- Generation defaults (output format, resolution, polling cadence)
"""

import os
from dataclasses import dataclass, field
from typing import Optional


def _credential_from_env() -> str:
    # GEMINI_API_KEY takes precedence; API_KEY is what hosted environments inject
    return os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY", "")


@dataclass
class APIConfig:
    """Credential for the generation service."""
    api_key: str = field(default_factory=_credential_from_env)


@dataclass
class ModelConfig:
    """Model selection configuration."""
    image_model: str = "imagen-4.0-generate-001"
    video_model: str = "veo-3.1-fast-generate-preview"


@dataclass
class GenerationConfig:
    """Defaults applied to every generation request."""

    # Image path
    image_output_mime_type: str = "image/png"
    number_of_images: int = 1
    default_image_aspect_ratio: str = "1:1"

    # Video path
    video_resolution: str = "720p"
    video_mime_type: str = "video/mp4"
    number_of_videos: int = 1
    default_video_aspect_ratio: str = "9:16"

    # Polling / feedback cadence (seconds)
    poll_interval_seconds: float = 10.0
    progress_interval_seconds: float = 5.0

    # Result download
    fetch_timeout_seconds: float = 300.0  # videos can be tens of MB

    # Reference uploads (PNG, JPG, GIF up to 10MB)
    max_reference_bytes: int = 10 * 1024 * 1024


@dataclass
class Config:
    """Main configuration class."""

    api: APIConfig = field(default_factory=APIConfig)
    models: ModelConfig = field(default_factory=ModelConfig)
    generation: GenerationConfig = field(default_factory=GenerationConfig)

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        return cls()

    def validate(self) -> list[str]:
        """Validate configuration and return list of issues."""
        issues = []

        if not self.api.api_key:
            issues.append("No API key configured (GEMINI_API_KEY or API_KEY required)")

        if self.generation.poll_interval_seconds < 0:
            issues.append("poll_interval_seconds must not be negative")

        if self.generation.progress_interval_seconds <= 0:
            issues.append("progress_interval_seconds must be positive")

        if self.generation.number_of_images != 1 or self.generation.number_of_videos != 1:
            issues.append("Only single-output generation is supported")

        return issues


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def reload_config():
    """Reload configuration from environment."""
    global _config
    _config = Config.from_env()

"""
AI Ad Generator Services

- media_generation: image and video generation workflow against the Gemini API
"""

from .media_generation import (
    GenerationWorkflow,
    GenerationClient,
    GenerationOutcome,
    GenerationResult,
)

__all__ = [
    "GenerationWorkflow",
    "GenerationClient",
    "GenerationOutcome",
    "GenerationResult",
]

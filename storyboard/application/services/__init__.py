"""Service orchestrators."""

from .image_service import ChunkImageOutcome, ImageService
from .script_service import ScriptService

__all__ = [
    "ChunkImageOutcome",
    "ImageService",
    "ScriptService",
]

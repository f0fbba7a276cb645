"""
Script domain models and schemas.

Request/response schemas for scripts, chunks and single-chunk image
generation.

Dependencies: pydantic, storyboard.boundary.db.models
System role: Script API contracts
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from storyboard.boundary.db.models.script_model import ChunkModel, ScriptModel
from storyboard.models.job import BatchGenerateRequest


class ChunkCreate(BaseModel):
    """One pre-chunked segment of a new script."""

    chunk_id: str = Field(min_length=1, max_length=100, description="Stable chunk key")
    content: str = Field(min_length=1, description="Narration text")
    start_time: float = Field(default=0.0, ge=0)
    end_time: float = Field(default=0.0, ge=0)
    topic: str | None = None


class CreateScriptRequest(BaseModel):
    """Request schema for storing an already-chunked script."""

    title: str = Field(min_length=1, max_length=255)
    original_script: str = Field(min_length=1)
    chunks: list[ChunkCreate] = Field(default_factory=list)


class ChunkResponse(BaseModel):
    """Chunk with its generated assets."""

    chunk_id: str
    position: int
    content: str
    start_time: float
    end_time: float
    topic: str | None = None
    image_url: str | None = None
    secondary_image_url: str | None = None
    scene_description: str | None = None
    symbol_description: str | None = None
    image_provider: str | None = None
    image_generated_at: datetime | None = None

    @classmethod
    def from_model(cls, chunk: ChunkModel) -> "ChunkResponse":
        return cls(
            chunk_id=chunk.chunk_id,
            position=chunk.position,
            content=chunk.content,
            start_time=chunk.start_time,
            end_time=chunk.end_time,
            topic=chunk.topic,
            image_url=chunk.image_url,
            secondary_image_url=chunk.secondary_image_url,
            scene_description=chunk.scene_description,
            symbol_description=chunk.symbol_description,
            image_provider=chunk.image_provider,
            image_generated_at=chunk.image_generated_at,
        )


class ScriptResponse(BaseModel):
    """Script with ordered chunks."""

    id: uuid.UUID
    title: str
    original_script: str
    created_at: datetime
    updated_at: datetime
    chunks: list[ChunkResponse]

    @classmethod
    def from_model(cls, script: ScriptModel) -> "ScriptResponse":
        return cls(
            id=script.id,
            title=script.title,
            original_script=script.original_script,
            created_at=script.created_at,
            updated_at=script.updated_at,
            chunks=[ChunkResponse.from_model(chunk) for chunk in script.chunks],
        )


class GenerateChunkImageRequest(BatchGenerateRequest):
    """Request schema for generating one chunk's image; same fields as batch."""


class GenerateChunkImageResponse(BaseModel):
    """Response schema for single-chunk image generation."""

    message: str = "Image generated successfully"
    image_url: str
    secondary_image_url: str | None = None
    chunk: ChunkResponse

"""
Script service orchestrator.

Coordinates script storage, progress inspection and single-chunk image
generation for the HTTP layer.

Dependencies: storyboard.boundary.db.CRUD, storyboard.application.services.image_service
System role: Script use case orchestration
"""

import logging
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from storyboard.application.services.image_service import ChunkImageOutcome, ImageService
from storyboard.boundary.db.CRUD.script_crud import script_crud
from storyboard.boundary.db.models.script_model import ChunkModel, ScriptModel
from storyboard.boundary.image_providers.base import GenerationConfig
from storyboard.core.exceptions import (
    ChunkMissingError,
    PersistenceFailureError,
    SubjectNotFoundError,
)

logger = logging.getLogger(__name__)


class ScriptService:
    """Script service orchestrator."""

    def __init__(self, db: AsyncSession, image_service: ImageService) -> None:
        """
        Initialize script service.

        Args:
            db: Async SQLAlchemy session
            image_service: Image generation use case
        """
        self.db = db
        self.image_service = image_service

    async def create_script(
        self,
        title: str,
        original_script: str,
        chunks: list[dict],
    ) -> ScriptModel:
        """
        Store an already-chunked script.

        Args:
            title: Script title
            original_script: Full source text
            chunks: Chunk field dicts in narration order

        Returns:
            ScriptModel: Created script with chunks

        Raises:
            PersistenceFailureError: If the insert fails (e.g. duplicate chunk keys)
        """
        try:
            script = await script_crud.create_with_chunks(
                self.db,
                title=title,
                original_script=original_script,
                chunks=chunks,
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PersistenceFailureError(str(e), operation="create_script") from e

        logger.info(
            f"{__name__}:create_script - Script created script_id={script.id}, chunks={len(chunks)}"
        )
        return script

    async def get_script(self, script_id: UUID) -> ScriptModel:
        """
        Get script with its chunks.

        Raises:
            SubjectNotFoundError: If the script does not exist
        """
        script = await script_crud.get_by_id(self.db, script_id)
        if script is None:
            raise SubjectNotFoundError(str(script_id))
        return script

    async def get_image_progress(self, script_id: UUID) -> dict:
        """
        Count illustrated chunks by inspecting the script directly.

        Used for batch status when the script has no job.

        Args:
            script_id: Script UUID

        Returns:
            dict: total_chunks, chunks_with_images, chunks_remaining,
                completion_percentage, is_complete

        Raises:
            SubjectNotFoundError: If the script does not exist
        """
        if not await script_crud.exists(self.db, script_id):
            raise SubjectNotFoundError(str(script_id))

        total, with_images = await script_crud.count_chunks(self.db, script_id)
        return {
            "total_chunks": total,
            "chunks_with_images": with_images,
            "chunks_remaining": total - with_images,
            "completion_percentage": round(with_images / total * 100) if total else 100,
            "is_complete": with_images == total,
        }

    async def generate_chunk_image(
        self,
        script_id: UUID,
        chunk_id: str,
        config: GenerationConfig,
    ) -> tuple[ChunkModel, ChunkImageOutcome]:
        """
        Generate images for one chunk and write them back to the script.

        A batch job that later reaches the same chunk sees the image and
        skips the provider call.

        Args:
            script_id: Script UUID
            chunk_id: Chunk key within the script
            config: Provider, style, color, quality and options

        Returns:
            Tuple of (updated chunk, generation outcome)

        Raises:
            SubjectNotFoundError: If the script does not exist
            ChunkMissingError: If the chunk is not part of the script
            ProviderUnavailableError: If the provider is not configured
            ProviderError: If generation fails
            PersistenceFailureError: If the result cannot be saved
        """
        if not await script_crud.exists(self.db, script_id):
            raise SubjectNotFoundError(str(script_id))

        chunk = await script_crud.get_chunk(self.db, script_id, chunk_id)
        if chunk is None:
            raise ChunkMissingError(chunk_id, script_id=str(script_id))

        logger.info(
            f"{__name__}:generate_chunk_image - START script_id={script_id}, "
            f"chunk_id={chunk_id}, provider={config.provider.value}"
        )
        outcome = await self.image_service.generate_for_chunk(chunk.content, config)

        try:
            updated = await script_crud.update_chunk_asset(
                self.db,
                script_id,
                chunk_id,
                image_url=outcome.image_url,
                secondary_image_url=outcome.secondary_image_url,
                scene_description=outcome.scene_description,
                symbol_description=outcome.symbol_description,
                provider=outcome.provider.value,
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PersistenceFailureError(str(e), operation="update_chunk_asset") from e

        if updated is None:
            raise ChunkMissingError(chunk_id, script_id=str(script_id))

        logger.info(
            f"{__name__}:generate_chunk_image - END chunk_id={chunk_id}, image_url={outcome.image_url}"
        )
        return updated, outcome

"""
Script and chunk CRUD operations.

Document store access used by the job manager and the script service.
Chunks are only read and have their asset fields written; they are never
created, reordered or deleted here outside of script creation.

Dependencies: sqlalchemy, storyboard.boundary.db.models.script_model
System role: Document store persistence operations
"""

from datetime import datetime
from typing import Sequence
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from storyboard.boundary.db.base import utcnow
from storyboard.boundary.db.models.script_model import ChunkModel, ScriptModel
from storyboard.boundary.db.CRUD.base_crud import BaseCRUD


class ScriptCRUD(BaseCRUD[ScriptModel]):
    """
    CRUD operations for ScriptModel and its chunks.

    Extends BaseCRUD with chunk lookups keyed by (script_id, chunk_id) and
    the asset write-back used after image generation.
    """

    def __init__(self) -> None:
        """Initialize ScriptCRUD with ScriptModel."""
        super().__init__(ScriptModel)

    async def create_with_chunks(
        self,
        session: AsyncSession,
        title: str,
        original_script: str,
        chunks: list[dict],
    ) -> ScriptModel:
        """
        Create a script together with its ordered chunks.

        Args:
            session: Async database session
            title: Script title
            original_script: Full source text
            chunks: Chunk field dicts; list order becomes chunk position

        Returns:
            Created ScriptModel with chunks loaded
        """
        script = ScriptModel(title=title, original_script=original_script)
        script.chunks = [
            ChunkModel(position=position, **chunk)
            for position, chunk in enumerate(chunks)
        ]
        return await self.add(session, script)

    async def get_chunk(
        self,
        session: AsyncSession,
        script_id: UUID,
        chunk_id: str,
    ) -> ChunkModel | None:
        """
        Retrieve one chunk of a script by its chunk key.

        Args:
            session: Async database session
            script_id: Script UUID
            chunk_id: Chunk key within the script

        Returns:
            ChunkModel if found, None otherwise
        """
        stmt = select(ChunkModel).where(
            ChunkModel.script_id == script_id,
            ChunkModel.chunk_id == chunk_id,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_chunks_missing_asset(
        self,
        session: AsyncSession,
        script_id: UUID,
    ) -> Sequence[ChunkModel]:
        """
        Retrieve chunks without a primary image, in script order.

        Args:
            session: Async database session
            script_id: Script UUID

        Returns:
            Sequence of ChunkModels whose image_url is empty
        """
        stmt = (
            select(ChunkModel)
            .where(
                ChunkModel.script_id == script_id,
                (ChunkModel.image_url.is_(None)) | (ChunkModel.image_url == ""),
            )
            .order_by(ChunkModel.position)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def count_chunks(
        self,
        session: AsyncSession,
        script_id: UUID,
    ) -> tuple[int, int]:
        """
        Count a script's chunks and how many already have an image.

        Args:
            session: Async database session
            script_id: Script UUID

        Returns:
            (total_chunks, chunks_with_images)
        """
        has_image = (ChunkModel.image_url.is_not(None)) & (ChunkModel.image_url != "")
        stmt = select(
            func.count(ChunkModel.id),
            func.count(ChunkModel.id).filter(has_image),
        ).where(ChunkModel.script_id == script_id)
        result = await session.execute(stmt)
        total, with_images = result.one()
        return total, with_images

    async def update_chunk_asset(
        self,
        session: AsyncSession,
        script_id: UUID,
        chunk_id: str,
        image_url: str,
        secondary_image_url: str | None = None,
        scene_description: str | None = None,
        symbol_description: str | None = None,
        provider: str | None = None,
        generated_at: datetime | None = None,
    ) -> ChunkModel | None:
        """
        Write generated asset references into a chunk.

        Args:
            session: Async database session
            script_id: Script UUID
            chunk_id: Chunk key within the script
            image_url: Primary image reference
            secondary_image_url: Optional symbol image reference
            scene_description: Scene text used for the primary image
            symbol_description: Symbol text used for the secondary image
            provider: Provider key that produced the images
            generated_at: Generation time (defaults to now)

        Returns:
            Updated ChunkModel, or None when the chunk no longer exists
        """
        chunk = await self.get_chunk(session, script_id, chunk_id)
        if chunk is None:
            return None

        chunk.image_url = image_url
        chunk.secondary_image_url = secondary_image_url
        chunk.scene_description = scene_description
        chunk.symbol_description = symbol_description
        chunk.image_provider = provider
        chunk.image_generated_at = generated_at or utcnow()
        await session.flush()
        return chunk


script_crud = ScriptCRUD()

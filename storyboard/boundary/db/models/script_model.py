"""
Script and chunk ORM models.

A script is the narrative text a storyboard is built from; its chunks are
the timed segments that each receive one or two illustrations.

Dependencies: sqlalchemy, storyboard.boundary.db.base
System role: Document store for scripts and their illustrated chunks
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storyboard.boundary.db.base import Base, UUIDMixin, TimestampMixin


class ScriptModel(Base, UUIDMixin, TimestampMixin):
    """
    Script ORM model owning an ordered list of chunks.

    The batch engine never creates, deletes or reorders chunks; it only
    fills in the image fields of existing ones.

    Attributes:
        id: UUID primary key (auto-generated)
        title: Display title
        original_script: Full source text before chunking
        chunks: Ordered ChunkModel rows (cascade delete)
        created_at: Script creation timestamp (UTC)
        updated_at: Last modification timestamp (UTC)
    """

    __tablename__ = "scripts"

    title: Mapped[str] = mapped_column(String(255), nullable=False)

    original_script: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        doc="Full source text before chunking",
    )

    chunks = relationship(
        "ChunkModel",
        back_populates="script",
        cascade="all, delete-orphan",
        order_by="ChunkModel.position",
        lazy="selectin",
    )


class ChunkModel(Base, UUIDMixin):
    """
    Timed script segment with its generated illustration.

    Attributes:
        id: UUID primary key (auto-generated)
        script_id: Foreign key to ScriptModel (cascade delete)
        chunk_id: Stable chunk key referenced by job items (unique per script)
        position: Zero-based order within the script
        content: Chunk text used as the image description
        start_time: Start offset in seconds
        end_time: End offset in seconds
        topic: Short description of the chunk subject
        image_url: Primary image reference (None until generated)
        secondary_image_url: Optional symbol image reference
        scene_description: Scene text the primary image was rendered from
        symbol_description: Symbol text the secondary image was rendered from
        image_provider: Provider key that produced the images
        image_generated_at: When the images were written (UTC)

    Constraints:
        (script_id, chunk_id): UNIQUE
    """

    __tablename__ = "chunks"
    __table_args__ = (
        UniqueConstraint("script_id", "chunk_id", name="uq_chunks_script_chunk"),
    )

    script_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("scripts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    chunk_id: Mapped[str] = mapped_column(String(100), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    start_time: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    end_time: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    topic: Mapped[str | None] = mapped_column(String(512), nullable=True)

    image_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    secondary_image_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    scene_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    symbol_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_provider: Mapped[str | None] = mapped_column(String(50), nullable=True)
    image_generated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # Relationships
    script = relationship("ScriptModel", back_populates="chunks")

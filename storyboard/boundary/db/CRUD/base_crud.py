"""
Shared persistence helpers for the storyboard CRUD classes.

Nothing here commits. A job manager step or a service call opens the
session, calls one or more CRUD methods and commits once, so a chunk
write-back and its job item update land in the same transaction.

Dependencies: sqlalchemy
System role: Foundation for all database CRUD operations
"""

from typing import Generic, TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storyboard.boundary.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseCRUD(Generic[ModelT]):
    """
    Primary-key access for one model.

    Attributes:
        model: ORM class operated on (ScriptModel, JobModel)
    """

    def __init__(self, model: type[ModelT]) -> None:
        self.model = model

    async def add(self, session: AsyncSession, instance: ModelT) -> ModelT:
        """
        Stage instance (and any children attached to it) and flush.

        Flushing assigns defaults and surfaces constraint violations, such
        as a second active job for a script, before the caller commits.

        Raises:
            IntegrityError: If a unique constraint is violated
        """
        session.add(instance)
        await session.flush()
        return instance

    async def get_by_id(self, session: AsyncSession, id: UUID) -> ModelT | None:
        """
        Load a row by primary key.

        Args:
            session: Async database session
            id: UUID primary key

        Returns:
            Model instance if found, None otherwise
        """
        result = await session.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def exists(self, session: AsyncSession, id: UUID) -> bool:
        """Check for a row without loading it or its relationships."""
        result = await session.execute(select(self.model.id).where(self.model.id == id))
        return result.scalar_one_or_none() is not None

"""
Test suite for BaseCRUD shared helpers.

Exercises add/get_by_id/exists through ScriptModel on an in-memory
SQLite database.

System role: Verification of the generic persistence layer
"""

import uuid

import pytest
from sqlalchemy.exc import IntegrityError

from storyboard.boundary.db.CRUD.base_crud import BaseCRUD
from storyboard.boundary.db.models.script_model import ChunkModel, ScriptModel


@pytest.fixture
def crud() -> BaseCRUD[ScriptModel]:
    """Provide a BaseCRUD bound to ScriptModel."""
    return BaseCRUD(ScriptModel)


class TestBaseCRUD:
    """Test suite for BaseCRUD."""

    @pytest.mark.asyncio
    async def test_add_should_generate_id_and_timestamps(self, crud, test_async_db) -> None:
        # Act
        script = await crud.add(test_async_db, ScriptModel(title="Ocean", original_script="Waves"))

        # Assert
        assert isinstance(script.id, uuid.UUID)
        assert script.created_at is not None
        assert script.updated_at is not None
        assert await crud.exists(test_async_db, script.id) is True

    @pytest.mark.asyncio
    async def test_add_should_surface_constraint_violation_on_flush(self, crud, test_async_db) -> None:
        # Arrange
        script = ScriptModel(title="Ocean", original_script="Waves")
        script.chunks = [
            ChunkModel(chunk_id="chunk_1", position=0, content="Waves"),
            ChunkModel(chunk_id="chunk_1", position=1, content="Tide"),
        ]

        # Act & Assert
        with pytest.raises(IntegrityError):
            await crud.add(test_async_db, script)

    @pytest.mark.asyncio
    async def test_get_by_id_should_load_row(self, crud, test_async_db) -> None:
        script = await crud.add(test_async_db, ScriptModel(title="Ocean", original_script="Waves"))

        found = await crud.get_by_id(test_async_db, script.id)

        assert found is script

    @pytest.mark.asyncio
    async def test_get_by_id_should_return_none_for_unknown_id(self, crud, test_async_db) -> None:
        assert await crud.get_by_id(test_async_db, uuid.uuid4()) is None
        assert await crud.exists(test_async_db, uuid.uuid4()) is False

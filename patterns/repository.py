"""Async repository pattern for database access.

Provides a generic base repository with CRUD operations and
atomic counter increments. Verticals subclass this to add domain-specific
queries.

Repositories never commit. They flush so generated values are visible,
and leave the transaction boundary to the session owner.
"""

from typing import Any, Generic, Mapping, TypeVar
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from core.models.base import Base

# ---------------------------------------------------------------------------
# Type variable for model classes
# ---------------------------------------------------------------------------

ModelT = TypeVar("ModelT", bound=Base)

IMMUTABLE_COLUMNS = ("id", "created_at")


# ---------------------------------------------------------------------------
# Base repository
# ---------------------------------------------------------------------------

class BaseRepository(Generic[ModelT]):
    """Generic async repository with CRUD + counters.

    Subclass and set `model` to your SQLAlchemy model::

        class TaskRepository(BaseRepository[Task]):
            model = Task

            async def owned_by(self, user_id: UUID):
                stmt = select(self.model).where(self.model.owner_id == user_id)
                result = await self.session.execute(stmt)
                return list(result.scalars().all())
    """

    model: type[ModelT]

    def __init__(self, session: AsyncSession):
        self.session = session

    # -- Get by ID --

    async def get(self, item_id: str | UUID) -> ModelT | None:
        """Get a single item by ID."""
        item_id = coerce_uuid(item_id)
        if item_id is None:
            return None
        return await self.session.get(self.model, item_id)

    # -- Create --

    async def create(self, data: dict[str, Any]) -> ModelT:
        """Create a new item."""
        item = self.model(**data)
        self.session.add(item)
        await self.session.flush()
        return item

    # -- Update --

    async def update(self, item_id: str | UUID, data: dict[str, Any]) -> ModelT | None:
        """Update an existing item. Returns None if not found."""
        item = await self.get(item_id)
        if not item:
            return None

        for key, value in data.items():
            if hasattr(item, key) and key not in IMMUTABLE_COLUMNS:
                setattr(item, key, value)

        await self.session.flush()
        return item

    # -- Atomic increment --

    async def increment(self, item_id: str | UUID, counters: Mapping[str, int]) -> bool:
        """Apply ``col = col + n`` for every counter in one UPDATE statement.

        The database evaluates the addition, so concurrent increments to
        different (or the same) columns never overwrite each other.
        Returns False if the row does not exist.
        """
        if not counters:
            return True
        item_id = coerce_uuid(item_id)
        if item_id is None:
            return False

        values = {
            name: getattr(self.model, name) + amount
            for name, amount in counters.items()
        }
        stmt = (
            update(self.model)
            .where(self.model.id == item_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)

        # Loaded instances would otherwise keep the stale counter values.
        cached = self.session.identity_map.get(
            self.session.identity_key(self.model, item_id)
        )
        if cached is not None:
            await self.session.refresh(cached, attribute_names=list(counters))
        return result.rowcount > 0

    # -- Delete --

    async def delete(self, item_id: str | UUID) -> bool:
        """Delete an item. Returns True if deleted, False if not found."""
        item = await self.get(item_id)
        if not item:
            return False

        await self.session.delete(item)
        await self.session.flush()
        return True


def coerce_uuid(value: str | UUID | None) -> UUID | None:
    if value is None or isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        return None

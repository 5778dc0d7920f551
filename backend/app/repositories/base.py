"""
NotaryPro Backend — Repository Base Class
===========================================

What:  Shared primary-key lookup and insert for the concrete repositories.
"""

from typing import Any, Generic, Optional, Type, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from app.database import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """
    Common operations for a single mapped table.

    Subclasses set `model`; everything table-specific (filters, aggregates,
    conditional updates) lives in the subclass.
    """

    model: Type[ModelT]

    async def get(self, db: AsyncSession, record_id: Any) -> Optional[ModelT]:
        """Primary-key lookup. Returns None when the row does not exist."""
        return await db.get(self.model, record_id)

    async def add(self, db: AsyncSession, instance: ModelT) -> ModelT:
        """
        Stage a new row and flush it so database defaults (autoincrement id,
        unique constraints) are applied before the caller continues.
        """
        db.add(instance)
        await db.flush()
        return instance

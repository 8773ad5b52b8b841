"""Base repository with common database operations.

Generic lookups shared by the model-specific repositories. Uses
SQLAlchemy 2.0's async API. Repositories do NOT manage transactions; the
caller is responsible for commit/rollback.
"""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel
from sqlalchemy import inspect, select
from sqlalchemy.ext.asyncio import AsyncSession

from lookthrough.db.base import Base

# Generic type for SQLAlchemy models
ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository with common operations.

    Type Parameters:
        ModelType: The SQLAlchemy model class

    Example:
        >>> class SecurityRepository(BaseRepository[Security]):
        ...     pass
        >>>
        >>> repo = SecurityRepository(Security, db)
        >>> security = await repo.get("AAPL")
    """

    def __init__(self, model: type[ModelType], db: AsyncSession):
        """Initialize repository.

        Args:
            model: The SQLAlchemy model class
            db: Async database session
        """
        self.model = model
        self.db = db

    @property
    def _primary_key(self) -> Any:
        return inspect(self.model).primary_key[0]

    async def get(self, id: Any) -> ModelType | None:
        """Get a single record by primary key.

        Args:
            id: Primary key value

        Returns:
            Model instance if found, None otherwise
        """
        result = await self.db.execute(select(self.model).where(self._primary_key == id))
        return result.scalar_one_or_none()

    @staticmethod
    def _values(obj_in: BaseModel | dict[str, Any]) -> dict[str, Any]:
        """Column values from a request schema (explicitly set fields only) or a dict."""
        if isinstance(obj_in, BaseModel):
            return obj_in.model_dump(exclude_unset=True)
        return dict(obj_in)

    async def create(self, *, obj_in: BaseModel | dict[str, Any]) -> ModelType:
        """Add a new row and flush it so defaults (ids, timestamps) are populated.

        Caller must commit the transaction.
        """
        db_obj = self.model(**self._values(obj_in))
        self.db.add(db_obj)
        await self.db.flush()
        return db_obj

    async def update(
        self,
        *,
        db_obj: ModelType,
        obj_in: BaseModel | dict[str, Any],
    ) -> ModelType:
        """Overwrite the given fields of a loaded row and flush.

        Caller must commit the transaction.
        """
        for field, value in self._values(obj_in).items():
            setattr(db_obj, field, value)

        await self.db.flush()
        return db_obj

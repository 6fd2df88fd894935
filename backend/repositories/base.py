"""
Base repository class providing common database operations.
"""

from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from repositories.database import Base

T = TypeVar("T", bound=Base)  # type: ignore[type-arg]


class BaseRepository(Generic[T]):
    """
    Common CRUD operations for one SQLAlchemy model.

    Write helpers commit immediately; every write is its own unit of work.
    """

    def __init__(self, model: type[T], db: Session):
        self.model = model
        self.db = db

    def get_by_id(self, id: int) -> T | None:
        return self.db.query(self.model).filter(self.model.id == id).first()

    def exists(self, id: int) -> bool:
        row = self.db.query(self.model.id).filter(self.model.id == id).first()
        return row is not None

    def create(self, entity: T) -> T:
        """
        Persist a new entity and return it refreshed.

        Args:
            entity: Unsaved entity

        Returns:
            The entity with generated columns populated
        """
        self.db.add(entity)
        self.db.commit()
        self.db.refresh(entity)
        return entity

    def update(self, entity: T) -> T:
        """Commit pending changes on an entity and refresh it."""
        self.db.commit()
        self.db.refresh(entity)
        return entity

    def delete(self, entity: T) -> None:
        self.db.delete(entity)
        self.db.commit()

    def count(self) -> int:
        return self.db.query(self.model).count()

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()

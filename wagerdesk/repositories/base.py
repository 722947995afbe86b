"""
Base repository classes for the data access layer.

`BaseRepository` wraps the common queries for one model. `OwnedRepository`
adds the ownership rule shared by every user-owned resource: a missing id is
NotFound, a row that belongs to somebody else is Forbidden.

Example:
    class PickRepository(OwnedRepository[Pick]):
        def __init__(self, db):
            super().__init__(Pick, db)

    pick = PickRepository(db).get_owned(pick_id, principal.user_id)
"""
from abc import ABC
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from sqlalchemy import desc, func
from sqlalchemy.orm import Query, Session

from wagerdesk.core.errors import Forbidden, NotFound
from wagerdesk.utils.timezone import utcnow

T = TypeVar("T")


class BaseRepository(Generic[T], ABC):
    """Queries and unit-of-work helpers for one model class."""

    def __init__(self, model_type: Type[T], db: Session):
        self.model_type = model_type
        self.db = db

    def find_by_id(self, id: str) -> Optional[T]:
        """Find a single record by ID."""
        return self.db.query(self.model_type).filter(self.model_type.id == id).first()

    def create(self, **kwargs) -> T:
        """Add a new row to the session; the caller commits."""
        instance = self.model_type(**kwargs)
        self.db.add(instance)
        return instance

    def apply(self, instance: T, changes: Dict[str, Any]) -> T:
        """Set attributes from `changes` on an already loaded instance."""
        for key, value in changes.items():
            if hasattr(instance, key):
                setattr(instance, key, value)
        if hasattr(instance, "updated_at"):
            instance.updated_at = utcnow()
        return instance

    def delete_instance(self, instance: T) -> None:
        self.db.delete(instance)

    def query(self) -> Query:
        """Get a new query object for this model."""
        return self.db.query(self.model_type)

    def where_first(self, *criterion) -> Optional[T]:
        """Filter records using SQLAlchemy expressions and return first match."""
        return self.db.query(self.model_type).filter(*criterion).first()

    def count(self, *criterion) -> int:
        """Count records matching optional criterion."""
        query = self.db.query(func.count(self.model_type.id))
        if criterion:
            query = query.filter(*criterion)
        return query.scalar() or 0

    def save(self) -> None:
        """Commit pending changes to the database."""
        self.db.commit()

    def flush(self) -> None:
        """Flush pending changes without committing."""
        self.db.flush()

    def refresh(self, instance: T) -> T:
        """Refresh an instance from the database."""
        self.db.refresh(instance)
        return instance

    def rollback(self) -> None:
        """Rollback pending changes."""
        self.db.rollback()


class OwnedRepository(BaseRepository[T]):
    """Repository for models carrying a `user_id` owner column."""

    def for_user(self, user_id: str) -> Query:
        """Query scoped to one user's rows."""
        return self.db.query(self.model_type).filter(self.model_type.user_id == user_id)

    def list_for_user(self, user_id: str, order_by: Optional[str] = None) -> List[T]:
        """
        All rows owned by `user_id`.

        Args:
            order_by: Column name to order by (prefix with '-' for descending)
        """
        query = self.for_user(user_id)
        if order_by:
            if order_by.startswith("-"):
                query = query.order_by(desc(getattr(self.model_type, order_by[1:])))
            else:
                query = query.order_by(getattr(self.model_type, order_by))
        return query.all()

    def get_owned(self, id: str, user_id: str) -> T:
        """
        Load a row and verify ownership.

        Raises:
            NotFound: no row with this id
            Forbidden: the row belongs to another user
        """
        instance = self.find_by_id(id)
        if instance is None:
            raise NotFound(f"{self.resource_name} not found")
        if instance.user_id != user_id:
            raise Forbidden()
        return instance

    @property
    def resource_name(self) -> str:
        return getattr(self, "RESOURCE_NAME", self.model_type.__name__)

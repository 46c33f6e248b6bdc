"""
Base repository for direct database access.

Repositories wrap a SQLAlchemy session and own every query for one entity.
They flush but never commit; the transaction belongs to the caller
(request dependency or ``session_scope``).
"""

from typing import Any, Generic, List, Optional, Type, TypeVar

from sqlalchemy.orm import Session

from ..model.base import Base

T = TypeVar("T", bound=Base)


class BaseRepository(Generic[T]):

    def __init__(self, db: Session, model: Type[T]):
        self.db = db
        self.model = model

    def get_by_id_optional(self, entity_id: Any) -> Optional[T]:
        if entity_id is None:
            return None
        return self.db.get(self.model, entity_id)

    def find_by(self, **filters) -> List[T]:
        return self.db.query(self.model).filter_by(**filters).all()

    def find_one_by(self, **filters) -> Optional[T]:
        return self.db.query(self.model).filter_by(**filters).first()

    def create(self, entity: T) -> T:
        self.db.add(entity)
        self.db.flush()
        return entity

    def update(self, entity: T, **values) -> T:
        for key, value in values.items():
            setattr(entity, key, value)
        self.db.flush()
        return entity

    def delete(self, entity: T) -> None:
        self.db.delete(entity)
        self.db.flush()

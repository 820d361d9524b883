"""
Generic repository over one ORM model.

Default queries hide tombstoned rows (`deleted_at IS NOT NULL`). Writes are
flushed, never committed: the unit of work in `Repositories.atomic` owns the
transaction.
"""
import logging
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session

from lms.core.exceptions import ConflictError
from lms.core.timeutils import utcnow
from lms.db.base import Base

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """CRUD + query helpers shared by every entity repository."""

    model: Type[ModelType]

    def __init__(self, db: Session):
        self.db = db

    def query(self, include_deleted: bool = False) -> Query:
        query = self.db.query(self.model)
        if not include_deleted:
            query = query.filter(self.model.deleted_at.is_(None))
        return query

    def get(self, entity_id: str, include_deleted: bool = False) -> Optional[ModelType]:
        if entity_id is None:
            return None
        return self.query(include_deleted).filter(self.model.id == entity_id).first()

    def get_by_key(self, **key: Any) -> Optional[ModelType]:
        """Fetch the single live row matching a composite key."""
        return self.query().filter_by(**key).first()

    def lock(self, entity_id: str) -> Optional[ModelType]:
        """
        Fetch a row with `SELECT ... FOR UPDATE`.

        The lock is held until the surrounding transaction ends. SQLite has no
        row locks, so there a no-op UPDATE of the row takes the database write
        lock, which serializes competing transactions the same way.
        """
        # populate_existing would discard unflushed edits on the row
        self.db.flush()
        if self.db.get_bind().dialect.name == "sqlite":
            self.query().filter(self.model.id == entity_id).update(
                {self.model.updated_at: self.model.updated_at}, synchronize_session=False
            )
        return (
            self.query()
            .filter(self.model.id == entity_id)
            .with_for_update()
            .populate_existing()
            .first()
        )

    def create(self, entity: ModelType) -> ModelType:
        """
        Insert a new row.

        Raises:
            ConflictError: If the row violates a uniqueness constraint
        """
        self.db.add(entity)
        try:
            self.db.flush()
        except IntegrityError as exc:
            logger.warning(f"Conflicting insert into {self.model.__tablename__}: {exc.orig}")
            raise ConflictError(
                f"Conflicting {self.model.__name__} write",
                table=self.model.__tablename__,
            ) from exc
        return entity

    def update(self, entity: ModelType) -> ModelType:
        self.db.add(entity)
        self.db.flush()
        return entity

    def increment_counter(self, entity_id: str, field: str, delta: int = 1) -> None:
        """Atomic `UPDATE ... SET field = field + delta` on one row."""
        column = getattr(self.model, field)
        self.query().filter(self.model.id == entity_id).update(
            {column: column + delta}, synchronize_session="fetch"
        )

    def list(
        self,
        filters: Optional[Dict[str, Any]] = None,
        limit: Optional[int] = None,
        offset: int = 0,
        order_by: Any = None,
    ) -> List[ModelType]:
        query = self.query().filter_by(**(filters or {}))
        query = query.order_by(order_by if order_by is not None else self.model.created_at)
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def count(self, **filters: Any) -> int:
        return self.query().filter_by(**filters).count()

    def soft_delete(self, entity: ModelType) -> ModelType:
        entity.deleted_at = utcnow()
        return self.update(entity)

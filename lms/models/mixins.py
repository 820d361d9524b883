"""
Columns shared by every table: UUID primary key, timestamps and the
soft-delete tombstone.
"""
import uuid

from sqlalchemy import Column, DateTime, String

from lms.core.timeutils import utcnow


def new_id() -> str:
    return str(uuid.uuid4())


class EntityMixin:
    """UUID key, audit timestamps and `deleted_at` tombstone."""

    id = Column(String(36), primary_key=True, default=new_id, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)
    deleted_at = Column(DateTime, nullable=True, index=True)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

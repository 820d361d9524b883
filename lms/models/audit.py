from sqlalchemy import Column, ForeignKey, JSON, String

from lms.db.base import Base
from lms.models.mixins import EntityMixin


class SystemAuditLog(EntityMixin, Base):
    """Append-only record of user-initiated state changes."""

    __tablename__ = "system_audit_logs"

    user_id = Column(String(36), ForeignKey("users.id"), nullable=True, index=True)
    action = Column(String, nullable=False, index=True)  # course_enroll, quiz_submit, coins_spend, ...
    entity_type = Column(String, nullable=False)
    entity_id = Column(String(36), nullable=True)
    details = Column(JSON, nullable=True)

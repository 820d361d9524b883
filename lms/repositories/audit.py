from lms.models.audit import SystemAuditLog
from lms.repositories.base import BaseRepository


class AuditLogRepository(BaseRepository[SystemAuditLog]):
    model = SystemAuditLog

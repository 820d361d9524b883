import logging
from typing import Any, Dict, Optional

from lms.models.audit import SystemAuditLog
from lms.repositories import Repositories

logger = logging.getLogger(__name__)


class AuditLogger:
    """Appends SystemAuditLog rows inside the caller's transaction."""

    def __init__(self, repos: Repositories):
        self.repos = repos

    def record(
        self,
        action: str,
        entity_type: str,
        entity_id: Optional[str] = None,
        user_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> SystemAuditLog:
        entry = self.repos.audit_logs.create(
            SystemAuditLog(
                action=action,
                entity_type=entity_type,
                entity_id=entity_id,
                user_id=user_id,
                details=details or {},
            )
        )
        logger.debug(f"Audit {action} on {entity_type}:{entity_id} by {user_id}")
        return entry

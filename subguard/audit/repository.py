from datetime import UTC, datetime
from uuid import uuid4

import aiosqlite

from subguard.audit.models import AuditAction, AuditEntityType
from subguard.audit.schemas import AuditLog


class AuditLogRepository:
    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db

    async def append(
        self,
        action: AuditAction,
        entity_type: AuditEntityType,
        entity_id: str,
        details: str,
        user_approved: bool,
        timestamp: datetime | None = None,
    ) -> AuditLog:
        entry = AuditLog(
            id=str(uuid4()),
            timestamp=timestamp or datetime.now(UTC),
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            details=details,
            user_approved=user_approved,
        )
        await self._db.execute(
            """
            INSERT INTO audit_logs
                (id, timestamp, action, entity_type, entity_id, details, user_approved)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                entry.id,
                entry.timestamp.isoformat(),
                entry.action,
                entry.entity_type,
                entry.entity_id,
                entry.details,
                int(entry.user_approved),
            ),
        )
        return entry

    async def list_recent(self, limit: int = 50) -> list[AuditLog]:
        cursor = await self._db.execute(
            """
            SELECT id, timestamp, action, entity_type, entity_id, details, user_approved
            FROM audit_logs
            ORDER BY timestamp DESC
            LIMIT ?
            """,
            (limit,),
        )
        rows = await cursor.fetchall()
        return [AuditLog.model_validate(dict(row)) for row in rows]

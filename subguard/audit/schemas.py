from subguard.audit.models import AuditAction, AuditEntityType
from subguard.schemas import CamelModel, UTCDateTime


class AuditLog(CamelModel):
    id: str
    timestamp: UTCDateTime
    action: AuditAction
    entity_type: AuditEntityType
    entity_id: str
    details: str
    user_approved: bool

from fastapi import APIRouter, Query

from subguard.audit.schemas import AuditLog
from subguard.dependencies import StoreDep

router = APIRouter()


@router.get("/", response_model=list[AuditLog])
async def list_audit_logs(
    store: StoreDep,
    limit: int = Query(default=50, ge=1, le=500),
) -> list[AuditLog]:
    return await store.get_audit_logs(limit)

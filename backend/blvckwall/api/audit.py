from fastapi import APIRouter, Depends
from typing import Optional

from ..schemas.pydantic_schemas import AuditRequest
from ..services.providers import Providers
from ..services.session import SessionProvider
from .deps import get_providers, get_session

router = APIRouter()


@router.post("", status_code=201)
async def record_audit(body: AuditRequest, session: SessionProvider = Depends(get_session),
                       providers: Providers = Depends(get_providers)):
    owner = session.resolve_owner_or_demo()
    return providers.ledger.record(body.type, body.action, owner.id,
                                   resource_id=body.resource_id, details=body.details)


@router.get("")
async def audit_history(type: Optional[str] = None, session: SessionProvider = Depends(get_session),
                        providers: Providers = Depends(get_providers)):
    owner = session.resolve_owner_or_demo()
    entries = providers.ledger.history(owner.id, entry_type=type)
    return {"entries": entries, "total": len(entries), "network": providers.ledger.network}

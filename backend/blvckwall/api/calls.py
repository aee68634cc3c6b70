from fastapi import APIRouter, Depends
import logging

from ..schemas.pydantic_schemas import StartCallRequest
from ..services.data_access import DataAccessFacade
from ..services.providers import Providers
from .deps import get_facade, get_providers, record_action

# Set up logger
logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/start", status_code=202)
async def start_call(payload: StartCallRequest, facade: DataAccessFacade = Depends(get_facade),
                     providers: Providers = Depends(get_providers)):
    logger.info(f"Starting call with agent {payload.agent_id} to {payload.phone_number}")
    call = await providers.telephony.start_call(payload.agent_id, payload.phone_number)
    ledger = record_action(
        facade, providers, "call", "call_started",
        f"Call started to {payload.phone_number}",
        resource_id=call["id"],
        details={"agent_id": payload.agent_id, "agent_record_id": payload.agent_record_id},
    )
    return {"call_id": call["id"], "status": call["status"], "audit_id": ledger["id"]}

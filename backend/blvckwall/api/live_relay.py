from fastapi import APIRouter, Depends
from typing import Optional
import logging

from ..schemas.pydantic_schemas import RelayMessageRequest, RelayStartRequest
from ..services.data_access import DataAccessFacade
from ..services.live_relay import LiveRelay
from ..services.providers import Providers
from .deps import get_facade, get_providers, record_action

logger = logging.getLogger(__name__)

router = APIRouter()


def get_relay(facade: DataAccessFacade = Depends(get_facade),
              providers: Providers = Depends(get_providers)) -> LiveRelay:
    return LiveRelay(facade, providers)


@router.post("/sessions", status_code=201)
async def start_session(body: RelayStartRequest, relay: LiveRelay = Depends(get_relay)):
    session = relay.start_session(body.call_id, body.target_language)
    record_action(
        relay.facade, relay.providers, "call", "relay_started",
        f"Live relay started for call {body.call_id}",
        resource_id=session["id"],
        details={"call_id": body.call_id},
    )
    return session


@router.get("/sessions")
async def list_sessions(call_id: Optional[str] = None, relay: LiveRelay = Depends(get_relay)):
    sessions = relay.active_sessions(call_id)
    return {"sessions": sessions, "total": len(sessions)}


@router.post("/sessions/{call_id}/messages")
async def send_message(call_id: str, body: RelayMessageRequest, relay: LiveRelay = Depends(get_relay)):
    return await relay.send_message(call_id, body.message, body.target_language)


@router.post("/sessions/{call_id}/end")
async def end_session(call_id: str, relay: LiveRelay = Depends(get_relay)):
    return relay.end_session(call_id)

import logging
import secrets
from typing import Any, Dict, Optional

import httpx

from ..errors import ProviderError
from .http_provider import DEFAULT_TIMEOUT, LiveHttpProvider

# Set up logger
logger = logging.getLogger(__name__)


class RetellClient(LiveHttpProvider):
    name = "retell"
    base_url = "https://api.retellai.com"

    def __init__(self, api_key: str, from_number: Optional[str] = None, timeout: float = DEFAULT_TIMEOUT,
                 transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        super().__init__(api_key, timeout=timeout, transport=transport)
        self.from_number = (from_number or "").strip() or None

    async def create_agent(self, name: str, voice: str, greeting: Optional[str] = None,
                           temperature: Optional[float] = None,
                           interruption_sensitivity: Optional[float] = None) -> Dict[str, Any]:
        """Create a Retell agent and return its id."""
        payload: Dict[str, Any] = {"name": name, "voice": voice}
        if greeting:
            payload["greeting_messages"] = [greeting]
        if temperature is not None:
            payload["temperature"] = temperature
        if interruption_sensitivity is not None:
            payload["interruption_sensitivity"] = interruption_sensitivity
        result = await self._request("POST", "/v1/agents", json=payload)
        agent_id = result.get("agent_id") or result.get("id")
        if not agent_id:
            raise ProviderError(self.name, "agent creation returned no id")
        logger.info(f"Retell agent created: {agent_id}")
        return {"id": agent_id, "status": "created", "llm_id": result.get("llm_id") or result.get("retell_llm_id")}

    async def start_call(self, agent_id: str, phone_number: str) -> Dict[str, Any]:
        """Initiate an outbound call through Retell AI"""
        # Validate from_number early to avoid opaque Retell 400s
        if not self.from_number:
            logger.error("RETELL_FROM_NUMBER is missing or empty. Set it to your Retell-assigned E.164 number")
            raise ProviderError(self.name, "RETELL_FROM_NUMBER missing")
        payload = {
            "to_number": phone_number,
            "from_number": self.from_number,
            "agent_id": agent_id,
        }
        logger.info(f"Attempting to initiate call to {phone_number} with agent {agent_id}")
        result = await self._request("POST", "/v2/create-phone-call", json=payload)
        call_id = result.get("call_id") or result.get("id")
        if not call_id:
            raise ProviderError(self.name, "call creation returned no id")
        return {"id": call_id, "status": result.get("call_status") or "queued"}


class SimulatedRetellClient:
    """Telephony provider used in demo mode; nothing leaves the process."""

    name = "retell"

    def __init__(self) -> None:
        logger.info("RetellClient initialized in simulation mode")

    async def create_agent(self, name: str, voice: str, greeting: Optional[str] = None,
                           temperature: Optional[float] = None,
                           interruption_sensitivity: Optional[float] = None) -> Dict[str, Any]:
        agent_id = f"agent_{secrets.token_hex(12)}"
        logger.info(f"[SIMULATED] Created agent {agent_id} ({name})")
        return {"id": agent_id, "status": "created", "llm_id": f"llm_{secrets.token_hex(12)}"}

    async def start_call(self, agent_id: str, phone_number: str) -> Dict[str, Any]:
        call_id = f"call_{secrets.token_hex(12)}"
        logger.info(f"[SIMULATED] Call {call_id} queued to {phone_number} with agent {agent_id}")
        return {"id": call_id, "status": "queued"}

from fastapi import APIRouter, Depends
import logging

from ..errors import ValidationError
from ..models.categories import Category, validate_fields
from ..schemas.pydantic_schemas import DeployAgentRequest
from ..services.data_access import DataAccessFacade
from ..services.providers import Providers
from .deps import get_facade, get_providers, record_action

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/deploy", status_code=201)
async def deploy_agent(body: DeployAgentRequest, facade: DataAccessFacade = Depends(get_facade),
                       providers: Providers = Depends(get_providers)):
    fields = body.model_dump(exclude_none=True)
    # Reject before the telephony provider is contacted
    violations = validate_fields(Category.AGENTS, fields)
    if violations:
        raise ValidationError(violations)

    deployed = await providers.telephony.create_agent(
        name=body.name,
        voice=body.voice,
        greeting=body.greeting,
        temperature=body.temperature,
        interruption_sensitivity=body.interruption_sensitivity,
    )
    agent = facade.create(Category.AGENTS, {
        **fields,
        "retell_agent_id": deployed["id"],
        "retell_llm_id": deployed.get("llm_id"),
        "status": "deployed",
    })
    record_action(
        facade, providers, "call", "agent_deployed",
        f"Agent {body.name} deployed",
        resource_id=agent["id"],
        details={"retell_agent_id": deployed["id"]},
    )
    return agent

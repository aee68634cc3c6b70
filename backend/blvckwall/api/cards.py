from fastapi import APIRouter, Depends

from ..schemas.pydantic_schemas import CardRequest
from ..services.data_access import DataAccessFacade
from ..services.providers import Providers
from .deps import get_facade, get_providers, record_action

router = APIRouter()


@router.post("", status_code=201)
async def create_digital_card(body: CardRequest, facade: DataAccessFacade = Depends(get_facade),
                              providers: Providers = Depends(get_providers)):
    card = await providers.cards.create_card(body.model_dump())
    record_action(
        facade, providers, "card", "card_created",
        f"Digital card created for {body.name}",
        resource_id=card["id"],
        details={"ipfs_hash": card.get("ipfs_hash")},
    )
    return card

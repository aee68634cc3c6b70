from fastapi import APIRouter, Depends

from ..services.data_access import DataAccessFacade
from ..services.sample_data import seed_sample_data
from .deps import get_facade

router = APIRouter()


@router.post("")
async def create_sample_data(facade: DataAccessFacade = Depends(get_facade)):
    return {"success": True, "created": seed_sample_data(facade)}

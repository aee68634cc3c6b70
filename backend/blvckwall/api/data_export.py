from fastapi import APIRouter, Depends

from ..schemas.pydantic_schemas import DataExportRequest
from ..services.data_access import DataAccessFacade
from ..services.data_export import export_data, list_exports
from .deps import get_facade

router = APIRouter()


@router.post("", status_code=201)
async def create_export(body: DataExportRequest, facade: DataAccessFacade = Depends(get_facade)):
    return export_data(facade, body.export_type)


@router.get("")
async def get_exports(facade: DataAccessFacade = Depends(get_facade)):
    return {"exports": list_exports(facade)}

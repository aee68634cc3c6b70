from fastapi import APIRouter, Body, Depends, Request
from typing import Any, Dict

from ..models.categories import parse_category, query_filters
from ..schemas.pydantic_schemas import RecordListResponse
from ..services.data_access import DataAccessFacade
from .deps import get_facade

router = APIRouter()


def _mode(facade: DataAccessFacade) -> str:
    return facade.storage_mode(facade.sessions.resolve_owner_or_demo()).value


@router.get("/{category}", response_model=RecordListResponse)
async def list_records(category: str, request: Request, facade: DataAccessFacade = Depends(get_facade)):
    cat = parse_category(category)
    # Query parameters naming a column are equality filters; anything else is ignored
    items = facade.list(cat, query_filters(cat, request.query_params))
    return {"items": items, "total": len(items), "storage_mode": _mode(facade)}


@router.post("/{category}", status_code=201)
async def create_record(category: str, body: Dict[str, Any] = Body(...),
                        facade: DataAccessFacade = Depends(get_facade)):
    return facade.create(category, body)


@router.get("/{category}/{record_id}")
async def get_record(category: str, record_id: str, facade: DataAccessFacade = Depends(get_facade)):
    return facade.get(category, record_id)


@router.patch("/{category}/{record_id}")
async def update_record(category: str, record_id: str, body: Dict[str, Any] = Body(...),
                        facade: DataAccessFacade = Depends(get_facade)):
    return facade.update(category, record_id, body)


@router.delete("/{category}/{record_id}")
async def delete_record(category: str, record_id: str, facade: DataAccessFacade = Depends(get_facade)):
    return {"deleted": facade.delete(category, record_id)}

from fastapi import APIRouter, Depends

from ..schemas.pydantic_schemas import DetectRequest, TranslateRequest
from ..services.providers import Providers
from .deps import get_providers

router = APIRouter()


@router.get("/languages")
async def list_languages(providers: Providers = Depends(get_providers)):
    return {"languages": await providers.translation.languages()}


@router.post("")
async def translate(body: TranslateRequest, providers: Providers = Depends(get_providers)):
    return await providers.translation.translate(body.text, body.target_language, body.source_language)


@router.post("/detect")
async def detect_language(body: DetectRequest, providers: Providers = Depends(get_providers)):
    return await providers.translation.detect_language(body.text)

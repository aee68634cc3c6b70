from fastapi import APIRouter, Depends, Response

from ..schemas.pydantic_schemas import TTSRequest
from ..services.providers import Providers
from .deps import get_providers

router = APIRouter()


@router.get("/voices")
async def list_voices(providers: Providers = Depends(get_providers)):
    return {"voices": await providers.voice.list_voices()}


@router.post("/tts")
async def text_to_speech(body: TTSRequest, providers: Providers = Depends(get_providers)):
    audio, media_type = await providers.voice.synthesize(body.text, body.voice_id)
    return Response(content=audio, media_type=media_type)

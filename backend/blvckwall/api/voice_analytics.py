from fastapi import APIRouter, Depends
import base64
import logging

from ..errors import ProviderError
from ..schemas.pydantic_schemas import AnalyticsQuestion
from ..services.data_access import DataAccessFacade
from ..services.providers import Providers
from ..services.voice_analytics import VoiceAnalytics
from .deps import get_facade, get_providers

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("")
async def ask(body: AnalyticsQuestion, facade: DataAccessFacade = Depends(get_facade),
              providers: Providers = Depends(get_providers)):
    result = VoiceAnalytics(facade, providers.ledger).answer(body.question)
    result["audio_data"] = None
    if body.speak:
        try:
            audio, media_type = await providers.voice.synthesize(result["response"], body.voice_id)
            result["audio_data"] = base64.b64encode(audio).decode("ascii")
            result["audio_media_type"] = media_type
        except ProviderError as e:
            # The text answer still goes out
            logger.error(f"Analytics answer not voiced: {e.message}")
    return result

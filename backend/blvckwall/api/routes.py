from fastapi import APIRouter
from .auth import router as auth_router
from .records import router as records_router
from .sample_data import router as sample_data_router
from .calls import router as calls_router
from .agents import router as agents_router
from .voices import router as voices_router
from .videos import router as videos_router
from .webhook import router as webhook_router
from .translate import router as translate_router
from .cards import router as cards_router
from .audit import router as audit_router
from .live_relay import router as live_relay_router
from .data_export import router as data_export_router
from .voice_analytics import router as voice_analytics_router

api_router = APIRouter()
api_router.include_router(auth_router, prefix="/auth", tags=["auth"])
api_router.include_router(records_router, prefix="/records", tags=["records"])
api_router.include_router(sample_data_router, prefix="/sample-data", tags=["sample-data"])
api_router.include_router(calls_router, prefix="/calls", tags=["calls"])
api_router.include_router(agents_router, prefix="/agents", tags=["agents"])
api_router.include_router(voices_router, tags=["voices"])
api_router.include_router(webhook_router, prefix="/videos", tags=["tavus"])
api_router.include_router(videos_router, prefix="/videos", tags=["videos"])
api_router.include_router(translate_router, prefix="/translate", tags=["translate"])
api_router.include_router(cards_router, prefix="/digital-cards", tags=["digital-cards"])
api_router.include_router(audit_router, prefix="/audit", tags=["audit"])
api_router.include_router(live_relay_router, prefix="/live-relay", tags=["live-relay"])
api_router.include_router(data_export_router, prefix="/data-export", tags=["data-export"])
api_router.include_router(voice_analytics_router, prefix="/voice-analytics", tags=["voice-analytics"])

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..config import ProviderMode, Settings
from .elevenlabs_client import DemoVoiceClient, ElevenLabsClient
from .ledger import DemoLedgerProvider
from .lingo_client import DemoTranslationClient, LingoClient
from .picaos_client import DemoCardClient, PicaosClient
from .retell_client import RetellClient, SimulatedRetellClient
from .tavus_client import DemoVideoClient, TavusClient

logger = logging.getLogger(__name__)


@dataclass
class Providers:
    telephony: Any
    voice: Any
    video: Any
    translation: Any
    cards: Any
    ledger: DemoLedgerProvider

    def modes(self) -> Dict[str, str]:
        return {
            "telephony": _mode_of(self.telephony),
            "voice": _mode_of(self.voice),
            "video": _mode_of(self.video),
            "translation": _mode_of(self.translation),
            "cards": _mode_of(self.cards),
            "ledger": ProviderMode.DEMO.value,
        }


def _mode_of(provider) -> str:
    return ProviderMode.LIVE.value if hasattr(provider, "api_key") else ProviderMode.DEMO.value


def _live_key(settings: Settings, name: str, api_key: Optional[str]) -> Optional[str]:
    if settings.mode_for(api_key) != ProviderMode.LIVE:
        return None
    if not (api_key and api_key.strip()):
        logger.warning(f"{name}: live mode requested but no API key configured, using demo provider")
        return None
    return api_key


def build_providers(settings: Settings) -> Providers:
    """Pick live or demo for each provider once, at startup."""
    timeout = settings.request_timeout_seconds

    key = _live_key(settings, "retell", settings.retell_api_key)
    telephony = (RetellClient(key, from_number=settings.retell_from_number, timeout=timeout)
                 if key else SimulatedRetellClient())

    key = _live_key(settings, "elevenlabs", settings.elevenlabs_api_key)
    voice = ElevenLabsClient(key, timeout=timeout) if key else DemoVoiceClient()

    key = _live_key(settings, "tavus", settings.tavus_api_key)
    video = TavusClient(key, timeout=timeout) if key else DemoVideoClient()

    key = _live_key(settings, "lingo", settings.lingo_api_key)
    translation = LingoClient(key, timeout=timeout) if key else DemoTranslationClient()

    key = _live_key(settings, "picaos", settings.picaos_api_key)
    cards = PicaosClient(key, timeout=timeout) if key else DemoCardClient()

    providers = Providers(telephony, voice, video, translation, cards, DemoLedgerProvider())
    logger.info(f"Providers ready: {providers.modes()}")
    return providers

import io
import logging
import wave
from typing import Any, Dict, List, Tuple

from .http_provider import LiveHttpProvider

logger = logging.getLogger(__name__)

DEMO_VOICES = [
    {"voice_id": "serena", "name": "Serena", "category": "premade"},
    {"voice_id": "morgan", "name": "Morgan", "category": "premade"},
    {"voice_id": "ava", "name": "Ava", "category": "premade"},
    {"voice_id": "ryan", "name": "Ryan", "category": "premade"},
    {"voice_id": "sophia", "name": "Sophia", "category": "premade"},
    {"voice_id": "james", "name": "James", "category": "premade"},
]


class ElevenLabsClient(LiveHttpProvider):
    name = "elevenlabs"
    base_url = "https://api.elevenlabs.io/v1"
    model_id = "eleven_monolingual_v1"

    def headers(self) -> Dict[str, str]:
        return {"xi-api-key": self.api_key, "Content-Type": "application/json"}

    async def list_voices(self) -> List[Dict[str, Any]]:
        data = await self._request("GET", "/voices")
        voices = data.get("voices") or []
        logger.info(f"Voices retrieved: {len(voices)}")
        return [
            {"voice_id": v.get("voice_id"), "name": v.get("name"), "category": v.get("category")}
            for v in voices
        ]

    async def synthesize(self, text: str, voice_id: str) -> Tuple[bytes, str]:
        response = await self._raw(
            "POST",
            f"/text-to-speech/{voice_id}",
            json={"text": text, "model_id": self.model_id},
            headers={"Accept": "audio/mpeg"},
        )
        return response.content, response.headers.get("content-type", "audio/mpeg")


def _silence_wav(seconds: float = 0.5, rate: int = 8000) -> bytes:
    buf = io.BytesIO()
    with wave.open(buf, "wb") as w:
        w.setnchannels(1)
        w.setsampwidth(2)
        w.setframerate(rate)
        w.writeframes(b"\x00\x00" * int(seconds * rate))
    return buf.getvalue()


class DemoVoiceClient:
    name = "elevenlabs"

    async def list_voices(self) -> List[Dict[str, Any]]:
        return [dict(v) for v in DEMO_VOICES]

    async def synthesize(self, text: str, voice_id: str) -> Tuple[bytes, str]:
        logger.info(f"[SIMULATED] Synthesizing {len(text)} chars with voice {voice_id}")
        return _silence_wav(), "audio/wav"

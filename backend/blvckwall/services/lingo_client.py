import logging
from typing import Any, Dict, List, Optional

from .http_provider import LiveHttpProvider

logger = logging.getLogger(__name__)

DEMO_LANGUAGES = [
    {"code": "en", "name": "English", "native_name": "English"},
    {"code": "es", "name": "Spanish", "native_name": "Español"},
    {"code": "fr", "name": "French", "native_name": "Français"},
    {"code": "de", "name": "German", "native_name": "Deutsch"},
    {"code": "it", "name": "Italian", "native_name": "Italiano"},
    {"code": "pt", "name": "Portuguese", "native_name": "Português"},
    {"code": "zh", "name": "Chinese", "native_name": "中文"},
    {"code": "ja", "name": "Japanese", "native_name": "日本語"},
    {"code": "ko", "name": "Korean", "native_name": "한국어"},
    {"code": "ar", "name": "Arabic", "native_name": "العربية"},
]

DEMO_TRANSLATIONS = {
    "Hello, how can I help you today?": {
        "es": "Hola, ¿cómo puedo ayudarte hoy?",
        "fr": "Bonjour, comment puis-je vous aider aujourd'hui?",
        "de": "Hallo, wie kann ich Ihnen heute helfen?",
        "it": "Ciao, come posso aiutarti oggi?",
        "pt": "Olá, como posso ajudá-lo hoje?",
        "zh": "你好，今天我能为您做些什么？",
        "ja": "こんにちは、今日はどのようにお手伝いできますか？",
        "ko": "안녕하세요, 오늘 어떻게 도와드릴까요?",
        "ar": "مرحبا، كيف يمكنني مساعدتك اليوم؟",
    },
}

DEMO_GREETINGS = {
    "hola": "es",
    "bonjour": "fr",
    "guten tag": "de",
    "ciao": "it",
    "olá": "pt",
    "你好": "zh",
    "こんにちは": "ja",
    "안녕하세요": "ko",
    "مرحبا": "ar",
}


class LingoClient(LiveHttpProvider):
    name = "lingo"
    base_url = "https://api.lingo.dev/v1"

    async def languages(self) -> List[Dict[str, Any]]:
        data = await self._request("GET", "/languages")
        return data.get("languages") or []

    async def translate(self, text: str, target_language: str, source_language: Optional[str] = None) -> Dict[str, Any]:
        payload = {"text": text, "target_language": target_language}
        if source_language:
            payload["source_language"] = source_language
        return await self._request("POST", "/translate", json=payload)

    async def detect_language(self, text: str) -> Dict[str, Any]:
        return await self._request("POST", "/detect", json={"text": text})


class DemoTranslationClient:
    name = "lingo"

    async def languages(self) -> List[Dict[str, Any]]:
        return [dict(lang) for lang in DEMO_LANGUAGES]

    async def translate(self, text: str, target_language: str, source_language: Optional[str] = None) -> Dict[str, Any]:
        translated = DEMO_TRANSLATIONS.get(text, {}).get(target_language) or f"[{target_language.upper()}] {text}"
        return {
            "text": text,
            "source_language": source_language or "en",
            "target_language": target_language,
            "translated_text": translated,
            "confidence": 0.95,
        }

    async def detect_language(self, text: str) -> Dict[str, Any]:
        lowered = text.lower()
        detected = next((code for word, code in DEMO_GREETINGS.items() if word in lowered), "en")
        return {"language": detected, "confidence": 0.9}

"""Operator relay into a live call.

An operator types messages for the caller. Each message is translated when the
session targets another language, voiced by the voice provider and appended to
the session transcript. One session per call is active at a time.
"""

import base64
import logging
from typing import Any, Dict, List, Optional

from ..errors import NotFound
from ..models.categories import Category, utc_now_iso

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "en"
RELAY_VOICE = "serena"


class LiveRelay:
    def __init__(self, facade, providers, voice_id: str = RELAY_VOICE) -> None:
        self.facade = facade
        self.providers = providers
        self.voice_id = voice_id

    def active_sessions(self, call_id: Optional[str] = None) -> List[Dict[str, Any]]:
        filters = {"status": "active"}
        if call_id:
            filters["call_id"] = call_id
        return self.facade.list(Category.LIVE_RELAY_SESSIONS, filters)

    def _active(self, call_id: str) -> Dict[str, Any]:
        sessions = self.active_sessions(call_id)
        if not sessions:
            raise NotFound(Category.LIVE_RELAY_SESSIONS.value, call_id)
        return sessions[0]

    def start_session(self, call_id: str, target_language: Optional[str] = None) -> Dict[str, Any]:
        existing = self.active_sessions(call_id)
        if existing:
            logger.info(f"Relay session for call {call_id} already active")
            return existing[0]
        session = self.facade.create(Category.LIVE_RELAY_SESSIONS, {
            "call_id": call_id,
            "status": "active",
            "target_language": target_language or DEFAULT_LANGUAGE,
            "transcript": [],
        })
        logger.info(f"Relay session {session['id']} started for call {call_id}")
        return session

    async def send_message(self, call_id: str, message: str, target_language: Optional[str] = None) -> Dict[str, Any]:
        session = self._active(call_id)
        language = target_language or session.get("target_language") or DEFAULT_LANGUAGE
        text = message
        if language != DEFAULT_LANGUAGE:
            translated = await self.providers.translation.translate(message, language, DEFAULT_LANGUAGE)
            text = translated.get("translated_text") or message
        audio, media_type = await self.providers.voice.synthesize(text, self.voice_id)

        entry = {
            "type": "operator_message",
            "message": text,
            "original": message,
            "language": language,
            "timestamp": utc_now_iso(),
        }
        transcript = list(session.get("transcript") or []) + [entry]
        updated = self.facade.update(Category.LIVE_RELAY_SESSIONS, session["id"], {"transcript": transcript})
        logger.info(f"Relayed message {len(transcript)} into call {call_id}")
        return {
            "success": True,
            "session": updated,
            "entry": entry,
            "audio_url": f"data:{media_type};base64,{base64.b64encode(audio).decode('ascii')}",
        }

    def end_session(self, call_id: str) -> Dict[str, Any]:
        session = self._active(call_id)
        ended = self.facade.update(Category.LIVE_RELAY_SESSIONS, session["id"], {
            "status": "ended",
            "ended_at": utc_now_iso(),
        })
        logger.info(f"Relay session {session['id']} ended")
        return ended

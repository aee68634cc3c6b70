"""Plain-language questions about the owner's own activity.

Questions are routed by keyword to a small set of answers computed from the
owner's records and audit trail.
"""

import logging
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Dict

from ..models.categories import Category

logger = logging.getLogger(__name__)

HELP_RESPONSE = "I'm not sure how to answer that question. Try asking about calls, agents, videos, activity or compliance."


class VoiceAnalytics:
    def __init__(self, facade, ledger) -> None:
        self.facade = facade
        self.ledger = ledger
        # First match wins
        self.topics = (
            (("call",), self._calls),
            (("compliance", "audit"), self._compliance),
            (("agent",), self._agents),
            (("video",), self._videos),
            (("activity", "today"), self._activity_today),
        )

    def _owner_id(self) -> str:
        return self.facade.sessions.resolve_owner_or_demo().id

    def answer(self, question: str) -> Dict[str, Any]:
        lowered = question.lower()
        for keywords, handler in self.topics:
            if any(k in lowered for k in keywords):
                topic, response, data = handler()
                logger.info(f"Analytics question answered as {topic}")
                return {"question": question, "topic": topic, "response": response, "data": data}
        return {"question": question, "topic": None, "response": HELP_RESPONSE, "data": None}

    def _calls(self):
        entries = self.ledger.history(self._owner_id(), entry_type="call")
        actions = Counter(e["metadata"]["action"] for e in entries)
        started = actions.get("call_started", 0)
        return "calls", f"You have started {started} calls and deployed {actions.get('agent_deployed', 0)} agents.", {
            "total": len(entries),
            "by_action": dict(actions),
        }

    def _compliance(self):
        entries = self.ledger.history(self._owner_id(), entry_type="compliance")
        return "compliance", f"There are {len(entries)} compliance entries in your audit trail.", {
            "total": len(entries),
            "latest": entries[0]["timestamp"] if entries else None,
        }

    def _agents(self):
        agents = self.facade.list(Category.AGENTS)
        statuses = Counter(a.get("status") or "draft" for a in agents)
        return "agents", f"You have {len(agents)} agents, {statuses.get('deployed', 0)} of them deployed.", {
            "total": len(agents),
            "by_status": dict(statuses),
        }

    def _videos(self):
        videos = self.facade.list(Category.VIDEO_SUMMARIES)
        statuses = Counter(v.get("status") or "queued" for v in videos)
        return "videos", f"You have {len(videos)} video summaries, {statuses.get('completed', 0)} completed.", {
            "total": len(videos),
            "by_status": dict(statuses),
        }

    def _activity_today(self):
        today = datetime.now(timezone.utc).date().isoformat()
        entries = [e for e in self.facade.list(Category.ACTIVITY_FEED) if (e.get("created_at") or "").startswith(today)]
        kinds = Counter(e.get("activity_type") for e in entries)
        return "activity", f"There were {len(entries)} activity events today.", {
            "total": len(entries),
            "by_type": dict(kinds),
        }

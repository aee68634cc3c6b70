import logging
import secrets
from typing import Any, Dict, Optional

from ..errors import ProviderError
from ..models.categories import utc_now_iso
from .http_provider import LiveHttpProvider

logger = logging.getLogger(__name__)


def doctors_note_script(patient_name: str, doctor_name: str, appointment_summary: str) -> str:
    return (
        f"Hello {patient_name}, this is {doctor_name}. \n\n"
        f"Here's a summary of your recent appointment: {appointment_summary}\n\n"
        "Thank you for choosing our practice. If you have any questions, please don't hesitate to contact us."
    )


class TavusClient(LiveHttpProvider):
    name = "tavus"
    base_url = "https://tavusapi.com"

    def headers(self) -> Dict[str, str]:
        return {"x-api-key": self.api_key, "Content-Type": "application/json"}

    @staticmethod
    def _video(data: Dict[str, Any]) -> Dict[str, Any]:
        video = data.get("data", data) or {}
        video_id = video.get("video_id")
        if not video_id:
            raise ProviderError("tavus", "response carried no video_id")
        return {
            "id": video_id,
            "status": video.get("status") or "queued",
            "video_url": video.get("video_url") or video.get("download_url"),
        }

    async def generate_video(self, replica_id: str, script: str, callback_url: Optional[str] = None) -> Dict[str, Any]:
        payload = {"replica_id": replica_id, "script": script}
        if callback_url:
            payload["callback_url"] = callback_url
        video = self._video(await self._request("POST", "/v2/videos", json=payload))
        logger.info(f"Video generation started: {video['id']}")
        return video

    async def get_video(self, video_id: str) -> Dict[str, Any]:
        return self._video(await self._request("GET", f"/v2/videos/{video_id}"))


class DemoVideoClient:
    name = "tavus"

    def __init__(self) -> None:
        self.videos: Dict[str, Dict[str, Any]] = {}

    async def generate_video(self, replica_id: str, script: str, callback_url: Optional[str] = None) -> Dict[str, Any]:
        video_id = f"vid_{secrets.token_hex(8)}"
        self.videos[video_id] = {
            "id": video_id,
            "status": "queued",
            "video_url": None,
            "replica_id": replica_id,
            "created_at": utc_now_iso(),
        }
        logger.info(f"[SIMULATED] Video {video_id} queued for replica {replica_id}")
        return dict(self.videos[video_id])

    async def get_video(self, video_id: str) -> Dict[str, Any]:
        video = self.videos.get(video_id)
        if video is None:
            raise ProviderError(self.name, f"video {video_id} not found", status=404)
        # Demo renders complete on first poll
        video["status"] = "completed"
        video["video_url"] = f"https://demo.blvckwall.ai/videos/{video_id}.mp4"
        return dict(video)

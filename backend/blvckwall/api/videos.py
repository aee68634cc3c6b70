from fastapi import APIRouter, Depends
import logging

from ..errors import ValidationError
from ..models.categories import Category
from ..schemas.pydantic_schemas import VideoRequest
from ..services.data_access import DataAccessFacade
from ..services.providers import Providers
from ..services.tavus_client import doctors_note_script
from .deps import get_facade, get_providers, get_runtime, record_action
from .webhook import callback_url

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", status_code=202)
async def generate_video(body: VideoRequest, facade: DataAccessFacade = Depends(get_facade),
                         providers: Providers = Depends(get_providers), runtime=Depends(get_runtime)):
    script = body.script
    if not script:
        missing = [n for n in ("patient_name", "doctor_name", "appointment_summary") if not getattr(body, n)]
        if missing:
            raise ValidationError([f"Field '{n}' is required when no script is given" for n in missing])
        script = doctors_note_script(body.patient_name, body.doctor_name, body.appointment_summary)

    owner = facade.sessions.resolve_owner_or_demo()
    callback = callback_url(runtime.settings, owner.id)
    video = await providers.video.generate_video(body.replica_id, script, callback_url=callback)
    summary = facade.create(Category.VIDEO_SUMMARIES, {
        "title": body.title or f"Video for {body.patient_name or 'patient'}",
        "summary": script,
        "video_id": video["id"],
        "status": video["status"],
    })
    record_action(
        facade, providers, "video", "video_requested",
        f"Video {video['id']} requested",
        resource_id=summary["id"],
        details={"video_id": video["id"], "replica_id": body.replica_id},
    )
    return {"video": video, "summary": summary}


@router.get("/{video_id}")
async def get_video(video_id: str, providers: Providers = Depends(get_providers)):
    return await providers.video.get_video(video_id)

from fastapi import APIRouter, Depends, Request, HTTPException
import hmac, hashlib, json
from urllib.parse import urlencode
import logging

from ..errors import StoreUnavailable
from ..models.categories import Category
from ..services.session import DEMO_OWNER
from .deps import Runtime, get_runtime

# Set up logger
logger = logging.getLogger(__name__)

router = APIRouter()


def verify_signature(secret: str, request_body: bytes, signature: str) -> bool:
    if not secret:
        return True  # allow in local dev
    digest = hmac.new(secret.encode(), request_body, hashlib.sha256).hexdigest()
    return hmac.compare_digest(digest, signature or "")


def _owner_message(owner_id: str) -> bytes:
    return f"owner:{owner_id}".encode()


def owner_signature(secret: str, owner_id: str) -> str:
    """Signature binding a callback URL to one owner; empty without a secret."""
    if not secret:
        return ""
    return hmac.new(secret.encode(), _owner_message(owner_id), hashlib.sha256).hexdigest()


def callback_url(settings, owner_id: str) -> str:
    params = {"owner": owner_id}
    signature = owner_signature(settings.tavus_webhook_secret or "", owner_id)
    if signature:
        params["owner_sig"] = signature
    return f"{settings.app_url.rstrip('/')}/api/videos/webhook?{urlencode(params)}"


@router.post("/webhook")
async def tavus_webhook(request: Request, owner: str, owner_sig: str = "", runtime: Runtime = Depends(get_runtime)):
    """Mark the owner's video summary completed when Tavus finishes rendering."""
    logger.info("Received webhook request from Tavus")

    secret = runtime.settings.tavus_webhook_secret or ""
    body = await request.body()
    sig = request.headers.get("x-tavus-signature", "")
    if not verify_signature(secret, body, sig):
        logger.warning("Webhook signature verification failed")
        raise HTTPException(status_code=401, detail="Invalid signature")
    if not verify_signature(secret, _owner_message(owner), owner_sig):
        logger.warning(f"Webhook owner signature verification failed for {owner}")
        raise HTTPException(status_code=401, detail="Invalid owner signature")

    try:
        event = json.loads(body.decode("utf-8"))
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid JSON body")

    if event.get("event_type") != "video.completed":
        return {"success": True, "updated": 0}

    data = event.get("data") or {}
    video_id = data.get("video_id")
    if not video_id:
        raise HTTPException(status_code=400, detail="video_id missing")

    updated = 0
    # The demo owner only ever has local records
    stores = (runtime.records,) if owner == DEMO_OWNER.id else (runtime.remote, runtime.records)
    for store in stores:
        try:
            rows = store.list(owner, Category.VIDEO_SUMMARIES, {"video_id": video_id})
            for row in rows:
                store.update(owner, Category.VIDEO_SUMMARIES, row["id"],
                             {"status": "completed", "video_url": data.get("video_url")})
                updated += 1
        except StoreUnavailable as e:
            logger.warning(f"Video {video_id} not updated in one store: {e.message}")
    logger.info(f"Video {video_id} completed, {updated} summaries updated")
    return {"success": True, "updated": updated}

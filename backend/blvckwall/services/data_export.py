import base64
import csv
import io
import json
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Mapping, Sequence

from ..errors import BlvckwallError, ValidationError
from ..models.categories import Category

logger = logging.getLogger(__name__)

EXPORT_TTL = timedelta(days=7)

# export_type -> category and the CSV columns written for it
CSV_EXPORTS: Dict[str, tuple] = {
    "agents": (Category.AGENTS,
               ("name", "voice", "status", "temperature", "interruption_sensitivity", "created_at")),
    "knowledge_bases": (Category.KNOWLEDGE_BASES, ("name", "type", "description", "created_at")),
    "video_summaries": (Category.VIDEO_SUMMARIES, ("title", "status", "video_url", "created_at")),
    "activity": (Category.ACTIVITY_FEED, ("activity_type", "title", "description", "created_at")),
    "live_relay": (Category.LIVE_RELAY_SESSIONS, ("call_id", "status", "target_language", "created_at", "ended_at")),
}
FULL_EXPORT = "all"
EXPORT_TYPES = tuple(CSV_EXPORTS) + (FULL_EXPORT,)

# Everything except the exports themselves, whose file_url already holds a copy
FULL_EXPORT_CATEGORIES = tuple(c for c in Category if c != Category.DATA_EXPORTS)


def render_csv(records: Iterable[Mapping[str, Any]], columns: Sequence[str]) -> str:
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=list(columns))
    writer.writeheader()
    for record in records:
        writer.writerow({k: record.get(k) for k in columns})
    return buf.getvalue()


def _data_url(media_type: str, data: bytes) -> str:
    return f"data:{media_type};base64,{base64.b64encode(data).decode('ascii')}"


def _build(facade, export_type: str, owner_id: str, now: datetime):
    stamp = now.strftime("%Y%m%d%H%M%S")
    if export_type == FULL_EXPORT:
        payload = {
            "export_date": now.isoformat(),
            "user_id": owner_id,
            "data": {cat.value: facade.list(cat) for cat in FULL_EXPORT_CATEGORIES},
        }
        return json.dumps(payload, indent=2, default=str), "application/json", f"complete-export-{stamp}.json"
    category, columns = CSV_EXPORTS[export_type]
    content = render_csv(facade.list(category), columns)
    return content, "text/csv", f"{export_type.replace('_', '-')}-export-{stamp}.csv"


def export_data(facade, export_type: str) -> Dict[str, Any]:
    """Write the current owner's records into a downloadable file.

    A ``data_exports`` record tracks the export from ``processing`` to
    ``completed`` (or ``failed``); the file travels as a data URL and expires
    after seven days. Only signed-in owners may export.
    """
    if export_type not in EXPORT_TYPES:
        raise ValidationError([f"Field 'export_type' must be one of: {', '.join(EXPORT_TYPES)}"])

    now = datetime.now(timezone.utc)
    record = facade.create(Category.DATA_EXPORTS, {
        "export_type": export_type,
        "status": "processing",
        "expires_at": (now + EXPORT_TTL).isoformat(),
    })
    owner_id = record["user_id"]
    try:
        content, media_type, filename = _build(facade, export_type, owner_id, now)
    except BlvckwallError as e:
        logger.error(f"Export {record['id']} failed: {e.message}")
        facade.update(Category.DATA_EXPORTS, record["id"], {"status": "failed"})
        raise

    data = content.encode("utf-8")
    url = _data_url(media_type, data)
    updated = facade.update(Category.DATA_EXPORTS, record["id"], {
        "status": "completed",
        "file_url": url,
        "filename": filename,
        "file_size_bytes": len(data),
    })
    logger.info(f"Export {record['id']} ({export_type}) completed: {len(data)} bytes")
    return {"export_id": record["id"], "download_url": url, "filename": filename, "export": updated}


def list_exports(facade) -> List[Dict[str, Any]]:
    return facade.list(Category.DATA_EXPORTS)

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple
from uuid import uuid4

from ..errors import ValidationError


LOCAL_KEY_PREFIX = "blvckwall_secure_"


class Category(str, Enum):
    AGENTS = "agents"
    KNOWLEDGE_BASES = "knowledge_bases"
    CONVERSATION_FLOWS = "conversation_flows"
    PHONE_NUMBERS = "phone_numbers"
    VIDEO_SUMMARIES = "video_summaries"
    FEEDBACK_SUBMISSIONS = "feedback_submissions"
    DATA_EXPORTS = "data_exports"
    ACTIVITY_FEED = "activity_feed"
    LIVE_RELAY_SESSIONS = "live_relay_sessions"


@dataclass(frozen=True)
class CategorySchema:
    table: str
    # Caller-writable columns; the reserved store columns come on top
    columns: Tuple[str, ...] = ()
    required: Tuple[str, ...] = ()
    max_length: Dict[str, int] = field(default_factory=dict)
    # field -> (low, high), inclusive
    ranges: Dict[str, Tuple[float, float]] = field(default_factory=dict)
    choices: Dict[str, Tuple[str, ...]] = field(default_factory=dict)
    requires_real_owner: bool = False


SCHEMAS: Dict[Category, CategorySchema] = {
    Category.AGENTS: CategorySchema(
        table="agents",
        columns=("name", "voice", "greeting", "description", "temperature", "interruption_sensitivity",
                 "status", "retell_agent_id", "retell_llm_id"),
        required=("name", "voice"),
        max_length={"name": 100, "greeting": 500},
        ranges={"temperature": (0.0, 1.0), "interruption_sensitivity": (0.0, 1.0)},
    ),
    Category.KNOWLEDGE_BASES: CategorySchema(
        table="knowledge_bases",
        columns=("name", "description", "type", "documents"),
        required=("name",),
        max_length={"name": 100, "description": 1000},
    ),
    Category.CONVERSATION_FLOWS: CategorySchema(
        table="conversation_flows",
        columns=("name", "description", "nodes", "edges"),
        required=("name",),
        max_length={"name": 100},
    ),
    Category.PHONE_NUMBERS: CategorySchema(
        table="phone_numbers",
        columns=("phone_number", "provider", "label", "agent_id"),
        required=("phone_number", "provider"),
        max_length={"label": 100},
        choices={"provider": ("retell", "elevenlabs")},
    ),
    Category.VIDEO_SUMMARIES: CategorySchema(
        table="video_summaries",
        columns=("title", "summary", "timestamps", "video_id", "video_url", "status"),
        required=("title", "summary"),
        max_length={"title": 100, "summary": 5000},
    ),
    Category.FEEDBACK_SUBMISSIONS: CategorySchema(
        table="feedback_submissions",
        columns=("type", "title", "description", "status"),
        required=("type", "title"),
        max_length={"title": 200, "description": 5000},
    ),
    Category.DATA_EXPORTS: CategorySchema(
        table="data_exports",
        columns=("export_type", "status", "file_url", "filename", "file_size_bytes", "expires_at"),
        required=("export_type",),
        requires_real_owner=True,
    ),
    Category.ACTIVITY_FEED: CategorySchema(
        table="activity_feed",
        columns=("activity_type", "title", "description", "metadata", "is_read"),
        required=("activity_type", "title"),
        max_length={"title": 200},
    ),
    Category.LIVE_RELAY_SESSIONS: CategorySchema(
        table="live_relay_sessions",
        columns=("call_id", "status", "target_language", "transcript", "ended_at"),
        required=("call_id",),
        choices={"status": ("active", "ended")},
    ),
}

# Columns owned by the stores, never accepted from callers
RESERVED_FIELDS = ("id", "user_id", "created_at", "updated_at", "version")


def parse_category(value: str) -> Category:
    try:
        return Category(value)
    except ValueError:
        raise ValidationError([f"Unknown category '{value}'"]) from None


def schema_for(category: Category) -> CategorySchema:
    return SCHEMAS[category]


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def validate_fields(category: Category, data: Mapping[str, Any], partial: bool = False) -> List[str]:
    """Return every rule violation of ``data``; an empty list means valid.

    With ``partial`` only the keys present in ``data`` are checked, so a patch
    may omit required fields but may not blank them.
    """
    schema = SCHEMAS[category]
    errors: List[str] = []

    for name in data:
        if name not in schema.columns and name not in RESERVED_FIELDS:
            errors.append(f"Unknown field '{name}'")

    for name in schema.required:
        if partial and name not in data:
            continue
        if _is_blank(data.get(name)):
            errors.append(f"Field '{name}' is required")

    for name, limit in schema.max_length.items():
        value = data.get(name)
        if isinstance(value, str) and len(value) > limit:
            errors.append(f"Field '{name}' exceeds maximum length of {limit}")

    for name, (low, high) in schema.ranges.items():
        value = data.get(name)
        if value is None:
            continue
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            errors.append(f"Field '{name}' must be a number")
        elif not low <= value <= high:
            errors.append(f"Field '{name}' must be between {low} and {high}")

    for name, allowed in schema.choices.items():
        value = data.get(name)
        if not _is_blank(value) and value not in allowed:
            errors.append(f"Field '{name}' must be one of: {', '.join(allowed)}")

    return errors


def validate_filters(category: Category, filters: Optional[Mapping[str, Any]]) -> List[str]:
    schema = SCHEMAS[category]
    return [
        f"Cannot filter on unknown field '{name}'"
        for name in (filters or {})
        if name not in schema.columns and name not in RESERVED_FIELDS
    ]


def query_filters(category: Category, params: Mapping[str, str]) -> Dict[str, str]:
    """Keep only the query parameters naming a column of ``category``."""
    schema = SCHEMAS[category]
    return {k: v for k, v in params.items() if k in schema.columns or k in RESERVED_FIELDS}


def strip_reserved(data: Mapping[str, Any], keep_id: bool = False) -> Dict[str, Any]:
    cleaned = {k: v for k, v in data.items() if k not in RESERVED_FIELDS}
    if keep_id and data.get("id"):
        cleaned["id"] = str(data["id"])
    return cleaned


def local_prefix(owner_id: str, category: Optional[Category] = None) -> str:
    if category is None:
        return f"{LOCAL_KEY_PREFIX}{owner_id}_"
    return f"{LOCAL_KEY_PREFIX}{owner_id}_{category.value}_"


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_record_id() -> str:
    return str(uuid4())


def matches_filters(record: Mapping[str, Any], filters: Optional[Mapping[str, Any]]) -> bool:
    if not filters:
        return True
    return all(_filter_matches(record.get(k), v) for k, v in filters.items())


def _filter_matches(stored: Any, wanted: Any) -> bool:
    """Equality with query-string values cast to the stored type, as PostgREST does."""
    if not isinstance(wanted, str) or isinstance(stored, str) or stored is None:
        return stored == wanted
    if isinstance(stored, bool):
        return wanted.strip().lower() == ("true" if stored else "false")
    if isinstance(stored, (int, float)):
        try:
            return float(wanted) == float(stored)
        except ValueError:
            return False
    return False

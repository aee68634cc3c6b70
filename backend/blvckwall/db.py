from typing import Any, Dict, List, Mapping, Optional
from uuid import uuid4
import logging

import httpx
from postgrest.exceptions import APIError
# Lightweight adapter over Supabase client. Without SUPABASE_URL every remote call reports StoreUnavailable
# so the data access layer degrades to the local store.
from supabase import create_client, Client, ClientOptions

from .config import Settings, get_settings
from .errors import NotFound, StoreUnavailable, ValidationError
from .models.categories import Category, matches_filters, schema_for, utc_now_iso

logger = logging.getLogger(__name__)


class InMemoryRecordStore:
    """Dict-backed remote store; ``available = False`` simulates an outage."""

    def __init__(self) -> None:
        self.tables: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.available = True
        self._seq = 0
        self._order: Dict[str, int] = {}

    def _check(self) -> None:
        if not self.available:
            raise StoreUnavailable("Remote store is unavailable")

    def _rows(self, category: Category) -> Dict[str, Dict[str, Any]]:
        return self.tables.setdefault(schema_for(category).table, {})

    def _owned(self, owner_id: str, category: Category, record_id: str) -> Dict[str, Any]:
        row = self._rows(category).get(str(record_id))
        if row is None or row.get("user_id") != owner_id:
            raise NotFound(category.value, str(record_id))
        return row

    def list(self, owner_id: str, category: Category, filters: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        self._check()
        items = [
            dict(r) for r in self._rows(category).values()
            if r.get("user_id") == owner_id and matches_filters(r, filters)
        ]
        items.sort(key=lambda r: (r.get("created_at") or "", self._order.get(r["id"], 0)), reverse=True)
        return items

    def get(self, owner_id: str, category: Category, record_id: str) -> Dict[str, Any]:
        self._check()
        return dict(self._owned(owner_id, category, record_id))

    def insert(self, owner_id: str, category: Category, fields: Mapping[str, Any]) -> Dict[str, Any]:
        self._check()
        now = utc_now_iso()
        rid = str(fields.get("id") or uuid4())
        obj = {
            **fields,
            "id": rid,
            "user_id": owner_id,
            "created_at": fields.get("created_at") or now,
            "updated_at": now,
            "version": 1,
        }
        self._seq += 1
        self._order[rid] = self._seq
        self._rows(category)[rid] = obj
        return dict(obj)

    def update(self, owner_id: str, category: Category, record_id: str, fields: Mapping[str, Any]) -> Dict[str, Any]:
        self._check()
        obj = self._owned(owner_id, category, record_id)
        for k, v in fields.items():
            obj[k] = v
        obj["updated_at"] = utc_now_iso()
        obj["version"] = int(obj.get("version") or 1) + 1
        return dict(obj)

    def delete(self, owner_id: str, category: Category, record_id: str) -> None:
        self._check()
        self._owned(owner_id, category, record_id)
        self._rows(category).pop(str(record_id))


def _is_bad_request(code: str) -> bool:
    """True for errors caused by the request itself rather than the store's health.

    Postgres data exceptions (22), integrity violations (23) and syntax or
    undefined-object errors (42, but not 42501 insufficient privilege), plus
    PostgREST request (PGRST1xx) and schema cache (PGRST2xx) errors.
    """
    if code.startswith("PGRST"):
        return code[5:6] in ("1", "2")
    if code == "42501":
        return False
    return code[:2] in ("22", "23", "42")


class SupabaseRecordStore:
    def __init__(self, client: Client) -> None:
        self.client = client

    def _table(self, category: Category):
        return self.client.table(schema_for(category).table)

    def _execute(self, query, category: Category):
        try:
            return query.execute()
        except APIError as e:
            code = str(e.code or "")
            if _is_bad_request(code):
                logger.warning(f"Supabase rejected {category.value} request: {code} {e.message}")
                raise ValidationError([e.message or code]) from e
            logger.error(f"Supabase error on {category.value}: {code} {e.message}")
            raise StoreUnavailable(f"Remote store rejected the request: {e.message or code}") from e
        except httpx.HTTPError as e:
            logger.error(f"Supabase request failed on {category.value}: {str(e)}")
            raise StoreUnavailable(f"Remote store unreachable: {str(e)}") from e

    def list(self, owner_id: str, category: Category, filters: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        query = self._table(category).select("*").eq("user_id", owner_id)
        for k, v in (filters or {}).items():
            query = query.eq(k, v)
        res = self._execute(query.order("created_at", desc=True), category)
        return res.data or []

    def get(self, owner_id: str, category: Category, record_id: str) -> Dict[str, Any]:
        query = self._table(category).select("*").eq("id", str(record_id)).eq("user_id", owner_id).limit(1)
        res = self._execute(query, category)
        if not res.data:
            raise NotFound(category.value, str(record_id))
        return res.data[0]

    def insert(self, owner_id: str, category: Category, fields: Mapping[str, Any]) -> Dict[str, Any]:
        payload = {**fields, "user_id": owner_id}
        res = self._execute(self._table(category).insert(payload), category)
        if not res.data:
            raise StoreUnavailable(f"Remote store returned no row for new {category.value} record")
        return res.data[0]

    def update(self, owner_id: str, category: Category, record_id: str, fields: Mapping[str, Any]) -> Dict[str, Any]:
        if not fields:
            return self.get(owner_id, category, record_id)
        payload = {**fields, "updated_at": utc_now_iso()}
        query = self._table(category).update(payload).eq("id", str(record_id)).eq("user_id", owner_id)
        res = self._execute(query, category)
        if not res.data:
            raise NotFound(category.value, str(record_id))
        return res.data[0]

    def delete(self, owner_id: str, category: Category, record_id: str) -> None:
        query = self._table(category).delete().eq("id", str(record_id)).eq("user_id", owner_id)
        res = self._execute(query, category)
        if not res.data:
            raise NotFound(category.value, str(record_id))


class UnavailableRecordStore:
    """Remote store used when Supabase is not configured."""

    def _fail(self, *args, **kwargs):
        raise StoreUnavailable("Remote store is not configured")

    list = get = insert = update = delete = _fail


_client: Optional[Client] = None
_store_instance: Optional[Any] = None


def get_supabase_client(settings: Optional[Settings] = None) -> Optional[Client]:
    global _client
    settings = settings or get_settings()
    if not settings.remote_configured:
        return None
    if _client is None:
        key = settings.supabase_service_role_key or settings.supabase_anon_key
        options = ClientOptions(postgrest_client_timeout=settings.request_timeout_seconds)
        _client = create_client(settings.supabase_url, key, options=options)
    return _client


def get_remote_store(settings: Optional[Settings] = None):
    global _store_instance
    client = get_supabase_client(settings)
    if client is not None:
        if _store_instance is None or not isinstance(_store_instance, SupabaseRecordStore):
            _store_instance = SupabaseRecordStore(client)
        return _store_instance
    if _store_instance is None or not isinstance(_store_instance, UnavailableRecordStore):
        logger.warning("SUPABASE_URL not configured, remote store unavailable; using local demo storage")
        _store_instance = UnavailableRecordStore()
    return _store_instance


def create_auth_client(settings: Settings) -> Client:
    """A fresh client per session; signing in mutates the client's auth state."""
    key = settings.supabase_anon_key or settings.supabase_service_role_key
    options = ClientOptions(
        postgrest_client_timeout=settings.request_timeout_seconds,
        auto_refresh_token=False,
        persist_session=False,
    )
    return create_client(settings.supabase_url, key, options=options)

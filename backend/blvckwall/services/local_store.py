import logging
from typing import Any, Dict, List, Mapping, Optional

from ..errors import DecryptionError, NotFound
from ..models.categories import (
    Category,
    local_prefix,
    matches_filters,
    new_record_id,
    utc_now_iso,
)
from .crypto import EncryptionCodec

logger = logging.getLogger(__name__)


class LocalDurableStore:
    """Encrypted key-value persistence scoped to one device/profile.

    Values are stored as ``encrypt(value)`` under
    ``blvckwall_secure_{owner}_{category}_{key}``. Nothing here is synchronised
    across clients.
    """

    def __init__(self, backend, codec: Optional[EncryptionCodec] = None) -> None:
        self.backend = backend
        self.codec = codec or EncryptionCodec(backend)

    @staticmethod
    def storage_key(owner_id: str, category: Category, key: str) -> str:
        return f"{local_prefix(owner_id, category)}{key}"

    def set(self, owner_id: str, category: Category, key: str, value: Any) -> None:
        token = self.codec.encrypt(value, owner_id)
        self.backend.set_item(owner_id, self.storage_key(owner_id, category, key), token)

    def get(self, owner_id: str, category: Category, key: str) -> Optional[Any]:
        token = self.backend.get_item(owner_id, self.storage_key(owner_id, category, key))
        if token is None:
            return None
        try:
            return self.codec.decrypt(token, owner_id)
        except DecryptionError as e:
            logger.warning(f"Treating unreadable local entry {category.value}/{key} as absent: {e.message}")
            return None

    def remove(self, owner_id: str, category: Category, key: str) -> bool:
        return self.backend.remove_item(owner_id, self.storage_key(owner_id, category, key))

    def keys(self, owner_id: str, category: Category) -> List[str]:
        prefix = local_prefix(owner_id, category)
        return [k[len(prefix):] for k in self.backend.keys(owner_id, prefix)]

    def clear(self, owner_id: str) -> int:
        """Remove every entry of one owner, encryption key included."""
        self.codec.forget(owner_id)
        removed = self.backend.remove_owner(owner_id)
        logger.info(f"Cleared {removed} local entries for owner {owner_id}")
        return removed


class LocalRecordStore:
    """Record CRUD over the local durable store, one encrypted blob per record."""

    def __init__(self, store: LocalDurableStore) -> None:
        self.store = store

    def list(self, owner_id: str, category: Category, filters: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        items = []
        for key in self.store.keys(owner_id, category):
            record = self.store.get(owner_id, category, key)
            if record is not None and matches_filters(record, filters):
                items.append(record)
        items.sort(key=lambda r: r.get("created_at") or "", reverse=True)
        return items

    def get(self, owner_id: str, category: Category, record_id: str) -> Dict[str, Any]:
        record = self.store.get(owner_id, category, str(record_id))
        if record is None:
            raise NotFound(category.value, str(record_id))
        return record

    def insert(self, owner_id: str, category: Category, fields: Mapping[str, Any]) -> Dict[str, Any]:
        now = utc_now_iso()
        record = dict(fields)
        record["id"] = str(record.get("id") or new_record_id())
        record["user_id"] = owner_id
        record["created_at"] = record.get("created_at") or now
        record["updated_at"] = now
        record["version"] = 1
        self.store.set(owner_id, category, record["id"], record)
        return record

    def update(self, owner_id: str, category: Category, record_id: str, fields: Mapping[str, Any]) -> Dict[str, Any]:
        current = self.get(owner_id, category, record_id)
        updated = {**current, **fields}
        updated["id"] = current["id"]
        updated["user_id"] = owner_id
        updated["created_at"] = current.get("created_at")
        updated["updated_at"] = utc_now_iso()
        updated["version"] = int(current.get("version") or 1) + 1
        self.store.set(owner_id, category, current["id"], updated)
        return updated

    def delete(self, owner_id: str, category: Category, record_id: str) -> None:
        if not self.store.remove(owner_id, category, str(record_id)):
            raise NotFound(category.value, str(record_id))

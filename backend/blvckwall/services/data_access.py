"""Unified data access facade.

One ``list/get/create/update/delete`` surface per category that hides which
store serves the call:

1. The owner comes from ``SessionProvider.resolve_owner_or_demo()``. The demo
   owner has no remote session, so it is served by the local store only and
   its records never mix with a real owner's.
2. A real owner is served by the remote store first. ``StoreUnavailable``
   falls back to the local store; ``NotFound`` and ``ValidationError`` are
   raised as they are.
3. ``create`` and ``update`` report every validation problem, unknown fields
   included, before any store is touched; ``list`` rejects filters on unknown
   fields the same way.
4. ``delete`` attempts both stores and fails only when both fail with
   something other than ``NotFound``.
5. ``list`` never merges the two stores.
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from ..errors import NotFound, StoreUnavailable, Unauthorized, ValidationError
from ..models.categories import (
    Category,
    parse_category,
    schema_for,
    strip_reserved,
    validate_fields,
    validate_filters,
)
from .local_store import LocalRecordStore
from .session import Owner, SessionProvider

logger = logging.getLogger(__name__)

CategoryLike = Union[Category, str]


class StorageMode(str, Enum):
    REMOTE = "remote"
    LOCAL_DEMO = "local-demo"


class DataAccessFacade:
    def __init__(self, sessions: SessionProvider, remote, local: LocalRecordStore) -> None:
        self.sessions = sessions
        self.remote = remote
        self.local = local

    @staticmethod
    def storage_mode(owner: Owner) -> StorageMode:
        return StorageMode.LOCAL_DEMO if owner.is_demo else StorageMode.REMOTE

    def _resolve(self, category: CategoryLike):
        cat = category if isinstance(category, Category) else parse_category(category)
        owner = self.sessions.resolve_owner_or_demo()
        if owner.is_demo and schema_for(cat).requires_real_owner:
            raise Unauthorized(f"Sign in to access {cat.value}")
        return cat, owner

    def _run(self, op: str, cat: Category, owner: Owner,
             remote_call: Callable[[], Any], local_call: Callable[[], Any]) -> Any:
        if self.storage_mode(owner) == StorageMode.LOCAL_DEMO:
            return local_call()
        try:
            return remote_call()
        except StoreUnavailable as e:
            logger.warning(f"{op} {cat.value}: remote store unavailable ({e.message}), using local store")
            return local_call()

    def list(self, category: CategoryLike, filters: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        cat, owner = self._resolve(category)
        violations = validate_filters(cat, filters)
        if violations:
            raise ValidationError(violations)
        return self._run(
            "list", cat, owner,
            lambda: self.remote.list(owner.id, cat, filters),
            lambda: self.local.list(owner.id, cat, filters),
        )

    def get(self, category: CategoryLike, record_id: str) -> Dict[str, Any]:
        cat, owner = self._resolve(category)
        return self._run(
            "get", cat, owner,
            lambda: self.remote.get(owner.id, cat, record_id),
            lambda: self.local.get(owner.id, cat, record_id),
        )

    def create(self, category: CategoryLike, fields: Mapping[str, Any]) -> Dict[str, Any]:
        cat, owner = self._resolve(category)
        violations = validate_fields(cat, fields)
        if violations:
            raise ValidationError(violations)
        payload = strip_reserved(fields, keep_id=True)
        record = self._run(
            "create", cat, owner,
            lambda: self.remote.insert(owner.id, cat, payload),
            lambda: self.local.insert(owner.id, cat, payload),
        )
        logger.info(f"Created {cat.value} record {record.get('id')} for owner {owner.id}")
        return record

    def update(self, category: CategoryLike, record_id: str, fields: Mapping[str, Any]) -> Dict[str, Any]:
        cat, owner = self._resolve(category)
        patch = strip_reserved(fields)
        violations = validate_fields(cat, patch, partial=True)
        if violations:
            raise ValidationError(violations)
        return self._run(
            "update", cat, owner,
            lambda: self.remote.update(owner.id, cat, record_id, patch),
            lambda: self.local.update(owner.id, cat, record_id, patch),
        )

    def delete(self, category: CategoryLike, record_id: str) -> bool:
        """Remove the record from every store holding it.

        Returns True when at least one store removed it and False when no
        store had it, so repeating a delete is harmless.
        """
        cat, owner = self._resolve(category)
        deleted = False
        remote_error: Optional[StoreUnavailable] = None
        local_error: Optional[StoreUnavailable] = None

        if self.storage_mode(owner) == StorageMode.REMOTE:
            try:
                self.remote.delete(owner.id, cat, record_id)
                deleted = True
            except NotFound:
                pass
            except StoreUnavailable as e:
                logger.warning(f"delete {cat.value}: remote store unavailable ({e.message})")
                remote_error = e
        try:
            self.local.delete(owner.id, cat, record_id)
            deleted = True
        except NotFound:
            pass
        except StoreUnavailable as e:
            local_error = e

        if local_error is not None and (remote_error is not None or self.storage_mode(owner) == StorageMode.LOCAL_DEMO):
            raise StoreUnavailable(f"Could not delete {cat.value} record {record_id}: no store reachable")
        if local_error is not None:
            logger.warning(f"delete {cat.value}: local copy of {record_id} not removed ({local_error.message})")
        return deleted

    def log_activity(self, activity_type: str, title: str, description: Optional[str] = None,
                     metadata: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self.create(Category.ACTIVITY_FEED, {
            "activity_type": activity_type,
            "title": title,
            "description": description,
            "metadata": metadata or {},
            "is_read": False,
        })

"""Audit trail entries for provider actions.

Only a demo ledger exists: entries are hashed with sha256 but never
submitted to a chain, so they carry ``network="demo"`` and
``confirmed=False``.
"""

import hashlib
import json
import logging
import secrets
import threading
from typing import Any, Dict, List, Optional

from ..errors import ValidationError
from ..models.categories import utc_now_iso

logger = logging.getLogger(__name__)

ENTRY_TYPES = ("call", "video", "card", "compliance", "hr_request")


class DemoLedgerProvider:
    name = "algorand"
    network = "demo"

    def __init__(self) -> None:
        self._entries: List[Dict[str, Any]] = []
        self._block = 1000
        self._lock = threading.Lock()

    def record(self, entry_type: str, action: str, owner_id: str,
               resource_id: Optional[str] = None, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        if entry_type not in ENTRY_TYPES:
            raise ValidationError([f"type must be one of {', '.join(ENTRY_TYPES)}"])
        metadata = {
            "action": action,
            "user_id": owner_id,
            "resource_id": resource_id,
            "details": details or {},
        }
        timestamp = utc_now_iso()
        digest = hashlib.sha256(
            json.dumps({"type": entry_type, "timestamp": timestamp, "metadata": metadata},
                       sort_keys=True, default=str).encode("utf-8")
        ).hexdigest()
        tx_id = f"TXN{secrets.token_hex(16).upper()}"
        with self._lock:
            self._block += 1
            entry = {
                "id": tx_id,
                "type": entry_type,
                "timestamp": timestamp,
                "hash": digest,
                "block": self._block,
                "network": self.network,
                "confirmed": False,
                "explorer_url": None,
                "metadata": metadata,
            }
            self._entries.append(entry)
        logger.info(f"[SIMULATED] Ledger entry {tx_id} ({entry_type}/{action}) for owner {owner_id}")
        return dict(entry)

    def history(self, owner_id: str, entry_type: Optional[str] = None) -> List[Dict[str, Any]]:
        with self._lock:
            entries = [e for e in self._entries if e["metadata"]["user_id"] == owner_id]
        if entry_type:
            entries = [e for e in entries if e["type"] == entry_type]
        return [dict(e) for e in reversed(entries)]

"""Per-owner symmetric encryption of JSON payloads for the local store.

Tokens look like ``v1.<urlsafe-base64(nonce || ciphertext)>``. The version
prefix leaves room for a future key rotation or cipher change; only ``v1``
(AES-128-GCM, owner id as associated data) exists today.
"""

import base64
import binascii
import json
import logging
import os
from typing import Any, Dict

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..errors import DecryptionError

logger = logging.getLogger(__name__)

ENCRYPTION_KEY_PREFIX = "blvckwall_encryption_key_"
CIPHERTEXT_VERSION = "v1"
KEY_BYTES = 16
NONCE_BYTES = 12


class EncryptionCodec:
    def __init__(self, backend) -> None:
        self.backend = backend
        self._keys: Dict[str, bytes] = {}

    @staticmethod
    def key_name(owner_id: str) -> str:
        return f"{ENCRYPTION_KEY_PREFIX}{owner_id}"

    def _get_key(self, owner_id: str) -> bytes:
        cached = self._keys.get(owner_id)
        if cached is not None:
            return cached
        stored = self.backend.get_item(owner_id, self.key_name(owner_id))
        if stored:
            try:
                key = bytes.fromhex(stored)
            except (TypeError, ValueError):
                raise DecryptionError(f"Stored encryption key of owner {owner_id} is not hex") from None
            if len(key) != KEY_BYTES:
                raise DecryptionError(f"Stored encryption key of owner {owner_id} has {len(key)} bytes")
        else:
            key = os.urandom(KEY_BYTES)
            self.backend.set_item(owner_id, self.key_name(owner_id), key.hex())
            logger.info(f"Generated local encryption key for owner {owner_id}")
        self._keys[owner_id] = key
        return key

    def encrypt(self, payload: Any, owner_id: str) -> str:
        key = self._get_key(owner_id)
        nonce = os.urandom(NONCE_BYTES)
        plaintext = json.dumps(payload).encode("utf-8")
        sealed = AESGCM(key).encrypt(nonce, plaintext, owner_id.encode("utf-8"))
        body = base64.urlsafe_b64encode(nonce + sealed).decode("ascii")
        return f"{CIPHERTEXT_VERSION}.{body}"

    def decrypt(self, token: str, owner_id: str) -> Any:
        version, _, body = (token or "").partition(".")
        if version != CIPHERTEXT_VERSION or not body:
            raise DecryptionError(f"Unsupported ciphertext format for owner {owner_id}")
        try:
            raw = base64.urlsafe_b64decode(body.encode("ascii"))
        except (binascii.Error, ValueError):
            raise DecryptionError(f"Corrupted ciphertext for owner {owner_id}") from None
        if len(raw) <= NONCE_BYTES:
            raise DecryptionError(f"Corrupted ciphertext for owner {owner_id}")
        key = self._get_key(owner_id)
        try:
            plaintext = AESGCM(key).decrypt(raw[:NONCE_BYTES], raw[NONCE_BYTES:], owner_id.encode("utf-8"))
        except InvalidTag:
            raise DecryptionError(f"Ciphertext does not match the key of owner {owner_id}") from None
        try:
            return json.loads(plaintext.decode("utf-8"))
        except (UnicodeDecodeError, ValueError):
            raise DecryptionError(f"Decrypted payload is not JSON for owner {owner_id}") from None

    def forget(self, owner_id: str) -> None:
        """Drop the cached key; it is reloaded from the backend on next use."""
        self._keys.pop(owner_id, None)

    def destroy_key(self, owner_id: str) -> None:
        self._keys.pop(owner_id, None)
        self.backend.remove_item(owner_id, self.key_name(owner_id))

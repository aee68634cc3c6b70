import logging
import secrets
from typing import Any, Dict

from ..errors import ProviderError
from ..models.categories import utc_now_iso
from .http_provider import LiveHttpProvider

logger = logging.getLogger(__name__)

CARD_FIELDS = ("name", "title", "company", "email", "phone", "image_url")


class PicaosClient(LiveHttpProvider):
    """Digital business cards pinned to IPFS through Picaos."""

    name = "picaos"
    base_url = "https://api.picaos.com/v1"

    async def create_card(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        payload = {k: fields.get(k) for k in CARD_FIELDS if fields.get(k) is not None}
        card = await self._request("POST", "/cards", json=payload)
        if not card.get("id"):
            raise ProviderError(self.name, "card creation returned no id")
        logger.info(f"Card pinned to IPFS: {card.get('ipfs_hash')}")
        return {**card, "status": card.get("status") or "pinned"}


class DemoCardClient:
    name = "picaos"

    async def create_card(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        ipfs_hash = f"QmX{secrets.token_hex(12)}"
        card = {k: fields.get(k) for k in CARD_FIELDS}
        card.update({
            "id": f"card_{secrets.token_hex(6)}",
            "status": "pinned",
            "ipfs_hash": ipfs_hash,
            "qr_code_url": f"https://api.qrserver.com/v1/create-qr-code/?size=200x200&data=https://ipfs.io/ipfs/{ipfs_hash}",
            "verification_url": f"https://picaos.com/verify/{ipfs_hash}",
            "created_at": utc_now_iso(),
        })
        logger.info(f"[SIMULATED] Card {card['id']} pinned as {ipfs_hash}")
        return card

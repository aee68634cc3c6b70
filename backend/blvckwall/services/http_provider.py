import logging
from typing import Any, Dict, Optional

import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..errors import ProviderError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class LiveHttpProvider:
    """Shared request plumbing for the live SaaS adapters.

    Transport failures are retried once; anything still failing surfaces as
    ProviderError.
    """

    name = "provider"
    base_url = ""

    def __init__(self, api_key: str, timeout: float = DEFAULT_TIMEOUT,
                 transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self.api_key = api_key.strip()
        self.timeout = timeout
        self.transport = transport
        logger.info(f"{self.name} client initialized with API key")

    def headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(2),
        wait=wait_exponential(multiplier=0.5, max=2),
        reraise=True,
    )
    async def _send(self, method: str, path: str, **kwargs) -> httpx.Response:
        async with httpx.AsyncClient(base_url=self.base_url, headers=self.headers(),
                                     timeout=self.timeout, transport=self.transport) as client:
            return await client.request(method, path, **kwargs)

    async def _raw(self, method: str, path: str, **kwargs) -> httpx.Response:
        logger.info(f"{self.name} {method} {path}")
        try:
            response = await self._send(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"{self.name} API HTTP error: {e.response.status_code} - {e.response.text[:500]}")
            raise ProviderError(self.name, f"HTTP {e.response.status_code}", status=e.response.status_code) from e
        except httpx.RequestError as e:
            logger.error(f"{self.name} API request error: {str(e)}")
            raise ProviderError(self.name, f"request failed: {str(e)}") from e
        return response

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        response = await self._raw(method, path, **kwargs)
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise ProviderError(self.name, "response was not JSON") from e

"""
HTTP client for the AI oracle.

The oracle is any service accepting POST {feature, prompt, payload} and
answering {"output": ...}. Nothing here raises for a remote problem: every
transport, status or decode failure comes back as an Err, is logged as a
warning, and the feature function substitutes its default.
"""

import logging
from typing import Any, Callable, Optional

import httpx

from storefront.results import Result

logger = logging.getLogger("oracle")

ORACLE_TIMEOUT = 30.0


class OracleClient:
    """
    Example:
        oracle = OracleClient("https://oracle.example/v1/generate", api_key="...")
        verdict = await compare_products(oracle, product_a, product_b)
    """

    def __init__(
        self,
        endpoint: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: float = ORACLE_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Args:
            endpoint: Generation URL; None disables the oracle entirely
            api_key: Sent as a bearer token when set
            timeout: Seconds before a call is abandoned
            client: HTTP client to use (created lazily when omitted)
        """
        self.endpoint = endpoint
        self.api_key = api_key
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    @classmethod
    def from_settings(cls, settings) -> "OracleClient":
        return cls(settings.oracle_url, settings.oracle_key)

    @property
    def enabled(self) -> bool:
        return bool(self.endpoint)

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "OracleClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def generate(
        self,
        feature: str,
        prompt: str,
        payload: Optional[dict[str, Any]] = None,
    ) -> Result[Any, str]:
        """Send one request and return the raw `output` field."""
        if not self.enabled:
            logger.debug(f"{feature}: oracle not configured")
            return Result.err("oracle not configured")

        headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}
        body = {"feature": feature, "prompt": prompt, "payload": payload or {}}
        try:
            response = await self._http().post(
                self.endpoint, json=body, headers=headers, timeout=self.timeout
            )
        except httpx.HTTPError as e:
            logger.warning(f"{feature}: oracle request failed: {e!r}")
            return Result.err(f"transport: {e!r}")

        if not response.is_success:
            logger.warning(f"{feature}: oracle returned {response.status_code}")
            return Result.err(f"status {response.status_code}")
        try:
            data = response.json()
        except ValueError as e:
            logger.warning(f"{feature}: oracle body is not JSON: {e}")
            return Result.err("body is not JSON")
        if not isinstance(data, dict) or "output" not in data:
            logger.warning(f"{feature}: oracle body has no output field")
            return Result.err("no output field")
        return Result.ok(data["output"])

    async def ask(
        self,
        feature: str,
        prompt: str,
        decoder: Callable[[Any], Result[Any, str]],
        payload: Optional[dict[str, Any]] = None,
    ) -> Result[Any, str]:
        """generate() followed by a typed decode; decode failures are logged."""
        result = (await self.generate(feature, prompt, payload)).bind(decoder)
        if result.is_err and self.enabled:
            logger.warning(f"{feature}: using default ({result.error})")
        return result

"""Latest ledger sequence lookup against Stellar RPC or Horizon."""

import logging
import time
from typing import Callable, Optional

import httpx
from fastapi import Request

from ..config import Settings, TESTNET_NETWORK_PASSPHRASE
from ..errors.api_errors import UpstreamError


logger = logging.getLogger(__name__)

DEFAULT_TESTNET_RPC_URL = "https://soroban-testnet.stellar.org"
DEFAULT_PUBNET_HORIZON_URL = "https://horizon.stellar.org"


class LatestLedgerService:
    """Fetches the network's latest ledger sequence, caching it briefly.

    Testnet always uses Soroban RPC. Other networks use RPC when a URL is
    configured and fall back to Horizon otherwise. A cached value is served
    until it is older than ``cache_ttl`` seconds, so callers may see a
    sequence that lags the network by that much.
    """

    def __init__(
        self,
        network_passphrase: str,
        rpc_url: Optional[str] = None,
        horizon_url: Optional[str] = None,
        cache_ttl: float = 5.0,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        if network_passphrase == TESTNET_NETWORK_PASSPHRASE:
            self.source = "rpc"
            self.url = rpc_url or DEFAULT_TESTNET_RPC_URL
        elif rpc_url:
            self.source = "rpc"
            self.url = rpc_url
        else:
            logger.warning("RPC_URL is empty for pubnet; falling back to Horizon for latest ledger.")
            self.source = "horizon"
            self.url = horizon_url or DEFAULT_PUBNET_HORIZON_URL

        self._cache_ttl = cache_ttl
        self._clock = clock
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)
        self._cached_sequence: Optional[int] = None
        self._cached_at: Optional[float] = None

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "LatestLedgerService":
        return cls(
            network_passphrase=settings.network_passphrase,
            rpc_url=settings.rpc_url,
            horizon_url=settings.horizon_url,
            cache_ttl=settings.latest_ledger_cache_ttl,
            timeout=settings.ledger_request_timeout,
            **kwargs
        )

    def _get_cached(self) -> Optional[int]:
        if self._cached_sequence is None or self._cached_at is None:
            return None
        if self._clock() - self._cached_at > self._cache_ttl:
            return None
        return self._cached_sequence

    async def _fetch_from_rpc(self) -> int:
        response = await self._client.post(
            self.url,
            json={"jsonrpc": "2.0", "id": 1, "method": "getLatestLedger"}
        )
        response.raise_for_status()
        body = response.json()
        if body.get("error"):
            raise UpstreamError(f"RPC getLatestLedger failed: {body['error']}")
        return int(body["result"]["sequence"])

    async def _fetch_from_horizon(self) -> int:
        response = await self._client.get(self.url)
        response.raise_for_status()
        return int(response.json()["core_latest_ledger"])

    async def get_latest_ledger_sequence(self) -> int:
        """Return the latest ledger sequence, from cache when still fresh.

        Raises:
            UpstreamError: If the network service is unreachable or answers
                with an unexpected payload
        """
        cached = self._get_cached()
        if cached is not None:
            return cached

        try:
            if self.source == "rpc":
                latest = await self._fetch_from_rpc()
            else:
                latest = await self._fetch_from_horizon()
        except httpx.HTTPError as e:
            logger.error(f"Failed to fetch latest ledger from {self.url}: {e}")
            raise UpstreamError("Failed to fetch latest ledger sequence") from e
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.error(f"Unexpected latest ledger response from {self.url}: {e}")
            raise UpstreamError("Failed to fetch latest ledger sequence") from e

        self._cached_sequence = latest
        self._cached_at = self._clock()
        logger.debug(f"Latest ledger sequence is {latest}")
        return latest

    async def aclose(self) -> None:
        await self._client.aclose()


def get_ledger_service(request: Request) -> LatestLedgerService:
    """FastAPI dependency returning the application's ledger service."""
    return request.app.state.ledger_service

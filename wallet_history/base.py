"""
Provider Adapters - Capability interface and shared HTTP plumbing.

Every adapter MUST:
- Resolve its endpoint per call from the network argument
- Return an empty raw response (never raise) for accounts with no history
- Map every upstream failure to ProviderError / RateLimitError
- Leave retrying to the caller
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional, Protocol, runtime_checkable

import aiohttp

from wallet_history.config import WalletHistoryConfig, get_config
from wallet_history.endpoints import NetworkEndpointRegistry, apply_auth
from wallet_history.exceptions import (
    ConfigurationError,
    ProviderError,
    RateLimitError,
)
from wallet_history.models import AdapterMetadata, Balance, NetworkEndpoint, Wallet
from wallet_history.responses import RawProviderResponse


logger = logging.getLogger(__name__)


@runtime_checkable
class ProviderAdapter(Protocol):
    """What the facade needs from a provider."""

    @property
    def name(self) -> str: ...

    def metadata(self) -> AdapterMetadata: ...

    def set_network(self, network_name: str) -> None: ...

    async def get_balance(
        self,
        network: Optional[str],
        wallet: Wallet,
    ) -> Balance: ...

    async def get_transaction_data(
        self,
        network: Optional[str],
        wallet: Wallet,
    ) -> RawProviderResponse: ...

    async def close(self) -> None: ...


class BaseProviderAdapter(ABC):
    """
    Shared base for HTTP-backed provider adapters.

    Subclasses must:
    1. Implement name / metadata()
    2. Implement _build_registry() - the provider's named networks
    3. Implement get_balance() and get_transaction_data()

    Features:
    - Lazily created, owned aiohttp session (or one injected by the caller)
    - Explicit request timeout
    - Credential injection per the endpoint's auth scheme
    - HTTP status and transport errors mapped to the exception hierarchy
    """

    # Attribute of WalletHistoryConfig holding this provider's key
    API_KEY_FIELD: Optional[str] = None
    API_KEY_ENV_VAR: Optional[str] = None
    REQUIRES_API_KEY = False
    # Largest page the provider accepts
    MAX_PAGE_SIZE = 100

    def __init__(
        self,
        api_key: Optional[str] = None,
        config: Optional[WalletHistoryConfig] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self._config = config or get_config()

        if not api_key and self.API_KEY_FIELD:
            api_key = getattr(self._config, self.API_KEY_FIELD, None)
        if self.REQUIRES_API_KEY and not api_key:
            raise ConfigurationError(
                f"API key required (set {self.API_KEY_ENV_VAR})",
                provider=self.name,
                config_key=self.API_KEY_ENV_VAR,
            )
        self._api_key = api_key

        self._timeout = self._config.request_timeout
        self._max_pages = max(1, self._config.max_pages)
        self._page_size = min(max(1, self._config.page_size), self.MAX_PAGE_SIZE)

        self._session = session
        self._owns_session = session is None

        self._registry = self._build_registry(api_key)
        if self._config.default_network in self._registry:
            self._default_network = self._config.default_network
        else:
            self._default_network = self._registry.default_network

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique identifier for this adapter."""
        pass

    @abstractmethod
    def metadata(self) -> AdapterMetadata:
        """Return adapter metadata."""
        pass

    @abstractmethod
    def _build_registry(self, api_key: Optional[str]) -> NetworkEndpointRegistry:
        """Named networks served by this provider."""
        pass

    @abstractmethod
    async def get_balance(
        self,
        network: Optional[str],
        wallet: Wallet,
    ) -> Balance:
        """Current balance in display units."""
        pass

    @abstractmethod
    async def get_transaction_data(
        self,
        network: Optional[str],
        wallet: Wallet,
    ) -> RawProviderResponse:
        """
        Fetch the wallet's full history, paging until the provider signals
        the end or the configured page ceiling is reached.
        """
        pass

    # ─────────────────────────────────────────────────────────────
    # Networks
    # ─────────────────────────────────────────────────────────────

    @property
    def config(self) -> WalletHistoryConfig:
        return self._config

    @property
    def registry(self) -> NetworkEndpointRegistry:
        return self._registry

    @property
    def default_network(self) -> str:
        return self._default_network

    def set_network(self, network_name: str) -> None:
        """Change the default network used when a call passes network=None."""
        self._registry.resolve(network_name)
        self._default_network = network_name
        logger.info(f"[{self.name}] Default network set to {network_name}")

    def _resolve(self, network: Optional[str]) -> NetworkEndpoint:
        return self._registry.resolve(network or self._default_network)

    # ─────────────────────────────────────────────────────────────
    # HTTP Helpers
    # ─────────────────────────────────────────────────────────────

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._timeout),
                headers=self._get_default_headers(),
            )
            self._owns_session = True
        return self._session

    def _get_default_headers(self) -> dict[str, str]:
        """Get default HTTP headers."""
        return {
            "Accept": "application/json",
            "User-Agent": self._config.user_agent,
        }

    async def _make_request(
        self,
        endpoint: NetworkEndpoint,
        method: str,
        path: str = "",
        params: Optional[dict[str, Any]] = None,
        json_body: Optional[Any] = None,
        headers: Optional[dict[str, str]] = None,
        address: Optional[str] = None,
    ) -> Any:
        """
        Send one authenticated request to an endpoint and decode the JSON body.

        Raises:
            RateLimitError: HTTP 429
            ProviderError: other HTTP errors, undecodable bodies, timeouts
                and connection failures
        """
        url = endpoint.base_url.rstrip("/") + path if path else endpoint.base_url
        url, params, headers = apply_auth(endpoint, url, params, headers)
        safe_url = self._redact(url, endpoint)

        session = await self._get_session()
        try:
            async with session.request(
                method,
                url,
                params=params or None,
                json=json_body,
                headers=headers or None,
                timeout=aiohttp.ClientTimeout(total=self._timeout),
            ) as response:
                if response.status == 429:
                    retry_after = response.headers.get("Retry-After")
                    logger.warning(f"[{self.name}] Rate limited on {endpoint.network_name}")
                    raise RateLimitError(
                        message="Rate limit exceeded",
                        provider=self.name,
                        network=endpoint.network_name,
                        address=address,
                        retry_after_seconds=int(retry_after) if retry_after and retry_after.isdigit() else None,
                        request_url=safe_url,
                    )

                if response.status >= 400:
                    body = await response.text()
                    raise ProviderError(
                        message=f"HTTP {response.status}",
                        provider=self.name,
                        network=endpoint.network_name,
                        address=address,
                        status_code=response.status,
                        response_body=body[:500],
                        request_url=safe_url,
                    )

                try:
                    return await response.json(content_type=None)
                except ValueError as e:
                    raise ProviderError(
                        message="Malformed JSON response",
                        provider=self.name,
                        network=endpoint.network_name,
                        address=address,
                        status_code=response.status,
                        request_url=safe_url,
                        original_error=e,
                    )

        except asyncio.TimeoutError as e:
            raise ProviderError(
                message=f"Timeout after {self._timeout:.0f}s",
                provider=self.name,
                network=endpoint.network_name,
                address=address,
                request_url=safe_url,
                original_error=e,
            )
        except aiohttp.ClientError as e:
            raise ProviderError(
                message=f"Connection error: {e}",
                provider=self.name,
                network=endpoint.network_name,
                address=address,
                request_url=safe_url,
                original_error=e,
            )

    @staticmethod
    def _redact(url: str, endpoint: NetworkEndpoint) -> str:
        if endpoint.credential and endpoint.credential in url:
            return url.replace(endpoint.credential, "***")
        return url

    def _malformed(
        self,
        endpoint: NetworkEndpoint,
        wallet: Wallet,
        detail: str,
    ) -> ProviderError:
        """Error for a 2xx response whose envelope is not what the provider documents."""
        return ProviderError(
            message=f"Malformed response: {detail}",
            provider=self.name,
            network=endpoint.network_name,
            address=wallet.address,
        )

    def _log_fetched(self, raw: RawProviderResponse) -> None:
        suffix = " (page limit reached)" if raw.truncated else ""
        logger.info(
            f"[{self.name}] Fetched {len(raw)} records for {raw.wallet.address} "
            f"on {raw.network} in {raw.pages_fetched} page(s){suffix}"
        )

    # ─────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────

    async def close(self) -> None:
        """Close resources."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> "BaseProviderAdapter":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(name={self.name}, network={self._default_network})>"

"""
Alchemy Adapter - EVM transfer history via alchemy_getAssetTransfers.

Supported chains:
- Ethereum (mainnet, sepolia)
- BNB Smart Chain (mainnet, testnet)

Transfers are queried twice, once with the wallet as sender (fromAddress)
and once as receiver (toAddress). A self transfer therefore appears in
both legs; each record is tagged with the leg that produced it.
"""

import logging
from typing import Any, Optional

import aiohttp

from wallet_history.base import BaseProviderAdapter
from wallet_history.config import WalletHistoryConfig
from wallet_history.endpoints import NetworkEndpointRegistry
from wallet_history.exceptions import ConfigurationError, ProviderError
from wallet_history.models import (
    AdapterMetadata,
    AuthScheme,
    Balance,
    NetworkEndpoint,
    Wallet,
)
from wallet_history.responses import AlchemyTransfers
from wallet_history.units import to_display_units


logger = logging.getLogger(__name__)


class AlchemyAdapter(BaseProviderAdapter):
    """
    Alchemy enhanced API adapter for one native EVM chain.

    The API key is part of the URL path (https://<chain>.g.alchemy.com/v2/<key>).
    """

    API_KEY_FIELD = "alchemy_api_key"
    API_KEY_ENV_VAR = "ALCHEMY_API_KEY"
    REQUIRES_API_KEY = True
    MAX_PAGE_SIZE = 1000

    # Native symbol -> network name -> base URL (key appended per request)
    CHAIN_URLS = {
        "ETH": {
            "mainnet": "https://eth-mainnet.g.alchemy.com/v2",
            "homestead": "https://eth-mainnet.g.alchemy.com/v2",
            "sepolia": "https://eth-sepolia.g.alchemy.com/v2",
        },
        "BNB": {
            "mainnet": "https://bnb-mainnet.g.alchemy.com/v2",
            "testnet": "https://bnb-testnet.g.alchemy.com/v2",
        },
    }

    # Fungible transfers only. BNB chain has no trace support, so no internal transfers
    CATEGORIES = {
        "ETH": ["external", "internal", "erc20"],
        "BNB": ["external", "erc20"],
    }

    LEGS = ("from", "to")

    def __init__(
        self,
        api_key: Optional[str] = None,
        native_symbol: str = "ETH",
        config: Optional[WalletHistoryConfig] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self._native_symbol = native_symbol.upper()
        if self._native_symbol not in self.CHAIN_URLS:
            raise ConfigurationError(
                f"Unsupported native chain '{native_symbol}' "
                f"(supported: {', '.join(self.CHAIN_URLS)})",
                provider="alchemy",
                config_key="native_symbol",
            )
        super().__init__(api_key, config, session)

    @property
    def name(self) -> str:
        """Unique identifier."""
        return f"alchemy-{self._native_symbol.lower()}"

    @property
    def native_symbol(self) -> str:
        return self._native_symbol

    def metadata(self) -> AdapterMetadata:
        """Return adapter metadata."""
        return AdapterMetadata(
            name=self.name,
            display_name=f"Alchemy ({self._native_symbol})",
            currency_symbols=[self._native_symbol],
            networks=self._registry.networks,
            requires_api_key=True,
            emits_duplicate_legs=True,
            page_size=self._page_size,
            base_url="https://www.alchemy.com",
            documentation_url="https://docs.alchemy.com/reference/alchemy-getassettransfers",
            tags=["evm", "json-rpc"],
        )

    def _build_registry(self, api_key: Optional[str]) -> NetworkEndpointRegistry:
        return NetworkEndpointRegistry(
            self.name,
            [
                NetworkEndpoint(
                    network_name=network,
                    base_url=url,
                    auth_scheme=AuthScheme.PATH_KEY,
                    credential=api_key,
                )
                for network, url in self.CHAIN_URLS[self._native_symbol].items()
            ],
            default_network="mainnet",
        )

    # ─────────────────────────────────────────────────────────────
    # JSON-RPC
    # ─────────────────────────────────────────────────────────────

    async def _rpc(
        self,
        endpoint: NetworkEndpoint,
        method: str,
        params: list[Any],
        wallet: Wallet,
    ) -> Any:
        payload = {"jsonrpc": "2.0", "id": 1, "method": method, "params": params}
        data = await self._make_request(
            endpoint, "POST", json_body=payload, address=wallet.address
        )

        if not isinstance(data, dict):
            raise self._malformed(endpoint, wallet, "expected JSON-RPC object")

        error = data.get("error")
        if error:
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise ProviderError(
                message=f"{method} failed: {message}",
                provider=self.name,
                network=endpoint.network_name,
                address=wallet.address,
                context={"rpc_error": error},
            )

        if "result" not in data:
            raise self._malformed(endpoint, wallet, "missing 'result'")
        return data["result"]

    # ─────────────────────────────────────────────────────────────
    # Fetching
    # ─────────────────────────────────────────────────────────────

    async def get_balance(
        self,
        network: Optional[str],
        wallet: Wallet,
    ) -> Balance:
        """Native balance via eth_getBalance (hex wei)."""
        endpoint = self._resolve(network)
        result = await self._rpc(
            endpoint, "eth_getBalance", [wallet.address, "latest"], wallet
        )
        if not isinstance(result, str):
            raise self._malformed(endpoint, wallet, "balance is not a hex string")

        return Balance(
            currency_symbol=self._native_symbol,
            amount=to_display_units(result, self._config.decimals_for(self._native_symbol)),
            address=wallet.address,
            network=endpoint.network_name,
            provider=self.name,
        )

    async def get_transaction_data(
        self,
        network: Optional[str],
        wallet: Wallet,
    ) -> AlchemyTransfers:
        """Sender leg then receiver leg, each paged by pageKey."""
        endpoint = self._resolve(network)
        raw = AlchemyTransfers(
            network=endpoint.network_name,
            wallet=wallet,
            native_symbol=self._native_symbol,
        )

        for leg in self.LEGS:
            page_key: Optional[str] = None
            leg_pages = 0
            while True:
                params: dict[str, Any] = {
                    "fromBlock": "0x0",
                    "toBlock": "latest",
                    f"{leg}Address": wallet.address,
                    "category": self.CATEGORIES[self._native_symbol],
                    "withMetadata": True,
                    "excludeZeroValue": True,
                    "maxCount": hex(self._page_size),
                    "order": "asc",
                }
                if page_key:
                    params["pageKey"] = page_key

                result = await self._rpc(
                    endpoint, "alchemy_getAssetTransfers", [params], wallet
                )
                if not isinstance(result, dict):
                    raise self._malformed(endpoint, wallet, "transfers result is not an object")

                transfers = result.get("transfers") or []
                raw.records.extend(dict(transfer, _leg=leg) for transfer in transfers)
                leg_pages += 1
                raw.pages_fetched += 1
                logger.debug(
                    f"[{self.name}] {leg}-leg page {leg_pages}: {len(transfers)} transfers"
                )

                page_key = result.get("pageKey")
                if not page_key:
                    break
                if leg_pages >= self._max_pages:
                    raw.truncated = True
                    logger.warning(
                        f"[{self.name}] Page limit ({self._max_pages}) reached on "
                        f"{leg}-leg for {wallet.address}"
                    )
                    break

        self._log_fetched(raw)
        return raw

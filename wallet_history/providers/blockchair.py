"""
Blockchair Adapter - UTXO chain history via address dashboards.

Supported currencies:
- BTC (mainnet, testnet)
- BCH, LTC, DOGE, DASH, ZEC (mainnet)

Works without an API key at a low request allowance; a key passed as
the `key` query parameter raises it.
"""

import logging
from typing import Any, Optional

from wallet_history.base import BaseProviderAdapter
from wallet_history.endpoints import NetworkEndpointRegistry
from wallet_history.exceptions import ConfigurationError, ProviderError
from wallet_history.models import (
    AdapterMetadata,
    AuthScheme,
    Balance,
    NetworkEndpoint,
    Wallet,
)
from wallet_history.responses import BlockchairDashboard
from wallet_history.units import to_display_units


logger = logging.getLogger(__name__)


class BlockchairAdapter(BaseProviderAdapter):
    """Blockchair dashboards adapter (one instance serves every UTXO chain)."""

    BASE_URL = "https://api.blockchair.com"

    API_KEY_FIELD = "blockchair_api_key"
    API_KEY_ENV_VAR = "BLOCKCHAIR_API_KEY"
    MAX_PAGE_SIZE = 10000

    # Currency -> network name -> chain path segment
    CHAINS = {
        "BTC": {"mainnet": "bitcoin", "testnet": "bitcoin/testnet"},
        "BCH": {"mainnet": "bitcoin-cash"},
        "LTC": {"mainnet": "litecoin"},
        "DOGE": {"mainnet": "dogecoin"},
        "DASH": {"mainnet": "dash"},
        "ZEC": {"mainnet": "zcash"},
    }

    @property
    def name(self) -> str:
        """Unique identifier."""
        return "blockchair"

    def metadata(self) -> AdapterMetadata:
        """Return adapter metadata."""
        return AdapterMetadata(
            name=self.name,
            display_name="Blockchair",
            currency_symbols=list(self.CHAINS),
            networks=self._registry.networks,
            requires_api_key=False,
            emits_duplicate_legs=False,
            page_size=self._page_size,
            base_url="https://blockchair.com",
            documentation_url="https://blockchair.com/api/docs",
            tags=["utxo", "explorer"],
        )

    def _build_registry(self, api_key: Optional[str]) -> NetworkEndpointRegistry:
        scheme = AuthScheme.QUERY_KEY if api_key else AuthScheme.NONE
        return NetworkEndpointRegistry(
            self.name,
            [
                NetworkEndpoint("mainnet", self.BASE_URL, scheme, api_key, "key"),
                NetworkEndpoint("testnet", self.BASE_URL, scheme, api_key, "key"),
            ],
            default_network="mainnet",
        )

    def _chain_path(self, endpoint: NetworkEndpoint, wallet: Wallet) -> str:
        symbol = wallet.currency_symbol.upper()
        chain = self.CHAINS.get(symbol, {}).get(endpoint.network_name)
        if chain is None:
            raise ConfigurationError(
                f"{symbol} is not served on network '{endpoint.network_name}'",
                provider=self.name,
                network=endpoint.network_name,
                config_key="network",
            )
        return chain

    async def _fetch_dashboard(
        self,
        endpoint: NetworkEndpoint,
        wallet: Wallet,
        limit: int,
        offset: int,
    ) -> dict[str, Any]:
        """One dashboard page; returns the entry for the wallet (possibly empty)."""
        path = f"/{self._chain_path(endpoint, wallet)}/dashboards/address/{wallet.address}"
        payload = await self._make_request(
            endpoint,
            "GET",
            path,
            params={
                "transaction_details": "true",
                "limit": limit,
                "offset": offset,
            },
            address=wallet.address,
        )

        if not isinstance(payload, dict) or "data" not in payload:
            raise self._malformed(endpoint, wallet, "missing 'data'")

        context = payload.get("context") or {}
        if context.get("error"):
            raise ProviderError(
                message=str(context["error"]),
                provider=self.name,
                network=endpoint.network_name,
                address=wallet.address,
                status_code=context.get("code"),
            )

        data = payload["data"] or {}
        if not isinstance(data, dict):
            raise self._malformed(endpoint, wallet, "'data' is not an object")

        # Keyed by the address as Blockchair canonicalizes it
        entry = data.get(wallet.address)
        if entry is None and data:
            entry = next(iter(data.values()))
        return entry or {}

    async def get_balance(
        self,
        network: Optional[str],
        wallet: Wallet,
    ) -> Balance:
        """Confirmed balance from the dashboard summary."""
        endpoint = self._resolve(network)
        entry = await self._fetch_dashboard(endpoint, wallet, limit=0, offset=0)
        address_info = entry.get("address") or {}
        symbol = wallet.currency_symbol.upper()

        return Balance(
            currency_symbol=symbol,
            amount=to_display_units(address_info.get("balance"), self._config.decimals_for(symbol)),
            account_type=address_info.get("type"),
            address=wallet.address,
            network=endpoint.network_name,
            provider=self.name,
        )

    async def get_transaction_data(
        self,
        network: Optional[str],
        wallet: Wallet,
    ) -> BlockchairDashboard:
        """Transactions with balance_change, paged by limit/offset."""
        endpoint = self._resolve(network)
        raw = BlockchairDashboard(network=endpoint.network_name, wallet=wallet)

        offset = 0
        while True:
            entry = await self._fetch_dashboard(endpoint, wallet, self._page_size, offset)
            transactions = entry.get("transactions") or []
            address_info = entry.get("address") or {}
            if address_info.get("transaction_count") is not None:
                raw.transaction_count = int(address_info["transaction_count"])

            raw.records.extend(tx for tx in transactions if isinstance(tx, dict))
            raw.pages_fetched += 1
            offset += len(transactions)
            logger.debug(
                f"[{self.name}] Page {raw.pages_fetched}: {len(transactions)} transactions"
            )

            if len(transactions) < self._page_size:
                break
            if raw.transaction_count is not None and offset >= raw.transaction_count:
                break
            if raw.pages_fetched >= self._max_pages:
                raw.truncated = True
                logger.warning(
                    f"[{self.name}] Page limit ({self._max_pages}) reached for {wallet.address}"
                )
                break

        self._log_fetched(raw)
        return raw

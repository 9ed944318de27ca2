"""
Hiro Adapter - Stacks (STX) history from the Hiro extended API.

An API key is optional; when present it is sent in the x-api-key header.
"""

import logging
from typing import Any, Optional

from wallet_history.base import BaseProviderAdapter
from wallet_history.endpoints import NetworkEndpointRegistry
from wallet_history.models import (
    AdapterMetadata,
    AuthScheme,
    Balance,
    NetworkEndpoint,
    Wallet,
)
from wallet_history.responses import HiroTransactions
from wallet_history.units import to_display_units


logger = logging.getLogger(__name__)


class HiroAdapter(BaseProviderAdapter):
    """Hiro Stacks API adapter."""

    NETWORK_URLS = {
        "mainnet": "https://api.hiro.so",
        "testnet": "https://api.testnet.hiro.so",
    }

    API_KEY_FIELD = "hiro_api_key"
    API_KEY_ENV_VAR = "HIRO_API_KEY"
    MAX_PAGE_SIZE = 50

    @property
    def name(self) -> str:
        """Unique identifier."""
        return "hiro"

    def metadata(self) -> AdapterMetadata:
        """Return adapter metadata."""
        return AdapterMetadata(
            name=self.name,
            display_name="Hiro (Stacks)",
            currency_symbols=["STX"],
            networks=self._registry.networks,
            page_size=self._page_size,
            base_url="https://www.hiro.so",
            documentation_url="https://docs.hiro.so/stacks/api",
            tags=["stacks"],
        )

    def _build_registry(self, api_key: Optional[str]) -> NetworkEndpointRegistry:
        scheme = AuthScheme.HEADER_KEY if api_key else AuthScheme.NONE
        return NetworkEndpointRegistry(
            self.name,
            [
                NetworkEndpoint(name, url, scheme, api_key, "x-api-key")
                for name, url in self.NETWORK_URLS.items()
            ],
            default_network="mainnet",
        )

    async def get_balance(
        self,
        network: Optional[str],
        wallet: Wallet,
    ) -> Balance:
        endpoint = self._resolve(network)
        data = await self._make_request(
            endpoint,
            "GET",
            f"/extended/v1/address/{wallet.address}/stx",
            address=wallet.address,
        )
        if not isinstance(data, dict) or "balance" not in data:
            raise self._malformed(endpoint, wallet, "missing 'balance'")

        return Balance(
            currency_symbol="STX",
            amount=to_display_units(data["balance"], self._config.decimals_for("STX")),
            address=wallet.address,
            network=endpoint.network_name,
            provider=self.name,
        )

    async def get_transaction_data(
        self,
        network: Optional[str],
        wallet: Wallet,
    ) -> HiroTransactions:
        endpoint = self._resolve(network)
        raw = HiroTransactions(network=endpoint.network_name, wallet=wallet)

        offset = 0
        while True:
            data = await self._make_request(
                endpoint,
                "GET",
                f"/extended/v1/address/{wallet.address}/transactions",
                params={"limit": self._page_size, "offset": offset},
                address=wallet.address,
            )
            if not isinstance(data, dict) or not isinstance(data.get("results"), list):
                raise self._malformed(endpoint, wallet, "missing 'results'")

            results: list[dict[str, Any]] = data["results"]
            if data.get("total") is not None:
                raw.total = int(data["total"])

            raw.records.extend(results)
            raw.pages_fetched += 1
            offset += len(results)
            logger.debug(
                f"[{self.name}] Page {raw.pages_fetched}: {len(results)} transactions "
                f"({offset}/{raw.total})"
            )

            if not results:
                break
            if raw.total is not None and offset >= raw.total:
                break
            if raw.total is None and len(results) < self._page_size:
                break
            if raw.pages_fetched >= self._max_pages:
                raw.truncated = True
                logger.warning(
                    f"[{self.name}] Page limit ({self._max_pages}) reached for {wallet.address}"
                )
                break

        self._log_fetched(raw)
        return raw

"""
TzKT Adapter - Tezos account operations from the TzKT indexer.

Public API, no key. Operations are requested oldest first and paged
with lastId (the id of the last operation already received).
"""

import logging
from typing import Any, Optional

from wallet_history.base import BaseProviderAdapter
from wallet_history.endpoints import NetworkEndpointRegistry
from wallet_history.models import AdapterMetadata, Balance, NetworkEndpoint, Wallet
from wallet_history.responses import TzktOperations
from wallet_history.units import to_display_units


logger = logging.getLogger(__name__)


class TzktAdapter(BaseProviderAdapter):
    """TzKT REST API adapter."""

    NETWORK_URLS = {
        "mainnet": "https://api.tzkt.io",
        "ghostnet": "https://api.ghostnet.tzkt.io",
        "testnet": "https://api.testnet.tzkt.io",
    }

    MAX_PAGE_SIZE = 10000

    @property
    def name(self) -> str:
        """Unique identifier."""
        return "tzkt"

    def metadata(self) -> AdapterMetadata:
        """Return adapter metadata."""
        return AdapterMetadata(
            name=self.name,
            display_name="TzKT (Tezos)",
            currency_symbols=["XTZ"],
            networks=self._registry.networks,
            emits_duplicate_legs=True,
            page_size=self._page_size,
            base_url="https://tzkt.io",
            documentation_url="https://api.tzkt.io",
            tags=["tezos", "indexer"],
        )

    def _build_registry(self, api_key: Optional[str]) -> NetworkEndpointRegistry:
        return NetworkEndpointRegistry(
            self.name,
            [NetworkEndpoint(name, url) for name, url in self.NETWORK_URLS.items()],
            default_network="mainnet",
        )

    async def get_balance(
        self,
        network: Optional[str],
        wallet: Wallet,
    ) -> Balance:
        endpoint = self._resolve(network)
        account = await self._make_request(
            endpoint, "GET", f"/v1/accounts/{wallet.address}", address=wallet.address
        )
        if not isinstance(account, dict):
            raise self._malformed(endpoint, wallet, "account is not an object")

        return Balance(
            currency_symbol="XTZ",
            amount=to_display_units(account.get("balance"), self._config.decimals_for("XTZ")),
            account_type=account.get("type"),
            address=wallet.address,
            network=endpoint.network_name,
            provider=self.name,
        )

    async def get_transaction_data(
        self,
        network: Optional[str],
        wallet: Wallet,
    ) -> TzktOperations:
        endpoint = self._resolve(network)
        raw = TzktOperations(network=endpoint.network_name, wallet=wallet)

        last_id: Optional[int] = None
        while True:
            params: dict[str, Any] = {
                "type": "transaction",
                "limit": self._page_size,
                "sort": 0,
            }
            if last_id is not None:
                params["lastId"] = last_id

            operations = await self._make_request(
                endpoint,
                "GET",
                f"/v1/accounts/{wallet.address}/operations",
                params=params,
                address=wallet.address,
            )
            if not isinstance(operations, list):
                raise self._malformed(endpoint, wallet, "operations is not a list")

            raw.records.extend(operations)
            raw.pages_fetched += 1
            logger.debug(
                f"[{self.name}] Page {raw.pages_fetched}: {len(operations)} operations"
            )

            if len(operations) < self._page_size or not operations[-1].get("id"):
                break
            if raw.pages_fetched >= self._max_pages:
                raw.truncated = True
                logger.warning(
                    f"[{self.name}] Page limit ({self._max_pages}) reached for {wallet.address}"
                )
                break
            last_id = operations[-1]["id"]

        self._log_fetched(raw)
        return raw

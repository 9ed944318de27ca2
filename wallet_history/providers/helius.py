"""
Helius Adapter - Solana enhanced transactions.

Requires HELIUS_API_KEY (sent as the `api-key` query parameter).
History is returned newest first and paged backwards with `before`
(the signature of the oldest transaction already received).
"""

import logging
from typing import Any, Optional

from wallet_history.base import BaseProviderAdapter
from wallet_history.endpoints import NetworkEndpointRegistry
from wallet_history.exceptions import ProviderError
from wallet_history.models import (
    AdapterMetadata,
    AuthScheme,
    Balance,
    NetworkEndpoint,
    Wallet,
)
from wallet_history.responses import HeliusTransactions
from wallet_history.units import to_display_units


logger = logging.getLogger(__name__)


class HeliusAdapter(BaseProviderAdapter):
    """Helius REST API adapter."""

    NETWORK_URLS = {
        "mainnet": "https://api.helius.xyz",
        "devnet": "https://api-devnet.helius.xyz",
    }

    API_KEY_FIELD = "helius_api_key"
    API_KEY_ENV_VAR = "HELIUS_API_KEY"
    REQUIRES_API_KEY = True
    MAX_PAGE_SIZE = 100

    @property
    def name(self) -> str:
        """Unique identifier."""
        return "helius"

    def metadata(self) -> AdapterMetadata:
        """Return adapter metadata."""
        return AdapterMetadata(
            name=self.name,
            display_name="Helius (Solana)",
            currency_symbols=["SOL"],
            networks=self._registry.networks,
            requires_api_key=True,
            emits_duplicate_legs=True,
            page_size=self._page_size,
            base_url="https://helius.dev",
            documentation_url="https://docs.helius.dev",
            tags=["solana"],
        )

    def _build_registry(self, api_key: Optional[str]) -> NetworkEndpointRegistry:
        return NetworkEndpointRegistry(
            self.name,
            [
                NetworkEndpoint(name, url, AuthScheme.QUERY_KEY, api_key, "api-key")
                for name, url in self.NETWORK_URLS.items()
            ],
            default_network="mainnet",
        )

    def _check_error(self, data: Any, endpoint: NetworkEndpoint, wallet: Wallet) -> None:
        if isinstance(data, dict) and data.get("error"):
            raise ProviderError(
                message=str(data["error"]),
                provider=self.name,
                network=endpoint.network_name,
                address=wallet.address,
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
            f"/v0/addresses/{wallet.address}/balances",
            address=wallet.address,
        )
        self._check_error(data, endpoint, wallet)
        if not isinstance(data, dict) or "nativeBalance" not in data:
            raise self._malformed(endpoint, wallet, "missing 'nativeBalance'")

        return Balance(
            currency_symbol="SOL",
            amount=to_display_units(data["nativeBalance"], self._config.decimals_for("SOL")),
            address=wallet.address,
            network=endpoint.network_name,
            provider=self.name,
        )

    async def get_transaction_data(
        self,
        network: Optional[str],
        wallet: Wallet,
    ) -> HeliusTransactions:
        endpoint = self._resolve(network)
        raw = HeliusTransactions(network=endpoint.network_name, wallet=wallet)

        before: Optional[str] = None
        while True:
            params: dict[str, Any] = {"limit": self._page_size}
            if before:
                params["before"] = before

            transactions = await self._make_request(
                endpoint,
                "GET",
                f"/v0/addresses/{wallet.address}/transactions",
                params=params,
                address=wallet.address,
            )
            self._check_error(transactions, endpoint, wallet)
            if not isinstance(transactions, list):
                raise self._malformed(endpoint, wallet, "transactions is not a list")

            raw.records.extend(transactions)
            raw.pages_fetched += 1
            logger.debug(
                f"[{self.name}] Page {raw.pages_fetched}: {len(transactions)} transactions"
            )

            if len(transactions) < self._page_size:
                break
            before = transactions[-1].get("signature")
            if not before:
                break
            if raw.pages_fetched >= self._max_pages:
                raw.truncated = True
                logger.warning(
                    f"[{self.name}] Page limit ({self._max_pages}) reached for {wallet.address}"
                )
                break

        self._log_fetched(raw)
        return raw

"""
XRPL Adapter - XRP Ledger history over public rippled JSON-RPC.

Uses account_tx (paged by marker) and account_info. No API key.
An account that was never funded answers `actNotFound`; that is an
empty history and a zero balance, not an error.
"""

import logging
from decimal import Decimal
from typing import Any, Optional

from wallet_history.base import BaseProviderAdapter
from wallet_history.endpoints import NetworkEndpointRegistry
from wallet_history.exceptions import ProviderError
from wallet_history.models import AdapterMetadata, Balance, NetworkEndpoint, Wallet
from wallet_history.responses import XrplAccountTx
from wallet_history.units import to_display_units


logger = logging.getLogger(__name__)


ACCOUNT_NOT_FOUND = "actNotFound"


class XrplAdapter(BaseProviderAdapter):
    """Public rippled cluster adapter."""

    NETWORK_URLS = {
        "mainnet": "https://xrplcluster.com/",
        "testnet": "https://s.altnet.rippletest.net:51234/",
    }

    MAX_PAGE_SIZE = 400

    @property
    def name(self) -> str:
        """Unique identifier."""
        return "xrpl"

    def metadata(self) -> AdapterMetadata:
        """Return adapter metadata."""
        return AdapterMetadata(
            name=self.name,
            display_name="XRP Ledger (rippled)",
            currency_symbols=["XRP"],
            networks=self._registry.networks,
            page_size=self._page_size,
            base_url="https://xrpl.org",
            documentation_url="https://xrpl.org/docs/references/http-websocket-apis/public-api-methods/account-methods/account_tx",
            tags=["xrp", "json-rpc"],
        )

    def _build_registry(self, api_key: Optional[str]) -> NetworkEndpointRegistry:
        return NetworkEndpointRegistry(
            self.name,
            [NetworkEndpoint(name, url) for name, url in self.NETWORK_URLS.items()],
            default_network="mainnet",
        )

    async def _call(
        self,
        endpoint: NetworkEndpoint,
        method: str,
        params: dict[str, Any],
        wallet: Wallet,
    ) -> Optional[dict[str, Any]]:
        """
        Run one rippled method. Returns None when the account does not exist.
        """
        data = await self._make_request(
            endpoint,
            "POST",
            json_body={"method": method, "params": [params]},
            address=wallet.address,
        )

        result = data.get("result") if isinstance(data, dict) else None
        if not isinstance(result, dict):
            raise self._malformed(endpoint, wallet, "missing 'result'")

        if result.get("status") == "error" or "error" in result:
            if result.get("error") == ACCOUNT_NOT_FOUND:
                return None
            raise ProviderError(
                message=f"{method} failed: {result.get('error_message') or result.get('error')}",
                provider=self.name,
                network=endpoint.network_name,
                address=wallet.address,
                context={"error": result.get("error")},
            )
        return result

    async def get_balance(
        self,
        network: Optional[str],
        wallet: Wallet,
    ) -> Balance:
        """Validated-ledger balance from account_info (drops)."""
        endpoint = self._resolve(network)
        result = await self._call(
            endpoint,
            "account_info",
            {"account": wallet.address, "ledger_index": "validated"},
            wallet,
        )

        if result is None:
            return Balance(
                currency_symbol="XRP",
                amount=Decimal(0),
                account_type="unfunded",
                address=wallet.address,
                network=endpoint.network_name,
                provider=self.name,
            )

        account_data = result.get("account_data")
        if not isinstance(account_data, dict):
            raise self._malformed(endpoint, wallet, "missing 'account_data'")

        return Balance(
            currency_symbol="XRP",
            amount=to_display_units(account_data.get("Balance"), self._config.decimals_for("XRP")),
            address=wallet.address,
            network=endpoint.network_name,
            provider=self.name,
        )

    async def get_transaction_data(
        self,
        network: Optional[str],
        wallet: Wallet,
    ) -> XrplAccountTx:
        """All validated ledgers, oldest first, paged by marker."""
        endpoint = self._resolve(network)
        raw = XrplAccountTx(network=endpoint.network_name, wallet=wallet)

        marker: Any = None
        while True:
            params: dict[str, Any] = {
                "account": wallet.address,
                "ledger_index_min": -1,
                "ledger_index_max": -1,
                "limit": self._page_size,
                "forward": True,
            }
            if marker is not None:
                params["marker"] = marker

            result = await self._call(endpoint, "account_tx", params, wallet)
            if result is None:
                logger.info(f"[{self.name}] Account {wallet.address} not found on {endpoint.network_name}")
                break

            transactions = result.get("transactions") or []
            raw.records.extend(transactions)
            raw.pages_fetched += 1
            logger.debug(
                f"[{self.name}] Page {raw.pages_fetched}: {len(transactions)} transactions"
            )

            marker = result.get("marker")
            if marker is None:
                break
            if raw.pages_fetched >= self._max_pages:
                raw.truncated = True
                logger.warning(
                    f"[{self.name}] Page limit ({self._max_pages}) reached for {wallet.address}"
                )
                break

        self._log_fetched(raw)
        return raw

"""
Aggregation Facade - One entry point for every supported currency.

Features:
- Currency symbol -> adapter lookup table
- Normalized, ordered, de-duplicated transaction lists
- Concurrent multi-wallet history
- Provider and configuration errors propagate unchanged
"""

import asyncio
import logging
from typing import Iterable, Optional, Union

from wallet_history.base import ProviderAdapter
from wallet_history.config import WalletHistoryConfig, get_config
from wallet_history.exceptions import ConfigurationError, UnsupportedCurrencyError
from wallet_history.models import Balance, Transaction, Wallet
from wallet_history.normalizer import finalize, normalize


logger = logging.getLogger(__name__)


class WalletDataFacade:
    """
    Routes wallet requests to the adapter registered for the currency.

    Usage:
        facade = WalletDataFacade()
        facade.register(TzktAdapter())
        facade.register(XrplAdapter())

        txs = await facade.get_transaction_data(
            "XTZ", "mainnet", Wallet("tz1...", "XTZ")
        )
        # [] for a wallet without history; ProviderError on upstream failure
    """

    def __init__(self) -> None:
        self._adapters: dict[str, ProviderAdapter] = {}

    def register(
        self,
        adapter: ProviderAdapter,
        currency_symbols: Optional[Iterable[str]] = None,
    ) -> None:
        """
        Register an adapter for its currencies.

        Args:
            adapter: Adapter instance
            currency_symbols: Symbols to route to it (default: from metadata)
        """
        if currency_symbols is None:
            currency_symbols = adapter.metadata().currency_symbols

        symbols = [symbol.upper() for symbol in currency_symbols]
        for symbol in symbols:
            existing = self._adapters.get(symbol)
            if existing is not None and existing is not adapter:
                logger.warning(f"Currency '{symbol}' already routed to '{existing.name}', replacing")
            self._adapters[symbol] = adapter

        logger.info(f"Registered adapter '{adapter.name}' for {', '.join(symbols)}")

    def unregister(self, currency_symbol: str) -> Optional[ProviderAdapter]:
        """Remove the route for a currency."""
        adapter = self._adapters.pop(currency_symbol.upper(), None)
        if adapter is not None:
            logger.info(f"Unregistered '{currency_symbol.upper()}' from '{adapter.name}'")
        return adapter

    def get_adapter(self, currency_symbol: str) -> ProviderAdapter:
        """Adapter for a currency, or UnsupportedCurrencyError."""
        adapter = self._adapters.get(currency_symbol.upper())
        if adapter is None:
            raise UnsupportedCurrencyError(currency_symbol, supported=self.list_currencies())
        return adapter

    def list_currencies(self) -> list[str]:
        """Registered currency symbols, sorted."""
        return sorted(self._adapters)

    def supports(self, currency_symbol: str) -> bool:
        return currency_symbol.upper() in self._adapters

    @staticmethod
    def _bind_wallet(currency_symbol: str, wallet: Union[Wallet, str]) -> Wallet:
        symbol = currency_symbol.upper()
        if isinstance(wallet, str):
            return Wallet(address=wallet, currency_symbol=symbol)
        if wallet.currency_symbol.upper() != symbol:
            return Wallet(address=wallet.address, currency_symbol=symbol)
        return wallet

    # ─────────────────────────────────────────────────────────────
    # Queries
    # ─────────────────────────────────────────────────────────────

    async def get_transaction_data(
        self,
        currency_symbol: str,
        network: Optional[str],
        wallet: Union[Wallet, str],
    ) -> list[Transaction]:
        """
        Canonical transactions for a wallet, ascending by date.

        Returns [] for a wallet without history.
        """
        adapter = self.get_adapter(currency_symbol)
        wallet = self._bind_wallet(currency_symbol, wallet)

        raw = await adapter.get_transaction_data(network, wallet)
        if raw.is_empty:
            logger.info(f"[{adapter.name}] No transactions for {wallet.address} on {raw.network}")
            return []

        # Same decimals as the adapter's balance path
        transactions = normalize(raw, config=getattr(adapter, "config", None))
        logger.info(
            f"[{adapter.name}] {len(transactions)} transactions for "
            f"{wallet.address} on {raw.network}"
        )
        return transactions

    async def get_balance(
        self,
        currency_symbol: str,
        network: Optional[str],
        wallet: Union[Wallet, str],
    ) -> Balance:
        """Current balance in display units."""
        adapter = self.get_adapter(currency_symbol)
        wallet = self._bind_wallet(currency_symbol, wallet)
        return await adapter.get_balance(network, wallet)

    async def get_bulk_transactions(
        self,
        currency_symbol: str,
        network: Optional[str],
        wallets: Iterable[Union[Wallet, str]],
    ) -> list[Transaction]:
        """
        History of several wallets fetched concurrently and merged.

        The first provider failure propagates.
        """
        bound = [self._bind_wallet(currency_symbol, wallet) for wallet in wallets]
        if not bound:
            return []

        results = await asyncio.gather(*(
            self.get_transaction_data(currency_symbol, network, wallet)
            for wallet in bound
        ))
        merged = finalize([tx for transactions in results for tx in transactions])
        logger.info(
            f"Bulk {currency_symbol.upper()}: {len(merged)} transactions "
            f"across {len(bound)} wallets"
        )
        return merged

    # ─────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────

    async def close(self) -> None:
        """Close every registered adapter once."""
        seen: set[int] = set()
        for adapter in self._adapters.values():
            if id(adapter) in seen:
                continue
            seen.add(id(adapter))
            try:
                await adapter.close()
            except Exception as e:
                logger.error(f"Error closing adapter {adapter.name}: {e}")

        self._adapters.clear()
        logger.info("Wallet data facade closed")

    async def __aenter__(self) -> "WalletDataFacade":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    def __repr__(self) -> str:
        return f"<WalletDataFacade(currencies={self.list_currencies()})>"


# Singleton instance
_default_facade: Optional[WalletDataFacade] = None


def get_default_facade() -> WalletDataFacade:
    """Get or create the default facade."""
    global _default_facade
    if _default_facade is None:
        _default_facade = WalletDataFacade()
    return _default_facade


def setup_default_adapters(
    config: Optional[WalletHistoryConfig] = None,
    facade: Optional[WalletDataFacade] = None,
) -> WalletDataFacade:
    """
    Register the standard adapters.

    Adapters whose mandatory API key is missing are skipped with a warning.
    """
    from wallet_history.providers import (
        AlchemyAdapter,
        BlockchairAdapter,
        HeliusAdapter,
        HiroAdapter,
        TzktAdapter,
        XrplAdapter,
    )

    config = config or get_config()
    facade = facade or get_default_facade()

    factories = [
        ("alchemy-eth", lambda: AlchemyAdapter(native_symbol="ETH", config=config)),
        ("alchemy-bnb", lambda: AlchemyAdapter(native_symbol="BNB", config=config)),
        ("blockchair", lambda: BlockchairAdapter(config=config)),
        ("xrpl", lambda: XrplAdapter(config=config)),
        ("tzkt", lambda: TzktAdapter(config=config)),
        ("helius", lambda: HeliusAdapter(config=config)),
        ("hiro", lambda: HiroAdapter(config=config)),
    ]

    for name, factory in factories:
        try:
            adapter = factory()
        except ConfigurationError as e:
            logger.warning(f"[{name}] Skipped: {e.message}")
            continue
        facade.register(adapter)

    logger.info(f"Default adapters ready for {', '.join(facade.list_currencies())}")
    return facade

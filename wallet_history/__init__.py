"""
Wallet History Package - Multi-chain wallet transaction normalization layer.

Fetches transaction history and balances for a wallet address from
heterogeneous chain data providers and returns one canonical,
chain-agnostic transaction format.

Features:
- Named networks per provider (mainnet / testnet / ...), selected per call
- Isolated, replaceable provider adapters
- Pure normalization: direction, display units, UTC dates, stable ids
- Ordered and de-duplicated output
- Empty history is an empty list, never an error

Quick Start:
    from wallet_history import (
        Wallet,
        WalletHistoryConfig,
        setup_default_adapters,
    )

    async def show_history():
        config = WalletHistoryConfig.from_env()
        async with setup_default_adapters(config) as facade:
            wallet = Wallet("rPT1Sjq2YGrBMTttX4GZHjKu9dyfzbpAYe", "XRP")
            txs = await facade.get_transaction_data("XRP", "mainnet", wallet)
            for tx in txs:
                print(tx.date, tx.tx_type.value, tx.amount, tx.currency_symbol)

            balance = await facade.get_balance("XRP", "mainnet", wallet)

Canonical Transaction:
- uniqueId: wallet address + provider transfer id (+ direction for
  providers that report one hash per leg)
- source / destination: counterparties, None when unknown
- amount: Decimal, display units, non-negative
- txType / activityCategory: inbound-transaction | outbound-transaction | NA
- date: timezone-aware UTC datetime

Adding New Adapters:
    class NewAdapter(BaseProviderAdapter):
        @property
        def name(self) -> str:
            return "new_adapter"

        def metadata(self): ...
        def _build_registry(self, api_key): ...
        async def get_balance(self, network, wallet): ...
        async def get_transaction_data(self, network, wallet): ...

    # plus a raw response variant and an extractor in NORMALIZERS
    facade.register(NewAdapter())
"""

from wallet_history.base import BaseProviderAdapter, ProviderAdapter
from wallet_history.config import (
    CURRENCY_DECIMALS,
    WalletHistoryConfig,
    get_config,
    get_decimals,
    set_config,
)
from wallet_history.endpoints import NetworkEndpointRegistry, apply_auth
from wallet_history.exceptions import (
    ConfigurationError,
    NormalizationError,
    ProviderError,
    RateLimitError,
    UnsupportedCurrencyError,
    WalletHistoryError,
)
from wallet_history.facade import (
    WalletDataFacade,
    get_default_facade,
    setup_default_adapters,
)
from wallet_history.models import (
    AdapterMetadata,
    AuthScheme,
    Balance,
    NetworkEndpoint,
    TimestampUnit,
    Transaction,
    TxType,
    Wallet,
)
from wallet_history.normalizer import (
    NormalizationReport,
    build_unique_id,
    classify_direction,
    normalize,
    normalize_with_report,
)
from wallet_history.providers import (
    AlchemyAdapter,
    BlockchairAdapter,
    HeliusAdapter,
    HiroAdapter,
    TzktAdapter,
    XrplAdapter,
)
from wallet_history.responses import (
    AlchemyTransfers,
    BlockchairDashboard,
    HeliusTransactions,
    HiroTransactions,
    RawProviderResponse,
    TzktOperations,
    XrplAccountTx,
)
from wallet_history.units import (
    normalize_timestamp,
    to_display_units,
    to_native_units,
)


__version__ = "1.0.0"

__all__ = [
    # Base
    "ProviderAdapter",
    "BaseProviderAdapter",

    # Models
    "AdapterMetadata",
    "AuthScheme",
    "Balance",
    "NetworkEndpoint",
    "TimestampUnit",
    "Transaction",
    "TxType",
    "Wallet",

    # Raw responses
    "RawProviderResponse",
    "AlchemyTransfers",
    "BlockchairDashboard",
    "HeliusTransactions",
    "HiroTransactions",
    "TzktOperations",
    "XrplAccountTx",

    # Exceptions
    "WalletHistoryError",
    "ConfigurationError",
    "ProviderError",
    "RateLimitError",
    "UnsupportedCurrencyError",
    "NormalizationError",

    # Configuration
    "WalletHistoryConfig",
    "CURRENCY_DECIMALS",
    "get_config",
    "set_config",
    "get_decimals",

    # Endpoints
    "NetworkEndpointRegistry",
    "apply_auth",

    # Normalization
    "NormalizationReport",
    "normalize",
    "normalize_with_report",
    "classify_direction",
    "build_unique_id",
    "normalize_timestamp",
    "to_display_units",
    "to_native_units",

    # Providers
    "AlchemyAdapter",
    "BlockchairAdapter",
    "HeliusAdapter",
    "HiroAdapter",
    "TzktAdapter",
    "XrplAdapter",

    # Facade
    "WalletDataFacade",
    "get_default_facade",
    "setup_default_adapters",
]

"""
Raw provider responses - one tagged variant per provider shape.

Adapters return these instead of bare JSON so that each shape is paired
with exactly one normalizer (see wallet_history.normalizer).
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Optional

from wallet_history.models import Wallet


@dataclass
class RawProviderResponse:
    """Base for all raw responses. Records are provider JSON, untouched."""
    provider: ClassVar[str] = ""

    network: str
    wallet: Wallet
    records: list[dict[str, Any]] = field(default_factory=list)
    pages_fetched: int = 0
    truncated: bool = False  # page ceiling reached before end of data

    @property
    def is_empty(self) -> bool:
        return not self.records

    def __len__(self) -> int:
        return len(self.records)


@dataclass
class AlchemyTransfers(RawProviderResponse):
    """
    alchemy_getAssetTransfers results.

    Each record is tagged with "_leg" = "from" | "to", the query that
    produced it; the same transfer may appear under both legs.
    """
    provider: ClassVar[str] = "alchemy"

    native_symbol: str = "ETH"


@dataclass
class BlockchairDashboard(RawProviderResponse):
    """Blockchair address dashboard transactions (balance_change per tx)."""
    provider: ClassVar[str] = "blockchair"

    transaction_count: Optional[int] = None


@dataclass
class XrplAccountTx(RawProviderResponse):
    """rippled account_tx entries ({tx | tx_json, meta, hash, ...})."""
    provider: ClassVar[str] = "xrpl"


@dataclass
class TzktOperations(RawProviderResponse):
    """TzKT account operations (transactions, reveals, delegations...)."""
    provider: ClassVar[str] = "tzkt"


@dataclass
class HeliusTransactions(RawProviderResponse):
    """Helius enhanced transactions with nativeTransfers."""
    provider: ClassVar[str] = "helius"


@dataclass
class HiroTransactions(RawProviderResponse):
    """Hiro Stacks extended API address transactions."""
    provider: ClassVar[str] = "hiro"

    total: Optional[int] = None

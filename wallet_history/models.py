"""
Wallet History Data Models - Canonical transaction and balance records.

Every provider response is reduced to these shapes before it leaves the
package. Records are created fresh on each fetch and owned by the caller.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional


class AuthScheme(Enum):
    """How a provider credential is attached to a request."""
    NONE = "none"
    HEADER_KEY = "header_key"
    QUERY_KEY = "query_key"
    PATH_KEY = "path_key"


class TxType(Enum):
    """Direction of a transaction relative to the queried wallet."""
    INBOUND = "inbound-transaction"
    OUTBOUND = "outbound-transaction"
    NA = "NA"


class TimestampUnit(Enum):
    """Time encodings emitted by providers."""
    SECONDS = "seconds"
    MILLISECONDS = "milliseconds"
    RIPPLE_EPOCH = "ripple_epoch"  # seconds since 2000-01-01T00:00:00Z
    ISO8601 = "iso8601"
    AUTO = "auto"


@dataclass(frozen=True)
class Wallet:
    """Account to query. Immutable for the duration of a fetch."""
    address: str
    currency_symbol: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "address": self.address,
            "currency_symbol": self.currency_symbol,
        }


@dataclass(frozen=True)
class NetworkEndpoint:
    """Connection parameters for one named network of one provider."""
    network_name: str
    base_url: str
    auth_scheme: AuthScheme = AuthScheme.NONE
    credential: Optional[str] = None
    auth_param: Optional[str] = None  # header or query parameter name

    @property
    def is_authenticated(self) -> bool:
        return self.auth_scheme != AuthScheme.NONE and bool(self.credential)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary. The credential is never serialized."""
        return {
            "network_name": self.network_name,
            "base_url": self.base_url,
            "auth_scheme": self.auth_scheme.value,
            "auth_param": self.auth_param,
            "has_credential": bool(self.credential),
        }


@dataclass(frozen=True)
class Transaction:
    """
    Canonical transaction record - STRICT schema.

    `amount` is always positive and in display units; direction lives in
    `tx_type`. `activity_category` always mirrors `tx_type`.
    """
    unique_id: str
    source: Optional[str]
    destination: Optional[str]
    amount: Decimal
    tx_type: TxType
    date: datetime
    transaction_id: str
    currency_symbol: str
    network: str = ""
    provider: str = ""
    fee: Optional[Decimal] = None

    @property
    def activity_category(self) -> str:
        return self.tx_type.value

    @property
    def is_inbound(self) -> bool:
        return self.tx_type == TxType.INBOUND

    @property
    def is_outbound(self) -> bool:
        return self.tx_type == TxType.OUTBOUND

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "uniqueId": self.unique_id,
            "source": self.source,
            "destination": self.destination,
            "amount": str(self.amount),
            "txType": self.tx_type.value,
            "date": self.date.isoformat(),
            "transactionId": self.transaction_id,
            "activityCategory": self.activity_category,
            "coinTicker": self.currency_symbol,
            "network": self.network,
            "provider": self.provider,
            "fee": str(self.fee) if self.fee is not None else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Transaction":
        """Create from dictionary produced by to_dict()."""
        return cls(
            unique_id=data["uniqueId"],
            source=data.get("source"),
            destination=data.get("destination"),
            amount=Decimal(data["amount"]),
            tx_type=TxType(data["txType"]),
            date=datetime.fromisoformat(data["date"]),
            transaction_id=data["transactionId"],
            currency_symbol=data["coinTicker"],
            network=data.get("network", ""),
            provider=data.get("provider", ""),
            fee=Decimal(data["fee"]) if data.get("fee") is not None else None,
        )


@dataclass(frozen=True)
class Balance:
    """Holding of one currency for one address."""
    currency_symbol: str
    amount: Decimal
    account_type: Optional[str] = None
    address: str = ""
    network: str = ""
    provider: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "currency_symbol": self.currency_symbol,
            "amount": str(self.amount),
            "account_type": self.account_type,
            "address": self.address,
            "network": self.network,
            "provider": self.provider,
        }


@dataclass
class AdapterMetadata:
    """Metadata about a provider adapter."""
    name: str
    display_name: str
    currency_symbols: list[str]
    networks: list[str]
    requires_api_key: bool = False
    emits_duplicate_legs: bool = False
    page_size: int = 100
    base_url: str = ""
    documentation_url: str = ""
    tags: list[str] = field(default_factory=list)

    def supports_currency(self, currency_symbol: str) -> bool:
        """Check if currency is served by this adapter."""
        return currency_symbol.upper() in (s.upper() for s in self.currency_symbols)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "display_name": self.display_name,
            "currency_symbols": self.currency_symbols,
            "networks": self.networks,
            "requires_api_key": self.requires_api_key,
            "emits_duplicate_legs": self.emits_duplicate_legs,
            "page_size": self.page_size,
            "base_url": self.base_url,
            "documentation_url": self.documentation_url,
            "tags": self.tags,
        }

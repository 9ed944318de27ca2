"""
Normalization Engine - Raw provider responses to canonical Transactions.

Pure functions, no I/O and no state between calls. Each provider shape has
one extractor that filters its records and lifts the fields it needs into
TransferCandidate drafts; a shared pipeline then classifies direction,
converts units and timestamps, builds identities, orders and de-duplicates.

A record that cannot be converted is skipped and counted, never fatal.
"""

import logging
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Any, Callable, Optional

from wallet_history.config import WalletHistoryConfig, get_config
from wallet_history.exceptions import NormalizationError
from wallet_history.models import TimestampUnit, Transaction, TxType, Wallet
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
    lower_or_none,
    normalize_timestamp,
    to_decimal,
    to_display_units,
)


logger = logging.getLogger(__name__)


@dataclass
class TransferCandidate:
    """A filtered provider record, before canonical conversion."""
    native_id: str
    source: Optional[str]
    destination: Optional[str]
    amount: Any
    timestamp: Any
    timestamp_unit: TimestampUnit = TimestampUnit.AUTO
    transfer_id: Optional[str] = None  # set when one hash carries several transfers
    decimals: Optional[int] = None  # None: amount is already in display units
    currency_symbol: Optional[str] = None
    leg: Optional[str] = None  # "from" / "to" when the provider queries per leg
    fee: Any = None
    fee_decimals: Optional[int] = None


@dataclass
class NormalizationReport:
    """Counters describing one normalization pass."""
    provider: str
    total: int = 0
    filtered: int = 0
    skipped: int = 0
    duplicates: int = 0
    produced: int = 0
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "provider": self.provider,
            "total": self.total,
            "filtered": self.filtered,
            "skipped": self.skipped,
            "duplicates": self.duplicates,
            "produced": self.produced,
            "errors": self.errors[:10],
        }


# ─────────────────────────────────────────────────────────────
# Shared steps
# ─────────────────────────────────────────────────────────────

def classify_direction(
    wallet_address: str,
    source: Optional[str],
    destination: Optional[str],
    leg: Optional[str] = None,
) -> TxType:
    """
    Classify a record relative to the wallet, comparing case-insensitively.

    Self transfers (both sides match) follow the query leg when known and
    are otherwise treated as outbound.
    """
    address = lower_or_none(wallet_address)
    is_source = address is not None and lower_or_none(source) == address
    is_destination = address is not None and lower_or_none(destination) == address

    if is_source and is_destination:
        return TxType.INBOUND if leg == "to" else TxType.OUTBOUND
    if is_source:
        return TxType.OUTBOUND
    if is_destination:
        return TxType.INBOUND
    return TxType.NA


def build_unique_id(
    wallet_address: str,
    native_id: str,
    tx_type: TxType,
    per_leg: bool = False,
) -> str:
    """
    Deterministic identity: wallet address + the provider's id for the
    transfer (the transaction hash unless the provider numbers transfers
    within a transaction).

    Providers that repeat one id for both legs also get the direction
    appended so the inbound and outbound legs stay distinct.
    """
    unique_id = f"{wallet_address}{native_id}"
    if per_leg:
        unique_id += f":{tx_type.value}"
    return unique_id


def _to_transaction(
    candidate: TransferCandidate,
    raw: RawProviderResponse,
    per_leg: bool,
) -> Transaction:
    wallet = raw.wallet
    tx_type = classify_direction(
        wallet.address, candidate.source, candidate.destination, candidate.leg
    )

    if candidate.decimals is None:
        amount = abs(to_decimal(candidate.amount))
    else:
        amount = abs(to_display_units(candidate.amount, candidate.decimals))

    fee = None
    if candidate.fee is not None:
        if candidate.fee_decimals is None:
            fee = to_decimal(candidate.fee)
        else:
            fee = to_display_units(candidate.fee, candidate.fee_decimals)

    if not candidate.native_id:
        raise ValueError("Record has no transaction id")

    return Transaction(
        unique_id=build_unique_id(
            wallet.address, candidate.transfer_id or candidate.native_id, tx_type, per_leg
        ),
        source=candidate.source or None,
        destination=candidate.destination or None,
        amount=amount,
        tx_type=tx_type,
        date=normalize_timestamp(candidate.timestamp, candidate.timestamp_unit),
        transaction_id=candidate.native_id,
        currency_symbol=candidate.currency_symbol or wallet.currency_symbol.upper(),
        network=raw.network,
        provider=raw.provider,
        fee=fee,
    )


def finalize(
    transactions: list[Transaction],
    report: Optional[NormalizationReport] = None,
) -> list[Transaction]:
    """Sort ascending by date and drop repeated unique ids (first wins)."""
    ordered = sorted(transactions, key=lambda tx: tx.date)
    seen: set[str] = set()
    result: list[Transaction] = []
    for tx in ordered:
        if tx.unique_id in seen:
            if report is not None:
                report.duplicates += 1
            continue
        seen.add(tx.unique_id)
        result.append(tx)
    return result


# ─────────────────────────────────────────────────────────────
# Provider extractors (filter + field lifting)
#
# One call per provider record. An empty list means the record is not a
# transfer and was filtered out.
# ─────────────────────────────────────────────────────────────

Extractor = Callable[[dict[str, Any], Any, WalletHistoryConfig], list[TransferCandidate]]


def _extract_alchemy(
    record: dict[str, Any],
    raw: AlchemyTransfers,
    config: WalletHistoryConfig,
) -> list[TransferCandidate]:
    if record.get("category") in ("erc721", "erc1155", "specialnft"):
        return []

    native_symbol = raw.native_symbol.upper()
    asset = record.get("asset")
    if not asset or (asset.upper() == "ETH" and native_symbol != "ETH"):
        asset = native_symbol

    amount: Any = record.get("value")
    decimals = None
    if amount is None:
        raw_contract = record.get("rawContract") or {}
        amount = raw_contract.get("value")
        raw_decimals = raw_contract.get("decimal")
        decimals = int(raw_decimals, 16) if raw_decimals else config.decimals_for(native_symbol)

    metadata = record.get("metadata") or {}
    return [TransferCandidate(
        native_id=str(record.get("hash") or record.get("uniqueId") or ""),
        # "<hash>:log:<index>" etc., one per transfer in the transaction
        transfer_id=record.get("uniqueId"),
        source=record.get("from"),
        destination=record.get("to"),
        amount=amount,
        decimals=decimals,
        timestamp=metadata.get("blockTimestamp"),
        timestamp_unit=TimestampUnit.ISO8601,
        currency_symbol=asset.upper(),
        leg=record.get("_leg"),
    )]


def _extract_blockchair(
    record: dict[str, Any],
    raw: BlockchairDashboard,
    config: WalletHistoryConfig,
) -> list[TransferCandidate]:
    address = raw.wallet.address
    change = to_decimal(record.get("balance_change"))
    return [TransferCandidate(
        native_id=str(record.get("hash") or ""),
        source=address if change < 0 else None,
        destination=address if change > 0 else None,
        amount=abs(change),
        decimals=config.decimals_for(raw.wallet.currency_symbol),
        timestamp=record.get("time"),
        timestamp_unit=TimestampUnit.ISO8601,
    )]


def _extract_xrpl(
    record: dict[str, Any],
    raw: XrplAccountTx,
    config: WalletHistoryConfig,
) -> list[TransferCandidate]:
    tx = record.get("tx_json") or record.get("tx") or {}
    meta = record.get("meta")
    if not isinstance(meta, dict):
        meta = {}

    if tx.get("TransactionType") != "Payment":
        return []
    if meta.get("TransactionResult", "tesSUCCESS") != "tesSUCCESS":
        return []

    delivered = meta.get("delivered_amount", tx.get("Amount"))
    if isinstance(delivered, dict):
        # Issued currency (IOU), not XRP
        return []

    decimals = config.decimals_for("XRP")
    return [TransferCandidate(
        native_id=str(record.get("hash") or tx.get("hash") or ""),
        source=tx.get("Account"),
        destination=tx.get("Destination"),
        amount=delivered,
        decimals=decimals,
        timestamp=tx.get("date"),
        timestamp_unit=TimestampUnit.RIPPLE_EPOCH,
        fee=tx.get("Fee"),
        fee_decimals=decimals,
    )]


def _extract_tzkt(
    record: dict[str, Any],
    raw: TzktOperations,
    config: WalletHistoryConfig,
) -> list[TransferCandidate]:
    # Reveals, delegations and originations share hashes with transfers
    if record.get("type") != "transaction":
        return []
    if record.get("status", "applied") != "applied":
        return []

    decimals = config.decimals_for("XTZ")
    sender = record.get("sender") or {}
    target = record.get("target") or {}
    fee = record.get("bakerFee")
    # Batches and internal operations share one hash; the operation id is unique
    op_hash = record.get("hash")
    op_id = record.get("id")
    return [TransferCandidate(
        native_id=str(op_hash or ""),
        transfer_id=f"{op_hash}:{op_id}" if op_hash and op_id is not None else None,
        source=sender.get("address"),
        destination=target.get("address"),
        amount=record.get("amount"),
        decimals=decimals,
        timestamp=record.get("timestamp"),
        timestamp_unit=TimestampUnit.ISO8601,
        fee=fee,
        fee_decimals=decimals if fee is not None else None,
    )]


def _extract_helius(
    record: dict[str, Any],
    raw: HeliusTransactions,
    config: WalletHistoryConfig,
) -> list[TransferCandidate]:
    if record.get("transactionError"):
        return []

    wallet_address = raw.wallet.address
    address = lower_or_none(wallet_address)

    # Net native transfers per direction within one signature
    inbound = Decimal(0)
    outbound = Decimal(0)
    inbound_from: Optional[str] = None
    outbound_to: Optional[str] = None
    for transfer in record.get("nativeTransfers") or []:
        sender = transfer.get("fromUserAccount")
        receiver = transfer.get("toUserAccount")
        lamports = to_decimal(transfer.get("amount"))
        if lower_or_none(receiver) == address and lower_or_none(sender) != address:
            inbound += lamports
            inbound_from = inbound_from or sender
        elif lower_or_none(sender) == address and lower_or_none(receiver) != address:
            outbound += lamports
            outbound_to = outbound_to or receiver

    decimals = config.decimals_for("SOL")
    signature = str(record.get("signature") or "")
    timestamp = record.get("timestamp")
    candidates: list[TransferCandidate] = []
    if inbound:
        candidates.append(TransferCandidate(
            native_id=signature,
            source=inbound_from,
            destination=wallet_address,
            amount=inbound,
            decimals=decimals,
            timestamp=timestamp,
            timestamp_unit=TimestampUnit.SECONDS,
        ))
    if outbound:
        pays_fee = lower_or_none(record.get("feePayer")) == address
        candidates.append(TransferCandidate(
            native_id=signature,
            source=wallet_address,
            destination=outbound_to,
            amount=outbound,
            decimals=decimals,
            timestamp=timestamp,
            timestamp_unit=TimestampUnit.SECONDS,
            fee=record.get("fee") if pays_fee else None,
            fee_decimals=decimals,
        ))
    return candidates


def _extract_hiro(
    record: dict[str, Any],
    raw: HiroTransactions,
    config: WalletHistoryConfig,
) -> list[TransferCandidate]:
    # v2 endpoints wrap the transaction as {"tx": {...}}
    tx = record["tx"] if isinstance(record.get("tx"), dict) else record
    if tx.get("tx_type") != "token_transfer" or tx.get("tx_status") != "success":
        return []

    decimals = config.decimals_for("STX")
    transfer = tx.get("token_transfer") or {}
    return [TransferCandidate(
        native_id=str(tx.get("tx_id") or ""),
        source=tx.get("sender_address"),
        destination=transfer.get("recipient_address"),
        amount=transfer.get("amount"),
        decimals=decimals,
        timestamp=tx.get("burn_block_time") or tx.get("block_time"),
        timestamp_unit=TimestampUnit.SECONDS,
        fee=tx.get("fee_rate"),
        fee_decimals=decimals,
    )]


# Lookup table: raw shape -> (extractor, emits duplicate hashes per leg)
NORMALIZERS: dict[type, tuple[Extractor, bool]] = {
    AlchemyTransfers: (_extract_alchemy, True),
    BlockchairDashboard: (_extract_blockchair, False),
    XrplAccountTx: (_extract_xrpl, False),
    TzktOperations: (_extract_tzkt, True),
    HeliusTransactions: (_extract_helius, True),
    HiroTransactions: (_extract_hiro, False),
}


# ─────────────────────────────────────────────────────────────
# Public API
# ─────────────────────────────────────────────────────────────

def normalize_with_report(
    raw: RawProviderResponse,
    network: Optional[str] = None,
    wallet: Optional[Wallet] = None,
    per_leg: Optional[bool] = None,
    config: Optional[WalletHistoryConfig] = None,
) -> tuple[list[Transaction], NormalizationReport]:
    """
    Normalize a raw response and return the counters alongside.

    `network` and `wallet` default to those recorded on the response;
    `per_leg` defaults to the provider's registered flag; `config` (for
    decimals) defaults to the global configuration.
    """
    entry = NORMALIZERS.get(type(raw))
    if entry is None:
        raise NormalizationError(
            f"No normalizer registered for {type(raw).__name__}",
            provider=getattr(raw, "provider", None),
            raw_type=type(raw).__name__,
        )
    extractor, default_per_leg = entry
    config = config or get_config()
    if per_leg is None:
        per_leg = default_per_leg

    changes: dict[str, Any] = {}
    if network is not None and network != raw.network:
        changes["network"] = network
    if wallet is not None and wallet != raw.wallet:
        changes["wallet"] = wallet
    if changes:
        raw = replace(raw, **changes)

    report = NormalizationReport(provider=raw.provider, total=len(raw.records))
    transactions: list[Transaction] = []

    for record in raw.records:
        try:
            candidates = extractor(record, raw, config)
        except Exception as e:
            report.skipped += 1
            report.errors.append(str(e))
            logger.warning(f"[{raw.provider}] Skipping unreadable record: {e}")
            continue

        if not candidates:
            report.filtered += 1
            continue

        converted: list[Transaction] = []
        try:
            for candidate in candidates:
                converted.append(_to_transaction(candidate, raw, per_leg))
        except Exception as e:
            report.skipped += 1
            report.errors.append(f"{candidates[0].native_id}: {e}")
            logger.warning(
                f"[{raw.provider}] Skipping record "
                f"{candidates[0].native_id or '<no id>'}: {e}"
            )
            continue
        transactions.extend(converted)

    result = finalize(transactions, report)
    report.produced = len(result)

    logger.debug(
        f"[{raw.provider}] Normalized {len(result)} transactions for "
        f"{raw.wallet.address} ({report.to_dict()})"
    )
    if report.skipped:
        logger.warning(
            f"[{raw.provider}] {report.skipped}/{report.total} records skipped "
            f"for {raw.wallet.address}"
        )
    return result, report


def normalize(
    raw: RawProviderResponse,
    network: Optional[str] = None,
    wallet: Optional[Wallet] = None,
    config: Optional[WalletHistoryConfig] = None,
) -> list[Transaction]:
    """Normalize a raw provider response into canonical transactions."""
    transactions, _ = normalize_with_report(raw, network, wallet, config=config)
    return transactions

"""
Tests for the Normalization Engine.

============================================================
PURPOSE
============================================================
1. Direction classification
2. Identity construction and de-duplication
3. Ordering and idempotence
4. Per-provider filtering and field extraction
5. Local recovery from malformed records

============================================================
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from wallet_history.config import WalletHistoryConfig, set_config
from wallet_history.exceptions import NormalizationError
from wallet_history.models import Transaction, TxType, Wallet
from wallet_history.normalizer import (
    build_unique_id,
    classify_direction,
    normalize,
    normalize_with_report,
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
from wallet_history.units import RIPPLE_EPOCH_OFFSET


EPOCH = 1700000000
INSTANT = datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)

ETH_WALLET = Wallet("0xAbC0000000000000000000000000000000000001", "ETH")
ETH_OTHER = "0xdef0000000000000000000000000000000000002"
BTC_WALLET = Wallet("bc1qwalletaddress", "BTC")
XRP_WALLET = Wallet("rWalletAddress", "XRP")
XTZ_WALLET = Wallet("tz1WalletAddress", "XTZ")
SOL_WALLET = Wallet("W1SolanaWallet", "SOL")
STX_WALLET = Wallet("SP1WALLET", "STX")


def tzkt_op(hash_, sender, target, amount, timestamp, **extra):
    """Build a TzKT transaction operation."""
    op = {
        "type": "transaction",
        "hash": hash_,
        "sender": {"address": sender},
        "target": {"address": target},
        "amount": amount,
        "timestamp": timestamp,
        "status": "applied",
    }
    op.update(extra)
    return op


def xrpl_payment(hash_, account, destination, delivered, date, result="tesSUCCESS"):
    """Build an account_tx entry for a Payment."""
    return {
        "hash": hash_,
        "tx": {
            "TransactionType": "Payment",
            "Account": account,
            "Destination": destination,
            "Amount": delivered,
            "Fee": "12",
            "date": date,
        },
        "meta": {"TransactionResult": result, "delivered_amount": delivered},
        "validated": True,
    }


def assert_chronological(transactions):
    dates = [tx.date for tx in transactions]
    assert dates == sorted(dates)


# ============================================================
# DIRECTION TESTS
# ============================================================

class TestClassifyDirection:
    """Tests for direction classification."""

    def test_outbound(self):
        """Test wallet as source."""
        assert classify_direction("0xABC", "0xabc", "0xdef") == TxType.OUTBOUND

    def test_inbound(self):
        """Test wallet as destination, case-insensitive."""
        assert classify_direction("0xabc", "0xDEF", "0xABC") == TxType.INBOUND

    def test_neither(self):
        """Test unrelated records."""
        assert classify_direction("0xabc", "0xdef", "0x123") == TxType.NA

    def test_missing_sides(self):
        """Test missing counterparties."""
        assert classify_direction("0xabc", None, "0xabc") == TxType.INBOUND
        assert classify_direction("0xabc", "0xabc", None) == TxType.OUTBOUND
        assert classify_direction("0xabc", None, None) == TxType.NA

    def test_self_transfer(self):
        """Test both sides matching follow the query leg."""
        assert classify_direction("0xabc", "0xABC", "0xabc") == TxType.OUTBOUND
        assert classify_direction("0xabc", "0xABC", "0xabc", leg="from") == TxType.OUTBOUND
        assert classify_direction("0xabc", "0xABC", "0xabc", leg="to") == TxType.INBOUND


class TestBuildUniqueId:
    """Tests for identity construction."""

    def test_plain(self):
        """Test address + native id."""
        assert build_unique_id("rWallet", "ABC123", TxType.INBOUND) == "rWalletABC123"

    def test_per_leg(self):
        """Test direction suffix for per-leg providers."""
        inbound = build_unique_id("tz1", "oo1", TxType.INBOUND, per_leg=True)
        outbound = build_unique_id("tz1", "oo1", TxType.OUTBOUND, per_leg=True)

        assert inbound == "tz1oo1:inbound-transaction"
        assert inbound != outbound

    def test_deterministic(self):
        """Test the same inputs give the same id."""
        assert build_unique_id("a", "b", TxType.NA, True) == build_unique_id("a", "b", TxType.NA, True)


# ============================================================
# SCENARIO TESTS
# ============================================================

class TestScenarios:
    """End-to-end normalization scenarios."""

    def test_inbound_lamports_case_differing(self):
        """Test one inbound record with case-differing counterparty."""
        raw = HeliusTransactions(
            network="mainnet",
            wallet=SOL_WALLET,
            records=[{
                "signature": "sigA",
                "timestamp": EPOCH,
                "nativeTransfers": [{
                    "fromUserAccount": "SenderAccount",
                    "toUserAccount": SOL_WALLET.address.lower(),
                    "amount": 500000000,
                }],
            }],
        )

        transactions = normalize(raw)

        assert len(transactions) == 1
        tx = transactions[0]
        assert tx.tx_type == TxType.INBOUND
        assert tx.activity_category == "inbound-transaction"
        assert tx.amount == Decimal("0.5")
        assert tx.date == INSTANT
        assert tx.currency_symbol == "SOL"
        assert tx.transaction_id == "sigA"

    def test_zero_records(self):
        """Test an empty response normalizes to an empty list."""
        raw = TzktOperations(network="mainnet", wallet=XTZ_WALLET, records=[])

        assert raw.is_empty
        assert normalize(raw) == []

    def test_per_leg_duplicates_retained(self):
        """Test two legs sharing one hash keep distinct ids."""
        raw = TzktOperations(
            network="mainnet",
            wallet=XTZ_WALLET,
            records=[
                tzkt_op("ooSharedHash", "tz1Other", XTZ_WALLET.address, 1000000, "2023-11-14T22:13:20Z"),
                tzkt_op("ooSharedHash", XTZ_WALLET.address, "KT1Contract", 250000, "2023-11-14T22:13:20Z"),
            ],
        )

        transactions, report = normalize_with_report(raw)

        assert len(transactions) == 2
        assert len({tx.unique_id for tx in transactions}) == 2
        assert {tx.tx_type for tx in transactions} == {TxType.INBOUND, TxType.OUTBOUND}
        assert report.duplicates == 0

    def test_self_transfer_both_legs_retained(self):
        """Test a self transfer seen on both Alchemy legs."""
        record = {
            "category": "external",
            "hash": "0xselftx",
            "from": ETH_WALLET.address.lower(),
            "to": ETH_WALLET.address,
            "value": 0.25,
            "asset": "ETH",
            "metadata": {"blockTimestamp": "2023-11-14T22:13:20.000Z"},
        }
        raw = AlchemyTransfers(
            network="mainnet",
            wallet=ETH_WALLET,
            records=[dict(record, _leg="from"), dict(record, _leg="to")],
        )

        transactions = normalize(raw)

        assert len(transactions) == 2
        assert {tx.tx_type for tx in transactions} == {TxType.INBOUND, TxType.OUTBOUND}
        assert transactions[0].unique_id != transactions[1].unique_id


# ============================================================
# PROPERTY TESTS
# ============================================================

class TestNormalizationProperties:
    """Tests for idempotence, uniqueness and ordering."""

    @pytest.fixture
    def xrpl_raw(self):
        """Out-of-order XRPL history with an overlapping page."""
        base = EPOCH - RIPPLE_EPOCH_OFFSET
        first = xrpl_payment("H1", "rSender", XRP_WALLET.address, "1000000", base + 300)
        second = xrpl_payment("H2", XRP_WALLET.address, "rOther", "2000000", base)
        third = xrpl_payment("H3", "rSender", XRP_WALLET.address.upper(), "3000000", base + 100)
        return XrplAccountTx(
            network="mainnet",
            wallet=XRP_WALLET,
            records=[first, second, third, first],
        )

    def test_idempotent(self, xrpl_raw):
        """Test normalizing twice gives identical lists."""
        assert normalize(xrpl_raw) == normalize(xrpl_raw)

    def test_unique_ids(self, xrpl_raw):
        """Test no two results share a uniqueId."""
        transactions, report = normalize_with_report(xrpl_raw)

        assert len(transactions) == 3
        assert len({tx.unique_id for tx in transactions}) == 3
        assert report.duplicates == 1

    def test_chronological(self, xrpl_raw):
        """Test dates are non-decreasing."""
        transactions = normalize(xrpl_raw)

        assert_chronological(transactions)
        assert [tx.transaction_id for tx in transactions] == ["H2", "H3", "H1"]

    def test_direction_matches_side(self, xrpl_raw):
        """Test each record's direction matches the wallet's side."""
        by_id = {tx.transaction_id: tx for tx in normalize(xrpl_raw)}

        assert by_id["H1"].tx_type == TxType.INBOUND
        assert by_id["H2"].tx_type == TxType.OUTBOUND
        assert by_id["H3"].tx_type == TxType.INBOUND

    def test_amounts_never_negative(self):
        """Test amounts are absolute values."""
        raw = BlockchairDashboard(
            network="mainnet",
            wallet=BTC_WALLET,
            records=[{"hash": "h1", "time": "2023-11-14 22:13:20", "balance_change": -150000000}],
        )
        transactions = normalize(raw)

        assert transactions[0].amount == Decimal("1.5")
        assert transactions[0].tx_type == TxType.OUTBOUND

    def test_network_and_wallet_override(self, xrpl_raw):
        """Test explicit network/wallet arguments take precedence."""
        transactions = normalize(xrpl_raw, network="testnet")

        assert all(tx.network == "testnet" for tx in transactions)
        assert xrpl_raw.network == "mainnet"

    def test_serialization(self, xrpl_raw):
        """Test to_dict/from_dict keep the canonical record."""
        tx = normalize(xrpl_raw)[0]
        data = tx.to_dict()

        assert data["txType"] == data["activityCategory"]
        assert data["uniqueId"] == XRP_WALLET.address + tx.transaction_id
        assert Transaction.from_dict(data) == tx


# ============================================================
# RECOVERY TESTS
# ============================================================

class TestMalformedRecords:
    """Tests for per-record recovery."""

    def test_bad_record_skipped(self):
        """Test one bad record does not fail the batch."""
        raw = TzktOperations(
            network="mainnet",
            wallet=XTZ_WALLET,
            records=[
                tzkt_op("oo1", "tz1Other", XTZ_WALLET.address, 1000000, "2023-11-14T22:13:20Z"),
                tzkt_op("oo2", "tz1Other", XTZ_WALLET.address, 1000000, None),
                tzkt_op("", "tz1Other", XTZ_WALLET.address, 1000000, "2023-11-14T22:13:20Z"),
                tzkt_op("oo4", "tz1Other", XTZ_WALLET.address, 1000000, "not a date"),
            ],
        )

        transactions, report = normalize_with_report(raw)

        assert [tx.transaction_id for tx in transactions] == ["oo1"]
        assert report.total == 4
        assert report.skipped == 3
        assert report.produced == 1

    def test_all_bad_batch(self):
        """Test a batch of only bad records yields an empty list."""
        raw = HiroTransactions(
            network="mainnet",
            wallet=STX_WALLET,
            records=[{
                "tx_id": "0xbad",
                "tx_type": "token_transfer",
                "tx_status": "success",
                "sender_address": STX_WALLET.address,
                "token_transfer": {"recipient_address": "SP2OTHER", "amount": "10"},
            }],
        )

        transactions, report = normalize_with_report(raw)

        assert transactions == []
        assert report.skipped == 1

    def test_non_dict_record_skipped(self):
        """Test records of the wrong JSON type are skipped."""
        raw = XrplAccountTx(network="mainnet", wallet=XRP_WALLET, records=["garbage"])

        transactions, report = normalize_with_report(raw)

        assert transactions == []
        assert report.skipped == 1

    def test_unregistered_shape(self):
        """Test a raw type without a normalizer raises."""

        @dataclass
        class UnknownResponse(RawProviderResponse):
            pass

        with pytest.raises(NormalizationError) as exc_info:
            normalize(UnknownResponse(network="mainnet", wallet=XTZ_WALLET))

        assert exc_info.value.raw_type == "UnknownResponse"


# ============================================================
# PROVIDER EXTRACTION TESTS
# ============================================================

class TestAlchemyExtraction:
    """Tests for Alchemy transfer records."""

    def test_native_transfer(self):
        """Test value already in display units."""
        raw = AlchemyTransfers(network="mainnet", wallet=ETH_WALLET, records=[{
            "category": "external",
            "hash": "0xh1",
            "from": ETH_WALLET.address,
            "to": ETH_OTHER,
            "value": 1.5,
            "asset": "ETH",
            "metadata": {"blockTimestamp": "2023-11-14T22:13:20.000Z"},
            "_leg": "from",
        }])

        tx = normalize(raw)[0]

        assert tx.amount == Decimal("1.5")
        assert tx.tx_type == TxType.OUTBOUND
        assert tx.currency_symbol == "ETH"
        assert tx.date == INSTANT
        assert tx.unique_id == ETH_WALLET.address + "0xh1:outbound-transaction"

    def test_token_without_value(self):
        """Test ERC-20 fallback to raw contract value and decimals."""
        raw = AlchemyTransfers(network="mainnet", wallet=ETH_WALLET, records=[{
            "category": "erc20",
            "hash": "0xh2",
            "from": ETH_OTHER,
            "to": ETH_WALLET.address.lower(),
            "value": None,
            "asset": "USDC",
            "rawContract": {"value": "0x2faf080", "decimal": "0x6"},
            "metadata": {"blockTimestamp": "2023-11-14T22:13:20.000Z"},
            "_leg": "to",
        }])

        tx = normalize(raw)[0]

        assert tx.amount == Decimal(50)
        assert tx.currency_symbol == "USDC"
        assert tx.tx_type == TxType.INBOUND

    def test_nft_filtered(self):
        """Test NFT categories are not transfers."""
        raw = AlchemyTransfers(network="mainnet", wallet=ETH_WALLET, records=[
            {"category": "erc721", "hash": "0xnft", "from": ETH_OTHER, "to": ETH_WALLET.address},
            {"category": "erc1155", "hash": "0xnft2", "from": ETH_OTHER, "to": ETH_WALLET.address},
        ])

        transactions, report = normalize_with_report(raw)

        assert transactions == []
        assert report.filtered == 2

    def test_bnb_native_symbol(self):
        """Test native asset on BNB chain."""
        raw = AlchemyTransfers(
            network="mainnet",
            wallet=Wallet(ETH_WALLET.address, "BNB"),
            native_symbol="BNB",
            records=[{
                "category": "external",
                "hash": "0xbnb",
                "from": ETH_OTHER,
                "to": ETH_WALLET.address,
                "value": 2,
                "asset": None,
                "metadata": {"blockTimestamp": "2023-11-14T22:13:20.000Z"},
            }],
        )

        assert normalize(raw)[0].currency_symbol == "BNB"

    def test_several_tokens_in_one_transaction(self):
        """Test transfers sharing a hash are identified by their uniqueId."""
        def erc20(unique_id, asset, amount):
            return {
                "category": "erc20",
                "hash": "0xairdrop",
                "uniqueId": unique_id,
                "from": ETH_OTHER,
                "to": ETH_WALLET.address,
                "value": amount,
                "asset": asset,
                "metadata": {"blockTimestamp": "2023-11-14T22:13:20.000Z"},
                "_leg": "to",
            }

        raw = AlchemyTransfers(network="mainnet", wallet=ETH_WALLET, records=[
            erc20("0xairdrop:log:0x1", "USDC", 10),
            erc20("0xairdrop:log:0x2", "DAI", 5),
            # Same transfer again on an overlapping page
            erc20("0xairdrop:log:0x2", "DAI", 5),
        ])

        transactions, report = normalize_with_report(raw)

        assert sorted((tx.currency_symbol, tx.amount) for tx in transactions) == [
            ("DAI", Decimal(5)),
            ("USDC", Decimal(10)),
        ]
        assert {tx.transaction_id for tx in transactions} == {"0xairdrop"}
        assert {tx.unique_id for tx in transactions} == {
            ETH_WALLET.address + "0xairdrop:log:0x1:inbound-transaction",
            ETH_WALLET.address + "0xairdrop:log:0x2:inbound-transaction",
        }
        assert report.duplicates == 1
        assert report.produced == 2


class TestBlockchairExtraction:
    """Tests for Blockchair dashboard records."""

    def test_balance_change_sign(self):
        """Test direction from the sign of balance_change."""
        raw = BlockchairDashboard(network="mainnet", wallet=BTC_WALLET, records=[
            {"hash": "out1", "time": "2023-11-15 08:00:00", "balance_change": -50000000},
            {"hash": "in1", "time": "2023-11-14 22:13:20", "balance_change": 150000000},
        ])

        transactions = normalize(raw)

        assert [tx.transaction_id for tx in transactions] == ["in1", "out1"]
        inbound, outbound = transactions
        assert inbound.tx_type == TxType.INBOUND
        assert inbound.amount == Decimal("1.5")
        assert inbound.source is None
        assert inbound.destination == BTC_WALLET.address
        assert outbound.tx_type == TxType.OUTBOUND
        assert outbound.amount == Decimal("0.5")
        assert outbound.destination is None
        assert inbound.unique_id == BTC_WALLET.address + "in1"

    def test_overlapping_pages_deduplicated(self):
        """Test repeated hashes collapse (first wins)."""
        record = {"hash": "h1", "time": "2023-11-14 22:13:20", "balance_change": 1000}
        raw = BlockchairDashboard(network="mainnet", wallet=BTC_WALLET, records=[record, dict(record)])

        transactions, report = normalize_with_report(raw)

        assert len(transactions) == 1
        assert report.duplicates == 1


class TestXrplExtraction:
    """Tests for XRPL account_tx entries."""

    def test_payment(self):
        """Test delivered amount, Ripple epoch date and fee."""
        raw = XrplAccountTx(network="mainnet", wallet=XRP_WALLET, records=[
            xrpl_payment("X1", "rSender", XRP_WALLET.address, "2500000", EPOCH - RIPPLE_EPOCH_OFFSET),
        ])

        tx = normalize(raw)[0]

        assert tx.amount == Decimal("2.5")
        assert tx.date == INSTANT
        assert tx.fee == Decimal("0.000012")
        assert tx.unique_id == XRP_WALLET.address + "X1"

    def test_tx_json_shape(self):
        """Test API v2 entries with tx_json."""
        entry = xrpl_payment("X2", XRP_WALLET.address, "rOther", "1000000", EPOCH - RIPPLE_EPOCH_OFFSET)
        entry["tx_json"] = entry.pop("tx")
        raw = XrplAccountTx(network="mainnet", wallet=XRP_WALLET, records=[entry])

        tx = normalize(raw)[0]

        assert tx.tx_type == TxType.OUTBOUND
        assert tx.transaction_id == "X2"

    def test_non_transfers_filtered(self):
        """Test failed payments, IOUs and other types are filtered."""
        date = EPOCH - RIPPLE_EPOCH_OFFSET
        failed = xrpl_payment("F1", "rSender", XRP_WALLET.address, "1", date, result="tecUNFUNDED_PAYMENT")
        iou = xrpl_payment("I1", "rSender", XRP_WALLET.address, "1", date)
        iou["meta"]["delivered_amount"] = {"currency": "USD", "issuer": "rIssuer", "value": "10"}
        offer = {"hash": "O1", "tx": {"TransactionType": "OfferCreate", "date": date}, "meta": {}}

        raw = XrplAccountTx(network="mainnet", wallet=XRP_WALLET, records=[failed, iou, offer])
        transactions, report = normalize_with_report(raw)

        assert transactions == []
        assert report.filtered == 3


class TestTzktExtraction:
    """Tests for TzKT operations."""

    def test_transaction(self):
        """Test mutez conversion and baker fee."""
        raw = TzktOperations(network="ghostnet", wallet=XTZ_WALLET, records=[
            tzkt_op("oo1", XTZ_WALLET.address, "tz1Other", 1500000, "2023-11-14T22:13:20Z", bakerFee=1420),
        ])

        tx = normalize(raw)[0]

        assert tx.amount == Decimal("1.5")
        assert tx.fee == Decimal("0.00142")
        assert tx.network == "ghostnet"
        assert tx.provider == "tzkt"

    def test_batch_to_several_recipients(self):
        """Test a batch sharing one hash keeps every operation."""
        raw = TzktOperations(network="mainnet", wallet=XTZ_WALLET, records=[
            tzkt_op("ooBatch", XTZ_WALLET.address, "tz1First", 1000000, "2023-11-14T22:13:20Z", id=1),
            tzkt_op("ooBatch", XTZ_WALLET.address, "tz1Second", 2000000, "2023-11-14T22:13:20Z", id=2),
            tzkt_op("ooBatch", XTZ_WALLET.address, "tz1Third", 3000000, "2023-11-14T22:13:20Z", id=3),
        ])

        transactions = normalize(raw)

        assert len(transactions) == 3
        assert sum(tx.amount for tx in transactions) == Decimal(6)
        assert {tx.transaction_id for tx in transactions} == {"ooBatch"}
        assert XTZ_WALLET.address + "ooBatch:2:outbound-transaction" in {
            tx.unique_id for tx in transactions
        }

    def test_repeated_operation_dropped(self):
        """Test the same operation id on overlapping pages is kept once."""
        op = tzkt_op("ooRepeat", "tz1Other", XTZ_WALLET.address, 1000000, "2023-11-14T22:13:20Z", id=42)
        raw = TzktOperations(network="mainnet", wallet=XTZ_WALLET, records=[op, dict(op)])

        transactions, report = normalize_with_report(raw)

        assert len(transactions) == 1
        assert report.duplicates == 1

    def test_decimals_override(self):
        """Test a configured decimals override applies to history amounts."""
        raw = TzktOperations(network="mainnet", wallet=XTZ_WALLET, records=[
            tzkt_op("oo7", "tz1Other", XTZ_WALLET.address, 7, "2023-11-14T22:13:20Z"),
        ])
        config = WalletHistoryConfig(decimals_overrides={"XTZ": 0})

        assert normalize(raw, config=config)[0].amount == Decimal(7)

        set_config(config)
        try:
            assert normalize(raw)[0].amount == Decimal(7)
        finally:
            set_config(None)

    def test_other_operations_filtered(self):
        """Test reveals and failed operations are filtered."""
        raw = TzktOperations(network="mainnet", wallet=XTZ_WALLET, records=[
            {"type": "reveal", "hash": "oo2", "timestamp": "2023-11-14T22:13:20Z"},
            tzkt_op("oo3", "tz1Other", XTZ_WALLET.address, 1, "2023-11-14T22:13:20Z", status="failed"),
        ])

        transactions, report = normalize_with_report(raw)

        assert transactions == []
        assert report.filtered == 2


class TestHeliusExtraction:
    """Tests for Helius enhanced transactions."""

    def test_outbound_with_fee(self):
        """Test outbound transfer pays the fee."""
        raw = HeliusTransactions(network="mainnet", wallet=SOL_WALLET, records=[{
            "signature": "sigOut",
            "timestamp": EPOCH,
            "fee": 5000,
            "feePayer": SOL_WALLET.address,
            "nativeTransfers": [
                {"fromUserAccount": SOL_WALLET.address, "toUserAccount": "Dest1", "amount": 1000000000},
            ],
        }])

        tx = normalize(raw)[0]

        assert tx.tx_type == TxType.OUTBOUND
        assert tx.amount == Decimal(1)
        assert tx.fee == Decimal("0.000005")
        assert tx.destination == "Dest1"

    def test_both_directions_in_one_signature(self):
        """Test netting per direction yields two legs."""
        raw = HeliusTransactions(network="mainnet", wallet=SOL_WALLET, records=[{
            "signature": "sigSwap",
            "timestamp": EPOCH,
            "nativeTransfers": [
                {"fromUserAccount": SOL_WALLET.address, "toUserAccount": "Pool", "amount": 300000000},
                {"fromUserAccount": SOL_WALLET.address, "toUserAccount": "Pool", "amount": 200000000},
                {"fromUserAccount": "Pool", "toUserAccount": SOL_WALLET.address, "amount": 100000000},
            ],
        }])

        transactions = normalize(raw)
        by_type = {tx.tx_type: tx for tx in transactions}

        assert len(transactions) == 2
        assert by_type[TxType.OUTBOUND].amount == Decimal("0.5")
        assert by_type[TxType.INBOUND].amount == Decimal("0.1")
        assert by_type[TxType.OUTBOUND].unique_id != by_type[TxType.INBOUND].unique_id

    def test_failed_and_unrelated_filtered(self):
        """Test failed transactions and foreign transfers are filtered."""
        raw = HeliusTransactions(network="mainnet", wallet=SOL_WALLET, records=[
            {"signature": "sigFail", "timestamp": EPOCH, "transactionError": {"InstructionError": [0, "Custom"]}},
            {"signature": "sigNone", "timestamp": EPOCH, "nativeTransfers": [
                {"fromUserAccount": "A", "toUserAccount": "B", "amount": 1},
            ]},
        ])

        transactions, report = normalize_with_report(raw)

        assert transactions == []
        assert report.filtered == 2


class TestHiroExtraction:
    """Tests for Hiro Stacks transactions."""

    def test_token_transfer(self):
        """Test micro-STX conversion and seconds timestamp."""
        raw = HiroTransactions(network="mainnet", wallet=STX_WALLET, records=[{
            "tx_id": "0xs1",
            "tx_type": "token_transfer",
            "tx_status": "success",
            "sender_address": STX_WALLET.address,
            "token_transfer": {"recipient_address": "SP2OTHER", "amount": "2500000"},
            "burn_block_time": EPOCH,
            "fee_rate": "180",
        }])

        tx = normalize(raw)[0]

        assert tx.tx_type == TxType.OUTBOUND
        assert tx.amount == Decimal("2.5")
        assert tx.fee == Decimal("0.00018")
        assert tx.date == INSTANT

    def test_wrapped_record(self):
        """Test {"tx": {...}} wrapped records."""
        raw = HiroTransactions(network="mainnet", wallet=STX_WALLET, records=[{"tx": {
            "tx_id": "0xs2",
            "tx_type": "token_transfer",
            "tx_status": "success",
            "sender_address": "SP2OTHER",
            "token_transfer": {"recipient_address": STX_WALLET.address, "amount": "1000000"},
            "burn_block_time": EPOCH,
        }}])

        assert normalize(raw)[0].tx_type == TxType.INBOUND

    def test_contract_calls_filtered(self):
        """Test non-transfer and failed transactions are filtered."""
        raw = HiroTransactions(network="mainnet", wallet=STX_WALLET, records=[
            {"tx_id": "0xc1", "tx_type": "contract_call", "tx_status": "success"},
            {"tx_id": "0xc2", "tx_type": "token_transfer", "tx_status": "abort_by_response"},
        ])

        transactions, report = normalize_with_report(raw)

        assert transactions == []
        assert report.filtered == 2

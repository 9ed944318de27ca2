"""
Fetch and print the normalized history of one or more wallets.

Usage:
    python scripts/fetch_wallet_history.py XTZ tz1... [tz1...] --network ghostnet
    python scripts/fetch_wallet_history.py BTC bc1q... --balance --json

API keys are read from the environment (or a .env file):
ALCHEMY_API_KEY, BLOCKCHAIR_API_KEY, HELIUS_API_KEY, HIRO_API_KEY.
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from wallet_history import (
    Transaction,
    WalletDataFacade,
    WalletHistoryConfig,
    WalletHistoryError,
    setup_default_adapters,
)


# ============================================================
# LOGGING
# ============================================================

def setup_logging(level: str = "INFO") -> None:
    """Configure logging."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s | %(levelname)-5s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

logger = logging.getLogger(__name__)


def print_banner(text: str) -> None:
    """Print a banner."""
    print("\n" + "=" * 60)
    print(f"  {text}")
    print("=" * 60)


def print_transaction(tx: Transaction) -> None:
    arrow = {"inbound-transaction": "IN ", "outbound-transaction": "OUT"}.get(tx.tx_type.value, "NA ")
    counterparty = tx.source if tx.is_inbound else tx.destination
    print(
        f"  {tx.date:%Y-%m-%d %H:%M:%S} {arrow} {tx.amount:>20} {tx.currency_symbol:<5} "
        f"{counterparty or '-':<44} {tx.transaction_id}"
    )


async def run(args: argparse.Namespace) -> int:
    config = WalletHistoryConfig.from_env(dotenv=False)
    if args.max_pages:
        config.max_pages = args.max_pages

    async with setup_default_adapters(config, facade=WalletDataFacade()) as facade:
        symbol = args.currency.upper()
        if not facade.supports(symbol):
            logger.error(
                f"No adapter for {symbol} (available: {', '.join(facade.list_currencies())})"
            )
            return 2

        try:
            if args.balance:
                for address in args.addresses:
                    balance = await facade.get_balance(symbol, args.network, address)
                    if args.json:
                        print(json.dumps(balance.to_dict()))
                    else:
                        print(f"{address}: {balance.amount} {balance.currency_symbol}")
                return 0

            if len(args.addresses) == 1:
                transactions = await facade.get_transaction_data(symbol, args.network, args.addresses[0])
            else:
                transactions = await facade.get_bulk_transactions(symbol, args.network, args.addresses)
        except WalletHistoryError as e:
            logger.error(str(e))
            return 1

    if args.json:
        print(json.dumps([tx.to_dict() for tx in transactions], indent=2))
        return 0

    print_banner(f"{symbol} history ({len(transactions)} transactions)")
    for tx in transactions:
        print_transaction(tx)
    return 0


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Fetch normalized wallet transaction history",
    )

    parser.add_argument("currency", help="Currency symbol, e.g. BTC, ETH, XRP")
    parser.add_argument("addresses", nargs="+", help="Wallet address(es)")
    parser.add_argument("--network", default=None, help="Network name (default: configured default)")
    parser.add_argument("--balance", action="store_true", help="Print balances instead of history")
    parser.add_argument("--json", action="store_true", help="Print JSON")
    parser.add_argument("--max-pages", type=int, default=None, help="Page ceiling per query")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])

    args = parser.parse_args()

    setup_logging(args.log_level)

    try:
        sys.exit(asyncio.run(run(args)))
    except KeyboardInterrupt:
        print("\nInterrupted")


if __name__ == "__main__":
    main()

"""
Wallet History Configuration - Provider credentials and fetch limits.

API keys are loaded from environment variables (optionally via a .env
file) and are never embedded in source.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Optional

from dotenv import load_dotenv


logger = logging.getLogger(__name__)


# Decimal exponent of each currency's smallest indivisible unit
CURRENCY_DECIMALS: dict[str, int] = {
    "BTC": 8,
    "BCH": 8,
    "LTC": 8,
    "DOGE": 8,
    "DASH": 8,
    "ZEC": 8,
    "ETH": 18,
    "BNB": 18,
    "XRP": 6,   # drops
    "XTZ": 6,   # mutez
    "SOL": 9,   # lamports
    "STX": 6,   # micro-STX
}


def get_decimals(currency_symbol: str) -> int:
    """Return the decimal exponent for a currency symbol."""
    try:
        return CURRENCY_DECIMALS[currency_symbol.upper()]
    except KeyError:
        raise KeyError(f"Unknown decimal exponent for currency '{currency_symbol}'")


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring non-integer {name}={raw!r}, using {default}")
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Ignoring non-numeric {name}={raw!r}, using {default}")
        return default


@dataclass
class WalletHistoryConfig:
    """Main configuration for the wallet history layer."""

    # Provider credentials
    alchemy_api_key: Optional[str] = None
    blockchair_api_key: Optional[str] = None
    helius_api_key: Optional[str] = None
    hiro_api_key: Optional[str] = None

    # Request settings
    request_timeout: float = 30.0
    max_pages: int = 10
    page_size: int = 100
    default_network: str = "mainnet"
    user_agent: str = "WalletHistory/1.0"

    # Per-currency overrides of CURRENCY_DECIMALS
    decimals_overrides: dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "WalletHistoryConfig":
        """Build configuration from the process environment."""
        if dotenv:
            load_dotenv()

        return cls(
            alchemy_api_key=os.environ.get("ALCHEMY_API_KEY") or None,
            blockchair_api_key=os.environ.get("BLOCKCHAIR_API_KEY") or None,
            helius_api_key=os.environ.get("HELIUS_API_KEY") or None,
            hiro_api_key=os.environ.get("HIRO_API_KEY") or None,
            request_timeout=_env_float("WALLET_HISTORY_TIMEOUT", 30.0),
            max_pages=_env_int("WALLET_HISTORY_MAX_PAGES", 10),
            page_size=_env_int("WALLET_HISTORY_PAGE_SIZE", 100),
            default_network=os.environ.get("WALLET_HISTORY_DEFAULT_NETWORK", "mainnet"),
        )

    def decimals_for(self, currency_symbol: str) -> int:
        """Decimal exponent, honouring overrides."""
        override = self.decimals_overrides.get(currency_symbol.upper())
        if override is not None:
            return override
        return get_decimals(currency_symbol)

    def to_dict(self) -> dict[str, Any]:
        """Serialize without exposing secrets."""
        return {
            "alchemy_api_key": bool(self.alchemy_api_key),
            "blockchair_api_key": bool(self.blockchair_api_key),
            "helius_api_key": bool(self.helius_api_key),
            "hiro_api_key": bool(self.hiro_api_key),
            "request_timeout": self.request_timeout,
            "max_pages": self.max_pages,
            "page_size": self.page_size,
            "default_network": self.default_network,
        }


# Global config instance
_config: Optional[WalletHistoryConfig] = None


def get_config() -> WalletHistoryConfig:
    """Get global configuration, loading it from the environment once."""
    global _config
    if _config is None:
        _config = WalletHistoryConfig.from_env()
    return _config


def set_config(config: Optional[WalletHistoryConfig]) -> None:
    """Replace (or reset with None) the global configuration."""
    global _config
    _config = config

"""
Providers package - Chain data provider adapter implementations.
"""

from wallet_history.providers.alchemy import AlchemyAdapter
from wallet_history.providers.blockchair import BlockchairAdapter
from wallet_history.providers.helius import HeliusAdapter
from wallet_history.providers.hiro import HiroAdapter
from wallet_history.providers.tzkt import TzktAdapter
from wallet_history.providers.xrpl import XrplAdapter


__all__ = [
    "AlchemyAdapter",
    "BlockchairAdapter",
    "HeliusAdapter",
    "HiroAdapter",
    "TzktAdapter",
    "XrplAdapter",
]

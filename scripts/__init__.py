"""
Scripts Package.

This package contains command line scripts for the wallet history layer.

Scripts:
- fetch_wallet_history: Print normalized history or balances for wallets
"""

# Scripts are meant to be run directly, not imported

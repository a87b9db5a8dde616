"""Cross-chain stablecoin sourcing and fee estimation for Avocado wallets."""

__version__ = "0.1.0"

"""Wallet contract access and token balances."""

from avoroute.wallet.avocado import AddressResolver, AvocadoWallet
from avoroute.wallet.balances import BalanceProvider

__all__ = [
    "AddressResolver",
    "AvocadoWallet",
    "BalanceProvider",
]

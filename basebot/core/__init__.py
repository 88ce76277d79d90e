"""
BASEBOT Core - Secret codec, keyed locks, and the wallet gateway.
"""

from .crypto import SecretCodec
from .locks import KeyedLocks
from .wallet import (
    ETH,
    CdpWalletGateway,
    SettlementReceipt,
    TradeDirection,
    TradeHandle,
    TradeIntent,
    WalletAddress,
    WalletHandle,
)

__all__ = [
    "SecretCodec",
    "KeyedLocks",
    "ETH",
    "CdpWalletGateway",
    "SettlementReceipt",
    "TradeDirection",
    "TradeHandle",
    "TradeIntent",
    "WalletAddress",
    "WalletHandle",
]

"""
BASEBOT - Telegram Wallet & Trading Bot for Base

Each chat user gets a Coinbase-hosted wallet, encrypted at rest, and a
guided Buy/Sell conversation that trades against ETH.

Usage:
    from basebot import BaseBot, BotConfig

    BaseBot(BotConfig()).run()
"""

__version__ = "1.0.0"

# Bot
from basebot.bot import BaseBot
from basebot.config import BotConfig

# Core components
from basebot.core.crypto import SecretCodec
from basebot.core.wallet import CdpWalletGateway, TradeDirection, TradeIntent

# Data
from basebot.data.credentials import CredentialStore
from basebot.data.database import CredentialDatabase

# Exceptions
from basebot.exceptions import (
    BasebotError,
    ConfigError,
    CredentialCorruptionError,
    DecryptionError,
    ProviderError,
    StoreUnavailableError,
    ValidationError,
    WalletError,
)

# Logger
from basebot.logger import BotLogger

# Trading
from basebot.trading.flow import TradeFlowEngine
from basebot.trading.state import ConversationState, ConversationStateStore

__all__ = [
    # Config
    "BotConfig",
    # Exceptions
    "BasebotError",
    "ConfigError",
    "DecryptionError",
    "WalletError",
    "CredentialCorruptionError",
    "StoreUnavailableError",
    "ValidationError",
    "ProviderError",
    # Logger
    "BotLogger",
    # Core
    "SecretCodec",
    "CdpWalletGateway",
    "TradeDirection",
    "TradeIntent",
    # Data
    "CredentialDatabase",
    "CredentialStore",
    # Trading
    "ConversationState",
    "ConversationStateStore",
    "TradeFlowEngine",
    # Bot
    "BaseBot",
]

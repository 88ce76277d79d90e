#!/usr/bin/env python3
"""
BASEBOT - Core Configuration

Bot credentials, storage settings, and environment management.
"""

import os
import string
from dataclasses import dataclass

from dotenv import load_dotenv

_dotenv_loaded = False

ENCRYPTION_KEY_HEX_LENGTH = 64  # 32-byte AES-256 key


def _ensure_dotenv() -> None:
    """Load .env file exactly once, on first call."""
    global _dotenv_loaded
    if not _dotenv_loaded:
        load_dotenv()
        _dotenv_loaded = True


@dataclass
class BotConfig:
    """
    Everything the bot needs before it may accept a single message.
    Empty secrets are filled from the environment (or a .env file).
    """

    # Telegram
    telegram_bot_token: str = ""

    # Coinbase Developer Platform
    cdp_api_key_name: str = ""
    cdp_api_key_secret: str = ""
    network_id: str = "base-mainnet"

    # Wallet credential storage
    encryption_key: str = ""  # 64 hex chars
    db_path: str = "basebot_wallets.db"
    store_timeout_seconds: float = 10.0
    serialize_wallet_creation: bool = False  # Per-user lock around get-or-create

    # Logging
    log_level: str = "INFO"
    log_file: str = "basebot.log"

    def __post_init__(self):
        """Fill env-based defaults after dataclass init (avoids module-level side effects)."""
        _ensure_dotenv()
        if not self.telegram_bot_token:
            self.telegram_bot_token = os.getenv("TELEGRAM_BOT_TOKEN", "")
        if not self.cdp_api_key_name:
            self.cdp_api_key_name = os.getenv("COINBASE_API_KEY_NAME", "")
        if not self.cdp_api_key_secret:
            self.cdp_api_key_secret = os.getenv("COINBASE_API_KEY_SECRET", "")
        if not self.encryption_key:
            self.encryption_key = os.getenv("ENCRYPTION_KEY", "")

    def __repr__(self) -> str:
        """Redact sensitive fields to prevent accidental secret leakage in logs."""

        def _redact(value: str) -> str:
            return "***" if value else "(empty)"

        return (
            f"BotConfig(network_id='{self.network_id}', "
            f"telegram_bot_token='{_redact(self.telegram_bot_token)}', "
            f"cdp_api_key_name='{_redact(self.cdp_api_key_name)}', "
            f"cdp_api_key_secret='{_redact(self.cdp_api_key_secret)}', "
            f"encryption_key='{_redact(self.encryption_key)}', "
            f"db_path='{self.db_path}')"
        )

    def validate(self) -> list[str]:
        """Collect every configuration problem instead of stopping at the first."""
        errors = []

        if not self.telegram_bot_token:
            errors.append("Missing TELEGRAM_BOT_TOKEN environment variable")

        if not self.cdp_api_key_name:
            errors.append("Missing COINBASE_API_KEY_NAME environment variable")

        if not self.cdp_api_key_secret:
            errors.append("Missing COINBASE_API_KEY_SECRET environment variable")

        if not self.encryption_key:
            errors.append("Missing ENCRYPTION_KEY environment variable")
        elif len(self.encryption_key) != ENCRYPTION_KEY_HEX_LENGTH or any(
            c not in string.hexdigits for c in self.encryption_key
        ):
            errors.append(
                f"ENCRYPTION_KEY must be {ENCRYPTION_KEY_HEX_LENGTH} hex characters (32 bytes)"
            )

        if self.store_timeout_seconds <= 0:
            errors.append("Store timeout must be positive")

        if self.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            errors.append(f"Unknown log level: {self.log_level}")

        return errors

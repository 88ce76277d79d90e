#!/usr/bin/env python3
"""
BASEBOT - Logging

One named logger, a console stream and a rotating file.
"""

import logging
from logging.handlers import RotatingFileHandler

from .config import BotConfig


class BotLogger:
    """
    Thin wrapper over the "BASEBOT" logger with domain-specific events.
    Never logs wallet seeds, exports or encryption keys.
    """

    def __init__(self, config: BotConfig):
        self.logger = logging.getLogger("BASEBOT")
        self.logger.setLevel(getattr(logging, config.log_level.upper(), logging.INFO))

        # logging.getLogger returns the same instance every time, so handlers
        # would stack when BotLogger is built more than once (e.g. in tests).
        if not self.logger.handlers:
            console = logging.StreamHandler()
            console.setFormatter(logging.Formatter(
                '%(asctime)s | %(levelname)8s | %(message)s',
                datefmt='%H:%M:%S'
            ))
            self.logger.addHandler(console)

            file_handler = RotatingFileHandler(
                config.log_file,
                maxBytes=10_000_000,  # 10MB
                backupCount=5
            )
            file_handler.setFormatter(logging.Formatter(
                '%(asctime)s | %(levelname)8s | %(name)s | %(message)s'
            ))
            self.logger.addHandler(file_handler)

    def wallet_created(self, user_id, address_id: str):
        self.logger.info(f"WALLET CREATED: user {user_id} -> {address_id}")

    def wallet_loaded(self, user_id, address_id: str):
        self.logger.debug(f"Wallet loaded: user {user_id} -> {address_id}")

    def trade_submitted(self, user_id, direction: str, from_asset: str, to_asset: str, amount):
        self.logger.info(
            f"TRADE SUBMITTED: user {user_id} | {direction.upper()} "
            f"{amount} {from_asset} -> {to_asset}"
        )

    def trade_settled(self, user_id, transaction_link: str):
        self.logger.info(f"TRADE SETTLED: user {user_id}")
        self.logger.info(f"   Link: {transaction_link}")

    def state_cleared(self, user_id, reason: str):
        self.logger.debug(f"Cleared state for user {user_id}: {reason}")

    def error(self, context: str, error: Exception):
        self.logger.error(f"{context}: {str(error)}")

    def info(self, message: str):
        self.logger.info(message)

    def warning(self, message: str):
        self.logger.warning(message)

    def debug(self, message: str):
        self.logger.debug(message)

#!/usr/bin/env python3
"""
BASEBOT - Wallet Gateway

Coinbase Developer Platform wallets behind a small async surface.
Your users' keys live here for the span of one request, never longer.
"""

import asyncio
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from cdp import Cdp, Wallet, WalletData

from basebot.config import BotConfig
from basebot.exceptions import ProviderError
from basebot.logger import BotLogger

ETH = "eth"  # Quote currency for every trade


class TradeDirection(Enum):
    BUY = "buy"
    SELL = "sell"


@dataclass(frozen=True)
class TradeIntent:
    """A fully specified, not-yet-submitted trade."""

    direction: TradeDirection
    from_asset: str
    to_asset: str
    amount: Decimal

    @classmethod
    def for_asset(cls, direction: TradeDirection, asset: str, amount: Decimal) -> "TradeIntent":
        """ETH is always the other side: spent on a buy, received on a sell."""
        if direction == TradeDirection.BUY:
            return cls(direction, ETH, asset, amount)
        return cls(direction, asset, ETH, amount)


@dataclass(frozen=True)
class SettlementReceipt:
    transaction_hash: str
    transaction_link: str


async def _call(description: str, func, *args, **kwargs):
    """
    Run a blocking SDK call in a worker thread.
    Only the awaiting task is suspended, other users keep moving.
    """
    try:
        return await asyncio.to_thread(func, *args, **kwargs)
    except ProviderError:
        raise
    except Exception as e:
        raise ProviderError(f"{description} failed: {e}") from e


class TradeHandle:
    """A submitted trade awaiting on-chain settlement."""

    def __init__(self, trade):
        self._trade = trade

    async def wait(self) -> SettlementReceipt:
        """Block this task until the provider reports a terminal status."""
        trade = await _call("Trade settlement", self._trade.wait)
        if str(trade.status).lower() == "failed":
            raise ProviderError(f"Trade {trade.trade_id} failed on-chain")
        transaction = trade.transaction
        return SettlementReceipt(
            transaction_hash=transaction.transaction_hash,
            transaction_link=transaction.transaction_link,
        )


class WalletAddress:
    """One on-chain address: balances in, trades out."""

    def __init__(self, address):
        self._address = address

    @property
    def address_id(self) -> str:
        return self._address.address_id

    async def list_balances(self) -> dict[str, Decimal]:
        balances = await _call("Balance listing", self._address.balances)
        return {asset: Decimal(amount) for asset, amount in balances.items()}

    async def get_balance(self, asset_id: str) -> Decimal:
        return Decimal(await _call(f"Balance query ({asset_id})", self._address.balance, asset_id))

    async def create_trade(self, intent: TradeIntent) -> TradeHandle:
        trade = await _call(
            "Trade submission",
            self._address.trade,
            intent.amount,
            intent.from_asset,
            intent.to_asset,
        )
        return TradeHandle(trade)


class WalletHandle:
    """A decrypted wallet, owned by the request that loaded it."""

    def __init__(self, wallet):
        self._wallet = wallet

    def export(self) -> dict:
        """Serializable seed export. Encrypt before it touches disk."""
        return self._wallet.export_data().to_dict()

    def default_address(self) -> WalletAddress:
        return WalletAddress(self._wallet.default_address)


class CdpWalletGateway:
    """
    Wallet creation and import via the Coinbase Developer Platform SDK.
    """

    def __init__(self, config: BotConfig, logger: BotLogger):
        self.config = config
        self.logger = logger
        self._configured = False

    def configure(self):
        """Authenticate the SDK once per process."""
        if self._configured:
            return
        # Keys copied from the CDP portal often carry literal "\n" escapes
        private_key = self.config.cdp_api_key_secret.replace("\\n", "\n")
        Cdp.configure(self.config.cdp_api_key_name, private_key)
        self._configured = True
        self.logger.info(f"Coinbase SDK configured for {self.config.network_id}")

    async def create_wallet(self, network_id: str) -> WalletHandle:
        self.configure()
        wallet = await _call("Wallet creation", Wallet.create, network_id=network_id)
        return WalletHandle(wallet)

    async def import_wallet(self, serialized_export: dict) -> WalletHandle:
        """
        Rebuild a wallet from its export.

        Raises:
            ValueError: the export is not a valid wallet blob
            ProviderError: the provider rejected or failed the import
        """
        self.configure()
        try:
            data = WalletData.from_dict(serialized_export)
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Malformed wallet export: {e}") from e
        wallet = await _call("Wallet import", Wallet.import_data, data)
        return WalletHandle(wallet)

#!/usr/bin/env python3
"""
BASEBOT - The Orchestrator

Wires Telegram to the wallet store and the trade flow.
Every update is its own task; errors stop at the update boundary.
"""

import json
from pathlib import Path

from telegram import ForceReply, ReplyKeyboardMarkup, Update
from telegram.constants import ParseMode
from telegram.ext import Application, CommandHandler, ContextTypes, MessageHandler, filters

from basebot.config import BotConfig
from basebot.core.crypto import SecretCodec
from basebot.core.wallet import CdpWalletGateway
from basebot.data.credentials import CredentialStore
from basebot.data.database import CredentialDatabase
from basebot.exceptions import ConfigError
from basebot.logger import BotLogger
from basebot.trading.flow import Reply, ReplySink, TradeFlowEngine
from basebot.trading.state import ConversationStateStore

MENU_LAYOUT = [
    ["Check Balance", "Deposit"],
    ["Buy", "Sell"],
    ["Help", "Settings"],
]

COMMAND_LIST = """Available commands:
• Check Balance - View your current holdings
• Deposit - Get your deposit address
• Buy - Purchase cryptocurrencies
• Sell - Sell your assets
• Help - Get assistance
• Settings - Configure your preferences"""

WELCOME_TEMPLATE = """Welcome to your Onchain Trading Bot!
Your Base address is `{address}`.

{commands}

Please select an option from the menu below."""

HELP_TEXT = f"{COMMAND_LIST}\n\nSend /start to see this menu again."
SETTINGS_TEXT = "Settings menu is coming soon."
MENU_HINT = "Please select an option from the menu or type /start to see available commands."
GENERIC_ERROR = "An error occurred while processing your request. Please try again."


def main_menu() -> ReplyKeyboardMarkup:
    return ReplyKeyboardMarkup(MENU_LAYOUT, resize_keyboard=True, is_persistent=True)


class BaseBot:
    """
    Telegram front end.
    Refuses to build if any credential or the encryption key is unusable.
    """

    def __init__(self, config: BotConfig, gateway: CdpWalletGateway | None = None):
        self.config = config
        self.logger = BotLogger(config)

        errors = config.validate()
        if errors:
            for error in errors:
                self.logger.error("Configuration error", Exception(error))
            raise ConfigError("Invalid configuration")

        self.codec = SecretCodec.from_hex(config.encryption_key)
        self.database = CredentialDatabase(config.db_path, timeout=config.store_timeout_seconds)
        self.gateway = gateway or CdpWalletGateway(config, self.logger)
        self.credentials = CredentialStore(
            config, self.database, self.codec, self.gateway, self.logger
        )
        self.states = ConversationStateStore()
        self.engine = TradeFlowEngine(self.credentials, self.states, self.logger)

        self.menu = {
            "Check Balance": self.check_balance,
            "Deposit": self.deposit,
            "Help": self.help,
            "Settings": self.settings,
        }

    def build_application(self) -> Application:
        application = (
            Application.builder()
            .token(self.config.telegram_bot_token)
            .concurrent_updates(True)
            .build()
        )
        application.add_handler(CommandHandler("start", self.start_command))
        # Edited messages are not new input
        text_messages = filters.UpdateType.MESSAGE & filters.TEXT & ~filters.COMMAND
        application.add_handler(MessageHandler(text_messages, self.handle_text))
        application.add_error_handler(self.on_error)
        return application

    def run(self):
        """Authenticate with the provider, then poll until interrupted."""
        self.gateway.configure()
        application = self.build_application()
        self.logger.info("Bot started")
        try:
            application.run_polling(allowed_updates=Update.ALL_TYPES)
        finally:
            self.close()

    def close(self):
        self.database.close()
        self.logger.info("Bot stopped")

    # ═══════════════════════════════════════════════════════════════════════
    #                           TELEGRAM HANDLERS
    # ═══════════════════════════════════════════════════════════════════════

    async def start_command(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        user_id = update.effective_user.id
        self.logger.info(f"Received /start from user {user_id}")
        try:
            address = await self.engine.resolve_address(user_id)
            await update.effective_message.reply_text(
                WELCOME_TEMPLATE.format(address=address.address_id, commands=COMMAND_LIST),
                parse_mode=ParseMode.MARKDOWN,
                reply_markup=main_menu(),
            )
        except Exception as e:
            self.logger.error(f"Start command failed for user {user_id}", e)
            await update.effective_message.reply_text(
                "An error occurred while starting the bot. Please try again."
            )

    async def handle_text(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        user_id = update.effective_user.id
        text = update.effective_message.text
        reply = self._reply_sink(update)

        try:
            # A flow in progress owns every message until it finishes
            if await self.engine.handle_message(user_id, text, reply):
                return

            handler = self.menu.get(text.strip())
            if handler is None:
                await reply(Reply(MENU_HINT))
                return
            await handler(user_id, reply)
        except Exception as e:
            self.logger.error(f"Error handling message from user {user_id}", e)
            try:
                await reply(Reply(GENERIC_ERROR))
            except Exception as send_error:
                self.logger.error("Error sending error message", send_error)

    async def on_error(self, update: object, context: ContextTypes.DEFAULT_TYPE):
        """Last line of defence for anything that escaped a handler."""
        self.logger.error("Bot error", context.error)
        if not isinstance(update, Update):
            return
        if update.effective_user:
            await self.states.clear(update.effective_user.id)
        if update.effective_message:
            try:
                await update.effective_message.reply_text(GENERIC_ERROR)
            except Exception as e:
                self.logger.error("Error sending error message", e)

    def _reply_sink(self, update: Update) -> ReplySink:
        async def send(reply: Reply):
            await update.effective_message.reply_text(
                reply.text,
                parse_mode=ParseMode.MARKDOWN if reply.markdown else None,
                reply_markup=ForceReply() if reply.force_reply else None,
            )

        return send

    # ═══════════════════════════════════════════════════════════════════════
    #                             MENU COMMANDS
    # ═══════════════════════════════════════════════════════════════════════

    async def check_balance(self, user_id, reply: ReplySink):
        address = await self.engine.resolve_address(user_id)
        balances = await address.list_balances()
        if balances:
            lines = "\n".join(f"{asset}: {amount}" for asset, amount in sorted(balances.items()))
        else:
            lines = "You have no balances."
        await reply(Reply(f"Your current balances are as follows:\n{lines}"))

    async def deposit(self, user_id, reply: ReplySink):
        address = await self.engine.resolve_address(user_id)
        await reply(Reply(
            "_Note: As this is a test app, make sure to deposit only small amounts of ETH!_",
            markdown=True,
        ))
        await reply(Reply("Please send your ETH to the following address on Base:"))
        await reply(Reply(f"`{address.address_id}`", markdown=True))

    async def help(self, user_id, reply: ReplySink):
        await reply(Reply(HELP_TEXT))

    async def settings(self, user_id, reply: ReplySink):
        await reply(Reply(SETTINGS_TEXT))


def main():
    """
    The entry point.
    Configuration comes from the environment (or .env), optionally a JSON file.
    """
    import argparse

    parser = argparse.ArgumentParser(
        description="BASEBOT - Telegram wallet and trading bot for Base",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run with settings from .env
  python -m basebot

  # Use a separate wallet database and verbose logs
  python -m basebot --db-path /var/lib/basebot/wallets.db --log-level DEBUG

Environment Variables (or use .env file):
  TELEGRAM_BOT_TOKEN       - Bot token from @BotFather
  COINBASE_API_KEY_NAME    - CDP API key name
  COINBASE_API_KEY_SECRET  - CDP API key private key
  ENCRYPTION_KEY           - 64 hex chars used to encrypt wallet exports
        """,
    )
    parser.add_argument("--config", type=str, help="Path to config JSON file")
    parser.add_argument("--network", type=str, help="Network id (default: base-mainnet)")
    parser.add_argument("--db-path", type=str, help="SQLite wallet database path")
    parser.add_argument("--log-level", type=str, help="Log level (default: INFO)")
    parser.add_argument(
        "--serialize-wallet-creation",
        action="store_true",
        default=False,
        help="Hold a per-user lock while creating wallets",
    )

    args = parser.parse_args()

    if args.config and Path(args.config).exists():
        config_data = json.loads(Path(args.config).read_text())
        config = BotConfig(**config_data)
    else:
        config = BotConfig()

    if args.network:
        config.network_id = args.network
    if args.db_path:
        config.db_path = args.db_path
    if args.log_level:
        config.log_level = args.log_level
    if args.serialize_wallet_creation:
        config.serialize_wallet_creation = True

    BaseBot(config).run()


if __name__ == "__main__":
    main()

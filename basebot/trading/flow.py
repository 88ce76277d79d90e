#!/usr/bin/env python3
"""
BASEBOT - Trade Flow Engine

Buy and sell as a three-state conversation:

    Idle --Buy/Sell--> AwaitingAsset --asset--> AwaitingAmount --amount--> Idle

transition() is the whole state machine and has no side effects.
TradeFlowEngine applies it under the user's lock, then does the I/O.
Any amount ends the flow: success, rejection and provider failure all land
back in Idle, and the user starts over with Buy or Sell.
"""

from dataclasses import dataclass, replace
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Awaitable, Callable, Optional

from basebot.core.wallet import ETH, TradeDirection, TradeIntent, WalletAddress
from basebot.data.credentials import CredentialStore
from basebot.exceptions import ProviderError, StoreUnavailableError, ValidationError
from basebot.logger import BotLogger
from basebot.trading.state import IDLE, ConversationState, ConversationStateStore, Step

COMMANDS = {
    "Buy": TradeDirection.BUY,
    "Sell": TradeDirection.SELL,
}

AMOUNT_PROMPTS = {
    TradeDirection.BUY: "Please respond with the amount of ETH you would like to spend.",
    TradeDirection.SELL: "Please respond with the amount of the asset you would like to sell.",
}

QUOTE_ASSET_REJECTION = "You cannot sell ETH, as it is the quote currency. Please try again."
INVALID_AMOUNT_REJECTION = "Invalid amount. Please try again."
INSUFFICIENT_BALANCE_REJECTION = "Invalid amount or insufficient balance. Please try again."
STORE_UNAVAILABLE_REPLY = "Your wallet is temporarily unavailable. Please try again later."
TRADE_FAILURE_TEMPLATE = "An error occurred while executing the {direction}. Please try again."


class Action(Enum):
    UNHANDLED = "unhandled"  # Idle and not a trade command
    PROMPT_ASSET = "prompt_asset"
    PROMPT_AMOUNT = "prompt_amount"
    REJECT_QUOTE_ASSET = "reject_quote_asset"
    REJECT_AMOUNT = "reject_amount"
    SUBMIT = "submit"


@dataclass(frozen=True)
class Transition:
    action: Action
    next_state: ConversationState
    amount: Optional[Decimal] = None


@dataclass(frozen=True)
class Reply:
    """One outbound chat message."""

    text: str
    markdown: bool = False
    force_reply: bool = False


ReplySink = Callable[[Reply], Awaitable[None]]


def parse_amount(text: str) -> Optional[Decimal]:
    """
    Decimal amount, or None when the text is not a usable number.
    NaN is passed through; balance validation rejects it.
    """
    try:
        amount = Decimal(text.strip())
    except InvalidOperation:
        return None
    if amount.is_nan():
        return amount
    if amount < 0:
        return None
    return amount


def check_amount(amount: Decimal, balance: Decimal):
    """Exact decimal comparison; binary floats would misjudge fractional edges."""
    if amount.is_nan() or amount > balance:
        raise ValidationError(INSUFFICIENT_BALANCE_REJECTION)


def transition(state: ConversationState, text: str) -> Transition:
    """Decide what an inbound message means given the current state."""
    if state.step is None:
        direction = COMMANDS.get(text.strip())
        if direction is None:
            return Transition(Action.UNHANDLED, state)
        return Transition(
            Action.PROMPT_ASSET,
            replace(state, operation=direction, step=Step.AWAITING_ASSET, asset=None),
        )

    if state.step == Step.AWAITING_ASSET:
        asset = text.strip().lower()
        if state.operation == TradeDirection.SELL and asset == ETH:
            return Transition(Action.REJECT_QUOTE_ASSET, IDLE)
        return Transition(
            Action.PROMPT_AMOUNT,
            replace(state, step=Step.AWAITING_AMOUNT, asset=asset),
        )

    # Step.AWAITING_AMOUNT
    amount = parse_amount(text)
    if amount is None:
        return Transition(Action.REJECT_AMOUNT, IDLE)
    return Transition(Action.SUBMIT, IDLE, amount)


class TradeFlowEngine:
    """
    Runs the buy/sell conversation for every user.
    """

    def __init__(
        self,
        credentials: CredentialStore,
        states: ConversationStateStore,
        logger: BotLogger,
    ):
        self.credentials = credentials
        self.states = states
        self.logger = logger

    def is_active(self, user_id) -> bool:
        return not self.states.get(user_id).is_idle

    async def resolve_address(self, user_id) -> WalletAddress:
        """The user's default address, memoized in conversation state."""
        cached = self.states.get(user_id).cached_address
        if cached is not None:
            return cached
        address = await self.credentials.get_or_create(user_id)
        await self.states.update(user_id, cached_address=address)
        return address

    async def handle_message(self, user_id, text: str, reply: ReplySink) -> bool:
        """
        Feed one inbound message to the state machine.
        Returns False when the message is not part of a trade flow.
        """
        async with self.states.locked(user_id):
            state = self.states.get(user_id)
            step = transition(state, text)
            if step.action == Action.UNHANDLED:
                return False
            self.states.set_unlocked(user_id, step.next_state)

        if step.next_state.is_idle:
            self.logger.state_cleared(user_id, step.action.value)

        try:
            await self._respond(user_id, state, step, reply)
        except Exception:
            # Only undo what this message wrote; a flow started since stays
            if await self.states.clear_if(user_id, step.next_state):
                self.logger.state_cleared(user_id, "error")
            raise
        return True

    async def _respond(
        self, user_id, state: ConversationState, step: Transition, reply: ReplySink
    ):
        if step.action == Action.PROMPT_ASSET:
            direction = step.next_state.operation
            await reply(Reply(
                f"Please respond with the asset you would like to {direction.value} "
                f"(ticker or contract address).",
                force_reply=True,
            ))
        elif step.action == Action.PROMPT_AMOUNT:
            await reply(Reply(AMOUNT_PROMPTS[state.operation], force_reply=True))
        elif step.action == Action.REJECT_QUOTE_ASSET:
            await reply(Reply(QUOTE_ASSET_REJECTION))
        elif step.action == Action.REJECT_AMOUNT:
            await reply(Reply(INVALID_AMOUNT_REJECTION))
        elif step.action == Action.SUBMIT:
            await self._submit(user_id, state, step.amount, reply)

    async def _submit(
        self, user_id, state: ConversationState, amount: Decimal, reply: ReplySink
    ):
        """Validate the amount against the live balance, then trade."""
        direction = state.operation

        try:
            address = state.cached_address or await self.resolve_address(user_id)
        except StoreUnavailableError as e:
            self.logger.error(f"Wallet lookup failed for user {user_id}", e)
            await reply(Reply(STORE_UNAVAILABLE_REPLY))
            return

        spend_asset = ETH if direction == TradeDirection.BUY else state.asset
        try:
            balance = await address.get_balance(spend_asset)
        except ProviderError as e:
            self.logger.error(f"Balance check failed for user {user_id}", e)
            await reply(Reply(TRADE_FAILURE_TEMPLATE.format(direction=direction.value)))
            return

        try:
            check_amount(amount, balance)
        except ValidationError as e:
            self.logger.info(
                f"Rejected {direction.value} for user {user_id}: "
                f"{amount} {spend_asset} against balance {balance}"
            )
            await reply(Reply(str(e)))
            return

        intent = TradeIntent.for_asset(direction, state.asset, amount)
        await reply(Reply(f"Initiating {direction.value}..."))

        try:
            trade = await address.create_trade(intent)
            self.logger.trade_submitted(
                user_id, direction.value, intent.from_asset, intent.to_asset, amount
            )
            receipt = await trade.wait()
        except ProviderError as e:
            self.logger.error(f"Trade failed for user {user_id}", e)
            await reply(Reply(TRADE_FAILURE_TEMPLATE.format(direction=direction.value)))
            return

        self.logger.trade_settled(user_id, receipt.transaction_link)
        await reply(Reply(
            f"Successfully completed {direction.value}: "
            f"[Basescan Link]({receipt.transaction_link})",
            markdown=True,
        ))

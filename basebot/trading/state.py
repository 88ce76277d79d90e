#!/usr/bin/env python3
"""
BASEBOT - Conversation State

Per-user, in-memory record of the trade flow in progress.
Lost on restart, which is fine: a half-typed trade is cheap to redo.
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Optional

from basebot.core.locks import KeyedLocks
from basebot.core.wallet import TradeDirection, WalletAddress


class Step(Enum):
    AWAITING_ASSET = "awaiting_asset"
    AWAITING_AMOUNT = "awaiting_amount"


@dataclass(frozen=True)
class ConversationState:
    """
    Snapshot of one user's conversation.
    The all-None value is Idle.
    """

    operation: Optional[TradeDirection] = None
    step: Optional[Step] = None
    asset: Optional[str] = None
    cached_address: Optional[WalletAddress] = None

    def __post_init__(self):
        if self.step is not None and self.operation is None:
            raise ValueError(f"Step {self.step.value} requires an operation")

    @property
    def is_idle(self) -> bool:
        return self.step is None


IDLE = ConversationState()

_FIELD_NAMES = frozenset(f.name for f in fields(ConversationState))


class ConversationStateStore:
    """
    Keyed mapping from user to ConversationState, one lock per user.

    Entries are never evicted on a schedule; memory grows with the number
    of users who ever talked to the bot.
    """

    def __init__(self):
        self._states: dict[str, ConversationState] = {}
        self._locks = KeyedLocks()

    def get(self, user_id) -> ConversationState:
        """Current state, or Idle. Never raises."""
        return self._states.get(str(user_id), IDLE)

    @asynccontextmanager
    async def locked(self, user_id):
        """Hold the user's lock across a read-decide-write sequence."""
        async with self._locks(str(user_id)):
            yield

    async def update(self, user_id, **changes) -> ConversationState:
        """Shallow-merge fields into the user's state, creating it if absent."""
        async with self._locks(str(user_id)):
            return self.update_unlocked(user_id, **changes)

    def update_unlocked(self, user_id, **changes) -> ConversationState:
        """update() for callers already inside locked()."""
        unknown = set(changes) - _FIELD_NAMES
        if unknown:
            raise TypeError(f"Unknown conversation fields: {sorted(unknown)}")
        state = replace(self.get(user_id), **changes)
        self._states[str(user_id)] = state
        return state

    def set_unlocked(self, user_id, state: ConversationState):
        """Store a whole state; Idle without a cached address drops the entry."""
        if state == IDLE:
            self.clear_unlocked(user_id)
        else:
            self._states[str(user_id)] = state

    async def clear(self, user_id):
        async with self._locks(str(user_id)):
            self.clear_unlocked(user_id)

    def clear_unlocked(self, user_id):
        self._states.pop(str(user_id), None)

    async def clear_if(self, user_id, expected: ConversationState) -> bool:
        """
        Clear only while the stored state is still `expected`.
        A newer flow written by another message is left alone.
        """
        async with self._locks(str(user_id)):
            if self.get(user_id) != expected:
                return False
            self.clear_unlocked(user_id)
            return True

    def __len__(self) -> int:
        return len(self._states)

"""
BASEBOT Trading - Conversation state and the buy/sell flow.
"""

from .flow import Action, Reply, TradeFlowEngine, Transition, transition
from .state import IDLE, ConversationState, ConversationStateStore, Step

__all__ = [
    "Action",
    "Reply",
    "TradeFlowEngine",
    "Transition",
    "transition",
    "IDLE",
    "ConversationState",
    "ConversationStateStore",
    "Step",
]

from src.conversation.booking_flow import BookingFlow
from src.conversation.engine import ConversationEngine, Rule
from src.conversation.intents import IntentMatcher
from src.conversation.state_machine import (
    FlowStateMachine,
    FlowTrigger,
    InvalidTransitionError,
)
from src.conversation.support_flow import SupportFlow

__all__ = [
    "ConversationEngine",
    "Rule",
    "IntentMatcher",
    "BookingFlow",
    "SupportFlow",
    "FlowStateMachine",
    "FlowTrigger",
    "InvalidTransitionError",
]

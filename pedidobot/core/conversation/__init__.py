"""
Conversation module: per-sender purchase flow.
"""

from pedidobot.core.conversation.states import FormStage, Mode
from pedidobot.core.conversation.models import (
    ConversationState,
    FormProgress,
    InboundMessage,
    PendingPayment,
)
from pedidobot.core.conversation.messenger import BaseMessenger
from pedidobot.core.conversation.store import ConversationStore
from pedidobot.core.conversation.engine import ConversationEngine
from pedidobot.core.conversation.sweeper import SessionSweeper

__all__ = [
    # States
    "Mode",
    "FormStage",
    # Models
    "ConversationState",
    "FormProgress",
    "InboundMessage",
    "PendingPayment",
    # Engine
    "BaseMessenger",
    "ConversationStore",
    "ConversationEngine",
    "SessionSweeper",
]

"""Protocol vocabulary: performatives, message envelopes and redeem results."""

from .types import ISSUE_SENTINEL, REFUSE_REASON, Message, Performative, RedeemOutcome, RedeemResult

__all__ = [
    "ISSUE_SENTINEL",
    "REFUSE_REASON",
    "Message",
    "Performative",
    "RedeemOutcome",
    "RedeemResult",
]

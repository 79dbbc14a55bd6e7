"""Protocol participants."""

from .base import Participant
from .initiator import Initiator, InitiatorState
from .ledger import Ledger
from .relay import TERMINAL_STATES, Relay, RelayState

__all__ = [
    "Participant",
    "Initiator",
    "InitiatorState",
    "Ledger",
    "Relay",
    "RelayState",
    "TERMINAL_STATES",
]

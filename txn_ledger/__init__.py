"""Single-use transaction token protocol.

Three participants exchange typed messages over an asynchronous bus: an
Initiator asks the Ledger for a token, hands it to a Relay, and the Relay
redeems it with the Ledger exactly once.
"""

from .bus import InMemoryBus, MessageBus
from .config import ProtocolConfig
from .directory import Directory, InMemoryDirectory
from .participants import Initiator, InitiatorState, Ledger, Relay, RelayState
from .protocol import Message, Performative, RedeemOutcome, RedeemResult

__all__ = [
    "InMemoryBus",
    "MessageBus",
    "ProtocolConfig",
    "Directory",
    "InMemoryDirectory",
    "Initiator",
    "InitiatorState",
    "Ledger",
    "Relay",
    "RelayState",
    "Message",
    "Performative",
    "RedeemOutcome",
    "RedeemResult",
]

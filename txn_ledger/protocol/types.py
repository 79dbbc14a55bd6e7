"""Message envelope and performative vocabulary shared by all participants."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Iterable, Optional
from uuid import uuid4

ISSUE_SENTINEL = "false"
REFUSE_REASON = "token not available"


class Performative(str, Enum):
    """Speech-act tag of a message."""

    REQUEST = "REQUEST"
    INFORM = "INFORM"
    CONFIRM = "CONFIRM"
    REFUSE = "REFUSE"


@dataclass(frozen=True)
class Message:
    """Immutable envelope exchanged over the bus.

    ``content`` is the only protocol-level payload: the issue sentinel, a
    token value, or a refusal reason.
    """

    performative: Performative
    sender: str
    receivers: FrozenSet[str]
    content: str = ""
    message_id: str = field(default_factory=lambda: str(uuid4()))

    @classmethod
    def build(
        cls,
        performative: Performative,
        *,
        sender: str,
        receivers: Iterable[str],
        content: str = "",
    ) -> "Message":
        return cls(
            performative=performative,
            sender=sender,
            receivers=frozenset(receivers),
            content=content,
        )

    def reply(self, performative: Performative, *, sender: str, content: str = "") -> "Message":
        """Build a reply addressed to this message's sender."""
        return Message.build(performative, sender=sender, receivers=[self.sender], content=content)


class RedeemOutcome(str, Enum):
    """Result space of a redeem attempt."""

    CONFIRMED = "CONFIRMED"
    REFUSED = "REFUSED"


@dataclass(frozen=True)
class RedeemResult:
    outcome: RedeemOutcome
    token: str
    reason: Optional[str] = None

    @property
    def confirmed(self) -> bool:
        return self.outcome is RedeemOutcome.CONFIRMED

"""Relay participant: redeems a handed-back token and records the outcome."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, Optional

from ..protocol import Message, Performative
from .base import Handler, Participant

logger = logging.getLogger(__name__)


class RelayState(str, Enum):
    IDLE = "IDLE"
    AWAITING_LEDGER = "AWAITING_LEDGER"
    CONFIRMED = "CONFIRMED"
    REFUSED = "REFUSED"


TERMINAL_STATES = frozenset({RelayState.CONFIRMED, RelayState.REFUSED})


class Relay(Participant):
    """Forwards a token to the Ledger for redemption.

    ``Idle -> AwaitingLedger -> Confirmed | Refused``. Once terminal, all
    further traffic is logged and ignored. A missing Ledger leaves the relay
    idle and the token is dropped.
    """

    role = "relay"

    def __init__(self, address: str, **kwargs: Any) -> None:
        super().__init__(address, **kwargs)
        self.state = RelayState.IDLE
        self.token: Optional[str] = None
        self.outcome_detail: Optional[str] = None

    @property
    def finished(self) -> bool:
        return self.state in TERMINAL_STATES

    def handlers(self) -> Dict[Performative, Handler]:
        return {
            Performative.INFORM: self.on_inform,
            Performative.CONFIRM: self.on_confirm,
            Performative.REFUSE: self.on_refuse,
        }

    async def handle(self, message: Message) -> None:
        if self.finished:
            logger.warning(
                "%s: already %s; ignoring %s from %s",
                self.address,
                self.state.value,
                getattr(message.performative, "value", message.performative),
                message.sender,
            )
            return
        await super().handle(message)

    async def wait_terminal(self) -> RelayState:
        return await self.wait_for_state(*TERMINAL_STATES)

    async def on_inform(self, message: Message) -> None:
        if self.state is not RelayState.IDLE:
            logger.warning("%s: unexpected token handback from %s while %s", self.address, message.sender, self.state.value)
            return

        logger.info("%s got token %s from %s", self.address, message.content, message.sender)
        self.token = message.content
        ledger = self.find_agent(self.config.ledger_role)
        if ledger is None:
            logger.error("%s: cannot communicate, ledger not found; token %s dropped", self.address, message.content)
            return

        if await self.send(Performative.REQUEST, ledger, message.content):
            await self.transition(RelayState.AWAITING_LEDGER, token=message.content)

    async def on_confirm(self, message: Message) -> None:
        logger.info("%s: token %s verified, transaction can proceed", self.address, message.content)
        self.outcome_detail = message.content
        await self.transition(RelayState.CONFIRMED, token=self.token, detail=message.content)

    async def on_refuse(self, message: Message) -> None:
        logger.warning("%s: token %s not verified, cannot proceed: %s", self.address, self.token, message.content)
        self.outcome_detail = message.content
        await self.transition(RelayState.REFUSED, token=self.token, detail=message.content)

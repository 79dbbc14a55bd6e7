"""Initiator participant: requests a token once and hands it to the Relay."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, Optional

from ..protocol import Message, Performative
from .base import Handler, Participant

logger = logging.getLogger(__name__)


class InitiatorState(str, Enum):
    IDLE = "IDLE"
    AWAITING_TOKEN = "AWAITING_TOKEN"
    FORWARDED = "FORWARDED"
    FAILED = "FAILED"


class Initiator(Participant):
    """Runs discovery-and-request exactly once, then forwards the issued token."""

    role = "initiator"

    def __init__(self, address: str, *, relay_address: Optional[str] = None, **kwargs: Any) -> None:
        super().__init__(address, **kwargs)
        self.relay_address = relay_address or self.config.relay_address
        self.state = InitiatorState.IDLE
        self.token: Optional[str] = None
        self._started = False

    def handlers(self) -> Dict[Performative, Handler]:
        return {Performative.INFORM: self.on_inform}

    async def start(self) -> None:
        if self._started:
            logger.warning("%s: token request already made; ignoring restart", self.address)
            return
        self._started = True

        ledger = self.find_agent(self.config.ledger_role)
        if ledger is None:
            logger.error("%s: cannot communicate, ledger not found", self.address)
            await self.transition(InitiatorState.FAILED, detail="ledger_not_found")
            return

        if not await self.send(Performative.REQUEST, ledger, self.config.issue_sentinel):
            await self.transition(InitiatorState.FAILED, detail="send_failed")
            return
        await self.transition(InitiatorState.AWAITING_TOKEN)

    async def on_inform(self, message: Message) -> None:
        if self.state is not InitiatorState.AWAITING_TOKEN:
            logger.warning(
                "%s: unexpected %s from %s in state %s; ignored",
                self.address,
                message.performative.value,
                message.sender,
                self.state.value,
            )
            return

        logger.info("%s got token %s", self.address, message.content)
        if not await self.send(Performative.INFORM, self.relay_address, message.content):
            return
        self.token = message.content
        await self.transition(InitiatorState.FORWARDED, token=message.content, detail=self.relay_address)

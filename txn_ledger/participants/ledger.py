"""Ledger participant: sole owner of the live token store."""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from ..protocol import REFUSE_REASON, Message, Performative, RedeemOutcome, RedeemResult
from ..token import TokenStore, new_token
from .base import Handler, Participant

logger = logging.getLogger(__name__)


class Ledger(Participant):
    """Issues single-use tokens and redeems each of them at most once.

    The store is touched only from :meth:`issue_token` and
    :meth:`redeem_token`, which run inside the receive loop one message at a
    time.
    """

    role = "ledger"

    def __init__(self, address: str, **kwargs: Any) -> None:
        super().__init__(address, **kwargs)
        self._store = TokenStore()
        self.registered = False

    @property
    def live_tokens(self) -> int:
        return len(self._store)

    def is_live(self, token: str) -> bool:
        return token in self._store

    def snapshot(self) -> List[str]:
        return self._store.tokens()

    def handlers(self) -> Dict[Performative, Handler]:
        return {Performative.REQUEST: self.on_request}

    async def start(self) -> None:
        if self.registered:
            return
        service_name = f"{self.address}-{self.config.ledger_role}"
        try:
            self.directory.register(self.config.ledger_role, self.address, service_name=service_name)
        except Exception:
            logger.exception("%s: directory registration failed", self.address)
            return
        self.registered = True
        logger.info("%s registered as %s", self.address, service_name)

    async def stop(self) -> None:
        if not self.registered:
            return
        try:
            self.directory.deregister(self.address)
        except Exception:
            logger.exception("%s: directory deregistration failed", self.address)
            return
        self.registered = False
        logger.info("%s deregistered", self.address)

    def issue_token(self, requester: str) -> str:
        token = new_token(self.config.token_prefix)
        while token in self._store:
            token = new_token(self.config.token_prefix)
        self._store.add(token, requester)
        logger.info("%s issued %s to %s", self.address, token, requester)
        return token

    def redeem_token(self, token: str, requester: str) -> RedeemResult:
        # The issuer-of-record is not compared against ``requester``.
        if token not in self._store:
            logger.info("%s refused %s from %s: %s", self.address, token, requester, REFUSE_REASON)
            return RedeemResult(outcome=RedeemOutcome.REFUSED, token=token, reason=REFUSE_REASON)
        self._store.pop(token)
        logger.info("%s confirmed %s for %s", self.address, token, requester)
        return RedeemResult(outcome=RedeemOutcome.CONFIRMED, token=token)

    async def on_request(self, message: Message) -> None:
        # Issue vs redeem is decided purely by equality with the sentinel; a
        # token that happened to equal it would be treated as an issue request.
        if message.content == self.config.issue_sentinel:
            token = self.issue_token(message.sender)
            await self.emit("issued", token=token, detail=message.sender)
            await self.reply(message, Performative.INFORM, token)
            return

        result = self.redeem_token(message.content, message.sender)
        await self.emit(result.outcome.value.lower(), token=result.token, detail=result.reason)
        if result.confirmed:
            await self.reply(message, Performative.CONFIRM, result.token)
        else:
            await self.reply(message, Performative.REFUSE, result.reason or REFUSE_REASON)

"""Common receive loop, dispatch and messaging helpers for participants."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, Dict, List, Optional

from ..bus import MessageBus
from ..config import ProtocolConfig
from ..directory import Directory, find_first
from ..exporters.base import EventExporter, ProtocolEvent
from ..protocol import Message, Performative

logger = logging.getLogger(__name__)

Handler = Callable[[Message], Awaitable[None]]


class Participant:
    """An addressable actor with one inbound channel and one receive loop.

    Messages are processed strictly one at a time in arrival order. Subclasses
    declare which performatives they understand via :meth:`handlers`; anything
    else is logged and dropped without a reply.
    """

    role = "participant"

    def __init__(
        self,
        address: str,
        *,
        bus: MessageBus,
        directory: Directory,
        config: Optional[ProtocolConfig] = None,
        exporter: Optional[EventExporter] = None,
    ) -> None:
        self.address = address
        self.bus = bus
        self.directory = directory
        self.config = config or ProtocolConfig()
        self.exporter = exporter
        self.state: Optional[Enum] = None
        self.transitions: List[Enum] = []
        self._state_changed = asyncio.Event()
        bus.register(address)

    def handlers(self) -> Dict[Performative, Handler]:
        return {}

    async def start(self) -> None:
        """Hook run once before the receive loop starts."""

    async def stop(self) -> None:
        """Hook for releasing external registrations."""

    async def run(self) -> None:
        """Start, then receive and handle messages until cancelled."""
        await self.start()
        logger.info("%s (%s) is ready", self.address, self.role)
        while True:
            try:
                message = await self.bus.receive(self.address)
            except Exception:
                logger.exception("%s: failed to receive message", self.address)
                await asyncio.sleep(0)
                continue
            await self.handle(message)

    async def handle(self, message: Message) -> None:
        handler = self.handlers().get(message.performative)
        if handler is None:
            logger.warning(
                "%s: no valid performative %r in message from %s; ignored",
                self.address,
                getattr(message.performative, "value", message.performative),
                message.sender,
            )
            await self.emit("unrecognized", detail=str(message.performative))
            return
        await handler(message)

    async def send(self, performative: Performative, receiver: str, content: str = "") -> bool:
        """Send one message; transport failures are logged and reported as ``False``."""
        message = Message.build(performative, sender=self.address, receivers=[receiver], content=content)
        return await self._deliver(message)

    async def reply(self, original: Message, performative: Performative, content: str = "") -> bool:
        return await self._deliver(original.reply(performative, sender=self.address, content=content))

    async def _deliver(self, message: Message) -> bool:
        try:
            await self.bus.send(message)
        except Exception:
            logger.exception(
                "%s: failed to send %s to %s",
                self.address,
                message.performative.value,
                ", ".join(sorted(message.receivers)),
            )
            return False
        logger.info("%s sent %s to %s", self.address, message.performative.value, ", ".join(sorted(message.receivers)))
        return True

    def find_agent(self, role: str) -> Optional[str]:
        address = find_first(self.directory, role)
        if address is None:
            logger.warning("%s: no participant found for role %r", self.address, role)
        else:
            logger.info("%s found %s (%s)", self.address, address, role)
        return address

    async def transition(self, state: Enum, *, token: Optional[str] = None, detail: Optional[str] = None) -> None:
        previous = self.state
        self.state = state
        self.transitions.append(state)
        changed, self._state_changed = self._state_changed, asyncio.Event()
        changed.set()
        logger.info(
            "%s: %s -> %s",
            self.address,
            previous.value if previous is not None else "-",
            state.value,
        )
        await self.emit("transition", token=token, detail=detail)

    async def wait_for_state(self, *states: Enum) -> Enum:
        """Suspend until the participant reaches one of ``states``."""
        while self.state not in states:
            await self._state_changed.wait()
        assert self.state is not None
        return self.state

    async def emit(self, kind: str, *, token: Optional[str] = None, detail: Optional[str] = None) -> None:
        if self.exporter is None:
            return
        event = ProtocolEvent(
            participant=self.address,
            role=self.role,
            kind=kind,
            state=self.state.value if self.state is not None else "",
            token=token,
            detail=detail,
        )
        try:
            await self.exporter.export(event)
        except Exception:
            logger.exception("%s: failed to export %s event", self.address, kind)

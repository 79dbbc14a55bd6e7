"""Message bus interface and in-memory implementation."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Dict, List

from ..protocol import Message


class BusError(RuntimeError):
    """Raised when the bus cannot deliver a message."""


class MessageBus(ABC):
    """Abstract asynchronous message transport."""

    @abstractmethod
    def register(self, address: str) -> None:
        """Create the inbound channel for an address."""

    @abstractmethod
    async def send(self, message: Message) -> None:
        """Deliver a message to every receiver; fire-and-forget."""

    @abstractmethod
    async def receive(self, address: str) -> Message:
        """Suspend until a message for ``address`` is available."""


class InMemoryBus(MessageBus):
    """Single-process bus with one FIFO queue per address.

    A single queue per receiver keeps every sender->receiver pair in order;
    messages from different senders interleave in arrival order.
    """

    def __init__(self) -> None:
        self._queues: Dict[str, asyncio.Queue[Message]] = {}
        self.history: List[Message] = []

    def register(self, address: str) -> None:
        self._queues.setdefault(address, asyncio.Queue())

    def addresses(self) -> List[str]:
        return sorted(self._queues)

    def pending(self, address: str) -> int:
        queue = self._queues.get(address)
        return queue.qsize() if queue is not None else 0

    async def send(self, message: Message) -> None:
        if not message.receivers:
            raise BusError(f"message {message.message_id} has no receivers")
        unknown = sorted(r for r in message.receivers if r not in self._queues)
        if unknown:
            raise BusError(f"unknown receiver(s): {', '.join(unknown)}")
        self.history.append(message)
        for receiver in message.receivers:
            self._queues[receiver].put_nowait(message)

    async def receive(self, address: str) -> Message:
        queue = self._queues.get(address)
        if queue is None:
            raise BusError(f"address {address!r} is not registered")
        return await queue.get()

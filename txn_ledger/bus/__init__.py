"""Asynchronous message transport."""

from .base import BusError, InMemoryBus, MessageBus

__all__ = ["BusError", "InMemoryBus", "MessageBus"]

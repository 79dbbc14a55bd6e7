"""Protocol event model and exporter interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional


@dataclass(frozen=True)
class ProtocolEvent:
    """One audit record: a state transition or a ledger decision."""

    participant: str
    role: str
    kind: str
    state: str
    token: Optional[str] = None
    detail: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        return {
            "participant": self.participant,
            "role": self.role,
            "kind": self.kind,
            "state": self.state,
            "token": self.token,
            "detail": self.detail,
            "created_at": self.created_at,
        }


class EventExporter(ABC):
    """Abstract base class for protocol event exporters."""

    @abstractmethod
    async def export(self, event: ProtocolEvent) -> None:
        """Export one protocol event."""

    async def close(self) -> None:
        """Close exporter resources if needed."""


class InMemoryExporter(EventExporter):
    """Collects events in a list; used by the demo and tests."""

    def __init__(self) -> None:
        self.events: List[ProtocolEvent] = []

    async def export(self, event: ProtocolEvent) -> None:
        self.events.append(event)

    def kinds(self, participant: Optional[str] = None) -> List[str]:
        return [e.kind for e in self.events if participant is None or e.participant == participant]

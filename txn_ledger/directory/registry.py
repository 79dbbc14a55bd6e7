"""Role-name directory used by participants to discover each other."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


class DirectoryError(RuntimeError):
    """Raised by a directory backend that cannot serve a request."""


class Directory(ABC):
    """Maps role names to reachable participant addresses."""

    @abstractmethod
    def register(self, role: str, address: str, *, service_name: Optional[str] = None) -> None:
        """Advertise ``address`` under ``role``."""

    @abstractmethod
    def deregister(self, address: str) -> None:
        """Remove every advertisement held by ``address``."""

    @abstractmethod
    def lookup(self, role: str) -> List[str]:
        """Return addresses registered for ``role``; empty when none."""


class InMemoryDirectory(Directory):
    """In-memory directory preserving registration order per role."""

    def __init__(self) -> None:
        self._roles: Dict[str, Dict[str, str]] = {}

    def register(self, role: str, address: str, *, service_name: Optional[str] = None) -> None:
        self._roles.setdefault(role, {})[address] = service_name or f"{address}-{role}"

    def deregister(self, address: str) -> None:
        found = False
        for entries in self._roles.values():
            if entries.pop(address, None) is not None:
                found = True
        if not found:
            raise DirectoryError(f"address {address!r} is not registered")

    def lookup(self, role: str) -> List[str]:
        return list(self._roles.get(role, {}))

    def services(self, role: str) -> Dict[str, str]:
        return dict(self._roles.get(role, {}))


def find_first(directory: Directory, role: str) -> Optional[str]:
    """Return the first address for ``role`` or ``None``.

    Backend failures are logged and reported as a miss.
    """
    try:
        addresses = directory.lookup(role)
    except Exception:
        logger.exception("directory lookup for role %r failed", role)
        return None
    if not addresses:
        return None
    return addresses[0]

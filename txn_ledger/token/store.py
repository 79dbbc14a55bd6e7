"""Live token store owned by a single Ledger."""

from __future__ import annotations

from typing import Dict, List, Optional
from uuid import uuid4

DEFAULT_TOKEN_PREFIX = "TXN-"


def new_token(prefix: str = DEFAULT_TOKEN_PREFIX) -> str:
    """Return a fresh transaction token."""
    return f"{prefix}{uuid4()}"


class TokenStore:
    """Mapping of live token -> issuer-of-record.

    Not thread-safe; callers serialize access through one receive loop.
    """

    def __init__(self) -> None:
        self._tokens: Dict[str, str] = {}

    def __contains__(self, token: object) -> bool:
        return token in self._tokens

    def __len__(self) -> int:
        return len(self._tokens)

    def add(self, token: str, issuer: str) -> None:
        if token in self._tokens:
            raise ValueError(f"token {token!r} is already live")
        self._tokens[token] = issuer

    def pop(self, token: str) -> Optional[str]:
        """Remove ``token`` and return its issuer, or ``None`` if not live."""
        return self._tokens.pop(token, None)

    def issuer_of(self, token: str) -> Optional[str]:
        return self._tokens.get(token)

    def tokens(self) -> List[str]:
        return list(self._tokens)

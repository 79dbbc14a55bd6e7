"""Runtime configuration for protocol participants."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .protocol import ISSUE_SENTINEL
from .token import DEFAULT_TOKEN_PREFIX


@dataclass(frozen=True)
class ProtocolConfig:
    """Role names and wire constants shared by every participant."""

    ledger_role: str = "ledger"
    issue_sentinel: str = ISSUE_SENTINEL
    token_prefix: str = DEFAULT_TOKEN_PREFIX
    relay_address: str = "B"

    @classmethod
    def from_env(cls) -> "ProtocolConfig":
        """Build config from ``TXN_*`` environment variables, falling back to defaults."""
        defaults = cls()
        values = {
            "ledger_role": os.getenv("TXN_LEDGER_ROLE", defaults.ledger_role),
            "issue_sentinel": os.getenv("TXN_ISSUE_SENTINEL", defaults.issue_sentinel),
            "token_prefix": os.getenv("TXN_TOKEN_PREFIX", defaults.token_prefix),
            "relay_address": os.getenv("TXN_RELAY_ADDRESS", defaults.relay_address),
        }
        blank = [name for name, value in values.items() if name != "token_prefix" and not value.strip()]
        if blank:
            raise ValueError(f"Empty configuration value(s): {', '.join(sorted(blank))}.")
        return cls(**values)

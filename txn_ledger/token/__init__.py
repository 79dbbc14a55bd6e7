"""Single-use transaction tokens."""

from .store import DEFAULT_TOKEN_PREFIX, TokenStore, new_token

__all__ = ["DEFAULT_TOKEN_PREFIX", "TokenStore", "new_token"]

"""Participant discovery by role name."""

from .registry import Directory, DirectoryError, InMemoryDirectory, find_first

__all__ = ["Directory", "DirectoryError", "InMemoryDirectory", "find_first"]

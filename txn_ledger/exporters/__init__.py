"""Exporter implementations for protocol audit events."""

from __future__ import annotations

import os

from .base import EventExporter, InMemoryExporter, ProtocolEvent

__all__ = ["EventExporter", "InMemoryExporter", "PostgresExporter", "ProtocolEvent", "create_exporter_from_env"]


def create_exporter_from_env() -> EventExporter:
    """Create a Postgres exporter if a DSN is configured, otherwise in-memory."""
    dsn = os.getenv("TXN_LEDGER_PG_DSN") or os.getenv("DATABASE_URL")
    if dsn:
        from .postgres import PostgresExporter

        return PostgresExporter(dsn=dsn)
    return InMemoryExporter()


def __getattr__(name: str):
    if name == "PostgresExporter":
        from .postgres import PostgresExporter

        return PostgresExporter
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

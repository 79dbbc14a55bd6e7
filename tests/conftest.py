import pytest

from txn_ledger.directory import Directory, DirectoryError
from txn_ledger.exporters import EventExporter, ProtocolEvent


class BrokenDirectory(Directory):
    def register(self, role, address, *, service_name=None) -> None:
        raise DirectoryError("down")

    def deregister(self, address) -> None:
        raise DirectoryError("down")

    def lookup(self, role):
        raise DirectoryError("down")


class BrokenExporter(EventExporter):
    def __init__(self) -> None:
        self.attempts = 0

    async def export(self, event: ProtocolEvent) -> None:
        self.attempts += 1
        raise RuntimeError("sink unavailable")


@pytest.fixture
def broken_directory() -> BrokenDirectory:
    return BrokenDirectory()


@pytest.fixture
def broken_exporter() -> BrokenExporter:
    return BrokenExporter()

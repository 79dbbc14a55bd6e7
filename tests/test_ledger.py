import asyncio

import pytest

from txn_ledger.bus import BusError, InMemoryBus
from txn_ledger.config import ProtocolConfig
from txn_ledger.directory import InMemoryDirectory
from txn_ledger.exporters import InMemoryExporter
from txn_ledger.participants import Ledger
from txn_ledger.protocol import REFUSE_REASON, Message, Performative, RedeemOutcome
from txn_ledger.token import TokenStore


def make_ledger(**kwargs) -> Ledger:
    return Ledger("ledger-1", bus=InMemoryBus(), directory=InMemoryDirectory(), **kwargs)


def test_issued_tokens_are_pairwise_distinct() -> None:
    ledger = make_ledger()
    tokens = [ledger.issue_token("A") for _ in range(200)]
    assert len(set(tokens)) == 200
    assert ledger.live_tokens == 200
    assert sorted(ledger.snapshot()) == sorted(tokens)


def test_issue_then_redeem_round_trip() -> None:
    ledger = make_ledger()
    token = ledger.issue_token("A")
    assert ledger.is_live(token)

    result = ledger.redeem_token(token, "A")
    assert result.outcome is RedeemOutcome.CONFIRMED
    assert result.confirmed
    assert result.token == token
    assert not ledger.is_live(token)
    assert ledger.live_tokens == 0


def test_redeem_confirms_at_most_once() -> None:
    ledger = make_ledger()
    token = ledger.issue_token("A")
    outcomes = [ledger.redeem_token(token, "B").outcome for _ in range(3)]
    assert outcomes == [RedeemOutcome.CONFIRMED, RedeemOutcome.REFUSED, RedeemOutcome.REFUSED]


def test_unknown_token_is_refused_and_store_unchanged() -> None:
    ledger = make_ledger()
    live = ledger.issue_token("A")

    result = ledger.redeem_token("not-a-real-token", "A")
    assert result.outcome is RedeemOutcome.REFUSED
    assert result.reason == REFUSE_REASON
    assert ledger.snapshot() == [live]


def test_redeem_does_not_check_issuer_of_record() -> None:
    ledger = make_ledger()
    token = ledger.issue_token("A")
    assert ledger.redeem_token(token, "someone-else").confirmed


def test_token_prefix_comes_from_config() -> None:
    ledger = make_ledger(config=ProtocolConfig(token_prefix="PAY-"))
    assert ledger.issue_token("A").startswith("PAY-")


def test_start_registers_and_stop_deregisters() -> None:
    async def run() -> None:
        directory = InMemoryDirectory()
        ledger = Ledger("test", bus=InMemoryBus(), directory=directory)
        await ledger.start()
        await ledger.start()
        assert directory.lookup("ledger") == ["test"]
        assert directory.services("ledger") == {"test": "test-ledger"}

        await ledger.stop()
        assert directory.lookup("ledger") == []
        assert ledger.registered is False
        await ledger.stop()

    asyncio.run(run())


def test_request_dispatch_issues_and_redeems_over_bus() -> None:
    async def run() -> None:
        bus = InMemoryBus()
        exporter = InMemoryExporter()
        ledger = Ledger("test", bus=bus, directory=InMemoryDirectory(), exporter=exporter)
        bus.register("client")

        await ledger.handle(Message.build(Performative.REQUEST, sender="client", receivers=["test"], content="false"))
        issued = await bus.receive("client")
        assert issued.performative is Performative.INFORM
        assert ledger.is_live(issued.content)

        await ledger.handle(Message.build(Performative.REQUEST, sender="client", receivers=["test"], content=issued.content))
        confirm = await bus.receive("client")
        assert confirm.performative is Performative.CONFIRM
        assert confirm.content == issued.content

        await ledger.handle(Message.build(Performative.REQUEST, sender="client", receivers=["test"], content=issued.content))
        refuse = await bus.receive("client")
        assert refuse.performative is Performative.REFUSE
        assert refuse.content == REFUSE_REASON

        assert exporter.kinds("test") == ["issued", "confirmed", "refused"]

    asyncio.run(run())


def test_non_request_performatives_get_no_reply() -> None:
    async def run() -> None:
        bus = InMemoryBus()
        ledger = Ledger("test", bus=bus, directory=InMemoryDirectory())
        bus.register("client")
        token = ledger.issue_token("client")

        for performative in (Performative.INFORM, Performative.CONFIRM, Performative.REFUSE):
            await ledger.handle(Message.build(performative, sender="client", receivers=["test"], content=token))

        assert bus.pending("client") == 0
        assert bus.history == []
        assert ledger.is_live(token)

    asyncio.run(run())


def test_concurrent_issue_requests_yield_distinct_tokens() -> None:
    async def run() -> None:
        bus = InMemoryBus()
        ledger = Ledger("test", bus=bus, directory=InMemoryDirectory())
        clients = [f"client-{i}" for i in range(25)]
        for client in clients:
            bus.register(client)

        loop_task = asyncio.create_task(ledger.run())

        async def ask(client: str) -> str:
            await bus.send(Message.build(Performative.REQUEST, sender=client, receivers=["test"], content="false"))
            reply = await bus.receive(client)
            assert reply.performative is Performative.INFORM
            return reply.content

        try:
            tokens = await asyncio.wait_for(asyncio.gather(*(ask(c) for c in clients)), timeout=2)
        finally:
            loop_task.cancel()
            await asyncio.gather(loop_task, return_exceptions=True)

        assert len(set(tokens)) == len(clients)
        assert ledger.live_tokens == len(clients)

    asyncio.run(run())


def test_concurrent_redeems_of_same_token_confirm_once() -> None:
    async def run() -> None:
        bus = InMemoryBus()
        ledger = Ledger("test", bus=bus, directory=InMemoryDirectory())
        token = ledger.issue_token("A")
        relays = [f"relay-{i}" for i in range(10)]
        for relay in relays:
            bus.register(relay)

        loop_task = asyncio.create_task(ledger.run())

        async def redeem(relay: str) -> Performative:
            await bus.send(Message.build(Performative.REQUEST, sender=relay, receivers=["test"], content=token))
            return (await bus.receive(relay)).performative

        try:
            replies = await asyncio.wait_for(asyncio.gather(*(redeem(r) for r in relays)), timeout=2)
        finally:
            loop_task.cancel()
            await asyncio.gather(loop_task, return_exceptions=True)

        assert replies.count(Performative.CONFIRM) == 1
        assert replies.count(Performative.REFUSE) == len(relays) - 1
        assert ledger.live_tokens == 0

    asyncio.run(run())


class FlakyReceiveBus(InMemoryBus):
    def __init__(self, failing_address: str) -> None:
        super().__init__()
        self.failing_address = failing_address
        self.failures = 1

    async def receive(self, address: str) -> Message:
        if address == self.failing_address and self.failures:
            self.failures -= 1
            raise BusError("transient receive failure")
        return await super().receive(address)


def test_receive_failure_does_not_stop_the_loop() -> None:
    async def run() -> None:
        bus = FlakyReceiveBus("test")
        ledger = Ledger("test", bus=bus, directory=InMemoryDirectory())
        bus.register("client")

        loop_task = asyncio.create_task(ledger.run())
        try:
            await bus.send(Message.build(Performative.REQUEST, sender="client", receivers=["test"], content="false"))
            reply = await asyncio.wait_for(bus.receive("client"), timeout=2)
            assert not loop_task.done()
        finally:
            loop_task.cancel()
            await asyncio.gather(loop_task, return_exceptions=True)

        assert bus.failures == 0
        assert reply.performative is Performative.INFORM
        assert ledger.is_live(reply.content)

    asyncio.run(run())


def test_store_is_private_to_each_ledger() -> None:
    with pytest.raises(TypeError):
        Ledger("L1", bus=InMemoryBus(), directory=InMemoryDirectory(), store=TokenStore())

    bus = InMemoryBus()
    directory = InMemoryDirectory()
    first = Ledger("L1", bus=bus, directory=directory)
    second = Ledger("L2", bus=bus, directory=directory)
    token = first.issue_token("A")

    assert not second.is_live(token)
    assert second.redeem_token(token, "B").outcome is RedeemOutcome.REFUSED
    assert first.redeem_token(token, "B").confirmed


def test_directory_failures_do_not_stop_serving(broken_directory) -> None:
    async def run() -> None:
        bus = InMemoryBus()
        ledger = Ledger("test", bus=bus, directory=broken_directory)
        bus.register("client")

        loop_task = asyncio.create_task(ledger.run())
        try:
            await bus.send(Message.build(Performative.REQUEST, sender="client", receivers=["test"], content="false"))
            reply = await asyncio.wait_for(bus.receive("client"), timeout=2)
        finally:
            loop_task.cancel()
            await asyncio.gather(loop_task, return_exceptions=True)

        assert ledger.registered is False
        assert reply.performative is Performative.INFORM

        ledger.registered = True
        await ledger.stop()
        assert ledger.registered is True

    asyncio.run(run())


def test_exporter_failures_do_not_stop_serving(broken_exporter) -> None:
    async def run() -> None:
        bus = InMemoryBus()
        ledger = Ledger("test", bus=bus, directory=InMemoryDirectory(), exporter=broken_exporter)
        bus.register("client")

        loop_task = asyncio.create_task(ledger.run())
        try:
            await bus.send(Message.build(Performative.REQUEST, sender="client", receivers=["test"], content="false"))
            issued = await asyncio.wait_for(bus.receive("client"), timeout=2)
            await bus.send(Message.build(Performative.REQUEST, sender="client", receivers=["test"], content=issued.content))
            confirm = await asyncio.wait_for(bus.receive("client"), timeout=2)
            assert not loop_task.done()
        finally:
            loop_task.cancel()
            await asyncio.gather(loop_task, return_exceptions=True)

        assert issued.performative is Performative.INFORM
        assert confirm.performative is Performative.CONFIRM
        assert broken_exporter.attempts == 2
        assert ledger.live_tokens == 0

    asyncio.run(run())

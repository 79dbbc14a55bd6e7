"""Run the token protocol end to end, then replay the handback with a corrupted token."""

from __future__ import annotations

import asyncio
import logging

from ..bus import InMemoryBus
from ..config import ProtocolConfig
from ..directory import InMemoryDirectory
from ..exporters import create_exporter_from_env
from ..participants import Initiator, Ledger, Relay
from ..protocol import Message, Performative


async def main() -> None:
    config = ProtocolConfig.from_env()
    bus = InMemoryBus()
    directory = InMemoryDirectory()
    exporter = create_exporter_from_env()

    ledger = Ledger("test", bus=bus, directory=directory, config=config, exporter=exporter)
    relay = Relay(config.relay_address, bus=bus, directory=directory, config=config, exporter=exporter)
    initiator = Initiator("A", bus=bus, directory=directory, config=config, exporter=exporter)

    await ledger.start()
    tasks = [asyncio.create_task(p.run()) for p in (ledger, relay, initiator)]
    try:
        outcome = await asyncio.wait_for(relay.wait_terminal(), timeout=5)
        print("TOKEN:", initiator.token)
        print("RELAY OUTCOME:", outcome.value, relay.outcome_detail)
        print("LIVE TOKENS:", ledger.live_tokens)

        # A second relay receives a handback that was never issued.
        corrupted = Relay("B2", bus=bus, directory=directory, config=config, exporter=exporter)
        tasks.append(asyncio.create_task(corrupted.run()))
        await bus.send(
            Message.build(
                Performative.INFORM,
                sender=initiator.address,
                receivers=[corrupted.address],
                content=f"{config.token_prefix}corrupted",
            )
        )
        outcome = await asyncio.wait_for(corrupted.wait_terminal(), timeout=5)
        print("CORRUPTED HANDBACK OUTCOME:", outcome.value, corrupted.outcome_detail)
    finally:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        await ledger.stop()
        await exporter.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    asyncio.run(main())

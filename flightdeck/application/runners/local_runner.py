"""
Local Runner

Architectural Intent:
- Runs a local flight once, on a shell transport bound to "localhost"
- Holds no resources between flights
"""

import logging
import time
from typing import Callable
from flightdeck.domain.entities.flight import FlightFn, call_flight
from flightdeck.domain.entities.run_context import RunContext
from flightdeck.domain.ports.transport_port import Transport
from flightdeck.domain.value_objects.host import Host

logger = logging.getLogger(__name__)

LOCALHOST = Host(host="localhost")


class LocalRunner:
    def __init__(self, transport_factory: Callable[[RunContext, Host], Transport]):
        self.transport_factory = transport_factory

    async def run(self, fn: FlightFn, context: RunContext) -> None:
        started = time.monotonic()
        logger.info("Flight to %s started", LOCALHOST)

        transport = self.transport_factory(context, LOCALHOST)
        try:
            await call_flight(fn, transport)
        finally:
            transport.close()

        logger.info(
            "Flight to %s finished after %.2fs", LOCALHOST, time.monotonic() - started
        )

"""
Remote Runner

Architectural Intent:
- Owns the connection pool of a run: one transport per reachable host,
  opened on the first remote flight and reused by every later one
- Runs the flight function once per pooled host, concurrently; the runner
  returns only after every host finished or failed
- A failing host does not cancel its siblings; the first failure (in host
  order) is raised once all of them are done

Connect-Failure Policy:
- Hosts marked failsafe are logged and skipped
- Any other host failing to connect fails the run with ConnectionFailedError
"""

from __future__ import annotations
import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional
from flightdeck.domain.entities.flight import FlightFn, call_flight
from flightdeck.domain.entities.run_context import RunContext
from flightdeck.domain.errors import ConnectionFailedError
from flightdeck.domain.ports.transport_port import Transport
from flightdeck.domain.value_objects.host import Host

logger = logging.getLogger(__name__)


class RemoteRunner:
    def __init__(
        self, connect: Callable[[RunContext, Host], Awaitable[Transport]]
    ) -> None:
        self.connect = connect
        self._connections: list[Transport] = []
        self._connected = False

    @property
    def connections(self) -> tuple[Transport, ...]:
        return tuple(self._connections)

    async def run(self, fn: FlightFn, context: RunContext) -> None:
        if not self._connected:
            await self._connect_all(context)

        outcomes = await asyncio.gather(
            *(self._execute(fn, transport) for transport in self._connections),
            return_exceptions=True,
        )
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                raise outcome

    async def _connect_all(self, context: RunContext) -> None:
        outcomes = await asyncio.gather(
            *(self._connect_one(context, host) for host in context.hosts),
            return_exceptions=True,
        )
        self._connected = True

        failures = []
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                failures.append(outcome)
            elif outcome is not None:
                self._connections.append(outcome)
        if failures:
            raise failures[0]

    async def _connect_one(
        self, context: RunContext, host: Host
    ) -> Optional[Transport]:
        logger.info("Connecting to '%s'", host)
        try:
            return await self.connect(context, host)
        except ConnectionFailedError as e:
            if not host.failsafe:
                raise
            logger.warning("Safely failed connecting to '%s': %s", host, e)
            return None

    async def _execute(self, fn: FlightFn, transport: Transport) -> None:
        started = time.monotonic()
        logger.info("Executing remote task on %s", transport.runtime)
        await call_flight(fn, transport)
        logger.info(
            "Remote task on %s finished after %.2fs",
            transport.runtime,
            time.monotonic() - started,
        )

    def disconnect(self) -> None:
        for transport in self._connections:
            try:
                transport.close()
            except Exception as e:
                logger.warning("Error closing connection to %s: %s", transport.runtime, e)
        self._connections = []
        self._connected = False

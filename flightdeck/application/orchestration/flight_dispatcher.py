"""
Flight Dispatcher

Architectural Intent:
- Routes a flight to the runner matching its kind
- Passes the flight function and run context through unchanged
"""

from flightdeck.application.runners.local_runner import LocalRunner
from flightdeck.application.runners.remote_runner import RemoteRunner
from flightdeck.domain.entities.flight import FlightFn, FlightKind
from flightdeck.domain.entities.run_context import RunContext
from flightdeck.domain.errors import InvalidArgumentError


class FlightDispatcher:
    def __init__(self, local_runner: LocalRunner, remote_runner: RemoteRunner):
        self.local_runner = local_runner
        self.remote_runner = remote_runner

    async def run(self, kind: FlightKind, fn: FlightFn, context: RunContext) -> None:
        if kind is FlightKind.LOCAL:
            await self.local_runner.run(fn, context)
        elif kind is FlightKind.REMOTE:
            await self.remote_runner.run(fn, context)
        else:
            raise InvalidArgumentError(f"Unknown flight kind: {kind!r}")

    def disconnect(self) -> None:
        # Only remote flights keep connections between flights
        self.remote_runner.disconnect()

"""
Flightplan Orchestrator

Architectural Intent:
- User-facing API of a deployment script: targets, flights, hooks, abort
- Resolves a (task, target) pair into the flights to run and the host set,
  builds the immutable RunContext and executes flights in registration order
- An explicit instance is handed to the user's script; there is no module
  level singleton

Execution Rules:
- One flight fully completes (on all its hosts) before the next starts
- A failed flight aborts the plan: no further flights are started
- Connections are released once per run, whatever the outcome
- start() is the process boundary: it maps SIGINT to ProcessInterruptedError
  and turns every failure into a non-zero exit code
"""

from __future__ import annotations
import asyncio
import inspect
import logging
import signal
import time
from typing import Any, Callable, Mapping, Optional
from flightdeck.application.orchestration.flight_dispatcher import FlightDispatcher
from flightdeck.domain.entities.flight import DEFAULT_TASK, Flight, FlightKind, Target
from flightdeck.domain.entities.run_context import PlanStatus, RunContext
from flightdeck.domain.errors import (
    AbortedError,
    FlightdeckError,
    InvalidTargetError,
    ProcessInterruptedError,
)
from flightdeck.domain.events.event_base import (
    FlightAbortedEvent,
    FlightLandedEvent,
    PlanFailedEvent,
    PlanFinishedEvent,
    PlanSucceededEvent,
)
from flightdeck.domain.ports.event_bus_port import EventBusPort
from flightdeck.domain.value_objects.host import Host

logger = logging.getLogger(__name__)


class Orchestrator:
    def __init__(self, dispatcher: FlightDispatcher, event_bus: EventBusPort):
        self.dispatcher = dispatcher
        self.event_bus = event_bus
        self._targets: dict[str, Target] = {}
        self._flights: list[Flight] = []
        self._runtime: Optional[RunContext] = None
        self._aborted = False

    @property
    def runtime(self) -> Optional[RunContext]:
        """Snapshot of the current run, None outside of a run.

        Lifecycle hooks still see it; it is cleared once run() returns.
        """
        return self._runtime

    @property
    def flights(self) -> tuple[Flight, ...]:
        return tuple(self._flights)

    def is_aborted(self) -> bool:
        return self._aborted

    # Registration

    def target(
        self, name: str, hosts: Any, options: Optional[Mapping[str, Any]] = None
    ) -> "Orchestrator":
        """Register a target; the last registration of a name wins.

        `hosts` is a host (mapping, `user@host:port` string or Host), a list
        of hosts, or a callable (optionally async) resolving them at run time.
        """
        if not callable(hosts):
            hosts = self._coerce_hosts(hosts)
        self._targets[name] = Target(name=name, hosts=hosts, options=dict(options or {}))
        return self

    def local(self, tasks_or_fn: Any = None, fn: Optional[Callable] = None) -> Any:
        return self._register(FlightKind.LOCAL, tasks_or_fn, fn)

    def remote(self, tasks_or_fn: Any = None, fn: Optional[Callable] = None) -> Any:
        return self._register(FlightKind.REMOTE, tasks_or_fn, fn)

    def _register(self, kind: FlightKind, tasks_or_fn: Any, fn: Optional[Callable]) -> Any:
        if fn is None and callable(tasks_or_fn):
            tasks_or_fn, fn = None, tasks_or_fn

        if fn is None:
            def decorator(func: Callable) -> Callable:
                self._add(Flight.build(kind, tasks_or_fn, func))
                return func
            return decorator

        self._add(Flight.build(kind, tasks_or_fn, fn))
        return fn

    def _add(self, flight: Flight) -> None:
        if not flight.is_async:
            logger.warning(
                "Flight %s is not a coroutine function; transport commands "
                "inside it are never awaited and will not run",
                getattr(flight.fn, "__qualname__", repr(flight.fn)),
            )
        self._flights.append(flight)

    def available_targets(self) -> list[str]:
        return sorted(self._targets)

    def available_tasks(self) -> list[str]:
        return sorted({task for flight in self._flights for task in flight.tasks})

    # Lifecycle hooks

    def _hook(self, event_type: type, fn: Callable[[], Any]) -> Callable[[], Any]:
        self.event_bus.subscribe(event_type, lambda event: fn())
        return fn

    def success(self, fn: Callable[[], Any]) -> Callable[[], Any]:
        return self._hook(PlanSucceededEvent, fn)

    def disaster(self, fn: Callable[[], Any]) -> Callable[[], Any]:
        return self._hook(PlanFailedEvent, fn)

    def debriefing(self, fn: Callable[[], Any]) -> Callable[[], Any]:
        return self._hook(PlanFinishedEvent, fn)

    def abort(self, message: Optional[str] = None) -> None:
        """Abort the plan from within a flight."""
        raise AbortedError(message or "Flightplan aborted")

    # Execution

    async def run(
        self,
        task: str = DEFAULT_TASK,
        target: Optional[str] = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> PlanStatus:
        options = dict(options or {})
        task = task or DEFAULT_TASK

        if target not in self._targets:
            raise InvalidTargetError(f"'{target}' is not a valid target")

        flights = [f for f in self._flights if f.applies_to(task)]
        if not flights:
            logger.warning("There is no work to be done for task '%s'", task)
            return PlanStatus(task=task, target=target)

        config = self._targets[target]
        logger.info("Running %s:%s", task, target)

        hosts = await self._resolve_hosts(config)
        username = options.get("username")
        if username:
            hosts = [h.with_username(username) for h in hosts]

        context = RunContext(
            task=task,
            target=target,
            options={**config.options, **options},
            hosts=tuple(hosts),
        )
        self._runtime = context
        try:
            return await self._fly(flights, context)
        finally:
            self._runtime = None

    async def _fly(self, flights: list[Flight], context: RunContext) -> PlanStatus:
        task, target = context.task, context.target
        self._aborted = False

        total = len(flights)
        flights_run = 0
        crash_message = None
        error: Optional[BaseException] = None
        started = time.monotonic()

        try:
            for index, flight in enumerate(flights, start=1):
                logger.info("Flight %d/%d launched...", index, total)
                flight_started = time.monotonic()
                try:
                    await self.dispatcher.run(flight.kind, flight.fn, context)
                except ProcessInterruptedError:
                    raise
                except FlightdeckError as e:
                    self._aborted = True
                    crash_message = e.message
                    error = e
                except Exception as e:
                    logger.exception("Flight %d/%d crashed", index, total)
                    self._aborted = True
                    crash_message = str(e) or type(e).__name__
                    error = e
                flights_run += 1
                elapsed = time.monotonic() - flight_started

                if self._aborted:
                    logger.error(
                        "Flight %d/%d aborted after %.2fs: %s",
                        index, total, elapsed, crash_message,
                    )
                    await self.event_bus.publish([
                        FlightAbortedEvent(
                            aggregate_id=target, index=index, total=total,
                            execution_time=elapsed, reason=crash_message or "",
                        )
                    ])
                    break

                logger.info("Flight %d/%d landed after %.2fs", index, total, elapsed)
                await self.event_bus.publish([
                    FlightLandedEvent(
                        aggregate_id=target, index=index, total=total,
                        execution_time=elapsed,
                    )
                ])
        finally:
            self.dispatcher.disconnect()

        execution_time = time.monotonic() - started
        if self._aborted:
            logger.error("Flightplan aborted after %.2fs", execution_time)
            outcome = PlanFailedEvent(
                aggregate_id=target, execution_time=execution_time, reason=crash_message
            )
        else:
            logger.info("Flightplan finished after %.2fs", execution_time)
            outcome = PlanSucceededEvent(aggregate_id=target, execution_time=execution_time)

        await self.event_bus.publish([
            outcome,
            PlanFinishedEvent(
                aggregate_id=target, aborted=self._aborted, execution_time=execution_time
            ),
        ])

        return PlanStatus(
            task=task,
            target=target,
            flights_total=total,
            flights_run=flights_run,
            aborted=self._aborted,
            execution_time=execution_time,
            crash_message=crash_message,
            error=error,
        )

    async def _resolve_hosts(self, target: Target) -> list[Host]:
        if not target.is_dynamic:
            return list(target.hosts)

        logger.info("Running dynamic hosts configuration")
        try:
            resolved = target.hosts()
            if inspect.isawaitable(resolved):
                resolved = await resolved
        except FlightdeckError:
            raise
        except Exception as e:
            raise AbortedError(f"Dynamic hosts configuration failed: {e}") from e

        if isinstance(resolved, BaseException):
            raise AbortedError(
                f"Dynamic hosts configuration failed: {resolved}"
            ) from resolved
        try:
            return self._coerce_hosts(resolved)
        except (TypeError, ValueError) as e:
            raise AbortedError(f"Dynamic hosts configuration failed: {e}") from e

    @staticmethod
    def _coerce_hosts(hosts: Any) -> list[Host]:
        if hosts is None:
            return []
        if isinstance(hosts, (str, Mapping, Host)):
            hosts = [hosts]
        return [Host.coerce(h) for h in hosts]

    async def _run_interruptible(
        self, task: str, target: Optional[str], options: Optional[Mapping[str, Any]]
    ) -> PlanStatus:
        loop = asyncio.get_running_loop()
        current = asyncio.current_task()
        interrupted = False

        def on_interrupt() -> None:
            nonlocal interrupted
            interrupted = True
            current.cancel()

        try:
            loop.add_signal_handler(signal.SIGINT, on_interrupt)
            installed = True
        except (NotImplementedError, RuntimeError):
            installed = False

        try:
            return await self.run(task, target, options)
        except asyncio.CancelledError:
            if interrupted:
                raise ProcessInterruptedError("Flightplan was interrupted") from None
            raise
        finally:
            if installed:
                loop.remove_signal_handler(signal.SIGINT)

    def start(
        self,
        task: str = DEFAULT_TASK,
        target: Optional[str] = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> int:
        """Run the plan to completion and return the process exit code."""
        try:
            status = asyncio.run(self._run_interruptible(task, target, options))
        except KeyboardInterrupt:
            logger.error("Flightplan was interrupted")
            return 1
        except FlightdeckError as e:
            logger.error("%s", e.message)
            return 1
        except Exception:
            logger.exception("Flightplan crashed")
            return 1
        return 0 if status.succeeded else 1

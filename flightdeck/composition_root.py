"""
Composition Root

Architectural Intent:
- Dependency injection composition root for Flightdeck
- Single place where terminal, prompter, transports, runners, dispatcher
  and orchestrator are wired together
- No adapter instantiation should occur outside this module (except CLI)

Design Decisions:
- Uses a simple dataclass container instead of a DI framework
- One prompter per container, so every transport of a run shares the same
  prompt queue
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional
from flightdeck.application.orchestration.flight_dispatcher import FlightDispatcher
from flightdeck.application.orchestration.orchestrator import Orchestrator
from flightdeck.application.prompter import SerializedPrompter
from flightdeck.application.runners.local_runner import LocalRunner
from flightdeck.application.runners.remote_runner import RemoteRunner
from flightdeck.domain.ports.terminal_port import TerminalPort
from flightdeck.infrastructure.adapters.console_terminal import ConsoleTerminal
from flightdeck.infrastructure.adapters.transport_factory import TransportFactory
from flightdeck.infrastructure.config import FlightdeckConfig
from flightdeck.infrastructure.event_bus import EventBus


@dataclass
class FlightdeckContainer:
    """DI container holding all wired dependencies."""

    config: FlightdeckConfig
    terminal: TerminalPort
    prompter: SerializedPrompter
    transport_factory: TransportFactory
    local_runner: LocalRunner
    remote_runner: RemoteRunner
    dispatcher: FlightDispatcher
    event_bus: EventBus
    orchestrator: Orchestrator


def create_container(
    config: Optional[FlightdeckConfig] = None,
    terminal: Optional[TerminalPort] = None,
) -> FlightdeckContainer:
    """Create and wire all dependencies."""
    config = config or FlightdeckConfig()
    terminal = terminal or ConsoleTerminal()

    prompter = SerializedPrompter(terminal)
    transport_factory = TransportFactory(prompter, config)
    local_runner = LocalRunner(transport_factory.local)
    remote_runner = RemoteRunner(transport_factory.remote)
    dispatcher = FlightDispatcher(local_runner, remote_runner)
    event_bus = EventBus()
    orchestrator = Orchestrator(dispatcher, event_bus)

    return FlightdeckContainer(
        config=config,
        terminal=terminal,
        prompter=prompter,
        transport_factory=transport_factory,
        local_runner=local_runner,
        remote_runner=remote_runner,
        dispatcher=dispatcher,
        event_bus=event_bus,
        orchestrator=orchestrator,
    )


def create_orchestrator(config: Optional[FlightdeckConfig] = None) -> Orchestrator:
    """Shortcut for scripts that drive a plan without the CLI."""
    return create_container(config).orchestrator

"""
Event Bus Port

Architectural Intent:
- Abstract interface for publishing plan lifecycle events
- Decouples the orchestrator from lifecycle hooks registered by user scripts
"""

from typing import Protocol, Callable, Awaitable, runtime_checkable
from flightdeck.domain.events.event_base import DomainEvent


@runtime_checkable
class EventBusPort(Protocol):
    async def publish(self, events: list[DomainEvent]) -> None: ...

    def subscribe(
        self, event_type: type, handler: Callable[[DomainEvent], Awaitable[None]]
    ) -> None: ...

"""
Event Bus Infrastructure

Architectural Intent:
- In-memory event bus for plan and flight lifecycle events
- Handlers may be coroutines or plain callables
"""

import inspect
import logging
from typing import Any, Callable
from flightdeck.domain.events.event_base import DomainEvent

logger = logging.getLogger(__name__)


class EventBus:
    def __init__(self) -> None:
        self._handlers: dict[type, list[Callable[[DomainEvent], Any]]] = {}

    async def publish(self, events: list[DomainEvent]) -> None:
        for event in events:
            event_type = type(event)
            if event_type in self._handlers:
                for handler in self._handlers[event_type]:
                    outcome = handler(event)
                    if inspect.isawaitable(outcome):
                        await outcome

    def subscribe(
        self, event_type: type, handler: Callable[[DomainEvent], Any]
    ) -> None:
        if event_type not in self._handlers:
            self._handlers[event_type] = []
        self._handlers[event_type].append(handler)

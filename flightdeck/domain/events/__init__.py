"""
Domain Events Package

Architectural Intent:
- Contains plan and flight lifecycle events
- Events are the mechanism lifecycle hooks (success/disaster/debriefing) use
"""

from flightdeck.domain.events.event_base import (
    DomainEvent,
    FlightLandedEvent,
    FlightAbortedEvent,
    PlanSucceededEvent,
    PlanFailedEvent,
    PlanFinishedEvent,
)

__all__ = [
    "DomainEvent",
    "FlightLandedEvent",
    "FlightAbortedEvent",
    "PlanSucceededEvent",
    "PlanFailedEvent",
    "PlanFinishedEvent",
]

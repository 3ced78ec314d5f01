"""
Domain Events Module

Architectural Intent:
- Base classes for domain events following DDD principles
- Events are immutable and capture significant plan and flight occurrences
- Events are dispatched via the event bus to lifecycle hooks
"""

from dataclasses import dataclass, field
from datetime import datetime, UTC
from typing import Any, Optional


@dataclass(frozen=True)
class DomainEvent:
    occurred_at: str = field(
        default_factory=lambda: datetime.now(UTC).isoformat(), init=False, repr=False
    )
    aggregate_id: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "aggregate_id": self.aggregate_id,
            "occurred_at": self.occurred_at,
            "event_type": self.__class__.__name__,
        }


@dataclass(frozen=True)
class FlightLandedEvent(DomainEvent):
    index: int = 0
    total: int = 0
    execution_time: float = 0.0


@dataclass(frozen=True)
class FlightAbortedEvent(DomainEvent):
    index: int = 0
    total: int = 0
    execution_time: float = 0.0
    reason: str = ""


@dataclass(frozen=True)
class PlanSucceededEvent(DomainEvent):
    execution_time: float = 0.0


@dataclass(frozen=True)
class PlanFailedEvent(DomainEvent):
    execution_time: float = 0.0
    reason: Optional[str] = None


@dataclass(frozen=True)
class PlanFinishedEvent(DomainEvent):
    aborted: bool = False
    execution_time: float = 0.0

"""
Run Context and Plan Status

Architectural Intent:
- RunContext is the immutable per-run snapshot exposed to user code as
  `plan.runtime`; it is created once per run and never mutated
- PlanStatus summarises the outcome of a run for callers and the CLI
"""

from __future__ import annotations
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional
from flightdeck.domain.value_objects.host import Host


@dataclass(frozen=True)
class RunContext:
    task: str
    target: str
    options: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    hosts: tuple[Host, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.options, MappingProxyType):
            object.__setattr__(self, "options", MappingProxyType(dict(self.options)))
        object.__setattr__(self, "hosts", tuple(self.hosts))

    @property
    def debug(self) -> bool:
        return bool(self.options.get("debug", False))


@dataclass(frozen=True)
class PlanStatus:
    task: str
    target: str
    flights_total: int = 0
    flights_run: int = 0
    aborted: bool = False
    execution_time: float = 0.0
    crash_message: Optional[str] = None
    # The failure that aborted the run, for callers that branch on its type
    error: Optional[BaseException] = field(default=None, compare=False)

    @property
    def succeeded(self) -> bool:
        return self.flights_total > 0 and not self.aborted

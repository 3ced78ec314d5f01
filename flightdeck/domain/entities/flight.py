"""
Flight and Target Entities

Architectural Intent:
- A Flight is one registered unit of work: a user function, the tasks it
  belongs to and where it runs (locally or on every host of the target)
- A Target is a named, resolvable set of remote hosts plus target options
- Registration order of flights is execution order

Domain Rules:
- A flight registered without a task belongs to the "default" task
- Target hosts are either static (one or many) or a resolver callable that
  is invoked once per run
"""

from __future__ import annotations
import inspect
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable, Iterable, Union

DEFAULT_TASK = "default"


class FlightKind(Enum):
    LOCAL = auto()
    REMOTE = auto()


FlightFn = Callable[[Any], Any]


@dataclass(frozen=True)
class Flight:
    kind: FlightKind
    tasks: frozenset[str]
    fn: FlightFn

    def applies_to(self, task: str) -> bool:
        return task in self.tasks

    @property
    def is_async(self) -> bool:
        return inspect.iscoroutinefunction(self.fn)

    @staticmethod
    def build(
        kind: FlightKind, tasks: Union[str, Iterable[str], None], fn: FlightFn
    ) -> "Flight":
        if tasks is None:
            names: Iterable[str] = (DEFAULT_TASK,)
        elif isinstance(tasks, str):
            names = (tasks,)
        else:
            names = tuple(tasks)
        if not callable(fn):
            raise TypeError("A flight needs a callable")
        return Flight(kind=kind, tasks=frozenset(names), fn=fn)


@dataclass
class Target:
    """Target aggregate; `hosts` is a host spec, a list of them, or a resolver."""

    name: str
    hosts: Any
    options: dict[str, Any] = field(default_factory=dict)

    @property
    def is_dynamic(self) -> bool:
        return callable(self.hosts)


async def call_flight(fn: FlightFn, transport: Any) -> None:
    """Invoke a flight function, awaiting it when it is a coroutine.

    Flights that run commands must be `async def`: transport methods are
    coroutines, so a plain function can only use the sync helpers
    (log, mode switches) or abort the plan.
    """
    outcome = fn(transport)
    if inspect.isawaitable(outcome):
        await outcome

"""
Command Result Value Object

Architectural Intent:
- Immutable outcome of one exec-family call
- `stdout`/`stderr` hold everything the command produced, or None when it
  produced nothing on that channel
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class CommandResult:
    code: int
    stdout: Optional[str] = None
    stderr: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.code == 0

    @staticmethod
    def from_output(code: int, stdout: str, stderr: str) -> "CommandResult":
        return CommandResult(code=code, stdout=stdout or None, stderr=stderr or None)

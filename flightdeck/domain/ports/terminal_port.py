"""
Terminal Port

Architectural Intent:
- Port interface for reading one line of operator input
- Implemented by the console adapter; replaced by fakes in tests
"""

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class TerminalPort(Protocol):
    async def read_line(
        self, prefix: str, message: str, hidden: bool = False
    ) -> Optional[str]: ...

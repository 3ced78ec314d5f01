"""
Console Terminal Adapter

Architectural Intent:
- Infrastructure adapter implementing TerminalPort on the controlling terminal
- Hidden prompts use getpass so secrets are not echoed
- Blocking reads run in the default executor to keep the event loop free
"""

import asyncio
import getpass
from typing import Optional
from flightdeck.domain.errors import ProcessInterruptedError
from flightdeck.domain.ports.terminal_port import TerminalPort


class ConsoleTerminal(TerminalPort):
    async def read_line(
        self, prefix: str, message: str, hidden: bool = False
    ) -> Optional[str]:
        text = f"{prefix} * {message} " if prefix else f"{message} "

        def _read():
            try:
                if hidden:
                    return getpass.getpass(text)
                return input(text)
            except (EOFError, KeyboardInterrupt):
                raise ProcessInterruptedError("User canceled prompt")

        return await asyncio.get_running_loop().run_in_executor(None, _read)

"""
Serialized Prompter

Architectural Intent:
- Implements PrompterPort on top of PromptQueue and a TerminalPort
- Every transport of a run shares one prompter, so prompts raised by hosts
  running concurrently reach the operator one at a time
"""

from __future__ import annotations
import asyncio
import logging
from typing import Optional
from flightdeck.application.prompt_queue import PromptQueue
from flightdeck.domain.errors import ProcessInterruptedError
from flightdeck.domain.ports.terminal_port import TerminalPort

logger = logging.getLogger(__name__)


class SerializedPrompter:
    def __init__(self, terminal: TerminalPort, queue: Optional[PromptQueue] = None):
        self.terminal = terminal
        self.queue = queue or PromptQueue()

    async def ask(
        self, prefix: str, message: str, hidden: bool = False, required: bool = False
    ) -> Optional[str]:
        loop = asyncio.get_running_loop()
        answered: asyncio.Future = loop.create_future()

        async def interact() -> Optional[str]:
            while True:
                answer = await self.terminal.read_line(prefix, message, hidden)
                if answer or not required:
                    return answer

        def settle(task: asyncio.Task) -> None:
            if answered.done():
                return
            if task.cancelled():
                answered.set_exception(ProcessInterruptedError("User canceled prompt"))
            elif task.exception() is not None:
                answered.set_exception(task.exception())
            else:
                answered.set_result(task.result())

        def start() -> None:
            task = loop.create_task(interact())
            task.add_done_callback(lambda t: self.queue.done(lambda: settle(t)))

        self.queue.push(start)
        self.queue.next()
        return await answered

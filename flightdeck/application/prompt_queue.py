"""
Prompt Queue

Architectural Intent:
- FIFO of pending prompt requests with at most one active at a time
- Keeps interactive prompts from concurrently running hosts single-file,
  in arrival order
- Callback based so it can be driven from the event loop without locks
"""

from __future__ import annotations
import logging
from collections import deque
from typing import Callable, Optional

logger = logging.getLogger(__name__)

Callback = Callable[[], None]


class PromptQueue:
    def __init__(self) -> None:
        self._items: deque[Callback] = deque()
        self._drain_callbacks: list[Callback] = []
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def __len__(self) -> int:
        return len(self._items)

    def push(self, task: Callback) -> None:
        self._items.append(task)

    def next(self) -> None:
        """Start the head task unless one is already active."""
        if self._running or not self._items:
            return
        self._running = True
        task = self._items.popleft()
        task()

    def done(self, callback: Optional[Callback] = None) -> None:
        """Finish the active task, then start the next or drain."""
        self._running = False
        if callback is not None:
            callback()
        if self._items:
            self.next()
        else:
            self.end()

    def on_drain(self, callback: Callback) -> None:
        self._drain_callbacks.append(callback)

    def end(self) -> None:
        callbacks, self._drain_callbacks = self._drain_callbacks, []
        for cb in callbacks:
            cb()

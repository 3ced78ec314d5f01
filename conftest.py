"""Global test configuration.

Shared fakes for the ports flights talk to: a recording host logger, a
scripted terminal and a transport that records commands instead of
running them.
"""

import logging
from typing import Any, Mapping, Optional
import pytest
from flightdeck.domain.entities.run_context import RunContext
from flightdeck.domain.ports.transport_port import Transport
from flightdeck.domain.value_objects.command_result import CommandResult
from flightdeck.domain.value_objects.host import Host
from flightdeck.domain.value_objects.transport_options import TransportOptions


class RecordingLogger:
    """Stands in for TransportLogger; keeps (category, message) pairs."""

    def __init__(self) -> None:
        self.records: list[tuple[str, str]] = []

    def __getattr__(self, category: str):
        if category.startswith("_"):
            raise AttributeError(category)

        def record(message: str, *args: Any, **kwargs: Any) -> None:
            self.records.append((category, message % args if args else message))

        return record

    def messages(self, category: str) -> list[str]:
        return [m for c, m in self.records if c == category]


class ScriptedTerminal:
    """Answers prompts from a list, remembering what was asked."""

    def __init__(self, answers: Optional[list] = None) -> None:
        self.answers = list(answers or [])
        self.asked: list[tuple[str, str, bool]] = []

    async def read_line(self, prefix: str, message: str, hidden: bool = False):
        self.asked.append((prefix, message, hidden))
        answer = self.answers.pop(0)
        if isinstance(answer, BaseException):
            raise answer
        return answer


class ScriptedPrompter:
    def __init__(self, answers: Optional[list] = None) -> None:
        self.answers = list(answers or [])
        self.asked: list[tuple[str, str, bool, bool]] = []

    async def ask(self, prefix, message, hidden=False, required=False):
        self.asked.append((prefix, message, hidden, required))
        return self.answers.pop(0) if self.answers else None


class RecordingTransport(Transport):
    """Transport whose commands exit with scripted codes."""

    def __init__(self, context, host, logger=None, prompter=None, codes=None):
        super().__init__(
            context, host, logger or RecordingLogger(), prompter or ScriptedPrompter()
        )
        self.codes: dict[str, int] = dict(codes or {})
        self.calls: list[tuple[str, TransportOptions, dict]] = []
        self.closed = False

    async def _exec(
        self, command: str, options: TransportOptions, exec_options: Mapping[str, Any]
    ) -> CommandResult:
        self.calls.append((command, options, dict(exec_options)))
        self._logger.command(command)
        code = self.codes.get(command, 0)
        return self._conclude(code, f"{command}\n", "", options)

    @property
    def commands(self) -> list[str]:
        return [c for c, _, _ in self.calls]

    def close(self) -> None:
        self.closed = True


@pytest.fixture(autouse=True)
def reset_flightdeck_logger():
    """Undo configure_logging() so caplog sees every record."""
    yield
    root = logging.getLogger("flightdeck")
    root.handlers.clear()
    root.setLevel(logging.NOTSET)


@pytest.fixture
def context():
    return RunContext(
        task="default",
        target="staging",
        hosts=(Host("web1.example.com"), Host("web2.example.com")),
    )


@pytest.fixture
def recording_logger():
    return RecordingLogger()


@pytest.fixture
def transport(context, recording_logger):
    return RecordingTransport(context, Host("web1.example.com"), recording_logger)

"""
Fabric Transport

Architectural Intent:
- Infrastructure adapter implementing the Transport port over SSH via Fabric
- One instance is bound to one open Connection to one host
- Fabric and paramiko are blocking; calls run in the default executor so
  hosts of a remote flight make progress concurrently

Security:
- SSH connections use connect_timeout, allow_agent, look_for_keys
- Keyboard-interactive challenges are relayed to the operator through the
  serialized prompt queue, secrets with hidden input
"""

from __future__ import annotations
import asyncio
import logging
import os
from typing import Any, Callable, Mapping, Optional
import paramiko
from fabric import Connection
from flightdeck.domain.entities.run_context import RunContext
from flightdeck.domain.errors import ConnectionFailedError
from flightdeck.domain.ports.transport_port import PrompterPort, Transport
from flightdeck.domain.value_objects.command_result import CommandResult
from flightdeck.domain.value_objects.host import Host
from flightdeck.domain.value_objects.transport_options import TransportOptions
from flightdeck.infrastructure.config import SSHConfig

logger = logging.getLogger(__name__)


class LineStream:
    """Write-only stream handing complete lines to a sink."""

    def __init__(self, sink: Optional[Callable[[str], None]] = None) -> None:
        self.sink = sink
        self._pending = ""

    def write(self, data: str) -> int:
        if self.sink is None:
            return len(data)
        self._pending += data
        *lines, self._pending = self._pending.split("\n")
        for line in lines:
            self.sink(line.rstrip("\r"))
        return len(data)

    def flush(self) -> None:
        if self.sink is not None and self._pending:
            self.sink(self._pending.rstrip("\r"))
        self._pending = ""


def build_connection(host: Host, ssh_config: SSHConfig) -> Connection:
    connect_kwargs: dict[str, Any] = {
        "allow_agent": ssh_config.allow_agent,
        "look_for_keys": ssh_config.look_for_keys,
    }
    if host.private_key:
        connect_kwargs["key_filename"] = os.path.expanduser(host.private_key)

    gateway = build_connection(host.tunnel, ssh_config) if host.tunnel else None

    return Connection(
        host=host.host,
        user=host.username,
        port=host.port,
        connect_timeout=ssh_config.connect_timeout,
        connect_kwargs=connect_kwargs,
        gateway=gateway,
    )


class FabricTransport(Transport):
    def __init__(
        self,
        context: RunContext,
        host: Host,
        logger: Any,
        prompter: PrompterPort,
        connection: Connection,
    ) -> None:
        super().__init__(context, host, logger, prompter)
        self._connection = connection

    @property
    def connection(self) -> Connection:
        return self._connection

    @classmethod
    async def create(
        cls,
        context: RunContext,
        host: Host,
        logger: Any,
        prompter: PrompterPort,
        ssh_config: Optional[SSHConfig] = None,
    ) -> "FabricTransport":
        ssh_config = ssh_config or SSHConfig()
        transport = cls(
            context, host, logger, prompter, build_connection(host, ssh_config)
        )
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(
                None, transport._open, loop, ssh_config.try_keyboard
            )
        except (paramiko.SSHException, OSError, EOFError) as e:
            raise ConnectionFailedError(
                f"Error connecting to '{host}': {e}"
            ) from e
        return transport

    def _open(self, loop: asyncio.AbstractEventLoop, try_keyboard: bool) -> None:
        try:
            self._connection.open()
        except paramiko.AuthenticationException:
            session = self._connection.client.get_transport()
            if not try_keyboard or session is None or not session.is_active():
                raise
            self._logger.debug("Falling back to keyboard-interactive authentication")
            session.auth_interactive(
                self._connection.user,
                lambda title, instructions, prompts: self._answer(loop, prompts),
            )
            self._connection.transport = session

    def _answer(self, loop: asyncio.AbstractEventLoop, prompts: list) -> list[str]:
        """Relay every challenge prompt to the operator, in order."""
        answers: list[str] = []
        while len(answers) < len(prompts):
            text, echo = prompts[len(answers)]
            future = asyncio.run_coroutine_threadsafe(
                self.prompt(text.strip(), hidden=not echo), loop
            )
            answers.append(future.result() or "")
        return answers

    async def _exec(
        self,
        command: str,
        options: TransportOptions,
        exec_options: Mapping[str, Any],
    ) -> CommandResult:
        self._logger.command(command)

        silent = options.silent
        err_sink = self._logger.stdwarn if options.failsafe else self._logger.stderr
        out_stream = LineStream(None if silent else self._logger.stdout)
        err_stream = LineStream(None if silent else err_sink)

        def _run():
            return self._connection.run(
                command,
                hide=False,
                warn=True,
                in_stream=False,
                out_stream=out_stream,
                err_stream=err_stream,
                **exec_options,
            )

        result = await asyncio.get_running_loop().run_in_executor(None, _run)
        out_stream.flush()
        err_stream.flush()

        return self._conclude(result.exited, result.stdout, result.stderr, options)

    def close(self) -> None:
        self._connection.close()

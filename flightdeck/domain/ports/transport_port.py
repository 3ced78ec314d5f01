"""
Transport Port

Architectural Intent:
- The command-execution handle passed into every flight function
- One surface regardless of locality: a shell variant for local flights and
  an SSH variant for remote flights implement `_exec()` independently
- Scoped options (silent, failsafe) and the `with` command prefix are private
  to one transport instance and follow stack discipline

Failure Semantics:
- A non-zero exit code without failsafe raises CommandExitedAbnormallyError,
  which unwinds the rest of the flight function for that host
- With failsafe the result is returned and a warning is logged
"""

from __future__ import annotations
import inspect
import shlex
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Iterator, Mapping, Optional, Protocol
from flightdeck.domain.errors import (
    CommandExitedAbnormallyError,
    InvalidArgumentError,
)
from flightdeck.domain.entities.run_context import RunContext
from flightdeck.domain.value_objects.command_result import CommandResult
from flightdeck.domain.value_objects.host import Host
from flightdeck.domain.value_objects.transport_options import TransportOptions

# Shortcuts: `transport.ls("-al")` is `transport.exec("ls -al")`
COMMANDS = (
    "awk", "cat", "cd", "chgrp", "chmod", "chown", "cp", "echo", "find",
    "ftp", "grep", "kill", "ln", "whoami", "ls", "mkdir", "mv", "ps", "pwd",
    "rm", "rmdir", "scp", "sed", "tail", "tar", "touch", "unzip", "zip",
    "git", "hg", "node", "npm", "rsync", "svn",
)


class PrompterPort(Protocol):
    async def ask(
        self, prefix: str, message: str, hidden: bool = False, required: bool = False
    ) -> Optional[str]: ...


class Transport(ABC):
    def __init__(
        self,
        context: RunContext,
        host: Host,
        logger: Any,
        prompter: PrompterPort,
    ) -> None:
        self._context = context
        self._host = host
        self._logger = logger
        self._prompter = prompter
        self._options = TransportOptions()
        self._exec_with = ""

    @property
    def runtime(self) -> Host:
        """The host this transport is bound to."""
        return self._host

    @property
    def options(self) -> TransportOptions:
        return self._options

    @property
    def prefix(self) -> str:
        return self._exec_with

    def __getattr__(self, name: str) -> Any:
        if name not in COMMANDS:
            raise AttributeError(
                f"{type(self).__name__!r} object has no attribute {name!r}"
            )

        async def shortcut(args: Optional[str] = None, **options: Any) -> CommandResult:
            command = f"{name} {args}" if args else name
            return await self.exec(command, **options)

        return shortcut

    @abstractmethod
    async def _exec(
        self,
        command: str,
        options: TransportOptions,
        exec_options: Mapping[str, Any],
    ) -> CommandResult:
        """Run a fully prefixed command and classify its exit code."""

    async def exec(
        self,
        command: str = "",
        *,
        silent: Optional[bool] = None,
        failsafe: Optional[bool] = None,
        exec_options: Optional[Mapping[str, Any]] = None,
    ) -> CommandResult:
        options = self._options.merge(silent=silent, failsafe=failsafe)
        return await self._exec(
            f"{self._exec_with}{command}", options, self._merge_exec_options(exec_options)
        )

    async def sudo(
        self,
        command: str = "",
        *,
        user: str = "root",
        silent: Optional[bool] = None,
        failsafe: Optional[bool] = None,
        exec_options: Optional[Mapping[str, Any]] = None,
    ) -> CommandResult:
        """Run `command` as `user` through `sudo -u <user> -i bash`."""
        inner = shlex.quote(f"{self._exec_with}{command}")
        wrapped = f"echo {inner} | sudo -u {shlex.quote(user)} -i bash"
        options = self._options.merge(silent=silent, failsafe=failsafe)
        return await self._exec(wrapped, options, self._merge_exec_options(exec_options))

    async def transfer(
        self, files: Any, remote_dir: Optional[str] = None, **options: Any
    ) -> list[CommandResult]:
        raise InvalidArgumentError("transfer() is only available on local flights")

    async def prompt(
        self, message: str, *, hidden: bool = False, required: bool = False
    ) -> Optional[str]:
        return await self._prompter.ask(
            str(self._host), message, hidden=hidden, required=required
        )

    def _apply_scope(self, arg: Any) -> None:
        if isinstance(arg, str):
            self._exec_with += f"{arg} && "
        elif isinstance(arg, Mapping):
            self._options = self._options.merge(arg)
        else:
            raise InvalidArgumentError(
                f"with: unsupported argument of type {type(arg).__name__}"
            )

    @contextmanager
    def scoped(self, *args: Any, **options: Any) -> Iterator["Transport"]:
        """Apply command prefixes and options until the block exits.

        ```python
        with remote.scoped("cd /srv/app", silent=True):
            await remote.git("pull")  # cd /srv/app && git pull
        ```
        """
        previous_with, previous_options = self._exec_with, self._options
        try:
            for arg in args:
                self._apply_scope(arg)
            self._options = self._options.merge(options)
            yield self
        finally:
            self._exec_with, self._options = previous_with, previous_options

    async def with_(self, *args: Any) -> None:
        """Apply prefixes and option mappings, in order, around thunks."""
        previous_with, previous_options = self._exec_with, self._options
        try:
            for arg in args:
                if callable(arg):
                    outcome = arg()
                    if inspect.isawaitable(outcome):
                        await outcome
                else:
                    self._apply_scope(arg)
        finally:
            self._exec_with, self._options = previous_with, previous_options

    def silent(self) -> None:
        self._options = self._options.merge(silent=True)

    def verbose(self) -> None:
        self._options = self._options.merge(silent=False)

    def failsafe(self) -> None:
        self._options = self._options.merge(failsafe=True)

    def unsafe(self) -> None:
        self._options = self._options.merge(failsafe=False)

    def log(self, message: str) -> None:
        self._logger.user(message)

    def debug(self, message: str) -> None:
        self._logger.debug(message)

    def close(self) -> None:
        pass

    def _merge_exec_options(
        self, exec_options: Optional[Mapping[str, Any]]
    ) -> dict[str, Any]:
        return {**self._host.exec_options, **(exec_options or {})}

    def _conclude(
        self, code: int, stdout: str, stderr: str, options: TransportOptions
    ) -> CommandResult:
        result = CommandResult.from_output(code, stdout, stderr)
        if result.ok:
            self._logger.success("ok")
        elif options.failsafe:
            self._logger.warn(f"failed safely ({code})")
        else:
            self._logger.error(f"failed ({code})")
            raise CommandExitedAbnormallyError(
                f"Command exited abnormally on {self._host}"
            )
        return result

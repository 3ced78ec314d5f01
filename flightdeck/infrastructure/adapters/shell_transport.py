"""
Shell Transport

Architectural Intent:
- Infrastructure adapter implementing the Transport port for local flights
- Runs commands through the local shell with asyncio subprocesses
- Streams output line by line to the host logger while buffering up to
  `max_buffer` bytes per channel for the returned CommandResult; a single
  line longer than that is logged in pieces, never rejected
- `transfer()` copies files to every host of the run with rsync over SSH,
  one rsync per host, concurrently

Security:
- The file list is staged in a temporary file, never interpolated into
  the command line
- Remote directory, key path and list path are quoted via shlex.quote()
"""

from __future__ import annotations
import asyncio
import contextlib
import logging
import os
import re
import shlex
import tempfile
from typing import Any, Callable, Mapping, Optional
from flightdeck.domain.entities.run_context import RunContext
from flightdeck.domain.errors import InvalidArgumentError
from flightdeck.domain.ports.transport_port import PrompterPort, Transport
from flightdeck.domain.value_objects.command_result import CommandResult
from flightdeck.domain.value_objects.host import Host
from flightdeck.domain.value_objects.transport_options import TransportOptions
from flightdeck.infrastructure.config import ShellConfig, TransferConfig

logger = logging.getLogger(__name__)

_FILE_SEPARATORS = re.compile(r"[\r\n\0]")
_READ_CHUNK = 64 * 1024


def _decode_line(line: bytes) -> str:
    return line.decode(errors="replace").rstrip("\r")


def _write_temp_file(content: str) -> str:
    fd, path = tempfile.mkstemp(prefix="flightdeck-", text=True)
    with os.fdopen(fd, "w") as f:
        f.write(content)
    return path


def normalize_file_list(files: Any) -> list[str]:
    """Accepts a list, a newline/NUL separated string or a command result."""
    if isinstance(files, str):
        text = files
    elif isinstance(files, Mapping):
        if "stdout" not in files:
            raise InvalidArgumentError("Invalid object passed")
        text = files["stdout"] or ""
    elif isinstance(files, (list, tuple)):
        text = "\n".join(str(f) for f in files)
    elif hasattr(files, "stdout"):
        text = files.stdout or ""
    else:
        raise InvalidArgumentError("Invalid object passed")

    entries = [entry.strip() for entry in _FILE_SEPARATORS.split(text)]
    entries = [entry for entry in entries if entry]
    if not entries:
        raise InvalidArgumentError("Empty file list passed")
    return entries


class ShellTransport(Transport):
    def __init__(
        self,
        context: RunContext,
        host: Host,
        logger: Any,
        prompter: PrompterPort,
        shell_config: Optional[ShellConfig] = None,
        transfer_config: Optional[TransferConfig] = None,
    ) -> None:
        super().__init__(context, host, logger, prompter)
        self.shell_config = shell_config or ShellConfig()
        self.transfer_config = transfer_config or TransferConfig()

    async def _exec(
        self,
        command: str,
        options: TransportOptions,
        exec_options: Mapping[str, Any],
    ) -> CommandResult:
        self._logger.command(command)

        kwargs: dict[str, Any] = {"stdin": asyncio.subprocess.DEVNULL}
        if self.shell_config.shell:
            kwargs["executable"] = self.shell_config.shell
        kwargs.update(exec_options)
        # Ceiling on bytes kept per channel; output past it is drained and dropped
        ceiling = int(kwargs.pop("max_buffer", self.shell_config.max_buffer))

        proc = await asyncio.create_subprocess_shell(
            command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            **kwargs,
        )

        err_sink = self._logger.stdwarn if options.failsafe else self._logger.stderr

        async def pump(stream, sink: Callable[[str], None]) -> bytes:
            captured = bytearray()
            pending = b""
            truncated = False
            while True:
                chunk = await stream.read(_READ_CHUNK)
                if not chunk:
                    break

                room = ceiling - len(captured)
                if room > 0:
                    captured += chunk[:room]
                if len(chunk) > room and not truncated:
                    truncated = True
                    logger.warning(
                        "Output of %r exceeded %d bytes and was truncated",
                        command, ceiling,
                    )

                if options.silent:
                    continue
                pending += chunk
                *lines, pending = pending.split(b"\n")
                for line in lines:
                    sink(_decode_line(line))
                if len(pending) > ceiling:
                    sink(_decode_line(pending))
                    pending = b""

            if pending and not options.silent:
                sink(_decode_line(pending))
            return bytes(captured)

        try:
            stdout, stderr = await asyncio.gather(
                pump(proc.stdout, self._logger.stdout),
                pump(proc.stderr, err_sink),
            )
        except BaseException:
            if proc.returncode is None:
                with contextlib.suppress(ProcessLookupError):
                    proc.kill()
            raise
        finally:
            code = await proc.wait()

        return self._conclude(
            code,
            stdout.decode(errors="replace"),
            stderr.decode(errors="replace"),
            options,
        )

    async def transfer(
        self,
        files: Any,
        remote_dir: Optional[str] = None,
        *,
        silent: Optional[bool] = None,
        failsafe: Optional[bool] = None,
        exec_options: Optional[Mapping[str, Any]] = None,
    ) -> list[CommandResult]:
        if not remote_dir:
            raise InvalidArgumentError("Missing remote path")
        entries = normalize_file_list(files)
        hosts = self._context.hosts
        if not hosts:
            raise InvalidArgumentError("No remote hosts to transfer files to")

        list_path = _write_temp_file("\n".join(entries))
        try:
            outcomes = await asyncio.gather(
                *(
                    self.exec(
                        self.transfer_command(list_path, host, remote_dir),
                        silent=silent,
                        failsafe=failsafe,
                        exec_options=exec_options,
                    )
                    for host in hosts
                ),
                return_exceptions=True,
            )
        finally:
            try:
                os.unlink(list_path)
            except FileNotFoundError:
                logger.debug("File list %s already removed", list_path)

        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                raise outcome
        return list(outcomes)

    def transfer_command(self, list_path: str, host: Host, remote_dir: str) -> str:
        flags = self.transfer_config.flags + ("vv" if self._context.debug else "")
        rsh = f"ssh -p{host.port}"
        if host.private_key:
            rsh += f" -i {shlex.quote(os.path.expanduser(host.private_key))}"
        chain = host.tunnel_chain()
        if chain:
            rsh += " -J " + ",".join(f"{hop.address}:{hop.port}" for hop in chain)
        return (
            f"{self.transfer_config.tool} --files-from {shlex.quote(list_path)} "
            f'{flags} --rsh="{rsh}" ./ {host.address}:{shlex.quote(remote_dir)}'
        )

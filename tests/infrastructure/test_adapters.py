"""Tests for the transport factory, console terminal and flightplan loader."""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from conftest import ScriptedPrompter
from flightdeck.domain.entities.run_context import RunContext
from flightdeck.domain.errors import InvalidArgumentError, ProcessInterruptedError
from flightdeck.domain.value_objects.host import Host
from flightdeck.infrastructure.adapters.console_terminal import ConsoleTerminal
from flightdeck.infrastructure.adapters.shell_transport import ShellTransport
from flightdeck.infrastructure.adapters.transport_factory import TransportFactory
from flightdeck.infrastructure.config import FlightdeckConfig, ShellConfig
from flightdeck.infrastructure.script_loader import load_flightplan


class TestTransportFactory:
    def test_local_builds_shell_transport(self):
        config = FlightdeckConfig(shell=ShellConfig(shell="/bin/bash"))
        factory = TransportFactory(ScriptedPrompter(), config)
        context = RunContext("default", "staging")

        transport = factory.local(context, Host("localhost"))

        assert isinstance(transport, ShellTransport)
        assert transport.shell_config.shell == "/bin/bash"
        assert transport.runtime == Host("localhost")

    def test_logger_debug_follows_run_options(self):
        factory = TransportFactory(ScriptedPrompter(), FlightdeckConfig())
        quiet = factory.logger_for(RunContext("default", "staging"), Host("web1"))
        loud = factory.logger_for(
            RunContext("default", "staging", {"debug": True}), Host("web1")
        )
        assert quiet.debug_enabled is False
        assert loud.debug_enabled is True
        assert loud.extra == {"host": "web1"}

    def test_logger_debug_follows_config(self):
        factory = TransportFactory(ScriptedPrompter(), FlightdeckConfig(debug=True))
        logger = factory.logger_for(RunContext("default", "staging"), Host("web1"))
        assert logger.debug_enabled is True

    @pytest.mark.asyncio
    async def test_remote_opens_fabric_transport(self):
        prompter = ScriptedPrompter()
        config = FlightdeckConfig()
        factory = TransportFactory(prompter, config)
        context = RunContext("default", "staging")
        created = MagicMock()

        with patch(
            "flightdeck.infrastructure.adapters.transport_factory.FabricTransport.create",
            new=AsyncMock(return_value=created),
        ) as create:
            transport = await factory.remote(context, Host("web1"))

        assert transport is created
        args, kwargs = create.call_args
        assert args[0] is context
        assert args[1] == Host("web1")
        assert args[3] is prompter
        assert kwargs["ssh_config"] is config.ssh


class TestConsoleTerminal:
    @pytest.mark.asyncio
    async def test_visible_prompt(self):
        with patch("builtins.input", return_value="yes") as mock_input:
            answer = await ConsoleTerminal().read_line("web1", "Proceed?")
        assert answer == "yes"
        mock_input.assert_called_once_with("web1 * Proceed? ")

    @pytest.mark.asyncio
    async def test_hidden_prompt_uses_getpass(self):
        with patch("getpass.getpass", return_value="s3cret") as mock_getpass:
            answer = await ConsoleTerminal().read_line("web1", "Password:", hidden=True)
        assert answer == "s3cret"
        mock_getpass.assert_called_once_with("web1 * Password: ")

    @pytest.mark.asyncio
    async def test_eof_cancels(self):
        with patch("builtins.input", side_effect=EOFError):
            with pytest.raises(ProcessInterruptedError, match="User canceled prompt"):
                await ConsoleTerminal().read_line("", "Proceed?")

    @pytest.mark.asyncio
    async def test_reads_on_the_running_loop(self):
        with patch("asyncio.get_event_loop", side_effect=RuntimeError("no current loop")):
            with patch("builtins.input", return_value="yes"):
                answer = await ConsoleTerminal().read_line("web1", "Proceed?")
        assert answer == "yes"


class TestLoadFlightplan:
    def test_calls_configure(self, tmp_path):
        script = tmp_path / "flightplan.py"
        script.write_text(
            "def configure(plan):\n"
            "    plan.target('staging', 'web1')\n"
        )
        plan = MagicMock()

        load_flightplan(script, plan)

        plan.target.assert_called_once_with("staging", "web1")

    def test_missing_file(self, tmp_path):
        with pytest.raises(InvalidArgumentError, match="Unable to load"):
            load_flightplan(tmp_path / "nope.py", MagicMock())

    def test_missing_configure(self, tmp_path):
        script = tmp_path / "flightplan.py"
        script.write_text("TARGETS = []\n")
        with pytest.raises(InvalidArgumentError, match="configure"):
            load_flightplan(script, MagicMock())

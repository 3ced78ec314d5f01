"""Tests for CommandResult, TransportOptions and the error taxonomy."""

import pytest
from flightdeck.domain.errors import (
    AbortedError,
    CommandExitedAbnormallyError,
    ConnectionFailedError,
    FlightdeckError,
    InvalidArgumentError,
    InvalidTargetError,
    ProcessInterruptedError,
)
from flightdeck.domain.value_objects.command_result import CommandResult
from flightdeck.domain.value_objects.transport_options import TransportOptions


class TestCommandResult:
    def test_empty_channels_become_none(self):
        result = CommandResult.from_output(0, "", "")
        assert result.stdout is None
        assert result.stderr is None
        assert result.ok

    def test_keeps_output(self):
        result = CommandResult.from_output(2, "out\n", "err\n")
        assert result.stdout == "out\n"
        assert result.stderr == "err\n"
        assert not result.ok


class TestTransportOptions:
    def test_defaults(self):
        options = TransportOptions()
        assert options.silent is False
        assert options.failsafe is False

    def test_merge_kwargs_and_mapping(self):
        options = TransportOptions().merge({"silent": True}, failsafe=True)
        assert options == TransportOptions(silent=True, failsafe=True)

    def test_merge_ignores_none_and_unknown_keys(self):
        options = TransportOptions(silent=True)
        assert options.merge(silent=None, color="red") is options

    def test_merge_does_not_mutate(self):
        options = TransportOptions()
        options.merge(silent=True)
        assert options.silent is False


class TestErrors:
    @pytest.mark.parametrize(
        "cls",
        [
            InvalidTargetError,
            InvalidArgumentError,
            ConnectionFailedError,
            CommandExitedAbnormallyError,
            AbortedError,
            ProcessInterruptedError,
        ],
    )
    def test_hierarchy(self, cls):
        error = cls("boom")
        assert isinstance(error, FlightdeckError)
        assert error.message == "boom"
        assert str(error) == "boom"

    def test_classes_are_distinct(self):
        with pytest.raises(AbortedError):
            try:
                raise AbortedError("stop")
            except ConnectionFailedError:
                pytest.fail("caught by the wrong class")

"""
Integration Tests: full plan runs through the composition root

Real shell transport for local flights, fabric Connection patched for remote
flights, real runners, dispatcher, orchestrator and event bus.
"""

import pytest
from unittest.mock import MagicMock, patch
from conftest import ScriptedTerminal
from flightdeck.composition_root import create_container
from flightdeck.infrastructure.config import FlightdeckConfig

CONNECTION = "flightdeck.infrastructure.adapters.fabric_transport.Connection"


class FakeFleet:
    """Builds one fake fabric Connection per host and records commands."""

    def __init__(self, failing=None):
        self.failing = failing or {}
        self.commands: dict[str, list[str]] = {}
        self.closed: list[str] = []

    def connection(self, host, **kwargs):
        conn = MagicMock()
        conn.host = host
        self.commands[host] = []

        def run(command, **run_kwargs):
            self.commands[host].append(command)
            result = MagicMock()
            result.exited = self.failing.get((host, command), 0)
            result.stdout = ""
            result.stderr = "error\n" if result.exited else ""
            return result

        conn.run.side_effect = run
        conn.close.side_effect = lambda: self.closed.append(host)
        return conn


def build_plan():
    container = create_container(FlightdeckConfig(), terminal=ScriptedTerminal())
    return container.orchestrator


class TestDeployFlow:
    @pytest.mark.asyncio
    async def test_staging_deploy_aborts_on_failing_host(self, tmp_path):
        fleet = FakeFleet(failing={("web2", "cd /srv/app && git pull"): 1})
        plan = build_plan()
        plan.target("staging", ["web1", "web2"])
        notified = tmp_path / "notified"
        outcome = []

        @plan.remote("deploy")
        async def deploy(remote):
            with remote.scoped("cd /srv/app"):
                await remote.git("pull")
            await remote.exec("systemctl restart app")

        @plan.local("deploy")
        async def notify(local):
            await local.touch(str(notified))

        plan.disaster(lambda: outcome.append("disaster"))

        with patch(CONNECTION, side_effect=fleet.connection):
            status = await plan.run("deploy", "staging")

        assert status.aborted
        assert fleet.commands["web1"] == ["cd /srv/app && git pull", "systemctl restart app"]
        assert fleet.commands["web2"] == ["cd /srv/app && git pull"]
        assert not notified.exists()
        assert outcome == ["disaster"]
        assert sorted(fleet.closed) == ["web1", "web2"]

    @pytest.mark.asyncio
    async def test_local_and_remote_flights_share_run(self, tmp_path):
        fleet = FakeFleet()
        plan = build_plan()
        plan.target("production", ["web1", "web2", "web3"], {"release": "42"})
        artifact = tmp_path / "release.txt"

        @plan.local
        async def build(local):
            release = plan.runtime.options["release"]
            await local.exec(f"echo {release} > {artifact}")

        @plan.remote
        async def deploy(remote):
            await remote.sudo(f"ln -sfn /srv/releases/{plan.runtime.options['release']} /srv/current")

        with patch(CONNECTION, side_effect=fleet.connection) as connection_cls:
            status = await plan.run("default", "production")

        assert status.succeeded
        assert artifact.read_text().strip() == "42"
        assert connection_cls.call_count == 3
        for host in ("web1", "web2", "web3"):
            assert fleet.commands[host] == [
                "echo 'ln -sfn /srv/releases/42 /srv/current' | sudo -u root -i bash"
            ]

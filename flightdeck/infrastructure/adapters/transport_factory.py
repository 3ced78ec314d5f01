"""
Transport Factory

Architectural Intent:
- Single place where transports are assembled with their logger, the
  shared prompter and configuration
- Runners receive the bound `local` / `remote` callables and never import
  adapters themselves
"""

from flightdeck.domain.entities.run_context import RunContext
from flightdeck.domain.ports.transport_port import PrompterPort
from flightdeck.domain.value_objects.host import Host
from flightdeck.infrastructure.adapters.fabric_transport import FabricTransport
from flightdeck.infrastructure.adapters.shell_transport import ShellTransport
from flightdeck.infrastructure.config import FlightdeckConfig
from flightdeck.infrastructure.logging import TransportLogger


class TransportFactory:
    def __init__(self, prompter: PrompterPort, config: FlightdeckConfig):
        self.prompter = prompter
        self.config = config

    def logger_for(self, context: RunContext, host: Host) -> TransportLogger:
        return TransportLogger(str(host), debug=context.debug or self.config.debug)

    def local(self, context: RunContext, host: Host) -> ShellTransport:
        return ShellTransport(
            context,
            host,
            self.logger_for(context, host),
            self.prompter,
            shell_config=self.config.shell,
            transfer_config=self.config.transfer,
        )

    async def remote(self, context: RunContext, host: Host) -> FabricTransport:
        return await FabricTransport.create(
            context,
            host,
            self.logger_for(context, host),
            self.prompter,
            ssh_config=self.config.ssh,
        )

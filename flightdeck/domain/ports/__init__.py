"""
Domain Ports Package

Architectural Intent:
- Contains port interfaces (abstract contracts) for external dependencies
- Ports define what the engine needs, adapters implement how
- Follows Hexagonal Architecture principles
"""

from flightdeck.domain.ports.transport_port import Transport, PrompterPort, COMMANDS
from flightdeck.domain.ports.terminal_port import TerminalPort
from flightdeck.domain.ports.event_bus_port import EventBusPort

__all__ = [
    "Transport",
    "PrompterPort",
    "COMMANDS",
    "TerminalPort",
    "EventBusPort",
]

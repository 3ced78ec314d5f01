"""
Flight Runners Package

Architectural Intent:
- Local runner: one shell transport, one invocation
- Remote runner: pooled SSH transports, one concurrent invocation per host
"""

from flightdeck.application.runners.local_runner import LocalRunner, LOCALHOST
from flightdeck.application.runners.remote_runner import RemoteRunner

__all__ = ["LocalRunner", "RemoteRunner", "LOCALHOST"]

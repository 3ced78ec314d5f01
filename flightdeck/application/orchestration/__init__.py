"""
Application Orchestration Package

Architectural Intent:
- Flight dispatching and plan orchestration
"""

from flightdeck.application.orchestration.flight_dispatcher import FlightDispatcher
from flightdeck.application.orchestration.orchestrator import Orchestrator

__all__ = ["FlightDispatcher", "Orchestrator"]

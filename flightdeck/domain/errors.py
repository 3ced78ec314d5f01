"""
Error Taxonomy

Architectural Intent:
- Closed set of typed failures shared by every layer
- Callers distinguish failures by class, never by message text
- Every error carries a human-readable message for the operator
"""


class FlightdeckError(Exception):
    """Base class for all expected operational failures."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class InvalidTargetError(FlightdeckError):
    pass


class InvalidArgumentError(FlightdeckError):
    pass


class ConnectionFailedError(FlightdeckError):
    pass


class CommandExitedAbnormallyError(FlightdeckError):
    pass


class AbortedError(FlightdeckError):
    pass


class ProcessInterruptedError(FlightdeckError):
    pass

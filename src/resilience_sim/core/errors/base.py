"""Root of the resilience-sim exception hierarchy."""


class ResilienceSimError(Exception):
    """Base exception for every error raised by resilience-sim."""


class SimulationConfigError(ResilienceSimError, ValueError):
    """Raised for unknown pattern/condition names or invalid configuration values.

    Attributes:
        field: Name of the offending setting, when known.
        value: The rejected value.
    """

    def __init__(self, message: str, field: str | None = None, value: object = None):
        super().__init__(message)
        self.field = field
        self.value = value

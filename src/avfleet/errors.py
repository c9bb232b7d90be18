"""Exceptions raised by the fleet simulator."""


class InvalidParameterError(ValueError):
    """Scenario parameters were rejected before the simulation started."""

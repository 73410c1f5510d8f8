"""Domain errors raised by the analysis core."""


class FootyError(Exception):
    """Base class for errors local to a single match's analysis."""


class InvalidParameterError(FootyError, ValueError):
    """An expected-rate input is non-positive or non-finite."""


class InvalidOddsError(FootyError, ValueError):
    """Market odds are not a finite decimal price above 1.0."""

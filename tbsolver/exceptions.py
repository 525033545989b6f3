"""
Exceptions Module

Error taxonomy shared by the index, amplitude and solver modules. Every
error is fatal for the call that raised it; nothing is retried internally.
"""


class TBSolverError(Exception):
    """Base class for all errors raised by tbsolver."""


class ConfigurationError(TBSolverError):
    """Solver or model is not set up correctly for the requested operation."""


class StructuralError(TBSolverError):
    """Basis structure is used in a way its lifecycle does not allow."""


class IndexNotFoundError(StructuralError, KeyError):
    """Lookup outside the established index <-> offset bijection."""

    def __str__(self):
        # KeyError quotes its message; keep the plain text instead.
        return Exception.__str__(self)


class NumericalError(TBSolverError):
    """The dense eigensolver failed to produce a result."""


class SerializationError(TBSolverError, ValueError):
    """An amplitude cannot be converted to or from its persisted form."""

"""Exceptions raised by the computation graph."""


class OdysisError(Exception):
    """Base class for odysis errors."""


class DimensionMismatch(OdysisError, ValueError):
    """An array length is incompatible with its arity or the vertex count."""


class IndexOutOfRange(OdysisError, IndexError):
    """A connectivity index refers to a vertex that does not exist."""


class UnknownField(OdysisError, KeyError):
    """An input selector names a Data or component the parent does not have."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the message readable
        return str(self.args[0]) if self.args else ""

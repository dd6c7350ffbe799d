"""
Errors raised by qwire.

Every error is raised where the offending value enters the library
(state construction, gate construction, circuit insertion) and derives
from ValueError, so callers that already catch ValueError keep working.
"""


class QwireError(ValueError):
    """Base class for all qwire errors."""


class InvalidQubitCount(QwireError):
    """A circuit or state was declared with an unusable number of qubits."""


class EmptyState(InvalidQubitCount):
    """A product state or amplitude mapping was built from nothing."""


class InvalidDigit(QwireError):
    """A product state digit was neither 0 nor 1."""


class WireOutOfRange(QwireError):
    """A gate operand wire lies outside the circuit."""


class IndexOutOfBounds(QwireError, IndexError):
    """A digit or amplitude index lies outside the state."""


class OverlappingWires(QwireError):
    """Two operands, or two gates of one column, share a wire."""


class DimensionMismatch(QwireError):
    """A state's size disagrees with the declared qubit count."""


class UnnormalisedState(QwireError):
    """Squared amplitudes do not sum to one within tolerance."""


class NotYetSimulated(QwireError):
    """Measurement was requested before any simulation ran."""


class CircuitConsumed(QwireError):
    """The circuit was handed to simulate() and can no longer be used."""

"""
Core quantum simulation functionality.

Gates are applied through their action on basis states rather than as
matrices. For every basis state with non-zero amplitude, the digits on a
gate's wires are projected out into a small local state, the gate maps
that local state to its image, and each image term is written back into
the full-width index of a fresh amplitude buffer. Contributions that land
on the same index are summed, which is what lets interference (H·H = I)
happen.

Columns are applied strictly in order, each producing a new buffer. Gates
inside one column touch disjoint wires and so commute.

The work per gate is vectorised over basis indices with numpy: the gate's
mapping is evaluated once per distinct local state (at most 2^k times for
a k-wire gate) and the resulting coefficients are scattered over every
source index sharing that local state.
"""

import numpy as np
from typing import Dict, List, Sequence, Tuple, Union

from .errors import DimensionMismatch, NotYetSimulated, WireOutOfRange
from .gates import Gate, GateKind, gate_image
from .measurement import NonObservable, Observable, measure_all as _measure_all, measure_once
from .states import ProductState, SuperPosition
from .utils import ZERO_MARGIN, is_zero

Column = Tuple[Gate, ...]
Register = Union[ProductState, SuperPosition, None]


def initial_register(register: Register, num_qubits: int) -> SuperPosition:
    """
    Turn a register description into a fresh superposition.

    Args:
        register: None for |0…0⟩, a ProductState, or a SuperPosition
        num_qubits: Width the register must have

    Returns:
        A writable superposition not shared with the caller

    Raises:
        DimensionMismatch: If the register has the wrong number of qubits
    """
    if register is None:
        return ProductState.zeros(num_qubits).to_superposition()
    if register.num_qubits != num_qubits:
        raise DimensionMismatch(
            f"The register has {register.num_qubits} qubits, while the circuit has "
            f"{num_qubits}. These must equal each other."
        )
    if isinstance(register, ProductState):
        return register.to_superposition()
    return register.copy()


def _local_indices(indices: np.ndarray, shifts: Sequence[int]) -> np.ndarray:
    # Digits on the gate's wires, first operand most significant.
    local = np.zeros(len(indices), dtype=np.int64)
    for shift in shifts:
        local = (local << 1) | ((indices >> shift) & 1)
    return local


def _nonzero_terms(image: SuperPosition) -> np.ndarray:
    return np.flatnonzero(~is_zero(image.amplitudes, ZERO_MARGIN))


def apply_gate(gate: Gate, superposition: SuperPosition) -> SuperPosition:
    """
    Apply one gate to a superposition.

    Args:
        gate: Gate whose wires lie within the superposition
        superposition: Current state (left untouched)

    Returns:
        New superposition holding the gate's image of the state

    Raises:
        WireOutOfRange: If a gate wire is outside the state
        DimensionMismatch: If a custom mapping returns the wrong width
    """
    n = superposition.num_qubits
    for wire in gate.wires:
        if wire >= n:
            raise WireOutOfRange(
                f"The gate {gate!r} uses wire {wire}, but the state only has {n} qubits."
            )
    if gate.kind is GateKind.ID:
        return superposition.copy()

    wires = gate.wires
    k = len(wires)
    shifts = [n - 1 - wire for wire in wires]
    wire_mask = 0
    for shift in shifts:
        wire_mask |= 1 << shift
    # Full-width bit pattern of each local basis state.
    scatter = [
        sum(((q >> (k - 1 - j)) & 1) << shifts[j] for j in range(k))
        for q in range(1 << k)
    ]

    amplitudes = superposition.amplitudes
    mapped = np.zeros(len(amplitudes), dtype=np.complex128)
    source = np.flatnonzero(amplitudes)
    local = _local_indices(source, shifts)
    untouched = source & ~wire_mask

    for pattern in range(1 << k):
        selected = local == pattern
        if not selected.any():
            continue
        indices = source[selected]
        amps = amplitudes[indices]

        image = gate_image(gate, ProductState.from_index(pattern, k))
        if image is None:
            mapped[indices] += amps
            continue

        base = untouched[selected]
        for term in _nonzero_terms(image):
            mapped[base | scatter[term]] += image.amplitudes[term] * amps

    return SuperPosition._wrap(mapped, n)


def apply_column(column: Sequence[Gate], superposition: SuperPosition) -> SuperPosition:
    """Apply a column of gates on disjoint wires, returning a new superposition."""
    state = superposition
    for gate in column:
        state = apply_gate(gate, state)
    if state is superposition:
        state = superposition.copy()
    return state


def run_columns(columns: Sequence[Column], register: SuperPosition, verbose: bool = False) -> SuperPosition:
    """
    Apply columns in order to a register.

    Args:
        columns: Gate columns, first applied first
        register: Initial state (not modified)
        verbose: If True, print each gate as it is applied

    Returns:
        Final superposition
    """
    number_gates = sum(len(column) for column in columns)
    if verbose:
        print("Starting circuit simulation...")

    state = register
    counter = 0
    for column in columns:
        if verbose:
            for gate in column:
                counter += 1
                print(f"Applying {gate.name} on wire {gate.target} # {counter}/{number_gates}")
        state = apply_column(column, state)

    if verbose:
        print("Finished circuit simulation.")
    return state


# Only simulate() holds this, so a SimulatedCircuit always comes from a run.
_ENGINE_TOKEN = object()


def simulate(
    columns: Sequence[Column],
    num_qubits: int,
    register: Register = None,
    verbose: bool = False,
) -> "SimulatedCircuit":
    """
    Simulate a gate schedule.

    Args:
        columns: Gate columns of the circuit
        num_qubits: Number of wires
        register: Initial state; |0…0⟩ if None. It is copied, never mutated.
        verbose: If True, print progress

    Returns:
        SimulatedCircuit holding the frozen final state
    """
    start = initial_register(register, num_qubits)
    final = run_columns(columns, start, verbose=verbose)
    return SimulatedCircuit(tuple(tuple(c) for c in columns), final, _token=_ENGINE_TOKEN)


class SimulatedCircuit:
    """
    The outcome of simulating a circuit.

    Only the simulation engine creates these, so holding one proves the
    circuit has run. The final superposition is frozen; re-running a
    circuit produces a new SimulatedCircuit instead of changing this one.
    """

    def __init__(self, columns: Tuple[Column, ...], register: SuperPosition, *, _token=None):
        if _token is not _ENGINE_TOKEN:
            raise TypeError("SimulatedCircuit is created by Circuit.simulate(), not directly.")
        self._columns = columns
        self._register = register.freeze()

    @property
    def num_qubits(self) -> int:
        return self._register.num_qubits

    @property
    def columns(self) -> Tuple[Column, ...]:
        return self._columns

    def get_circuit_gates(self) -> List[Gate]:
        return [gate for column in self._columns for gate in column]

    @property
    def has_custom_gates(self) -> bool:
        return any(gate.kind is GateKind.CUSTOM for gate in self.get_circuit_gates())

    def get_state(self) -> NonObservable[SuperPosition]:
        """The final amplitudes (read-only)."""
        return NonObservable(self._register)

    def take_state(self) -> NonObservable[SuperPosition]:
        """A writable deep copy of the final amplitudes."""
        return NonObservable(self._register.copy())

    def measure_all(self, shots: int, rng=None) -> Observable[Dict[ProductState, int]]:
        """
        Bin counts of measuring every qubit shots times.

        Every shot samples the same final state, as if the circuit were
        re-run before each measurement.
        """
        return _measure_all(self._register, shots, rng)

    def measure(self, rng=None) -> Observable[ProductState]:
        """A single shot."""
        return measure_once(self._register, rng)

    def __repr__(self) -> str:
        return f"SimulatedCircuit(num_qubits={self.num_qubits}, columns={len(self._columns)})"


def require_simulated(result) -> SimulatedCircuit:
    """Return result if it is a SimulatedCircuit, else raise NotYetSimulated."""
    if isinstance(result, SimulatedCircuit):
        return result
    raise NotYetSimulated(
        f"Expected a simulated circuit, got {type(result).__name__}. "
        f"Call Circuit.simulate() first."
    )

"""
Circuits: an append-only schedule of gate columns.

Each column holds gates acting on disjoint wires. Gates are added in
batches; every batch starts at least one new column, and gates are never
removed or changed once placed.

Batch layout, including a deliberate reshaping of what was asked for:

- All single-wire gates of a batch share one column.
- In a batch of more than one gate, every multi-wire gate (any gate with
  controls, SWAP and multi-wire custom gates included) is moved into a
  fresh column of its own, after the single-wire column and in batch
  order. Multi-wire gates therefore never share a column, and no error
  is raised when they overlap each other.
- Two single-wire gates on the same wire raise OverlappingWires, unless
  the circuit was built with isolate_overlaps=True, in which case the
  later gate moves to the next column with room.

Because singles are placed first, a batch is reordered whenever a
single-wire gate is listed after a multi-wire gate it shares a wire with.
add_gates([CNOT_gate(0, 1), H_gate(1)]) applies H before CNOT, exactly
as if H had been listed first. Add such gates with separate add_gate()
calls to keep the order they were written in.
"""

from typing import Callable, Iterable, List, Optional, Sequence, Tuple, Union

from .core import Column, Register, SimulatedCircuit, initial_register, simulate
from .errors import CircuitConsumed, InvalidQubitCount, NotYetSimulated, OverlappingWires, WireOutOfRange
from .gates import Gate, GateKind
from .states import ProductState, SuperPosition

# 2^30 complex128 amplitudes already need 16 GiB.
MAX_QUBITS = 30


class Circuit:
    """
    A quantum circuit on a fixed number of wires.

    Example:
        >>> from qwire import Circuit, H_gate, CNOT_gate
        >>> qc = Circuit(2)
        >>> qc.add_gate(H_gate(0)).add_gate(CNOT_gate(0, 1))
        >>> result = qc.simulate()
        >>> result.measure_all(1000).take()   # {|00⟩: ~500, |11⟩: ~500}
    """

    def __init__(self, num_qubits: int, isolate_overlaps: bool = False):
        """
        Args:
            num_qubits: Number of wires, from 1 to MAX_QUBITS
            isolate_overlaps: Move clashing single-wire gates of one batch
                into later columns instead of raising OverlappingWires
        """
        if num_qubits < 1:
            raise InvalidQubitCount("The initialised circuit must have at least one wire.")
        if num_qubits > MAX_QUBITS:
            raise InvalidQubitCount(
                f"{num_qubits} qubits exceeds the supported maximum of {MAX_QUBITS}; "
                f"the state vector would not fit in memory."
            )
        self._num_qubits = num_qubits
        self._columns: List[Column] = []
        self._register: Optional[SuperPosition] = None
        self._isolate_overlaps = isolate_overlaps
        self._print_progress = False
        self._consumed = False

    # -------------------------------------------------------------------------
    # Layout, read-only
    # -------------------------------------------------------------------------

    @property
    def num_qubits(self) -> int:
        return self._num_qubits

    @property
    def columns(self) -> Tuple[Column, ...]:
        self._ensure_usable()
        return tuple(self._columns)

    @property
    def num_columns(self) -> int:
        return len(self.columns)

    def get_gates(self) -> List[Gate]:
        """All placed gates, column by column."""
        return [gate for column in self.columns for gate in column]

    @property
    def has_custom_gates(self) -> bool:
        return any(gate.kind is GateKind.CUSTOM for gate in self.get_gates())

    @property
    def is_consumed(self) -> bool:
        return self._consumed

    def _ensure_usable(self):
        if self._consumed:
            raise CircuitConsumed(
                "This circuit was passed to simulate(). Use clone_and_simulate() to "
                "keep a circuit usable after simulation."
            )

    # -------------------------------------------------------------------------
    # Building
    # -------------------------------------------------------------------------

    def _check_wires(self, gate: Gate):
        for wire in gate.wires:
            if wire >= self._num_qubits:
                raise WireOutOfRange(
                    f"The gate {gate!r} uses wire {wire}, which is out of bounds for "
                    f"the circuit with {self._num_qubits} qubits."
                )

    def _layout(self, gates: Sequence[Gate]) -> List[Column]:
        if len(gates) == 1:
            return [tuple(gates)]

        single_columns: List[List[Gate]] = []
        occupied: List[set] = []
        for gate in gates:
            if not gate.is_single:
                continue
            for column, wires in zip(single_columns, occupied):
                if gate.target not in wires:
                    column.append(gate)
                    wires.add(gate.target)
                    break
                if not self._isolate_overlaps:
                    raise OverlappingWires(
                        f"Attempted to add more than one gate onto wire {gate.target} "
                        f"in a single column."
                    )
            else:
                single_columns.append([gate])
                occupied.append({gate.target})

        multi_columns = [(gate,) for gate in gates if not gate.is_single]
        return [tuple(column) for column in single_columns] + multi_columns

    def add_gates(self, gates: Iterable[Gate]) -> "Circuit":
        """
        Add a batch of gates meant to act at the same time.

        See the module docstring for how a batch is split into columns.

        Raises:
            WireOutOfRange: If a gate uses a wire >= num_qubits
            OverlappingWires: If two single-wire gates share a wire and
                isolate_overlaps is off
        """
        self._ensure_usable()
        gates = list(gates)
        if not gates:
            return self
        for gate in gates:
            self._check_wires(gate)
        self._columns.extend(self._layout(gates))
        return self

    def add_gate(self, gate: Gate) -> "Circuit":
        """Add a single gate in a new column."""
        return self.add_gates([gate])

    def add_repeating_gate(self, factory: Callable[[int], Gate], wires: Sequence[int]) -> "Circuit":
        """
        Add the same single-wire gate to several wires in one column.

        Args:
            factory: Gate factory taking a wire, e.g. H_gate
            wires: Wires to place a gate on; must all differ

        Example:
            >>> qc.add_repeating_gate(H_gate, [0, 1, 2])
        """
        if len(set(wires)) != len(wires):
            raise OverlappingWires(
                f"Attempted to add more than one gate onto a single wire. "
                f"The positions in {list(wires)} must all differ."
            )
        return self.add_gates([factory(wire) for wire in wires])

    def change_register(self, register: Union[ProductState, SuperPosition]) -> "Circuit":
        """
        Replace the default |0…0⟩ starting state.

        Raises:
            DimensionMismatch: If the register width differs from num_qubits
        """
        self._ensure_usable()
        self._register = initial_register(register, self._num_qubits)
        return self

    def set_print_progress(self, print_progress: bool) -> "Circuit":
        """Print each gate as it is applied during simulation."""
        self._print_progress = print_progress
        return self

    # -------------------------------------------------------------------------
    # Simulation
    # -------------------------------------------------------------------------

    def _starting_register(self, register: Register) -> Register:
        if register is not None:
            return register
        return self._register

    def simulate(self, register: Register = None) -> SimulatedCircuit:
        """
        Simulate the circuit, consuming it.

        Args:
            register: Starting state for this run; overrides any register
                set with change_register(), |0…0⟩ if neither is given

        Returns:
            SimulatedCircuit with the final state. The circuit itself raises
            CircuitConsumed if used again.
        """
        self._ensure_usable()
        start = self._starting_register(register)
        result = simulate(self._columns, self._num_qubits, start, verbose=self._print_progress)
        self._consumed = True
        self._columns = []
        self._register = None
        return result

    def clone_and_simulate(self, register: Register = None) -> SimulatedCircuit:
        """Simulate without consuming the circuit, so it can be extended and re-run."""
        self._ensure_usable()
        start = self._starting_register(register)
        return simulate(list(self._columns), self._num_qubits, start, verbose=self._print_progress)

    def get_state(self):
        raise NotYetSimulated(
            "The circuit has not been simulated. Call Circuit.simulate() and use "
            "SimulatedCircuit.get_state() instead."
        )

    def measure_all(self, shots: int, rng=None):
        raise NotYetSimulated(
            "The circuit has not been simulated. Call Circuit.simulate() and use "
            "SimulatedCircuit.measure_all() instead."
        )

    def __repr__(self) -> str:
        if self._consumed:
            return f"Circuit(num_qubits={self._num_qubits}, consumed)"
        return f"Circuit(num_qubits={self._num_qubits}, columns={len(self._columns)})"

"""
Grover's search algorithm implementation.

Grover's algorithm provides quadratic speedup for unstructured search problems.
Given M marked items among N = 2^n, it amplifies the marked items so that a
measurement finds one in O(√(N/M)) oracle calls instead of O(N).

Bit ordering convention:
    wires list is MSB-first: wires[0] is the most significant bit, the same
    ordering ProductState uses. Marked items may be given as integers, bit
    strings such as "011", or ProductStates.
"""

import numpy as np
from typing import Dict, Iterable, Optional, Sequence, Set, Union

from .circuit import Circuit
from .errors import DimensionMismatch, IndexOutOfBounds
from .gates import CNOT_gate, Custom_gate, Gate, H_gate, TOFF_gate, X_gate
from .states import ProductState, SuperPosition

Marked = Union[int, str, ProductState]


def _as_index(item: Marked, n: int) -> int:
    if isinstance(item, str):
        item = ProductState.from_string(item)
    if isinstance(item, ProductState):
        if item.num_qubits != n:
            raise DimensionMismatch(f"Marked state {item!r} does not have {n} qubits")
        return item.to_index()
    if not (0 <= item < 2 ** n):
        raise IndexOutOfBounds(f"Marked item must be in [0, {2**n - 1}], got {item}")
    return int(item)


def marked_indices(marked: Iterable[Marked], n: int) -> Set[int]:
    """Distinct basis indices named by the marked items."""
    return {_as_index(item, n) for item in marked}


def multi_controlled_x(controls: Sequence[int], target: int) -> Gate:
    """
    X on target when every control is |1⟩.

    Uses CNOT or TOFF where they exist, and a custom gate for three or
    more controls.
    """
    if len(controls) == 1:
        return CNOT_gate(controls[0], target)
    if len(controls) == 2:
        return TOFF_gate(controls[0], controls[1], target)

    def flip_if_all_ones(state: ProductState) -> Optional[ProductState]:
        if all(state.digits[:-1]):
            return state.copy().invert_digit(state.num_qubits - 1)
        return None

    return Custom_gate(flip_if_all_ones, target, controls, label="X")


def phase_oracle(circuit: Circuit, wires: Sequence[int], marked: Iterable[Marked]) -> Circuit:
    """
    Flip the phase of the marked basis states of the given wires.

    The oracle is a single custom gate on all the wires.

    Args:
        circuit: Circuit to extend
        wires: Search register, MSB first
        marked: Items to mark

    Returns:
        The circuit, for chaining
    """
    n = len(wires)
    targets = marked_indices(marked, n)

    def flip_marked(state: ProductState) -> Optional[SuperPosition]:
        if state.to_index() not in targets:
            return None
        flipped = state.to_superposition()
        flipped.amplitudes[state.to_index()] = -1
        return flipped

    *controls, target = wires
    return circuit.add_gate(Custom_gate(flip_marked, target, controls, label="Oracle"))


def zero_phase_oracle(circuit: Circuit, wires: Sequence[int]) -> Circuit:
    """
    Phase oracle that marks the all-zeros state.

    Applies a phase flip (-1) to the |00...0⟩ state only.
    This is used as part of the diffusion operator.
    """
    # Flip phase of |0...0⟩: X all wires, then multi-controlled Z, then X all
    circuit.add_repeating_gate(X_gate, wires)

    # Multi-controlled Z = H on last, multi-controlled X, H on last
    circuit.add_gate(H_gate(wires[-1]))
    if len(wires) == 1:
        circuit.add_gate(X_gate(wires[-1]))
    else:
        circuit.add_gate(multi_controlled_x(wires[:-1], wires[-1]))
    circuit.add_gate(H_gate(wires[-1]))

    return circuit.add_repeating_gate(X_gate, wires)


def diffusion_operator(circuit: Circuit, wires: Sequence[int]) -> Circuit:
    """
    Grover diffusion operator (inversion about average).

    D = 2|ψ⟩⟨ψ| - I where |ψ⟩ is the uniform superposition.
    This can be implemented as: H⊗n · (2|0⟩⟨0| - I) · H⊗n, up to a global
    phase of -1.
    """
    circuit.add_repeating_gate(H_gate, wires)
    zero_phase_oracle(circuit, wires)
    return circuit.add_repeating_gate(H_gate, wires)


def optimal_iterations(num_qubits: int, num_marked: int) -> int:
    """⌊π/4 · √(N/M)⌋ rounds, at least one."""
    return max(1, int(np.pi / 4 * np.sqrt(2 ** num_qubits / num_marked)))


def grover_circuit(num_qubits: int, marked: Iterable[Marked],
                   num_iterations: Optional[int] = None) -> Circuit:
    """
    Build a Grover search circuit on wires 0..num_qubits-1.

    Args:
        num_qubits: Number of qubits (searches 2^n items). Must be >= 1.
        marked: Items the oracle marks
        num_iterations: Oracle + diffusion rounds (default: optimal)

    Returns:
        The unsimulated circuit

    Raises:
        ValueError: If n < 1 or nothing is marked
    """
    if num_qubits < 1:
        raise ValueError(f"n must be >= 1, got {num_qubits}")
    targets = marked_indices(marked, num_qubits)
    if not targets:
        raise ValueError("At least one item must be marked")

    if num_iterations is None:
        num_iterations = optimal_iterations(num_qubits, len(targets))

    wires = list(range(num_qubits))
    circuit = Circuit(num_qubits)
    circuit.add_repeating_gate(H_gate, wires)
    for _ in range(num_iterations):
        phase_oracle(circuit, wires, targets)
        diffusion_operator(circuit, wires)
    return circuit


def grover_search(
    num_qubits: int,
    marked: Iterable[Marked],
    shots: int = 1000,
    num_iterations: Optional[int] = None,
    rng=None,
    verbose: bool = True,
) -> Dict[ProductState, int]:
    """
    Run Grover's search algorithm and sample the result.

    Args:
        num_qubits: Number of qubits (searches 2^n items). Must be >= 1.
        marked: Items the oracle marks
        shots: Number of measurements
        num_iterations: Number of Grover iterations (default: optimal ~π√(N/M)/4)
        rng: numpy Generator used for sampling
        verbose: If True, print progress

    Returns:
        Bin counts of the measured states
    """
    targets = marked_indices(marked, num_qubits)
    circuit = grover_circuit(num_qubits, targets, num_iterations)

    if verbose:
        print(f"Grover search on {num_qubits} qubits ({2 ** num_qubits} items), "
              f"{len(targets)} marked")
        print(f"Circuit has {circuit.num_columns} columns")

    result = circuit.simulate()
    bin_count = result.measure_all(shots, rng).take()

    if verbose and bin_count:
        best = max(bin_count, key=bin_count.get)
        print(f"Most frequent outcome: {best!r} ({bin_count[best]}/{shots})")

    return bin_count

"""
Quantum Fourier Transform (QFT) implementation.

The QFT is the quantum analog of the discrete Fourier transform and is a key
component of many quantum algorithms including Shor's factoring algorithm
and quantum phase estimation.

The builders here append gates to a Circuit. Wires are listed from most
significant to least significant bit, matching the circuit's own ordering.
"""

import numpy as np
from typing import Optional, Sequence

from .circuit import Circuit
from .gates import CR_gate, CRk_gate, Custom_gate, Gate, H_gate, SWAP_gate
from .states import ProductState, SuperPosition


def _fourier_rotations(circuit: Circuit, wires: Sequence[int], verbose: bool = False):
    n = len(wires)
    for i in range(n):
        circuit.add_gate(H_gate(wires[i]))

        if verbose:
            print(f"After H on wire {wires[i]}")

        # Rotation angle: π/2^(j-i) = 2π/2^k with k = j-i+1
        for j in range(i + 1, n):
            circuit.add_gate(CRk_gate(wires[j], wires[i], j - i + 1))

            if verbose:
                print(f"After CRk({j - i + 1}) controlled by wire {wires[j]} on wire {wires[i]}")


def QFT(circuit: Circuit, wires: Sequence[int], swap: bool = True, verbose: bool = False) -> Circuit:
    """
    Append the Quantum Fourier Transform on a list of wires.

    The QFT transforms the computational basis states as:
    |j⟩ → (1/√N) Σₖ exp(2πijk/N) |k⟩

    Args:
        circuit: Circuit to extend
        wires: Wires ordered from most significant to least significant bit
        swap: If False, skip the final wire reversal (the output is then
              bit-reversed)
        verbose: If True, print each step

    Returns:
        The circuit, for chaining
    """
    n = len(wires)

    if verbose:
        print(f"QFT on {n} wires: {list(wires)}")

    _fourier_rotations(circuit, wires, verbose)

    if swap:
        for i in range(n // 2):
            circuit.add_gate(SWAP_gate(wires[i], wires[n - 1 - i]))
            if verbose:
                print(f"After SWAP({wires[i]}, {wires[n - 1 - i]})")

    if verbose:
        print("QFT complete")

    return circuit


def QFT_inverse(circuit: Circuit, wires: Sequence[int], verbose: bool = False) -> Circuit:
    """
    Append the inverse Quantum Fourier Transform.

    The inverse QFT is the adjoint of QFT, obtained by reversing the gate
    order and negating the phase angles.

    Args:
        circuit: Circuit to extend
        wires: Wires ordered MSB to LSB
        verbose: If True, print each step

    Returns:
        The circuit, for chaining
    """
    n = len(wires)

    if verbose:
        print(f"Inverse QFT on {n} wires: {list(wires)}")

    # First, swap wires to reverse order (same as forward QFT)
    for i in range(n // 2):
        circuit.add_gate(SWAP_gate(wires[i], wires[n - 1 - i]))

    # Apply gates in reverse order with negated phases
    for i in range(n - 1, -1, -1):
        for j in range(n - 1, i, -1):
            theta = -np.pi / (2 ** (j - i))
            circuit.add_gate(CR_gate(wires[j], wires[i], theta))

        # H is its own inverse
        circuit.add_gate(H_gate(wires[i]))

    if verbose:
        print("Inverse QFT complete")

    return circuit


def _qft_mapping(state: ProductState) -> Optional[SuperPosition]:
    # Simulates the unswapped QFT of a single local basis state.
    mini_circuit = Circuit(state.num_qubits)
    _fourier_rotations(mini_circuit, list(range(state.num_qubits)))
    return mini_circuit.simulate(register=state).take_state().take()


def qft_gate(target: int, controls: Sequence[int] = (), label: str = "QFT") -> Gate:
    """
    The QFT (without the final swaps) as a single custom gate.

    The gate acts on controls..., target, with the first wire most
    significant. It shows how a custom mapping can itself be defined by
    simulating a smaller circuit on each basis state.
    """
    return Custom_gate(_qft_mapping, target, controls, label)

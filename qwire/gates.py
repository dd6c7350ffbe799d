"""
Quantum gate definitions.

Gates are not stored as matrices. Each standard gate is a pure mapping
from one basis state of its own wires to the superposition it produces,
so applying a k-wire gate costs one lookup per basis state instead of a
2^k × 2^k matrix. A mapping returns None when the basis state passes
through unchanged.

The local basis state handed to a mapping lists the gate's wires in the
order controls..., target. For the two-qubit gates below that means
|control, target⟩; for SWAP it is |wire_a, wire_b⟩.

Gate instances are plain data (kind, operand wires, optional parameter)
created by the *_gate factories, e.g. H_gate(0) or CNOT_gate(0, 1).
"""

import enum
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Sequence, Tuple, Union

import numpy as np

from .errors import DimensionMismatch, OverlappingWires, WireOutOfRange
from .states import ProductState, SuperPosition
from .utils import expi

CustomFunction = Callable[[ProductState], Optional[Union[SuperPosition, ProductState]]]

_SQRT_HALF = np.sqrt(1 / 2)


class GateKind(enum.Enum):
    ID = "Id"
    H = "H"
    X = "X"
    Y = "Y"
    Z = "Z"
    S = "S"
    SDAG = "S*"
    T = "T"
    TDAG = "T*"
    RX = "Rx"
    RY = "Ry"
    RZ = "Rz"
    X90 = "X90"
    Y90 = "Y90"
    MX90 = "X-90"
    MY90 = "Y-90"
    PHASE = "P"
    CR = "CR"
    CRK = "CRk"
    CZ = "CZ"
    CY = "CY"
    CNOT = "CNOT"
    SWAP = "SWAP"
    TOFFOLI = "TOFF"
    CUSTOM = "Custom"


@dataclass(frozen=True)
class Gate:
    """
    One gate placed on specific wires.

    Attributes:
        kind: Which mapping to apply
        target: Wire the gate acts on (the last operand)
        controls: Remaining operand wires, in the order the mapping sees them
        parameter: Rotation angle, or k for CRk
        function: User mapping for custom gates
        label: Display label for custom gates
    """

    kind: GateKind
    target: int
    controls: Tuple[int, ...] = ()
    parameter: Optional[float] = None
    function: Optional[CustomFunction] = None
    label: Optional[str] = None

    @property
    def wires(self) -> Tuple[int, ...]:
        """Operand wires, controls first and target last."""
        return self.controls + (self.target,)

    @property
    def is_single(self) -> bool:
        return not self.controls

    @property
    def name(self) -> str:
        if self.kind is GateKind.CUSTOM:
            return self.label or GateKind.CUSTOM.value
        if self.parameter is not None:
            return f"{self.kind.value}({self.parameter:g})"
        return self.kind.value

    def __repr__(self) -> str:
        if self.controls:
            return f"{self.name} on wire {self.target} (controls {list(self.controls)})"
        return f"{self.name} on wire {self.target}"


# =============================================================================
# Helpers for writing mappings
# =============================================================================

def _single(zero, one) -> SuperPosition:
    return SuperPosition._wrap(np.array([zero, one], dtype=np.complex128), 1)


def _basis(digits: Sequence[int], amplitude: complex = 1.0) -> SuperPosition:
    """Superposition holding a single basis state with the given amplitude."""
    state = ProductState(digits)
    amplitudes = np.zeros(1 << state.num_qubits, dtype=np.complex128)
    amplitudes[state.to_index()] = amplitude
    return SuperPosition._wrap(amplitudes, state.num_qubits)


# =============================================================================
# Single-qubit gates
# =============================================================================

def identity(state: ProductState) -> Optional[SuperPosition]:
    return None


def hadamard(state: ProductState) -> Optional[SuperPosition]:
    # [[1,  1],
    #  [1, -1]] / √2
    if state[0] == 0:
        return _single(_SQRT_HALF, _SQRT_HALF)
    return _single(_SQRT_HALF, -_SQRT_HALF)


def pauli_x(state: ProductState) -> Optional[SuperPosition]:
    # [[0, 1],
    #  [1, 0]]
    return _basis([1 - state[0]])


def pauli_y(state: ProductState) -> Optional[SuperPosition]:
    # [[ 0, -i],
    #  [ i,  0]]
    if state[0] == 0:
        return _single(0, 1j)
    return _single(-1j, 0)


def pauli_z(state: ProductState) -> Optional[SuperPosition]:
    # diag(1, -1)
    if state[0] == 0:
        return None
    return _single(0, -1)


def phase_s(state: ProductState) -> Optional[SuperPosition]:
    # diag(1, i)
    return None if state[0] == 0 else _single(0, 1j)


def phase_s_dagger(state: ProductState) -> Optional[SuperPosition]:
    # diag(1, -i)
    return None if state[0] == 0 else _single(0, -1j)


def t_gate(state: ProductState) -> Optional[SuperPosition]:
    # diag(1, e^{iπ/4})
    return None if state[0] == 0 else _single(0, expi(np.pi / 4))


def t_gate_dagger(state: ProductState) -> Optional[SuperPosition]:
    # diag(1, e^{-iπ/4})
    return None if state[0] == 0 else _single(0, expi(-np.pi / 4))


def rx(state: ProductState, theta: float) -> Optional[SuperPosition]:
    # [[ cos(θ/2), -i sin(θ/2)],
    #  [-i sin(θ/2), cos(θ/2)]]
    c, s = np.cos(theta / 2), np.sin(theta / 2)
    if state[0] == 0:
        return _single(c, -1j * s)
    return _single(-1j * s, c)


def ry(state: ProductState, theta: float) -> Optional[SuperPosition]:
    # [[cos(θ/2), -sin(θ/2)],
    #  [sin(θ/2),  cos(θ/2)]]
    c, s = np.cos(theta / 2), np.sin(theta / 2)
    if state[0] == 0:
        return _single(c, s)
    return _single(-s, c)


def rz(state: ProductState, theta: float) -> Optional[SuperPosition]:
    # diag(e^{-iθ/2}, e^{iθ/2})
    if state[0] == 0:
        return _single(expi(-theta / 2), 0)
    return _single(0, expi(theta / 2))


def global_phase(state: ProductState, theta: float) -> Optional[SuperPosition]:
    # e^{iθ/2} · I
    if state[0] == 0:
        return _single(expi(theta / 2), 0)
    return _single(0, expi(theta / 2))


def x90(state: ProductState) -> Optional[SuperPosition]:
    return rx(state, np.pi / 2)


def y90(state: ProductState) -> Optional[SuperPosition]:
    return ry(state, np.pi / 2)


def mx90(state: ProductState) -> Optional[SuperPosition]:
    return rx(state, -np.pi / 2)


def my90(state: ProductState) -> Optional[SuperPosition]:
    return ry(state, -np.pi / 2)


# =============================================================================
# Two-qubit gates, local state |control, target⟩
# =============================================================================

def cnot(state: ProductState) -> Optional[SuperPosition]:
    control, target = state.digits
    if control == 0:
        return None
    return _basis([1, 1 - target])


def cy(state: ProductState) -> Optional[SuperPosition]:
    control, target = state.digits
    if control == 0:
        return None
    if target == 0:
        return _basis([1, 1], 1j)
    return _basis([1, 0], -1j)


def cz(state: ProductState) -> Optional[SuperPosition]:
    control, target = state.digits
    if control == 1 and target == 1:
        return _basis([1, 1], -1)
    return None


def swap(state: ProductState) -> Optional[SuperPosition]:
    a, b = state.digits
    if a == b:
        return None
    return _basis([b, a])


def cr(state: ProductState, theta: float) -> Optional[SuperPosition]:
    # diag(1, 1, 1, e^{iθ})
    control, target = state.digits
    if control == 1 and target == 1:
        return _basis([1, 1], expi(theta))
    return None


def crk(state: ProductState, k: int) -> Optional[SuperPosition]:
    # CR(2π / 2^k), the rotations of the quantum Fourier transform
    return cr(state, 2 * np.pi / 2 ** k)


# =============================================================================
# Three-qubit gates, local state |control_a, control_b, target⟩
# =============================================================================

def toffoli(state: ProductState) -> Optional[SuperPosition]:
    control_a, control_b, target = state.digits
    if control_a == 1 and control_b == 1:
        return _basis([1, 1, 1 - target])
    return None


GATE_ACTIONS: Dict[GateKind, Callable] = {
    GateKind.ID: identity,
    GateKind.H: hadamard,
    GateKind.X: pauli_x,
    GateKind.Y: pauli_y,
    GateKind.Z: pauli_z,
    GateKind.S: phase_s,
    GateKind.SDAG: phase_s_dagger,
    GateKind.T: t_gate,
    GateKind.TDAG: t_gate_dagger,
    GateKind.RX: rx,
    GateKind.RY: ry,
    GateKind.RZ: rz,
    GateKind.X90: x90,
    GateKind.Y90: y90,
    GateKind.MX90: mx90,
    GateKind.MY90: my90,
    GateKind.PHASE: global_phase,
    GateKind.CR: cr,
    GateKind.CRK: crk,
    GateKind.CZ: cz,
    GateKind.CY: cy,
    GateKind.CNOT: cnot,
    GateKind.SWAP: swap,
    GateKind.TOFFOLI: toffoli,
}

PARAMETERISED = frozenset({GateKind.RX, GateKind.RY, GateKind.RZ, GateKind.PHASE, GateKind.CR, GateKind.CRK})


def gate_image(gate: Gate, state: ProductState) -> Optional[SuperPosition]:
    """
    Evaluate a gate on one basis state of its own wires.

    Args:
        gate: The gate to evaluate
        state: Local basis state, one digit per operand wire

    Returns:
        The image superposition, or None if the state is unchanged

    Raises:
        DimensionMismatch: If a custom mapping returns the wrong width
    """
    if gate.kind is GateKind.CUSTOM:
        image = gate.function(state)
        if isinstance(image, ProductState):
            image = image.to_superposition()
    elif gate.kind in PARAMETERISED:
        image = GATE_ACTIONS[gate.kind](state, gate.parameter)
    else:
        image = GATE_ACTIONS[gate.kind](state)

    if image is not None and image.num_qubits != state.num_qubits:
        raise DimensionMismatch(
            f"The gate {gate!r} mapped a {state.num_qubits}-qubit state onto a "
            f"{image.num_qubits}-qubit superposition."
        )
    return image


# =============================================================================
# Factories
# =============================================================================

def _operands(*wires: int) -> Tuple[int, ...]:
    for wire in wires:
        if int(wire) != wire or wire < 0:
            raise WireOutOfRange(f"Wire indices must be non-negative integers, got {wire!r}")
    wires = tuple(int(w) for w in wires)
    if len(set(wires)) != len(wires):
        raise OverlappingWires(f"The operand wires {list(wires)} of a gate must all differ.")
    return wires


def _single_gate(kind: GateKind, target: int, parameter: Optional[float] = None) -> Gate:
    (target,) = _operands(target)
    return Gate(kind, target, parameter=parameter)


def _controlled_gate(kind: GateKind, controls: Sequence[int], target: int,
                     parameter: Optional[float] = None) -> Gate:
    *controls, target = _operands(*controls, target)
    return Gate(kind, target, tuple(controls), parameter=parameter)


def I_gate(target: int) -> Gate:
    """Identity."""
    return _single_gate(GateKind.ID, target)


def H_gate(target: int) -> Gate:
    """Hadamard."""
    return _single_gate(GateKind.H, target)


def X_gate(target: int) -> Gate:
    """Pauli X (NOT)."""
    return _single_gate(GateKind.X, target)


def Y_gate(target: int) -> Gate:
    """Pauli Y."""
    return _single_gate(GateKind.Y, target)


def Z_gate(target: int) -> Gate:
    """Pauli Z."""
    return _single_gate(GateKind.Z, target)


def S_gate(target: int) -> Gate:
    """Phase gate S = diag(1, i)."""
    return _single_gate(GateKind.S, target)


def Sinv_gate(target: int) -> Gate:
    """S† = diag(1, -i)."""
    return _single_gate(GateKind.SDAG, target)


def T_gate(target: int) -> Gate:
    """T = diag(1, e^{iπ/4})."""
    return _single_gate(GateKind.T, target)


def Tinv_gate(target: int) -> Gate:
    """T† = diag(1, e^{-iπ/4})."""
    return _single_gate(GateKind.TDAG, target)


def Rx_gate(target: int, theta: float) -> Gate:
    """X rotation gate Rx(θ)"""
    return _single_gate(GateKind.RX, target, float(theta))


def Ry_gate(target: int, theta: float) -> Gate:
    """Y rotation gate Ry(θ)"""
    return _single_gate(GateKind.RY, target, float(theta))


def Rz_gate(target: int, theta: float) -> Gate:
    """Z rotation gate Rz(θ)"""
    return _single_gate(GateKind.RZ, target, float(theta))


def X90_gate(target: int) -> Gate:
    return _single_gate(GateKind.X90, target)


def Y90_gate(target: int) -> Gate:
    return _single_gate(GateKind.Y90, target)


def MX90_gate(target: int) -> Gate:
    return _single_gate(GateKind.MX90, target)


def MY90_gate(target: int) -> Gate:
    return _single_gate(GateKind.MY90, target)


def Phase_gate(target: int, theta: float) -> Gate:
    """Global phase e^{iθ/2} · I."""
    return _single_gate(GateKind.PHASE, target, float(theta))


def CNOT_gate(control: int, target: int) -> Gate:
    """Controlled NOT gate (XOR)"""
    return _controlled_gate(GateKind.CNOT, [control], target)


def CY_gate(control: int, target: int) -> Gate:
    return _controlled_gate(GateKind.CY, [control], target)


def CZ_gate(control: int, target: int) -> Gate:
    return _controlled_gate(GateKind.CZ, [control], target)


def CR_gate(control: int, target: int, theta: float) -> Gate:
    """Controlled phase gate CR(θ) = diag(1, 1, 1, e^{iθ})"""
    return _controlled_gate(GateKind.CR, [control], target, float(theta))


def CRk_gate(control: int, target: int, k: int) -> Gate:
    """Controlled phase CR(2π/2^k), as used by the QFT."""
    return _controlled_gate(GateKind.CRK, [control], target, int(k))


def SWAP_gate(wire_a: int, wire_b: int) -> Gate:
    """Swap gate"""
    return _controlled_gate(GateKind.SWAP, [wire_a], wire_b)


def TOFF_gate(control_a: int, control_b: int, target: int) -> Gate:
    """Toffoli gate (CCNOT)"""
    return _controlled_gate(GateKind.TOFFOLI, [control_a, control_b], target)


def Custom_gate(function: CustomFunction, target: int, controls: Sequence[int] = (),
                label: str = "U") -> Gate:
    """
    Wrap a user mapping as a gate.

    The mapping receives a ProductState with one digit per operand wire,
    ordered controls..., target, and returns a SuperPosition (or a single
    ProductState) over the same wires, or None to leave the state as is.

    The mapping is trusted: it is never checked for linearity or
    unitarity, which is what allows non-unitary channels such as
    post-selection. A mapping that is not unitary yields a final state
    that no longer conserves probability.

    Image terms whose real and imaginary parts are both below ZERO_MARGIN
    (1e-7) are dropped when the gate is applied, so a mapping that scales
    a state by less than that leaves zero amplitude behind.

    Args:
        function: Mapping from local basis states to their images
        target: Wire the gate is drawn on, the last operand
        controls: Other operand wires, in the order the mapping sees them
        label: Name shown when the circuit is displayed
    """
    *controls, target = _operands(*controls, target)
    return Gate(GateKind.CUSTOM, target, tuple(controls), function=function, label=label)

"""
Qwire - A gate-based quantum circuit simulator in Python.

This package builds circuits as ordered columns of gates, simulates them
on a dense state vector by applying each gate's action on basis states
(no tensor-product matrices are ever formed), and samples measurement
outcomes from the result.

Modules:
    states      - ProductState (basis states) and SuperPosition (amplitude vectors)
    gates       - Gate catalogue (H, X, Y, Z, CNOT, SWAP, TOFF, custom gates, etc.)
    circuit     - Circuit, the append-only column schedule
    core        - Simulation engine and SimulatedCircuit
    measurement - Observable / NonObservable results and sampling
    qft         - Quantum Fourier Transform builders
    grover      - Grover's search algorithm
    utils       - Complex scalar helpers and state comparison
    errors      - Error types

Quick Start:
    >>> from qwire import *
    >>> qc = Circuit(2)
    >>> qc.add_repeating_gate(H_gate, [0, 1]).add_gate(CNOT_gate(0, 1))
    >>> result = qc.simulate()
    >>> result.get_state().take()
    >>> result.measure_all(1000).take()
"""

# States
from .states import (
    ProductState,
    SuperPosition,
)

# Gates
from .gates import (
    Gate,
    GateKind,
    gate_image,
    # Single-qubit gates
    I_gate,
    H_gate,
    X_gate,
    Y_gate,
    Z_gate,
    S_gate,
    Sinv_gate,
    T_gate,
    Tinv_gate,
    Rx_gate,
    Ry_gate,
    Rz_gate,
    X90_gate,
    Y90_gate,
    MX90_gate,
    MY90_gate,
    Phase_gate,
    # Two-qubit gates
    CNOT_gate,
    CY_gate,
    CZ_gate,
    CR_gate,
    CRk_gate,
    SWAP_gate,
    # Three-qubit gates
    TOFF_gate,
    # User-defined
    Custom_gate,
)

# Circuits and simulation
from .circuit import Circuit, MAX_QUBITS
from .core import (
    SimulatedCircuit,
    apply_gate,
    apply_column,
    run_columns,
    simulate,
    require_simulated,
)

# Measurement
from .measurement import (
    Observable,
    NonObservable,
    Measurement,
    measure_all,
    probability_distribution,
)

# QFT
from .qft import (
    QFT,
    QFT_inverse,
    qft_gate,
)

# Algorithms
from .grover import (
    grover_search,
    grover_circuit,
    phase_oracle,
    diffusion_operator,
    zero_phase_oracle,
    multi_controlled_x,
    marked_indices,
)

# Utilities
from .utils import (
    expi,
    abs_square,
    allclose_up_to_global_phase,
    state_fidelity,
    int_to_bits,
    bits_to_int,
)

# Errors
from .errors import (
    QwireError,
    InvalidQubitCount,
    EmptyState,
    InvalidDigit,
    WireOutOfRange,
    IndexOutOfBounds,
    OverlappingWires,
    DimensionMismatch,
    UnnormalisedState,
    NotYetSimulated,
    CircuitConsumed,
)

__version__ = "0.1.0"
__all__ = [
    # States
    "ProductState",
    "SuperPosition",
    # Gates
    "Gate",
    "GateKind",
    "gate_image",
    "I_gate",
    "H_gate",
    "X_gate",
    "Y_gate",
    "Z_gate",
    "S_gate",
    "Sinv_gate",
    "T_gate",
    "Tinv_gate",
    "Rx_gate",
    "Ry_gate",
    "Rz_gate",
    "X90_gate",
    "Y90_gate",
    "MX90_gate",
    "MY90_gate",
    "Phase_gate",
    "CNOT_gate",
    "CY_gate",
    "CZ_gate",
    "CR_gate",
    "CRk_gate",
    "SWAP_gate",
    "TOFF_gate",
    "Custom_gate",
    # Circuits and simulation
    "Circuit",
    "MAX_QUBITS",
    "SimulatedCircuit",
    "apply_gate",
    "apply_column",
    "run_columns",
    "simulate",
    "require_simulated",
    # Measurement
    "Observable",
    "NonObservable",
    "Measurement",
    "measure_all",
    "probability_distribution",
    # QFT
    "QFT",
    "QFT_inverse",
    "qft_gate",
    # Grover
    "grover_search",
    "grover_circuit",
    "phase_oracle",
    "diffusion_operator",
    "zero_phase_oracle",
    "multi_controlled_x",
    "marked_indices",
    # Utils
    "expi",
    "abs_square",
    "allclose_up_to_global_phase",
    "state_fidelity",
    "int_to_bits",
    "bits_to_int",
    # Errors
    "QwireError",
    "InvalidQubitCount",
    "EmptyState",
    "InvalidDigit",
    "WireOutOfRange",
    "IndexOutOfBounds",
    "OverlappingWires",
    "DimensionMismatch",
    "UnnormalisedState",
    "NotYetSimulated",
    "CircuitConsumed",
]

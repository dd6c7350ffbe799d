"""
Utility functions for state-vector simulation.

This module provides helper functions for:
- Complex scalar arithmetic used wherever amplitudes appear
- Quantum state comparison (accounting for global phase)
- Binary encoding of basis states
- Inverse-CDF sampling of probability vectors
"""

import numpy as np
from typing import List, Sequence

# Amplitudes whose real and imaginary parts are both below this are zero.
ZERO_MARGIN = 1e-7

# Allowed deviation of the total probability from one in checked states.
NORMALISATION_TOLERANCE = 1e-6


# =============================================================================
# Complex scalar utilities
# =============================================================================

def expi(theta: float) -> complex:
    """Return e^{iθ}."""
    return complex(np.cos(theta), np.sin(theta))


def abs_square(z):
    """Return |z|² without taking a square root; works elementwise on arrays."""
    return np.real(z) ** 2 + np.imag(z) ** 2


def is_zero(z, margin: float = ZERO_MARGIN):
    """True where both parts of z are within margin of zero."""
    return (np.abs(np.real(z)) < margin) & (np.abs(np.imag(z)) < margin)


def equal_within_error(a: float, b: float, tolerance: float = NORMALISATION_TOLERANCE) -> bool:
    """Check two floats agree to within an absolute tolerance."""
    return abs(a - b) < tolerance


# =============================================================================
# Quantum state utilities
# =============================================================================

def allclose_up_to_global_phase(v, w, atol: float = 1e-9) -> bool:
    """
    Check if two quantum states are equal up to a global phase.

    Global phase has no physical significance, so a circuit built from a
    different decomposition may legitimately differ from a reference by
    a constant factor of modulus one.

    Args:
        v: First quantum state (array-like or SuperPosition)
        w: Second quantum state (array-like or SuperPosition)
        atol: Absolute tolerance for comparison

    Returns:
        True if states are equal up to global phase
    """
    v = np.asarray(getattr(v, "amplitudes", v)).reshape(-1)
    w = np.asarray(getattr(w, "amplitudes", w)).reshape(-1)

    # Find a stable pivot amplitude in w
    idx = np.argmax(np.abs(w))
    if np.abs(w[idx]) < atol:
        return np.allclose(v, w, atol=atol)

    phase = v[idx] / w[idx]
    return np.allclose(v, phase * w, atol=atol)


def state_fidelity(v, w) -> float:
    """
    Compute the fidelity between two pure quantum states.

    Fidelity F = |⟨v|w⟩|² ranges from 0 (orthogonal) to 1 (identical).

    Args:
        v: First quantum state
        w: Second quantum state

    Returns:
        Fidelity value between 0 and 1
    """
    v = np.asarray(getattr(v, "amplitudes", v)).reshape(-1)
    w = np.asarray(getattr(w, "amplitudes", w)).reshape(-1)
    return float(np.abs(np.vdot(v, w)) ** 2)


# =============================================================================
# Binary utilities
# =============================================================================

def int_to_bits(x: int, n: int) -> List[int]:
    """
    Convert integer to list of bits (MSB first).

    Wire 0 of a register is its most significant bit, so the returned
    list can be used directly as product state digits.

    Args:
        x: Integer to convert
        n: Number of bits

    Returns:
        List of n bits, MSB first
    """
    return [(x >> (n - 1 - i)) & 1 for i in range(n)]


def bits_to_int(bits: Sequence[int]) -> int:
    """
    Convert list of bits (MSB first) to integer.

    Args:
        bits: List of bits, MSB first

    Returns:
        Integer value
    """
    result = 0
    for bit in bits:
        result = (result << 1) | int(bit)
    return result


def is_power_of_two(length: int) -> bool:
    return length > 0 and (length & (length - 1)) == 0


# =============================================================================
# Sampling
# =============================================================================

def inverse_cdf_sample(probabilities: np.ndarray, draws) -> np.ndarray:
    """
    Map uniform draws in [0, 1) onto indices of a probability vector.

    Index i is chosen when the draw falls in [cdf[i-1], cdf[i]). The
    probabilities are assumed to sum to one; draws that land beyond the
    last cumulative value through rounding are clamped to the last index
    with non-zero probability.

    Args:
        probabilities: Non-negative weights summing to one
        draws: Scalar or array of uniform samples

    Returns:
        Array of sampled indices, one per draw
    """
    cdf = np.cumsum(probabilities)
    indices = np.searchsorted(cdf, np.atleast_1d(draws), side="right")
    last = int(np.flatnonzero(probabilities)[-1])
    return np.minimum(indices, last)

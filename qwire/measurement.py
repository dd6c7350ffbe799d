"""
Measurement of simulated states.

Results are wrapped as Observable (data a physical device could return,
such as bin counts of repeated shots) or NonObservable (the theoretical
amplitudes), so calling code cannot mistake one for the other.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Generic, TypeVar, Union

import numpy as np

from .errors import UnnormalisedState
from .states import ProductState, SuperPosition
from .utils import NORMALISATION_TOLERANCE, ZERO_MARGIN, inverse_cdf_sample

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Observable(Generic[T]):
    """Data obtainable through physical measurement."""

    value: T

    def take(self) -> T:
        return self.value


@dataclass(frozen=True)
class NonObservable(Generic[T]):
    """Theoretical state data that no measurement can reveal directly."""

    value: T

    def take(self) -> T:
        return self.value


Measurement = Union[Observable[T], NonObservable[T]]


def probability_distribution(superposition: SuperPosition) -> np.ndarray:
    """
    Outcome probabilities |a_i|² of a superposition, summing to one.

    Superpositions produced by non-unitary custom gates may not be
    normalised. Those are renormalised after logging a warning; a state
    with no probability mass at all cannot be sampled.

    Raises:
        UnnormalisedState: If the total probability is (nearly) zero
    """
    probabilities = superposition.probabilities()
    total = float(probabilities.sum())
    if total <= ZERO_MARGIN:
        raise UnnormalisedState(
            f"The superposition has total probability {total}; there is nothing to measure."
        )
    if abs(total - 1.0) > NORMALISATION_TOLERANCE:
        logger.warning(
            "Total probability is %.6g rather than 1, most likely from a non-unitary "
            "custom gate. Renormalising before sampling.",
            total,
        )
        probabilities = probabilities / total
    return probabilities


def measure_all(superposition: SuperPosition, shots: int, rng=None) -> Observable[Dict[ProductState, int]]:
    """
    Repeatedly measure every qubit of a superposition.

    Each shot draws a uniform value in [0, 1) and picks the basis state
    whose cumulative probability interval contains it. The superposition
    itself is left untouched.

    Args:
        superposition: State to sample
        shots: Number of independent measurements
        rng: numpy Generator (or any object with random(size)); a fresh
             default_rng() if omitted

    Returns:
        Observable bin counts {ProductState: occurrences}, summing to shots
    """
    if shots < 0:
        raise ValueError(f"shots must be >= 0, got {shots}")

    bin_count: Dict[ProductState, int] = {}
    if shots == 0:
        return Observable(bin_count)

    rng = np.random.default_rng() if rng is None else rng
    probabilities = probability_distribution(superposition)
    outcomes = inverse_cdf_sample(probabilities, rng.random(shots))
    counts = np.bincount(outcomes, minlength=len(probabilities))

    for index in np.flatnonzero(counts):
        state = ProductState.from_index(int(index), superposition.num_qubits)
        bin_count[state] = int(counts[index])
    return Observable(bin_count)


def measure_once(superposition: SuperPosition, rng=None) -> Observable[ProductState]:
    """A single non-destructive shot."""
    return Observable(superposition.sample(rng))

"""
Product states and superpositions of qubits.

The mapping of circuit wires to a product state in the computational basis
is defined like so:

    |a⟩ ────
    |b⟩ ────   ⟺  |a,b,c,⋯⟩ ≡ |a⟩⊗|b⟩⊗|c⟩⊗⋯
    |c⟩ ────

Wire 0 is the left-most digit and the most significant bit of the linear
index, so |110⟩ sits at index 6 of a three-qubit amplitude vector.
"""

import numpy as np
from typing import Dict, Iterator, Mapping, Optional, Sequence, Tuple, Union

from .errors import (
    DimensionMismatch,
    EmptyState,
    IndexOutOfBounds,
    InvalidDigit,
    InvalidQubitCount,
    UnnormalisedState,
)
from .utils import (
    NORMALISATION_TOLERANCE,
    ZERO_MARGIN,
    abs_square,
    bits_to_int,
    equal_within_error,
    int_to_bits,
    inverse_cdf_sample,
    is_power_of_two,
)

_DIGITS = {0: 0, 1: 1, "0": 0, "1": 1, False: 0, True: 1}


def _as_digit(value) -> int:
    try:
        return _DIGITS[value]
    except (KeyError, TypeError):
        raise InvalidDigit(f"Product state digits must be 0 or 1, got {value!r}") from None


class ProductState:
    """
    A computational basis state, e.g. |011⟩.

    The number of digits is fixed at construction. The only mutation is
    invert_digit(); every other operation returns a new state.
    """

    __slots__ = ("_digits",)

    def __init__(self, digits: Sequence):
        digits = [_as_digit(d) for d in digits]
        if not digits:
            raise EmptyState("A product state needs at least one digit.")
        self._digits = digits

    @classmethod
    def from_string(cls, label: str) -> "ProductState":
        """Build a state from a label such as "011" or "|011⟩"."""
        return cls(label.strip().lstrip("|").rstrip(">⟩"))

    @classmethod
    def from_index(cls, index: int, num_qubits: int) -> "ProductState":
        """Inverse of to_index()."""
        if num_qubits < 1:
            raise InvalidQubitCount(f"num_qubits must be >= 1, got {num_qubits}")
        if not 0 <= index < (1 << num_qubits):
            raise IndexOutOfBounds(
                f"Index {index} is out of bounds for {num_qubits} qubits "
                f"(must be below {1 << num_qubits})."
            )
        return cls(int_to_bits(index, num_qubits))

    @classmethod
    def zeros(cls, num_qubits: int) -> "ProductState":
        if num_qubits < 1:
            raise EmptyState(f"num_qubits must be >= 1, got {num_qubits}")
        return cls([0] * num_qubits)

    @property
    def num_qubits(self) -> int:
        return len(self._digits)

    @property
    def digits(self) -> Tuple[int, ...]:
        return tuple(self._digits)

    def _check_wire(self, wire: int):
        if not 0 <= wire < len(self._digits):
            raise IndexOutOfBounds(
                f"The position of the binary digit, {wire}, is out of bounds. "
                f"The product dimension is {len(self._digits)}, and so the "
                f"position must be strictly less."
            )

    def get(self, wire: int) -> int:
        """Return the digit on a wire."""
        self._check_wire(wire)
        return self._digits[wire]

    def __getitem__(self, wire: int) -> int:
        return self.get(wire)

    def invert_digit(self, wire: int) -> "ProductState":
        """Flip the digit on a wire in place and return self."""
        self._check_wire(wire)
        self._digits[wire] ^= 1
        return self

    def kronecker_prod(self, other: Union["ProductState", int]) -> "ProductState":
        """
        Tensor this state with another, this state's wires first.

        Args:
            other: A ProductState or a single digit

        Returns:
            New state |self⟩⊗|other⟩
        """
        if isinstance(other, ProductState):
            return ProductState(self._digits + other._digits)
        return ProductState(self._digits + [_as_digit(other)])

    def insert_digits(self, digits: Sequence[int], wires: Sequence[int]) -> "ProductState":
        """Return a copy with the digits on the given wires replaced."""
        if len(digits) != len(wires):
            raise DimensionMismatch(
                f"Got {len(digits)} digits for {len(wires)} wires; these must be equal."
            )
        edited = list(self._digits)
        for digit, wire in zip(digits, wires):
            self._check_wire(wire)
            edited[wire] = _as_digit(digit)
        return ProductState(edited)

    def to_index(self) -> int:
        """Position of this basis state in an amplitude vector."""
        return bits_to_int(self._digits)

    def to_superposition(self) -> "SuperPosition":
        """Promote to a superposition with unit amplitude on this state."""
        amplitudes = np.zeros(1 << self.num_qubits, dtype=np.complex128)
        amplitudes[self.to_index()] = 1.0
        return SuperPosition._wrap(amplitudes, self.num_qubits)

    def copy(self) -> "ProductState":
        return ProductState(self._digits)

    def __len__(self) -> int:
        return len(self._digits)

    def __iter__(self) -> Iterator[int]:
        return iter(tuple(self._digits))

    def __eq__(self, other) -> bool:
        if not isinstance(other, ProductState):
            return NotImplemented
        return self._digits == other._digits

    def __hash__(self) -> int:
        return hash(tuple(self._digits))

    def __str__(self) -> str:
        return "".join(str(d) for d in self._digits)

    def __repr__(self) -> str:
        return f"|{self}⟩"


class SuperPosition:
    """
    A dense vector of complex amplitudes over 2**num_qubits basis states.

    Checked constructors reject vectors whose squared amplitudes do not sum
    to one. The *_unchecked constructors keep values verbatim; they exist
    for custom gates that deliberately model non-unitary channels such as
    post-selection.
    """

    __slots__ = ("_amplitudes", "_num_qubits")

    def __init__(self, num_qubits: int):
        """Create |0…0⟩ on num_qubits qubits."""
        if num_qubits < 1:
            raise InvalidQubitCount(f"num_qubits must be >= 1, got {num_qubits}")
        self._amplitudes = np.zeros(1 << num_qubits, dtype=np.complex128)
        self._amplitudes[0] = 1.0
        self._num_qubits = num_qubits

    @classmethod
    def _wrap(cls, amplitudes: np.ndarray, num_qubits: int) -> "SuperPosition":
        # Takes ownership of the buffer; callers must not keep a reference.
        sp = cls.__new__(cls)
        sp._amplitudes = amplitudes
        sp._num_qubits = num_qubits
        return sp

    # -------------------------------------------------------------------------
    # Constructors
    # -------------------------------------------------------------------------

    @staticmethod
    def _amplitude_array(amplitudes, num_qubits: Optional[int]) -> Tuple[np.ndarray, int]:
        array = np.array(amplitudes, dtype=np.complex128).reshape(-1)
        length = len(array)
        if not is_power_of_two(length):
            raise DimensionMismatch(
                f"The number of amplitudes, {length}, must be of the form 2**n."
            )
        found = length.bit_length() - 1
        if found == 0:
            raise InvalidQubitCount("A superposition needs at least one qubit (two amplitudes).")
        if num_qubits is not None and found != num_qubits:
            raise DimensionMismatch(
                f"Got {length} amplitudes, but {num_qubits} qubits need {1 << num_qubits}."
            )
        return array, found

    @staticmethod
    def _states_array(
        mapping: Mapping[ProductState, complex], num_qubits: Optional[int]
    ) -> Tuple[np.ndarray, int]:
        if not mapping:
            raise EmptyState(
                "An empty mapping was given. A superposition must have at least one state."
            )
        if num_qubits is None:
            num_qubits = next(iter(mapping)).num_qubits
        amplitudes = np.zeros(1 << num_qubits, dtype=np.complex128)
        for state, amplitude in mapping.items():
            if state.num_qubits != num_qubits:
                raise DimensionMismatch(
                    f"The state {state!r} has {state.num_qubits} qubits, "
                    f"while the superposition has {num_qubits}."
                )
            amplitudes[state.to_index()] = amplitude
        return amplitudes, num_qubits

    @staticmethod
    def _check_normalised(amplitudes: np.ndarray):
        total = float(np.sum(abs_square(amplitudes)))
        if not equal_within_error(total, 1.0, NORMALISATION_TOLERANCE):
            raise UnnormalisedState(
                f"The total sum of the absolute square of all amplitudes, {total}, "
                f"does not equal 1. That is, the superposition does not conserve probability."
            )

    @classmethod
    def from_amplitudes(cls, amplitudes, num_qubits: Optional[int] = None) -> "SuperPosition":
        """
        Build a normalised superposition from a full amplitude list.

        Args:
            amplitudes: 2**n complex amplitudes indexed by basis state
            num_qubits: Expected n (inferred from the length if omitted)

        Raises:
            DimensionMismatch: If the length is not 2**num_qubits
            UnnormalisedState: If Σ|a|² differs from 1 beyond tolerance
        """
        array, n = cls._amplitude_array(amplitudes, num_qubits)
        cls._check_normalised(array)
        return cls._wrap(array, n)

    @classmethod
    def from_amplitudes_unchecked(cls, amplitudes, num_qubits: Optional[int] = None) -> "SuperPosition":
        """Like from_amplitudes(), but keeps unnormalised values verbatim."""
        array, n = cls._amplitude_array(amplitudes, num_qubits)
        return cls._wrap(array, n)

    @classmethod
    def from_states(
        cls, mapping: Mapping[ProductState, complex], num_qubits: Optional[int] = None
    ) -> "SuperPosition":
        """
        Build a normalised superposition from a sparse state → amplitude map.

        States missing from the mapping get zero amplitude.
        """
        array, n = cls._states_array(mapping, num_qubits)
        cls._check_normalised(array)
        return cls._wrap(array, n)

    @classmethod
    def from_states_unchecked(
        cls, mapping: Mapping[ProductState, complex], num_qubits: Optional[int] = None
    ) -> "SuperPosition":
        """Like from_states(), but skips the normalisation check."""
        array, n = cls._states_array(mapping, num_qubits)
        return cls._wrap(array, n)

    # -------------------------------------------------------------------------
    # Access
    # -------------------------------------------------------------------------

    @property
    def num_qubits(self) -> int:
        return self._num_qubits

    @property
    def dimension(self) -> int:
        return len(self._amplitudes)

    @property
    def amplitudes(self) -> np.ndarray:
        """The amplitude vector itself (read-only once frozen)."""
        return self._amplitudes

    @property
    def is_frozen(self) -> bool:
        return not self._amplitudes.flags.writeable

    def freeze(self) -> "SuperPosition":
        """Make the amplitude buffer read-only and return self."""
        self._amplitudes.flags.writeable = False
        return self

    def copy(self) -> "SuperPosition":
        """Deep copy; the copy is writable even if self is frozen."""
        return SuperPosition._wrap(self._amplitudes.copy(), self._num_qubits)

    def get_amplitude(self, index: int) -> complex:
        """
        Amplitude of the basis state at a linear index.

        Any in-range index is meaningful, so a zero amplitude is returned
        rather than treated as missing.
        """
        if not 0 <= index < len(self._amplitudes):
            raise IndexOutOfBounds(
                f"Failed to retrieve amplitude. Index given was {index}, "
                f"but the superposition has {len(self._amplitudes)} amplitudes."
            )
        return complex(self._amplitudes[index])

    def get_amplitude_from_state(self, state: ProductState) -> complex:
        if state.num_qubits != self._num_qubits:
            raise DimensionMismatch(
                f"Unable to retrieve {state!r} with {state.num_qubits} qubits from a "
                f"superposition over {self._num_qubits} qubits."
            )
        return complex(self._amplitudes[state.to_index()])

    def probabilities(self) -> np.ndarray:
        return abs_square(self._amplitudes)

    def total_probability(self) -> float:
        return float(np.sum(self.probabilities()))

    def is_normalised(self, tolerance: float = NORMALISATION_TOLERANCE) -> bool:
        return equal_within_error(self.total_probability(), 1.0, tolerance)

    def __iter__(self) -> Iterator[Tuple[ProductState, complex]]:
        for index, amplitude in enumerate(self._amplitudes):
            yield ProductState.from_index(index, self._num_qubits), complex(amplitude)

    def __len__(self) -> int:
        return len(self._amplitudes)

    def to_dict(self, margin: float = ZERO_MARGIN) -> Dict[ProductState, complex]:
        """Map of every basis state whose amplitude is not (nearly) zero."""
        return {
            ProductState.from_index(int(i), self._num_qubits): complex(self._amplitudes[i])
            for i in np.flatnonzero(np.abs(self._amplitudes) >= margin)
        }

    def __repr__(self) -> str:
        terms = " + ".join(f"({amp:.4g}){state!r}" for state, amp in self.to_dict().items())
        return f"SuperPosition({terms or '0'})"

    # -------------------------------------------------------------------------
    # Measurement
    # -------------------------------------------------------------------------

    def sample(self, rng=None) -> ProductState:
        """
        Draw one basis state without disturbing the superposition.

        Args:
            rng: Source of uniform [0, 1) values with a numpy Generator-like
                 random() method; defaults to a fresh default_rng()

        Returns:
            The sampled basis state
        """
        from .measurement import probability_distribution

        rng = np.random.default_rng() if rng is None else rng
        probabilities = probability_distribution(self)
        index = int(inverse_cdf_sample(probabilities, rng.random())[0])
        return ProductState.from_index(index, self._num_qubits)

    def collapse(self, rng=None) -> ProductState:
        """
        Measure every qubit, collapsing the superposition.

        The amplitudes are overwritten in place by the sampled basis state,
        so a frozen superposition refuses with ValueError.
        """
        if self.is_frozen:
            raise ValueError("Cannot collapse a frozen superposition; copy() it first.")
        state = self.sample(rng)
        self._amplitudes[:] = 0
        self._amplitudes[state.to_index()] = 1.0
        return state

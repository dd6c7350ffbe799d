"""Tests for Grover's search algorithm."""

import numpy as np
import pytest

from qwire import (
    Circuit, ProductState, GateKind,
    H_gate, X_gate, CZ_gate, TOFF_gate,
    grover_circuit, grover_search, marked_indices, multi_controlled_x, phase_oracle,
    DimensionMismatch, IndexOutOfBounds,
)


class TestHandBuiltGrover:
    """A single Grover round written out gate by gate."""

    def build(self):
        wires = [0, 1, 2]
        qc = Circuit(3)
        qc.add_repeating_gate(H_gate, wires)
        # oracle marking |011⟩ and |111⟩
        qc.add_gate(CZ_gate(1, 2))
        # diffusion
        qc.add_repeating_gate(H_gate, wires)
        qc.add_repeating_gate(X_gate, wires)
        qc.add_gate(H_gate(2))
        qc.add_gate(TOFF_gate(0, 1, 2))
        qc.add_gate(H_gate(2))
        qc.add_repeating_gate(X_gate, wires)
        qc.add_repeating_gate(H_gate, wires)
        return qc

    def test_amplitudes(self):
        state = self.build().simulate().get_state().take()
        expected = np.zeros(8)
        expected[[3, 7]] = -1 / np.sqrt(2)
        assert np.allclose(state.amplitudes, expected)

    def test_marked_states_dominate(self):
        """More than 80% of shots land on a marked state."""
        counts = self.build().simulate().measure_all(1000, rng=np.random.default_rng(7)).take()
        hits = counts.get(ProductState("011"), 0) + counts.get(ProductState("111"), 0)
        assert hits > 800


class TestGroverSearch:
    """Tests for the Grover builders."""

    def test_two_marked_states(self):
        """The library circuit reproduces the hand-built round."""
        state = grover_circuit(3, ["011", "111"]).simulate().get_state().take()
        probabilities = state.probabilities()
        assert np.allclose(probabilities[[3, 7]], 0.5)
        assert probabilities.sum() == pytest.approx(1.0)

    def test_single_marked_three_qubits(self):
        counts = grover_search(3, [5], shots=1000, rng=np.random.default_rng(1), verbose=False)
        assert counts.get(ProductState.from_index(5, 3), 0) > 850

    def test_single_marked_four_qubits(self):
        """Three controls go through a custom multi-controlled X."""
        counts = grover_search(4, ["1001"], shots=1000, rng=np.random.default_rng(2), verbose=False)
        assert counts.get(ProductState("1001"), 0) > 900

    def test_verbose_output(self, capsys):
        grover_search(2, [3], shots=100, rng=np.random.default_rng(3))
        out = capsys.readouterr().out
        assert "Grover search on 2 qubits" in out
        assert "Most frequent outcome: |11⟩" in out

    def test_repeated_items_count_once(self):
        """Marking an item twice does not change the number of rounds."""
        single = grover_circuit(3, [5]).simulate().get_state().take()
        for marked in ([5, 5], [5, "101"], [ProductState("101"), 5, "101"]):
            repeated = grover_circuit(3, marked).simulate().get_state().take()
            assert np.allclose(repeated.amplitudes, single.amplitudes)
        assert single.probabilities()[5] == pytest.approx(0.9453, abs=1e-3)

    def test_verbose_counts_distinct_items(self, capsys):
        grover_search(2, [3, "11"], shots=10, rng=np.random.default_rng(4))
        assert "1 marked" in capsys.readouterr().out

    def test_marked_indices(self):
        assert marked_indices([5, "101", ProductState("011")], 3) == {3, 5}

    def test_invalid_arguments(self):
        with pytest.raises(ValueError):
            grover_circuit(0, [0])
        with pytest.raises(ValueError):
            grover_circuit(3, [])
        with pytest.raises(IndexOutOfBounds):
            grover_circuit(3, [8])
        with pytest.raises(DimensionMismatch):
            grover_circuit(3, ["01"])


class TestOracleParts:
    """Tests for oracle building blocks."""

    def test_multi_controlled_x_kinds(self):
        assert multi_controlled_x([0], 1).kind is GateKind.CNOT
        assert multi_controlled_x([0, 1], 2).kind is GateKind.TOFFOLI
        assert multi_controlled_x([0, 1, 2], 3).kind is GateKind.CUSTOM

    @pytest.mark.parametrize("index", range(16))
    def test_multi_controlled_x_truth_table(self, index):
        register = ProductState.from_index(index, 4)
        expected = register.copy()
        if all(register.digits[:3]):
            expected.invert_digit(3)

        qc = Circuit(4).add_gate(multi_controlled_x([0, 1, 2], 3))
        state = qc.simulate(register=register).get_state().take()
        assert np.allclose(state.amplitudes, np.eye(16)[expected.to_index()])

    def test_phase_oracle(self):
        """Only the marked amplitude changes sign."""
        qc = Circuit(2).add_repeating_gate(H_gate, [0, 1])
        phase_oracle(qc, [0, 1], ["10"])
        state = qc.simulate().get_state().take()
        assert np.allclose(state.amplitudes, np.array([1, 1, -1, 1]) / 2)

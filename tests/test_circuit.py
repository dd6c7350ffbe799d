"""Tests for circuit construction and column layout."""

import numpy as np
import pytest

from qwire import (
    Circuit, MAX_QUBITS, ProductState, SimulatedCircuit, SuperPosition,
    H_gate, X_gate, Y_gate, Z_gate, CNOT_gate, SWAP_gate, TOFF_gate, Custom_gate,
    require_simulated,
    CircuitConsumed, DimensionMismatch, InvalidQubitCount, NotYetSimulated,
    OverlappingWires, WireOutOfRange,
)


def kinds(circuit):
    """Column layout as lists of (gate name, wires)."""
    return [[(gate.name, gate.wires) for gate in column] for column in circuit.columns]


class TestCircuitSize:
    """Tests for the number of wires."""

    def test_needs_a_wire(self):
        with pytest.raises(InvalidQubitCount):
            Circuit(0)

    def test_maximum_width(self):
        """Widths past MAX_QUBITS are refused before any allocation."""
        with pytest.raises(InvalidQubitCount):
            Circuit(MAX_QUBITS + 1)
        assert Circuit(MAX_QUBITS).num_qubits == MAX_QUBITS

    def test_gate_outside_circuit(self):
        """A gate on wire 2 of a two-wire circuit raises WireOutOfRange."""
        qc = Circuit(2)
        with pytest.raises(WireOutOfRange):
            qc.add_gate(H_gate(2))
        with pytest.raises(WireOutOfRange):
            qc.add_gate(CNOT_gate(0, 2))
        assert qc.num_columns == 0

    def test_failed_batch_adds_nothing(self):
        """A batch is validated before any of it is placed."""
        qc = Circuit(2)
        with pytest.raises(WireOutOfRange):
            qc.add_gates([H_gate(0), X_gate(5)])
        assert qc.num_columns == 0


class TestColumnLayout:
    """Tests for how batches are split into columns."""

    def test_single_gates_share_a_column(self):
        qc = Circuit(3).add_gates([H_gate(0), X_gate(1), Z_gate(2)])
        assert kinds(qc) == [[("H", (0,)), ("X", (1,)), ("Z", (2,))]]

    def test_every_add_starts_a_column(self):
        """Separate adds never merge, even on disjoint wires."""
        qc = Circuit(2).add_gate(H_gate(0)).add_gate(H_gate(1))
        assert qc.num_columns == 2

    def test_lone_multi_gate_keeps_its_column(self):
        qc = Circuit(3).add_gates([TOFF_gate(0, 1, 2)])
        assert kinds(qc) == [[("TOFF", (0, 1, 2))]]

    def test_multi_gates_are_isolated(self):
        """Multi-wire gates follow the single-wire column in batch order."""
        qc = Circuit(3)
        qc.add_gates([CNOT_gate(2, 0), CNOT_gate(0, 1), H_gate(2)])
        assert kinds(qc) == [
            [("H", (2,))],
            [("CNOT", (2, 0))],
            [("CNOT", (0, 1))],
        ]

        qc.add_gates([TOFF_gate(1, 2, 0), H_gate(1), CNOT_gate(0, 2)])
        assert qc.num_columns == 6
        assert kinds(qc)[3:] == [
            [("H", (1,))],
            [("TOFF", (1, 2, 0))],
            [("CNOT", (0, 2))],
        ]

    def test_isolated_multi_gates_may_overlap(self):
        """Overlapping multi-wire gates in one batch raise no error."""
        qc = Circuit(2).add_gates([CNOT_gate(0, 1), SWAP_gate(0, 1)])
        assert qc.num_columns == 2

    def test_overlapping_singles_rejected(self):
        qc = Circuit(2)
        with pytest.raises(OverlappingWires):
            qc.add_gates([H_gate(0), X_gate(0)])
        assert qc.num_columns == 0

    def test_overlapping_singles_isolated_on_request(self):
        """With isolate_overlaps the clashing gate moves to the next column."""
        qc = Circuit(2, isolate_overlaps=True)
        qc.add_gates([H_gate(0), X_gate(0), Y_gate(1), Z_gate(0)])
        assert kinds(qc) == [
            [("H", (0,)), ("Y", (1,))],
            [("X", (0,))],
            [("Z", (0,))],
        ]

    def test_add_repeating_gate(self):
        qc = Circuit(3).add_repeating_gate(H_gate, [0, 2])
        assert kinds(qc) == [[("H", (0,)), ("H", (2,))]]
        with pytest.raises(OverlappingWires):
            qc.add_repeating_gate(H_gate, [1, 1])

    def test_get_gates_in_order(self):
        qc = Circuit(2).add_gates([CNOT_gate(0, 1), H_gate(1)]).add_gate(X_gate(0))
        assert [gate.name for gate in qc.get_gates()] == ["H", "CNOT", "X"]

    def test_batch_applies_singles_first(self):
        """A single listed after a multi-wire gate on its wire still runs first."""
        batched = Circuit(2).add_gates([CNOT_gate(0, 1), H_gate(0)]).simulate()
        assert np.allclose(batched.get_state().take().amplitudes, np.array([1, 0, 0, 1]) / np.sqrt(2))

        written_order = Circuit(2).add_gate(CNOT_gate(0, 1)).add_gate(H_gate(0)).simulate()
        assert np.allclose(written_order.get_state().take().amplitudes, np.array([1, 0, 1, 0]) / np.sqrt(2))

    def test_has_custom_gates(self):
        qc = Circuit(1).add_gate(H_gate(0))
        assert not qc.has_custom_gates
        qc.add_gate(Custom_gate(lambda s: None, 0))
        assert qc.has_custom_gates


class TestCircuitLifecycle:
    """Tests for simulating, consuming and re-running circuits."""

    def test_simulate_consumes(self):
        """The circuit cannot be used after simulate()."""
        qc = Circuit(1).add_gate(X_gate(0))
        result = qc.simulate()
        assert isinstance(result, SimulatedCircuit)
        assert qc.is_consumed
        with pytest.raises(CircuitConsumed):
            qc.add_gate(H_gate(0))
        with pytest.raises(CircuitConsumed):
            qc.simulate()
        with pytest.raises(CircuitConsumed):
            qc.columns

    def test_clone_and_simulate_keeps_circuit(self):
        """A cloned run leaves the circuit open for more gates."""
        qc = Circuit(1).add_gate(H_gate(0))
        first = qc.clone_and_simulate()
        qc.add_gate(H_gate(0))
        second = qc.clone_and_simulate()

        assert np.allclose(first.get_state().take().amplitudes, np.array([1, 1]) / np.sqrt(2))
        assert np.allclose(second.get_state().take().amplitudes, [1, 0])
        assert len(first.columns) == 1
        assert len(second.columns) == 2

    def test_unsimulated_circuit_has_no_state(self):
        qc = Circuit(1).add_gate(H_gate(0))
        with pytest.raises(NotYetSimulated):
            qc.get_state()
        with pytest.raises(NotYetSimulated):
            qc.measure_all(10)
        with pytest.raises(NotYetSimulated):
            require_simulated(qc)
        result = qc.simulate()
        assert require_simulated(result) is result

    def test_simulated_circuit_not_constructible(self):
        """Only the engine creates SimulatedCircuit."""
        with pytest.raises(TypeError):
            SimulatedCircuit((), SuperPosition(1))

    def test_change_register(self):
        qc = Circuit(2).add_gate(CNOT_gate(0, 1))
        qc.change_register(ProductState("10"))
        assert np.allclose(qc.simulate().get_state().take().amplitudes, [0, 0, 0, 1])

    def test_change_register_width(self):
        with pytest.raises(DimensionMismatch):
            Circuit(2).change_register(ProductState("1"))
        with pytest.raises(DimensionMismatch):
            Circuit(1).change_register(SuperPosition(2))

    def test_register_argument_overrides(self):
        """A register passed to simulate() beats change_register()."""
        qc = Circuit(1).add_gate(X_gate(0)).change_register(ProductState("1"))
        result = qc.clone_and_simulate(register=ProductState("0"))
        assert np.allclose(result.get_state().take().amplitudes, [0, 1])

    def test_register_is_not_mutated(self):
        register = SuperPosition(1)
        Circuit(1).add_gate(X_gate(0)).simulate(register=register)
        assert np.allclose(register.amplitudes, [1, 0])
        assert not register.is_frozen

    def test_empty_circuit(self):
        """A circuit without gates returns its register."""
        result = Circuit(2).simulate(register=ProductState("11"))
        assert np.allclose(result.get_state().take().amplitudes, [0, 0, 0, 1])

    def test_print_progress(self, capsys):
        qc = Circuit(2).set_print_progress(True)
        qc.add_gates([H_gate(0), CNOT_gate(0, 1)]).simulate()
        out = capsys.readouterr().out
        assert "Starting circuit simulation..." in out
        assert "Applying H on wire 0 # 1/2" in out
        assert "Applying CNOT on wire 1 # 2/2" in out
        assert "Finished circuit simulation." in out

import math

import numpy as np
import pytest

from quantum_composer.engine.algorithms import AlgorithmTemplate
from quantum_composer.engine.circuit import GateInstance, QuantumCircuit
from quantum_composer.engine.errors import CircuitValidationError
from quantum_composer.engine.simulator import Simulator, simulate

S = 1 / math.sqrt(2)


def _circuit(n, *gates):
    qc = QuantumCircuit(num_qubits=n)
    for position, (name, qubits, *params) in enumerate(gates):
        qc.add_gate(GateInstance(name, list(qubits),
                                 params[0] if params else None, position))
    return qc


def test_bell_state(bell_circuit):
    result = Simulator().run(bell_circuit, shots=0)
    assert result.probabilities == pytest.approx({"00": 0.5, "11": 0.5})
    assert np.allclose(result.final_state.data, [S, 0, 0, S])
    assert result.measurement is None


@pytest.mark.parametrize("n", [1, 3, 8])
def test_empty_circuit_is_ground_state(n):
    result = Simulator().run(QuantumCircuit(num_qubits=n), shots=0)
    assert result.probabilities == {"0" * n: 1.0}


@pytest.mark.parametrize("name", ["H", "X"])
def test_self_inverse_pairs(name):
    state = simulate(_circuit(1, (name, [0]), (name, [0])))
    assert np.allclose(state.data, [1, 0])


def test_norm_is_preserved_across_the_catalogue():
    qc = _circuit(
        3,
        ("H", [0]), ("Y", [1]), ("S", [2]), ("T", [0]), ("S†", [1]),
        ("T†", [2]), ("RX", [0], [0.3]), ("RY", [1], [1.1]),
        ("RZ", [2], [2.2]), ("U3", [0], [0.4, 0.5, 0.6]),
        ("CX", [0, 1]), ("CZ", [1, 2]), ("CY", [2, 0]),
        ("SWAP", [0, 2]), ("CCX", [0, 1, 2]), ("Z", [1]), ("X", [2]),
    )
    assert abs(simulate(qc).norm() - 1.0) < 1e-9


def test_pauli_y_phase():
    state = simulate(_circuit(1, ("Y", [0])))
    assert np.allclose(state.data, [0, 1j])


def test_phase_gates():
    s_state = simulate(_circuit(1, ("H", [0]), ("S", [0])))
    assert np.allclose(s_state.data, [S, 1j * S])
    tt_state = simulate(_circuit(1, ("H", [0]), ("T", [0]), ("T", [0])))
    assert np.allclose(tt_state.data, s_state.data)
    undone = simulate(_circuit(1, ("H", [0]), ("S", [0]), ("S†", [0])))
    assert np.allclose(undone.data, [S, S])


def test_rotations():
    assert np.allclose(simulate(_circuit(1, ("RX", [0], [math.pi]))).data, [0, -1j])
    # Missing parameters fall back to pi/2
    ry = simulate(_circuit(1, ("RY", [0])))
    assert np.allclose(ry.data, [S, S])


def test_u3_pi_zero_pi_is_x():
    state = simulate(_circuit(1, ("U3", [0], [math.pi, 0.0, math.pi])))
    assert np.allclose(state.data, [0, 1])


def test_controlled_z_and_y():
    cz = simulate(_circuit(2, ("H", [0]), ("H", [1]), ("CZ", [0, 1])))
    assert np.allclose(cz.data, [0.5, 0.5, 0.5, -0.5])
    cy = simulate(_circuit(2, ("X", [0]), ("CY", [0, 1])))
    assert np.allclose(cy.data, [0, 0, 0, 1j])


def test_swap():
    state = simulate(_circuit(2, ("X", [0]), ("SWAP", [0, 1])))
    assert np.isclose(abs(state.data[0b01]), 1.0)


def test_toffoli():
    both = simulate(_circuit(3, ("X", [0]), ("X", [1]), ("CCX", [0, 1, 2])))
    assert np.isclose(abs(both.data[0b111]), 1.0)
    one = simulate(_circuit(3, ("X", [0]), ("CCX", [0, 1, 2])))
    assert np.isclose(abs(one.data[0b100]), 1.0)
    shuffled = simulate(_circuit(3, ("X", [2]), ("X", [0]), ("CCX", [2, 0, 1])))
    assert np.isclose(abs(shuffled.data[0b111]), 1.0)


def test_gates_apply_in_position_order():
    qc = QuantumCircuit(num_qubits=1)
    qc.add_gate(GateInstance("X", [0], position=1))
    qc.add_gate(GateInstance("H", [0], position=0))
    # H then X leaves |+>
    assert np.allclose(simulate(qc).data, [S, S])


def test_position_ties_apply_in_insertion_order():
    qc = QuantumCircuit(num_qubits=1)
    qc.add_gate(GateInstance("X", [0], position=0))
    qc.add_gate(GateInstance("H", [0], position=0))
    # X then H gives |->
    assert np.allclose(simulate(qc).data, [S, -S])


@pytest.mark.parametrize("gate", [
    GateInstance("CX", [0, 0]),
    GateInstance("H", [3]),
    GateInstance("FOO", [0]),
    GateInstance("CCX", [0, 1]),
])
def test_invalid_circuits_are_rejected(gate):
    qc = QuantumCircuit(num_qubits=2, gates=[gate])
    with pytest.raises(CircuitValidationError):
        Simulator().run(qc)


def test_shrinking_register_keeps_simulation_valid():
    qc = _circuit(4, ("H", [0]), ("CX", [0, 3]), ("X", [1]))
    qc.set_num_qubits(2)
    result = Simulator().run(qc, shots=0)
    assert result.probabilities == pytest.approx({"01": 0.5, "11": 0.5})


def test_ghz_template():
    result = Simulator().run(AlgorithmTemplate.ghz_state(), shots=0)
    assert result.probabilities == pytest.approx({"000": 0.5, "111": 0.5})


def test_exact_counts_for_bell(bell_circuit):
    result = Simulator().run(bell_circuit, shots=1024, exact=True)
    assert result.measurement_counts == {"00": 512, "11": 512}
    assert result.measurement.entropy == pytest.approx(1.0)
    assert result.measurement.effective_states == 2


def test_sampled_counts_sum_to_shots_and_are_reproducible(bell_circuit):
    a = Simulator().run(bell_circuit, shots=500, seed=42)
    b = Simulator().run(bell_circuit, shots=500, seed=42)
    assert sum(a.measurement_counts.values()) == 500
    assert set(a.measurement_counts) <= {"00", "11"}
    assert a.measurement_counts == b.measurement_counts


def test_result_carries_bloch_angles(bell_circuit):
    result = Simulator().run(bell_circuit, shots=0)
    assert [b.qubit for b in result.bloch] == [0, 1]
    assert all(b.radius == pytest.approx(0.0, abs=1e-9) for b in result.bloch)


def test_step_by_step_yields_every_intermediate_state(bell_circuit):
    steps = list(Simulator().run_step_by_step(bell_circuit))
    assert [idx for _, idx in steps] == [-1, 0, 1]
    assert np.allclose(steps[0][0].data, [1, 0, 0, 0])
    assert np.allclose(steps[1][0].data, [S, 0, S, 0])
    assert np.allclose(steps[-1][0].data, simulate(bell_circuit).data)

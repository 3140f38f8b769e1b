import math

import numpy as np
import pytest

from quantum_composer.engine.analysis import (
    CircuitMetrics, all_bloch_angles, bloch_angles, pauli_expectations,
    probability_distribution, reduced_purity, shannon_entropy,
)
from quantum_composer.engine.circuit import GateInstance, QuantumCircuit
from quantum_composer.engine.simulator import simulate
from quantum_composer.engine.state_vector import StateVector


def test_distribution_drops_tiny_probabilities_and_renormalises():
    sv = StateVector(1)
    sv.data = np.array([math.sqrt(1 - 1e-8), math.sqrt(1e-8)])
    assert probability_distribution(sv) == {"0": 1.0}


def test_distribution_sums_to_one():
    sv = StateVector(3)
    for q in range(3):
        sv.apply_h(q)
    dist = probability_distribution(sv)
    assert len(dist) == 8
    assert sum(dist.values()) == pytest.approx(1.0)


def test_bloch_of_basis_states():
    sv = StateVector(2)
    sv.apply_x(1)
    zero, one = all_bloch_angles(sv)
    assert zero.theta == pytest.approx(0.0)
    assert zero.phi == 0.0
    assert one.theta == pytest.approx(math.pi)
    assert one.radius == pytest.approx(1.0)


def test_bloch_azimuth_of_plus_i():
    sv = StateVector(1)
    sv.apply_h(0)
    sv.apply_gate(np.diag([1, 1j]), [0])
    angles = bloch_angles(sv, 0)
    assert angles.theta == pytest.approx(math.pi / 2)
    assert angles.phi == pytest.approx(math.pi / 2)
    assert pauli_expectations(sv, 0) == pytest.approx((0.0, 1.0, 0.0), abs=1e-12)


def test_entangled_qubits_sit_at_the_centre(bell_circuit):
    state = simulate(bell_circuit)
    for q in range(2):
        angles = bloch_angles(state, q)
        assert angles.radius == pytest.approx(0.0, abs=1e-12)
        assert angles.theta == pytest.approx(math.pi / 2)
        assert angles.phi == 0.0
        assert reduced_purity(state, q) == pytest.approx(0.5)


@pytest.mark.parametrize("counts,expected", [
    ({"0": 1, "1": 1}, 1.0),
    ({"00": 1, "01": 1, "10": 1, "11": 1}, 2.0),
    ({"0": 5}, 0.0),
    ({}, 0.0),
])
def test_shannon_entropy(counts, expected):
    assert shannon_entropy(counts) == pytest.approx(expected)


@pytest.mark.parametrize("count,label", [
    (0, "None"), (4, "Simple"), (5, "Moderate"), (14, "Moderate"),
    (15, "Complex"), (30, "Very Complex"),
])
def test_complexity_levels(count, label):
    assert CircuitMetrics(count, 1, count, 1).complexity == label


def test_metrics_from_circuit(bell_circuit):
    metrics = CircuitMetrics.from_circuit(bell_circuit)
    assert metrics == CircuitMetrics(gate_count=2, depth=2, quantum_cost=6,
                                     unique_gates=2)


def test_metrics_of_empty_circuit():
    metrics = CircuitMetrics.from_circuit(QuantumCircuit(num_qubits=2))
    assert (metrics.gate_count, metrics.depth, metrics.quantum_cost) == (0, 0, 0)
    assert metrics.complexity == "None"


def test_metrics_count_unknown_gates_once():
    qc = QuantumCircuit(num_qubits=1)
    qc.add_gate(GateInstance("FOO", [0]))
    assert CircuitMetrics.from_circuit(qc).quantum_cost == 1

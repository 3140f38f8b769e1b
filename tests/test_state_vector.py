import numpy as np
import pytest

from quantum_composer.engine.gates import CNOT_MATRIX, H_MATRIX, X_MATRIX, rx_matrix
from quantum_composer.engine.state_vector import StateVector

S = 1 / np.sqrt(2)


def test_initial_state_is_ground():
    sv = StateVector(3)
    assert sv.data[0] == 1
    assert np.isclose(sv.norm(), 1.0)
    assert sv.basis_label(5) == "101"


@pytest.mark.parametrize("n", [0, 9])
def test_qubit_count_bounds(n):
    with pytest.raises(ValueError):
        StateVector(n)


def test_qubit_zero_is_most_significant_bit():
    sv = StateVector(3)
    sv.apply_x(0)
    assert np.isclose(abs(sv.data[0b100]), 1.0)
    sv.reset()
    sv.apply_x(2)
    assert np.isclose(abs(sv.data[0b001]), 1.0)


def test_hadamard_kernel():
    sv = StateVector(1)
    sv.apply_h(0)
    assert np.allclose(sv.data, [S, S])
    sv.apply_z(0)
    assert np.allclose(sv.data, [S, -S])


def test_cx_kernel_flips_target_only_when_control_set():
    sv = StateVector(2)
    sv.apply_cx(0, 1)
    assert np.isclose(abs(sv.data[0]), 1.0)
    sv.apply_x(0)
    sv.apply_cx(0, 1)
    assert np.isclose(abs(sv.data[0b11]), 1.0)


def test_cx_rejects_same_control_and_target():
    with pytest.raises(ValueError):
        StateVector(2).apply_cx(1, 1)


@pytest.mark.parametrize("qubit", [0, 1, 2])
def test_kernels_match_tensor_contraction(qubit):
    rng = np.random.default_rng(7)
    vec = rng.normal(size=8) + 1j * rng.normal(size=8)
    vec /= np.linalg.norm(vec)

    for kernel, matrix in (("apply_h", H_MATRIX), ("apply_x", X_MATRIX)):
        fast = StateVector(3)
        fast.data = vec.copy()
        getattr(fast, kernel)(qubit)
        general = StateVector(3)
        general.data = vec.copy()
        general.apply_gate(matrix, [qubit])
        assert np.allclose(fast.data, general.data)


@pytest.mark.parametrize("control,target", [(0, 1), (1, 0), (0, 2), (2, 0), (1, 2)])
def test_cx_kernel_matches_matrix(control, target):
    rng = np.random.default_rng(11)
    vec = rng.normal(size=8) + 1j * rng.normal(size=8)
    vec /= np.linalg.norm(vec)
    fast = StateVector(3)
    fast.data = vec.copy()
    fast.apply_cx(control, target)
    general = StateVector(3)
    general.data = vec.copy()
    general.apply_gate(CNOT_MATRIX, [control, target])
    assert np.allclose(fast.data, general.data)


def test_apply_gate_with_reversed_targets():
    sv = StateVector(3)
    sv.apply_x(2)
    sv.apply_gate(CNOT_MATRIX, [2, 0])
    assert np.isclose(abs(sv.data[0b101]), 1.0)


def test_apply_gate_validates_input():
    sv = StateVector(2)
    with pytest.raises(ValueError):
        sv.apply_gate(X_MATRIX, [2])
    with pytest.raises(ValueError):
        sv.apply_gate(CNOT_MATRIX, [1, 1])
    with pytest.raises(ValueError):
        sv.apply_gate(CNOT_MATRIX, [0])


def test_unitaries_preserve_norm():
    sv = StateVector(4)
    for q in range(4):
        sv.apply_h(q)
        sv.apply_gate(rx_matrix(0.3 * (q + 1)), [q])
    sv.apply_cx(0, 3)
    assert abs(sv.norm() - 1.0) < 1e-9


def test_reduced_density_matrix_of_plus_state():
    sv = StateVector(2)
    sv.apply_h(1)
    rho = sv.get_reduced_density_matrix(1)
    assert np.allclose(rho, [[0.5, 0.5], [0.5, 0.5]])
    assert np.allclose(sv.get_bloch_coordinates(1), (1.0, 0.0, 0.0))
    assert np.allclose(sv.get_bloch_coordinates(0), (0.0, 0.0, 1.0))


def test_copy_is_independent():
    sv = StateVector(1)
    clone = sv.copy()
    clone.apply_x(0)
    assert sv.data[0] == 1
    assert clone.data[1] == 1

"""Gate unitaries and the GateDefinition catalogue entry."""

from __future__ import annotations

import numpy as np
from dataclasses import dataclass
from typing import Callable
from enum import Enum


class GateType(Enum):
    SINGLE = "single"
    CONTROLLED = "controlled"
    MULTI = "multi"


@dataclass(frozen=True)
class GateDefinition:
    """Immutable catalogue entry for a named gate.

    ``num_controls`` counts the leading qubits of a placement that act as
    controls; the remaining qubits are targets.
    """
    name: str
    display_name: str
    gate_type: GateType
    num_qubits: int
    num_params: int
    param_names: tuple[str, ...]
    matrix_func: Callable[..., np.ndarray]
    symbol: str
    color: str
    cost: int = 1
    default_params: tuple[float, ...] = ()
    num_controls: int = 0

    @property
    def is_parameterized(self) -> bool:
        return self.num_params > 0

    def matrix(self, params: list[float] | tuple[float, ...] | None = None) -> np.ndarray:
        """Unitary for this gate, falling back to the default parameters."""
        if not self.num_params:
            return self.matrix_func()
        values = tuple(params) if params else self.default_params
        return self.matrix_func(*values)


def _unitary(rows) -> np.ndarray:
    return np.array(rows, dtype=np.complex128)


def phase_matrix(angle: float) -> np.ndarray:
    """diag(1, e^{i angle})."""
    return _unitary([[1, 0], [0, np.exp(1j * angle)]])


# --- Fixed single-qubit unitaries ---

I_MATRIX = np.eye(2, dtype=np.complex128)
X_MATRIX = _unitary([[0, 1], [1, 0]])
Y_MATRIX = _unitary([[0, -1j], [1j, 0]])
Z_MATRIX = _unitary([[1, 0], [0, -1]])
H_MATRIX = _unitary([[1, 1], [1, -1]]) / np.sqrt(2)

S_MATRIX = phase_matrix(np.pi / 2)
S_DAG_MATRIX = phase_matrix(-np.pi / 2)
T_MATRIX = phase_matrix(np.pi / 4)
T_DAG_MATRIX = phase_matrix(-np.pi / 4)


# --- Rotations: exp(-i theta P / 2) = cos(theta/2) I - i sin(theta/2) P ---

def _pauli_rotation(pauli: np.ndarray, theta: float) -> np.ndarray:
    return np.cos(theta / 2) * I_MATRIX - 1j * np.sin(theta / 2) * pauli


def rx_matrix(theta: float) -> np.ndarray:
    return _pauli_rotation(X_MATRIX, theta)


def ry_matrix(theta: float) -> np.ndarray:
    return _pauli_rotation(Y_MATRIX, theta)


def rz_matrix(theta: float) -> np.ndarray:
    return _pauli_rotation(Z_MATRIX, theta)


def u3_matrix(theta: float, phi: float, lam: float) -> np.ndarray:
    """U3(theta, phi, lambda) in the OpenQASM convention."""
    half = theta / 2
    return _unitary([
        [np.cos(half), -np.exp(1j * lam) * np.sin(half)],
        [np.exp(1j * phi) * np.sin(half), np.exp(1j * (phi + lam)) * np.cos(half)],
    ])


# --- Multi-qubit unitaries ---
# Row/column order follows the gate's qubit list, first qubit most significant.

def controlled(matrix: np.ndarray) -> np.ndarray:
    """Single-control version of ``matrix`` with the control as first qubit."""
    dim = matrix.shape[0]
    result = np.eye(2 * dim, dtype=np.complex128)
    result[dim:, dim:] = matrix
    return result


CNOT_MATRIX = controlled(X_MATRIX)
CZ_MATRIX = controlled(Z_MATRIX)
CY_MATRIX = controlled(Y_MATRIX)
SWAP_MATRIX = np.eye(4, dtype=np.complex128)[[0, 2, 1, 3]]
TOFFOLI_MATRIX = controlled(CNOT_MATRIX)


def _const(matrix: np.ndarray) -> Callable[[], np.ndarray]:
    """No-arg callable returning ``matrix``."""
    return lambda: matrix


def is_unitary(matrix: np.ndarray, atol: float = 1e-10) -> bool:
    dim = matrix.shape[0]
    return bool(np.allclose(matrix.conj().T @ matrix, np.eye(dim), atol=atol))

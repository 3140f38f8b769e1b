"""Derived views of a simulated state and structural circuit metrics.

All functions operate on NumPy arrays and StateVector objects.
No GUI or PyQt6 dependencies -- this module belongs to the engine layer.

Provides:
- probability_distribution: filtered, renormalised basis-state probabilities
- Bloch projection via the reduced density matrix of each qubit
- shannon_entropy over count tables
- CircuitMetrics: gate count, depth, quantum cost, complexity level
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Mapping

import numpy as np

from .circuit import QuantumCircuit
from .gates import X_MATRIX, Y_MATRIX, Z_MATRIX
from .state_vector import StateVector

PROBABILITY_EPSILON = 1e-6

_PAULI = {"X": X_MATRIX, "Y": Y_MATRIX, "Z": Z_MATRIX}


# =========================================================================
# Probability distribution
# =========================================================================

def probability_distribution(state: StateVector,
                             epsilon: float = PROBABILITY_EPSILON) -> dict[str, float]:
    """Map of bitstring -> probability for every state above ``epsilon``.

    The kept entries are renormalised so they sum to 1.
    """
    probs = state.probabilities
    keep = np.nonzero(probs > epsilon)[0]
    if keep.size == 0:
        # Only reachable with a degenerate vector; fall back to the ground state
        return {state.basis_label(0): 1.0}
    total = float(probs[keep].sum())
    return {state.basis_label(int(i)): float(probs[i]) / total for i in keep}


# =========================================================================
# Bloch projection
# =========================================================================

@dataclass(frozen=True)
class BlochAngles:
    """Polar/azimuthal angles of one qubit's reduced state.

    ``radius`` is the Bloch vector length: 1 for a pure single-qubit state,
    below 1 when the qubit is entangled with the rest of the register.
    """
    qubit: int
    theta: float
    phi: float
    x: float
    y: float
    z: float

    @property
    def radius(self) -> float:
        return math.sqrt(self.x ** 2 + self.y ** 2 + self.z ** 2)


def reduced_density_matrix(state: StateVector, qubit: int) -> np.ndarray:
    return state.get_reduced_density_matrix(qubit)


def pauli_expectation(state: StateVector, qubit: int, pauli: str) -> float:
    """<P> on the reduced state of ``qubit`` for P in X, Y, Z."""
    rho = state.get_reduced_density_matrix(qubit)
    return float(np.real(np.trace(rho @ _PAULI[pauli])))


def pauli_expectations(state: StateVector, qubit: int) -> tuple[float, float, float]:
    return tuple(pauli_expectation(state, qubit, p) for p in ("X", "Y", "Z"))


def bloch_angles(state: StateVector, qubit: int) -> BlochAngles:
    x, y, z = pauli_expectations(state, qubit)
    theta = math.acos(max(-1.0, min(1.0, z)))
    # atan2(0, 0) is 0, so states on the z axis report phi = 0
    phi = math.atan2(y, x) if abs(x) > 1e-12 or abs(y) > 1e-12 else 0.0
    return BlochAngles(qubit=qubit, theta=theta, phi=phi, x=x, y=y, z=z)


def all_bloch_angles(state: StateVector) -> list[BlochAngles]:
    return [bloch_angles(state, q) for q in range(state.num_qubits)]


def reduced_purity(state: StateVector, qubit: int) -> float:
    """Tr(rho^2) of a single qubit; 0.5 means maximally entangled."""
    rho = state.get_reduced_density_matrix(qubit)
    return float(np.real(np.trace(rho @ rho)))


# =========================================================================
# Count statistics
# =========================================================================

def shannon_entropy(counts: Mapping[str, float]) -> float:
    """Shannon entropy in bits of a (not necessarily normalised) count table."""
    total = float(sum(counts.values()))
    if total <= 0:
        return 0.0
    entropy = 0.0
    for value in counts.values():
        p = value / total
        if p > 0:
            entropy -= p * math.log2(p)
    return entropy


# =========================================================================
# Circuit metrics
# =========================================================================

@dataclass(frozen=True)
class CircuitMetrics:
    gate_count: int
    depth: int
    quantum_cost: int
    unique_gates: int

    @property
    def complexity(self) -> str:
        if self.gate_count == 0:
            return "None"
        if self.gate_count < 5:
            return "Simple"
        if self.gate_count < 15:
            return "Moderate"
        if self.gate_count < 30:
            return "Complex"
        return "Very Complex"

    @classmethod
    def from_circuit(cls, circuit: QuantumCircuit) -> CircuitMetrics:
        return cls(
            gate_count=circuit.gate_count(),
            depth=circuit.depth(),
            quantum_cost=circuit.quantum_cost(),
            unique_gates=len(circuit.unique_gate_names()),
        )

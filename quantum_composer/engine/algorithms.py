"""Built-in quantum algorithm circuit templates."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable

from .circuit import QuantumCircuit, GateInstance


class AlgorithmTemplate:
    """Factory for the prebuilt circuits offered in the algorithm library."""

    @staticmethod
    def bell_state() -> QuantumCircuit:
        """Bell state |Phi+> = (|00> + |11>) / sqrt(2)."""
        circuit = QuantumCircuit(num_qubits=2)
        circuit.add_gate(GateInstance("H", [0], position=0))
        circuit.add_gate(GateInstance("CX", [0, 1], position=1))
        return circuit

    @staticmethod
    def ghz_state() -> QuantumCircuit:
        """Three-qubit GHZ state (|000> + |111>) / sqrt(2), built as a CX chain."""
        circuit = QuantumCircuit(num_qubits=3)
        circuit.add_gate(GateInstance("H", [0], position=0))
        circuit.add_gate(GateInstance("CX", [0, 1], position=1))
        circuit.add_gate(GateInstance("CX", [1, 2], position=2))
        return circuit

    @staticmethod
    def deutsch_jozsa() -> QuantumCircuit:
        """Deutsch-Jozsa on two input qubits with a balanced (parity) oracle."""
        circuit = QuantumCircuit(num_qubits=3)
        circuit.add_gate(GateInstance("X", [2], position=0))
        for q in range(3):
            circuit.add_gate(GateInstance("H", [q], position=1))
        circuit.add_gate(GateInstance("CX", [0, 2], position=2))
        circuit.add_gate(GateInstance("CX", [1, 2], position=2))
        circuit.add_gate(GateInstance("H", [0], position=3))
        circuit.add_gate(GateInstance("H", [1], position=3))
        return circuit

    @staticmethod
    def grover_two_qubit() -> QuantumCircuit:
        """One Grover iteration over two qubits."""
        circuit = QuantumCircuit(num_qubits=2)
        layers = [
            ("H", [0], 0), ("H", [1], 0),
            ("Z", [1], 1),
            ("CZ", [0, 1], 2),
            ("H", [0], 3), ("H", [1], 3),
            ("X", [0], 4), ("X", [1], 4),
            ("CZ", [0, 1], 5),
            ("X", [0], 6), ("X", [1], 6),
            ("H", [0], 7), ("H", [1], 7),
        ]
        for name, qubits, position in layers:
            circuit.add_gate(GateInstance(name, qubits, position=position))
        return circuit

    @staticmethod
    def qft_three_qubit() -> QuantumCircuit:
        """Three-qubit QFT with controlled phases decomposed into RZ and CX."""
        circuit = QuantumCircuit(num_qubits=3)
        col = 0
        circuit.add_gate(GateInstance("H", [0], position=col))
        col += 1
        for control, target, angle in ((0, 1, math.pi / 2),
                                       (0, 2, math.pi / 4),
                                       (1, 2, math.pi / 2)):
            if control == 1:
                circuit.add_gate(GateInstance("H", [1], position=col))
                col += 1
            circuit.add_gate(GateInstance("RZ", [target], [angle], col))
            circuit.add_gate(GateInstance("CX", [control, target], position=col))
            col += 1
            circuit.add_gate(GateInstance("RZ", [target], [-angle], col))
            circuit.add_gate(GateInstance("CX", [control, target], position=col))
            col += 1
        circuit.add_gate(GateInstance("H", [2], position=col))
        return circuit


@dataclass(frozen=True)
class PrebuiltAlgorithm:
    id: str
    name: str
    description: str
    category: str
    builder: Callable[[], QuantumCircuit]

    def build(self) -> QuantumCircuit:
        return self.builder()


PREBUILT_ALGORITHMS: dict[str, PrebuiltAlgorithm] = {
    a.id: a for a in (
        PrebuiltAlgorithm("bell-state", "Bell State",
                          "Creates maximum entanglement between two qubits",
                          "Entanglement", AlgorithmTemplate.bell_state),
        PrebuiltAlgorithm("ghz-state", "GHZ State",
                          "Three-qubit maximally entangled state",
                          "Entanglement", AlgorithmTemplate.ghz_state),
        PrebuiltAlgorithm("deutsch-jozsa", "Deutsch-Jozsa",
                          "Determines if function is constant or balanced",
                          "Algorithms", AlgorithmTemplate.deutsch_jozsa),
        PrebuiltAlgorithm("grover-2qubit", "Grover (2-qubit)",
                          "Search algorithm for 2 qubits",
                          "Algorithms", AlgorithmTemplate.grover_two_qubit),
        PrebuiltAlgorithm("qft-3qubit", "QFT (3-qubit)",
                          "Quantum Fourier Transform for 3 qubits",
                          "Transforms", AlgorithmTemplate.qft_three_qubit),
    )
}


def build_template(template_id: str) -> QuantumCircuit | None:
    algorithm = PREBUILT_ALGORITHMS.get(template_id)
    return algorithm.build() if algorithm else None

"""Quantum circuit simulator - applies circuits to state vectors."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Generator

import numpy as np

from .analysis import (
    BlochAngles, PROBABILITY_EPSILON, all_bloch_angles, probability_distribution,
)
from .circuit import GateInstance, QuantumCircuit
from .gate_registry import GateRegistry
from .measurement import DEFAULT_SHOTS, MeasurementEngine, MeasurementSummary
from .state_vector import StateVector

logger = logging.getLogger(__name__)


@dataclass
class SimulationResult:
    """Result of a full simulation run."""
    final_state: StateVector
    probabilities: dict[str, float]
    bloch: list[BlochAngles] = field(default_factory=list)
    measurement: MeasurementSummary | None = None
    seed: int | None = None

    @property
    def measurement_counts(self) -> dict[str, int]:
        return dict(self.measurement.counts) if self.measurement else {}


class Simulator:
    """Executes a QuantumCircuit on a fresh StateVector.

    The circuit is validated before any gate is applied, so every
    structural problem surfaces as a CircuitValidationError and the
    engine itself only ever runs on consistent input.
    """

    def __init__(self, epsilon: float = PROBABILITY_EPSILON):
        self._gate_registry = GateRegistry.instance()
        self._epsilon = epsilon

    def simulate(self, circuit: QuantumCircuit) -> StateVector:
        """Final state of ``circuit`` starting from |0...0>."""
        circuit.validate()
        state = StateVector(circuit.num_qubits)
        for gate_inst in circuit.ordered_gates():
            self._apply_gate_instance(state, gate_inst)
        return state

    def run(self, circuit: QuantumCircuit, shots: int = DEFAULT_SHOTS,
            seed: int | None = None,
            rng: np.random.Generator | None = None,
            exact: bool = False,
            execution_time_ms: float | None = None) -> SimulationResult:
        """Full simulation: evolve the state, then derive every view.

        Args:
            circuit: The quantum circuit to simulate.
            shots: Number of measurement samples (0 skips sampling).
            seed: Optional seed for reproducibility (creates rng if not given).
            rng: Optional pre-seeded Generator (takes precedence over seed).
            exact: Use deterministic expected counts instead of sampling.
            execution_time_ms: Reported execution time; measured wall-clock
                time of this call when omitted.
        """
        if shots < 0:
            raise ValueError(f"shots must be non-negative, got {shots}")
        started = time.perf_counter()
        state = self.simulate(circuit)
        probabilities = probability_distribution(state, self._epsilon)

        summary = None
        if shots > 0:
            if exact:
                counts = MeasurementEngine.expected_counts(probabilities, shots)
            else:
                if rng is None:
                    rng = np.random.default_rng(seed)
                counts = MeasurementEngine.sample(probabilities, shots, rng=rng)
            if execution_time_ms is None:
                execution_time_ms = (time.perf_counter() - started) * 1000.0
            summary = MeasurementSummary.from_counts(counts, shots, execution_time_ms)

        logger.debug("Simulated %d gate(s) on %d qubit(s)",
                     circuit.gate_count(), circuit.num_qubits)
        return SimulationResult(
            final_state=state,
            probabilities=probabilities,
            bloch=all_bloch_angles(state),
            measurement=summary,
            seed=seed,
        )

    def run_step_by_step(self, circuit: QuantumCircuit) -> Generator[tuple[StateVector, int], None, None]:
        """Yields (state_vector, gate_index) after each gate in application order."""
        circuit.validate()
        state = StateVector(circuit.num_qubits)
        yield state.copy(), -1  # Initial state

        for gate_idx, gate_inst in enumerate(circuit.ordered_gates()):
            self._apply_gate_instance(state, gate_inst)
            yield state.copy(), gate_idx

    def _apply_gate_instance(self, state: StateVector, gate: GateInstance):
        """Apply a single gate instance to the state."""
        gate_def = self._gate_registry.get(gate.name)
        name = gate_def.name
        if name == "H":
            state.apply_h(gate.qubits[0])
        elif name == "X":
            state.apply_x(gate.qubits[0])
        elif name == "Z":
            state.apply_z(gate.qubits[0])
        elif name == "CX":
            state.apply_cx(gate.qubits[0], gate.qubits[1])
        else:
            state.apply_gate(gate_def.matrix(gate.parameters), gate.qubits)


def simulate(circuit: QuantumCircuit) -> StateVector:
    """Shorthand for ``Simulator().simulate(circuit)``."""
    return Simulator().simulate(circuit)

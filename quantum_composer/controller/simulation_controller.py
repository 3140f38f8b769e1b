"""Simulation controller: recomputes the state on every edit and publishes
shot results after a cosmetic delay.

Every shot request takes a new sequence number. A delivery only reaches
listeners while its number is still the latest, so a cancelled request or
one overtaken by a newer circuit can never overwrite newer results.
"""

from __future__ import annotations

import logging
import time

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from quantum_composer.core.config import AppConfig
from quantum_composer.engine.analysis import PROBABILITY_EPSILON
from quantum_composer.engine.circuit import QuantumCircuit
from quantum_composer.engine.errors import CircuitValidationError
from quantum_composer.engine.measurement import DEFAULT_SHOTS, MeasurementSummary
from quantum_composer.engine.simulator import SimulationResult, Simulator

logger = logging.getLogger(__name__)


class SimulationController(QObject):
    """Drives the engine for the result panels."""

    # Public signals
    state_updated = pyqtSignal(object)      # SimulationResult
    shots_ready = pyqtSignal(object)        # MeasurementSummary
    error_occurred = pyqtSignal(str)
    busy_changed = pyqtSignal(bool)

    def __init__(self, delay_ms: int = 1500, parent: QObject | None = None,
                 epsilon: float = PROBABILITY_EPSILON,
                 default_shots: int = DEFAULT_SHOTS):
        super().__init__(parent)

        self._simulator = Simulator(epsilon=epsilon)
        self._delay_ms = max(0, delay_ms)
        self._default_shots = default_shots
        self._sequence = 0
        self._pending: tuple[int, MeasurementSummary] | None = None
        self._latest: SimulationResult | None = None

        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.timeout.connect(self._on_timeout)

    @classmethod
    def from_config(cls, config: AppConfig,
                    parent: QObject | None = None) -> SimulationController:
        """Controller using the configured delay, epsilon and shot count."""
        return cls(delay_ms=config.result_delay_ms, parent=parent,
                   epsilon=config.probability_epsilon,
                   default_shots=config.default_shots)

    @property
    def latest_result(self) -> SimulationResult | None:
        return self._latest

    @property
    def sequence(self) -> int:
        return self._sequence

    @property
    def is_busy(self) -> bool:
        return self._pending is not None

    def set_delay(self, delay_ms: int) -> None:
        """Set the delay before shot results are published."""
        self._delay_ms = max(0, delay_ms)

    def attach(self, circuit_controller) -> None:
        """Recompute whenever ``circuit_controller`` reports an edit."""
        circuit_controller.circuit_changed.connect(
            lambda: self.recompute(circuit_controller.circuit))

    # ------------------------------------------------------------------
    # Exact state
    # ------------------------------------------------------------------

    def recompute(self, circuit: QuantumCircuit) -> SimulationResult | None:
        """Simulate ``circuit`` from scratch and publish the exact views.

        Any shot request still waiting belongs to an older circuit and is
        cancelled.
        """
        self.cancel()
        try:
            result = self._simulator.run(circuit, shots=0)
        except CircuitValidationError as exc:
            logger.warning("Circuit rejected: %s", exc)
            self._latest = None
            self.error_occurred.emit(str(exc))
            return None
        self._latest = result
        self.state_updated.emit(result)
        return result

    # ------------------------------------------------------------------
    # Shots
    # ------------------------------------------------------------------

    def request_shots(self, circuit: QuantumCircuit, shots: int | None = None,
                      seed: int | None = None, exact: bool = False) -> int:
        """Sample ``shots`` measurements and publish them after the delay.

        ``shots`` defaults to the controller's configured shot count.
        Returns the sequence number of the request, or -1 on error.
        """
        if shots is None:
            shots = self._default_shots
        self._timer.stop()
        self._sequence += 1
        sequence = self._sequence
        started = time.perf_counter()
        try:
            result = self._simulator.run(circuit.copy(), shots=shots, seed=seed,
                                         exact=exact)
        except (CircuitValidationError, ValueError) as exc:
            self._set_pending(None)
            self.error_occurred.emit(str(exc))
            return -1
        elapsed_ms = (time.perf_counter() - started) * 1000.0
        summary = result.measurement or MeasurementSummary.from_counts({}, shots)
        summary.execution_time_ms = elapsed_ms

        self._set_pending((sequence, summary))
        self._timer.start(self._delay_ms)
        return sequence

    def cancel(self) -> None:
        """Drop any waiting shot result."""
        self._timer.stop()
        if self._pending is not None:
            self._sequence += 1
            self._set_pending(None)

    def deliver(self, sequence: int, summary: MeasurementSummary) -> bool:
        """Publish ``summary`` if ``sequence`` is still the latest request."""
        if sequence != self._sequence:
            logger.debug("Dropping stale shot result %d (latest %d)",
                         sequence, self._sequence)
            return False
        self._set_pending(None)
        self.shots_ready.emit(summary)
        return True

    def _on_timeout(self) -> None:
        if self._pending is not None:
            sequence, summary = self._pending
            self.deliver(sequence, summary)

    def _set_pending(self, pending: tuple[int, MeasurementSummary] | None) -> None:
        was_busy = self._pending is not None
        self._pending = pending
        if was_busy != (pending is not None):
            self.busy_changed.emit(pending is not None)

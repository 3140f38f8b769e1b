import time

import pytest

from quantum_composer.controller.circuit_controller import CircuitController
from quantum_composer.controller.simulation_controller import SimulationController
from quantum_composer.core.config import AppConfig
from quantum_composer.engine.circuit import GateInstance, QuantumCircuit
from quantum_composer.engine.measurement import MeasurementSummary


def _wait(qapp, predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while not predicate() and time.monotonic() < deadline:
        qapp.processEvents()
        time.sleep(0.005)
    return predicate()


@pytest.fixture
def controller(qapp):
    return SimulationController(delay_ms=0)


def test_recompute_publishes_exact_state(controller, bell_circuit):
    published = []
    controller.state_updated.connect(published.append)
    result = controller.recompute(bell_circuit)
    assert published == [result]
    assert result.probabilities == pytest.approx({"00": 0.5, "11": 0.5})
    assert controller.latest_result is result


def test_recompute_reports_invalid_circuit(controller):
    errors = []
    controller.error_occurred.connect(errors.append)
    bad = QuantumCircuit(num_qubits=2, gates=[GateInstance("H", [4])])
    assert controller.recompute(bad) is None
    assert len(errors) == 1
    assert controller.latest_result is None


def test_shots_are_delivered_after_delay(qapp, controller, bell_circuit):
    delivered = []
    busy = []
    controller.shots_ready.connect(delivered.append)
    controller.busy_changed.connect(busy.append)
    sequence = controller.request_shots(bell_circuit, shots=1024, exact=True)
    assert sequence > 0
    assert controller.is_busy
    assert _wait(qapp, lambda: delivered)
    assert delivered[0].counts == {"00": 512, "11": 512}
    assert delivered[0].total_shots == 1024
    assert busy == [True, False]
    assert not controller.is_busy


def test_stale_delivery_is_dropped(controller, bell_circuit):
    delivered = []
    controller.shots_ready.connect(delivered.append)
    controller.set_delay(60_000)
    first = controller.request_shots(bell_circuit, shots=10, seed=1)
    second = controller.request_shots(bell_circuit, shots=20, seed=1)
    summary = MeasurementSummary.from_counts({"00": 10}, 10)
    assert controller.deliver(first, summary) is False
    assert delivered == []
    assert controller.deliver(second, summary) is True
    assert delivered == [summary]


def test_cancel_prevents_delivery(qapp, controller, bell_circuit):
    delivered = []
    controller.shots_ready.connect(delivered.append)
    sequence = controller.request_shots(bell_circuit, shots=10)
    controller.cancel()
    assert not controller.is_busy
    for _ in range(20):
        qapp.processEvents()
    assert delivered == []
    assert controller.deliver(sequence, MeasurementSummary.from_counts({}, 0)) is False


def test_recompute_cancels_pending_shots(qapp, controller, bell_circuit):
    delivered = []
    controller.shots_ready.connect(delivered.append)
    controller.request_shots(bell_circuit, shots=10)
    controller.recompute(bell_circuit)
    for _ in range(20):
        qapp.processEvents()
    assert delivered == []


def test_invalid_shot_request(controller, bell_circuit):
    errors = []
    controller.error_occurred.connect(errors.append)
    assert controller.request_shots(bell_circuit, shots=-5) == -1
    assert errors
    assert not controller.is_busy


def test_attach_recomputes_on_every_edit(qapp, controller):
    editor = CircuitController(QuantumCircuit(num_qubits=2))
    controller.attach(editor)
    published = []
    controller.state_updated.connect(published.append)
    editor.add_gate("X", [1])
    assert published[-1].probabilities == {"01": 1.0}
    editor.undo()
    assert published[-1].probabilities == {"00": 1.0}


def test_from_config_applies_shots_and_epsilon(qapp, tmp_path):
    config = AppConfig.load(tmp_path)
    config.result_delay_ms = 0
    config.default_shots = 64
    config.probability_epsilon = 0.01
    controller = SimulationController.from_config(config)

    # RY(0.1) leaves sin^2(0.05) ~ 0.0025 on |1>, below the configured cutoff
    qc = QuantumCircuit(num_qubits=1)
    qc.add_gate(GateInstance("RY", [0], [0.1]))
    assert controller.recompute(qc).probabilities == {"0": 1.0}

    delivered = []
    controller.shots_ready.connect(delivered.append)
    assert controller.request_shots(qc, exact=True) > 0
    assert _wait(qapp, lambda: delivered)
    assert delivered[0].total_shots == 64
    assert delivered[0].counts == {"0": 64}


def test_from_config_applies_delay(qapp, tmp_path):
    config = AppConfig.load(tmp_path)
    config.result_delay_ms = 60_000
    controller = SimulationController.from_config(config)
    delivered = []
    controller.shots_ready.connect(delivered.append)
    qc = QuantumCircuit(num_qubits=1)
    controller.request_shots(qc, shots=8)
    for _ in range(20):
        qapp.processEvents()
    assert delivered == []
    assert controller.is_busy
    controller.cancel()

import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PyQt6.QtCore import QCoreApplication

from quantum_composer.engine.circuit import GateInstance, QuantumCircuit
from quantum_composer.engine.gate_registry import GateRegistry


@pytest.fixture(scope="session")
def qapp():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture(autouse=True)
def fresh_registry():
    GateRegistry.reset()
    yield
    GateRegistry.reset()


@pytest.fixture
def bell_circuit():
    qc = QuantumCircuit(num_qubits=2)
    qc.add_gate(GateInstance("H", [0], position=0))
    qc.add_gate(GateInstance("CX", [0, 1], position=1))
    return qc

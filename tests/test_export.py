import pytest

from quantum_composer.core.export import QasmExporter, QiskitExporter
from quantum_composer.engine.circuit import GateInstance, QuantumCircuit


@pytest.fixture
def circuit():
    qc = QuantumCircuit(num_qubits=3)
    qc.add_gate(GateInstance("H", [0], position=0))
    qc.add_gate(GateInstance("CX", [0, 1], position=1))
    qc.add_gate(GateInstance("RX", [2], position=1))
    qc.add_gate(GateInstance("RZ", [1], [0.5], position=2))
    qc.add_gate(GateInstance("S†", [2], position=2))
    qc.add_gate(GateInstance("FOO", [0], position=3))
    return qc


def test_qasm_listing(circuit):
    lines = QasmExporter.export(circuit).splitlines()
    assert lines[:6] == ["OPENQASM 2.0;", 'include "qelib1.inc";', "",
                         "qreg q[3];", "creg c[3];", ""]
    assert lines[6:12] == [
        "h q[0];",
        "cx q[0],q[1];",
        "rx(pi/2) q[2];",
        "rz(0.5) q[1];",
        "sdg q[2];",
        "// Unknown gate: FOO",
    ]
    assert lines[-1] == "measure q -> c;"


def test_qasm_gate_lines():
    assert QasmExporter.gate_line(GateInstance("CCX", [2, 0, 1])) == "ccx q[2],q[0],q[1];"
    assert QasmExporter.gate_line(
        GateInstance("U3", [0], [0.1, 0.2, 0.3])) == "u3(0.1,0.2,0.3) q[0];"
    assert QasmExporter.gate_line(GateInstance("CX", [0])) == "// Unknown gate: CX"


def test_qiskit_script(circuit):
    script = QiskitExporter.export(circuit, shots=2048)
    lines = script.splitlines()
    assert "qc = QuantumCircuit(3, 3)" in lines
    for expected in ("qc.h(0)", "qc.cx(0, 1)", "qc.rx(np.pi/2, 2)",
                     "qc.rz(0.5, 1)", "qc.sdg(2)", "# Unknown gate: FOO",
                     "qc.measure_all()"):
        assert expected in lines
    assert "shots=2048" in script


def test_gates_are_emitted_in_position_order():
    qc = QuantumCircuit(num_qubits=2)
    qc.add_gate(GateInstance("CX", [0, 1], position=1))
    qc.add_gate(GateInstance("H", [0], position=0))

    qasm = QasmExporter.export(qc).splitlines()
    assert qasm[6:8] == ["h q[0];", "cx q[0],q[1];"]

    qiskit = QiskitExporter.export(qc).splitlines()
    assert qiskit.index("qc.h(0)") < qiskit.index("qc.cx(0, 1)")

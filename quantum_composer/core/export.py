"""Circuit export to OpenQASM 2.0 and to a Qiskit script.

Both exporters read the circuit model directly and walk the gates in
circuit order. Gate names without a mapping produce an explicit
"Unknown gate" comment line instead of being dropped.
"""

from __future__ import annotations

from quantum_composer.engine.circuit import GateInstance, QuantumCircuit
from quantum_composer.engine.gate_registry import canonical_name

# Catalogue name -> instruction name shared by QASM and Qiskit.
_INSTRUCTIONS = {
    "H": "h", "X": "x", "Y": "y", "Z": "z",
    "S": "s", "S†": "sdg", "T": "t", "T†": "tdg",
    "RX": "rx", "RY": "ry", "RZ": "rz", "U3": "u3",
    "CX": "cx", "CZ": "cz", "CY": "cy", "SWAP": "swap", "CCX": "ccx",
}

_ARITY = {"CX": 2, "CZ": 2, "CY": 2, "SWAP": 2, "CCX": 3}
_PARAM_COUNT = {"RX": 1, "RY": 1, "RZ": 1, "U3": 3}


def _format_angle(value: float) -> str:
    return repr(float(value))


def _angles(gate: GateInstance, name: str, default: str) -> list[str] | None:
    count = _PARAM_COUNT[name]
    if not gate.parameters:
        return [default] * count
    if len(gate.parameters) != count:
        return None
    return [_format_angle(p) for p in gate.parameters]


def _mappable(gate: GateInstance) -> str | None:
    """Canonical name when the gate can be rendered, else None."""
    name = canonical_name(gate.name)
    if name not in _INSTRUCTIONS:
        return None
    if len(gate.qubits) != _ARITY.get(name, 1):
        return None
    return name


class QasmExporter:
    """Renders an OpenQASM 2.0 listing."""

    @staticmethod
    def gate_line(gate: GateInstance) -> str:
        name = _mappable(gate)
        if name is None:
            return f"// Unknown gate: {gate.name}"
        operands = ",".join(f"q[{q}]" for q in gate.qubits)
        instruction = _INSTRUCTIONS[name]
        if name in _PARAM_COUNT:
            angles = _angles(gate, name, "pi/2")
            if angles is None:
                return f"// Unknown gate: {gate.name}"
            instruction = f"{instruction}({','.join(angles)})"
        return f"{instruction} {operands};"

    @staticmethod
    def export(circuit: QuantumCircuit) -> str:
        n = circuit.num_qubits
        lines = [
            "OPENQASM 2.0;",
            'include "qelib1.inc";',
            "",
            f"qreg q[{n}];",
            f"creg c[{n}];",
            "",
        ]
        lines.extend(QasmExporter.gate_line(g) for g in circuit.ordered_gates())
        lines.extend(["", "measure q -> c;", ""])
        return "\n".join(lines)


class QiskitExporter:
    """Renders an equivalent Qiskit script."""

    HEADER = (
        "from qiskit import QuantumCircuit, execute, Aer\n"
        "from qiskit.visualization import plot_histogram\n"
        "import numpy as np\n"
    )

    FOOTER = (
        "# Add measurements\n"
        "qc.measure_all()\n"
        "\n"
        "# Execute circuit\n"
        "backend = Aer.get_backend('qasm_simulator')\n"
        "job = execute(qc, backend, shots={shots})\n"
        "result = job.result()\n"
        "counts = result.get_counts(qc)\n"
        "\n"
        "# Display results\n"
        "print(counts)\n"
        "plot_histogram(counts)\n"
    )

    @staticmethod
    def gate_line(gate: GateInstance) -> str:
        name = _mappable(gate)
        if name is None:
            return f"# Unknown gate: {gate.name}"
        args = [str(q) for q in gate.qubits]
        if name in _PARAM_COUNT:
            angles = _angles(gate, name, "np.pi/2")
            if angles is None:
                return f"# Unknown gate: {gate.name}"
            args = angles + args
        return f"qc.{_INSTRUCTIONS[name]}({', '.join(args)})"

    @staticmethod
    def export(circuit: QuantumCircuit, shots: int = 1024) -> str:
        n = circuit.num_qubits
        parts = [
            QiskitExporter.HEADER,
            "# Create quantum circuit",
            f"qc = QuantumCircuit({n}, {n})",
            "",
        ]
        parts.extend(QiskitExporter.gate_line(g) for g in circuit.ordered_gates())
        parts.append("")
        parts.append(QiskitExporter.FOOTER.format(shots=shots))
        return "\n".join(parts)

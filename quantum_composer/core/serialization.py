"""JSON save/load for quantum circuits."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from quantum_composer.engine.circuit import IdGenerator, QuantumCircuit
from quantum_composer.engine.errors import CircuitImportError

logger = logging.getLogger(__name__)


class CircuitSerializer:
    """JSON save/load for quantum circuits.

    Loading is all-or-nothing: the document is parsed and checked in full
    before a circuit is returned, and any problem raises CircuitImportError.
    Gate ids are regenerated on load, from the given IdGenerator if any.
    """

    FILE_VERSION = "1.0"
    FILE_EXTENSION = ".json"

    @staticmethod
    def to_json(circuit: QuantumCircuit) -> str:
        return json.dumps(circuit.to_dict(), indent=2, ensure_ascii=False)

    @staticmethod
    def from_json(text: str, id_generator: IdGenerator | None = None) -> QuantumCircuit:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise CircuitImportError(f"Not a JSON document: {exc}") from exc
        return CircuitSerializer.from_data(data, id_generator)

    @staticmethod
    def from_data(data: object, id_generator: IdGenerator | None = None) -> QuantumCircuit:
        CircuitSerializer._check_document(data)
        try:
            circuit = QuantumCircuit.from_dict(data, id_generator)
        except (KeyError, TypeError, ValueError) as exc:
            raise CircuitImportError(f"Malformed circuit document: {exc}") from exc
        # Unknown names are kept; only the simulator refuses them
        problems = circuit.problems(strict_names=False)
        if problems:
            raise CircuitImportError("; ".join(problems))
        return circuit

    @staticmethod
    def _check_document(data: object) -> None:
        if not isinstance(data, dict):
            raise CircuitImportError("Circuit document must be a JSON object")
        gates = data.get("gates")
        if not isinstance(gates, list):
            raise CircuitImportError("Circuit document needs a 'gates' list")
        for i, gate in enumerate(gates):
            if not isinstance(gate, dict):
                raise CircuitImportError(f"gates[{i}] must be an object")
            if not isinstance(gate.get("name"), str):
                raise CircuitImportError(f"gates[{i}] needs a string 'name'")
            qubits = gate.get("qubits")
            if not isinstance(qubits, list) or not all(
                    isinstance(q, int) and not isinstance(q, bool) for q in qubits):
                raise CircuitImportError(f"gates[{i}] needs an integer 'qubits' list")
            params = gate.get("parameters")
            if params is not None and (not isinstance(params, list) or not all(
                    isinstance(p, (int, float)) and not isinstance(p, bool)
                    for p in params)):
                raise CircuitImportError(f"gates[{i}] 'parameters' must be numbers")
            position = gate.get("position", 0)
            if not isinstance(position, int) or isinstance(position, bool):
                raise CircuitImportError(f"gates[{i}] 'position' must be an integer")
        measurements = data.get("measurements", [])
        if not isinstance(measurements, list) or not all(
                isinstance(m, dict) and "qubit" in m and "bit" in m
                for m in measurements):
            raise CircuitImportError("'measurements' must be a list of {qubit, bit}")
        num_qubits = data.get("num_qubits")
        if num_qubits is not None and (
                not isinstance(num_qubits, int) or isinstance(num_qubits, bool)):
            raise CircuitImportError("'num_qubits' must be an integer")

    @staticmethod
    def save(circuit: QuantumCircuit, filepath: Path | str):
        filepath = Path(filepath)
        with open(filepath, 'w', encoding='utf-8') as f:
            f.write(CircuitSerializer.to_json(circuit))
        logger.info("Saved circuit to %s", filepath)

    @staticmethod
    def load(filepath: Path | str, id_generator: IdGenerator | None = None) -> QuantumCircuit:
        filepath = Path(filepath)
        try:
            text = filepath.read_text(encoding='utf-8')
        except OSError as exc:
            raise CircuitImportError(f"Cannot read {filepath}: {exc}") from exc
        return CircuitSerializer.from_json(text, id_generator)

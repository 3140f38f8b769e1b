"""Quantum circuit data model."""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field

from .errors import CircuitValidationError
from .gate_registry import GateRegistry, canonical_name

MAX_QUBITS = 8


class IdGenerator:
    """Monotonic gate id source. Ids are never handed out twice."""

    def __init__(self, prefix: str = "g", start: int = 1):
        self._prefix = prefix
        self._counter = itertools.count(start)

    def next_id(self) -> str:
        return f"{self._prefix}{next(self._counter)}"


# Shared by every circuit in the process so ids stay unique across
# backups, custom gates and imported circuits.
DEFAULT_ID_GENERATOR = IdGenerator()


@dataclass
class GateInstance:
    """A specific gate placed in the circuit.

    For controlled gates ``qubits[0]`` is the control and the last entry is
    the target. ``parameters`` is ``None`` for gates that take no angles.
    """
    name: str
    qubits: list[int]
    parameters: list[float] | None = None
    position: int = 0
    id: str = ""

    def copy(self, new_id: str | None = None) -> GateInstance:
        return GateInstance(
            name=self.name,
            qubits=list(self.qubits),
            parameters=list(self.parameters) if self.parameters is not None else None,
            position=self.position,
            id=self.id if new_id is None else new_id,
        )

    def same_operation(self, other: GateInstance) -> bool:
        """Equal in everything except id."""
        return (self.name == other.name
                and list(self.qubits) == list(other.qubits)
                and self.parameters == other.parameters
                and self.position == other.position)

    def to_dict(self) -> dict:
        d = {
            "id": self.id,
            "name": self.name,
            "qubits": list(self.qubits),
            "position": self.position,
        }
        if self.parameters is not None:
            d["parameters"] = list(self.parameters)
        return d

    @classmethod
    def from_dict(cls, data: dict) -> GateInstance:
        params = data.get("parameters")
        return cls(
            name=data["name"],
            qubits=[int(q) for q in data["qubits"]],
            parameters=[float(p) for p in params] if params is not None else None,
            position=int(data.get("position", 0)),
            id=str(data.get("id", "")),
        )


@dataclass
class Measurement:
    """Qubit-to-classical-bit mapping. Carried along, not simulated."""
    qubit: int
    bit: int

    def to_dict(self) -> dict:
        return {"qubit": self.qubit, "bit": self.bit}

    @classmethod
    def from_dict(cls, data: dict) -> Measurement:
        return cls(qubit=int(data["qubit"]), bit=int(data["bit"]))


@dataclass
class QuantumCircuit:
    """The full circuit model - a list of gate instances on n qubits."""
    num_qubits: int = 4
    gates: list[GateInstance] = field(default_factory=list)
    measurements: list[Measurement] = field(default_factory=list)
    id_generator: IdGenerator = field(
        default=DEFAULT_ID_GENERATOR, repr=False, compare=False)

    def add_gate(self, gate: GateInstance) -> GateInstance:
        """Append a copy of ``gate`` under a freshly assigned id."""
        stored = gate.copy(new_id=self.id_generator.next_id())
        self.gates.append(stored)
        return stored

    def insert_gate(self, gate: GateInstance, index: int | None = None) -> None:
        """Put back a gate that already owns an id (undo/redo)."""
        if self.get_gate(gate.id) is not None:
            return
        if index is None or index >= len(self.gates):
            self.gates.append(gate)
        else:
            self.gates.insert(index, gate)

    def remove_gate(self, gate_id: str) -> GateInstance | None:
        for i, gate in enumerate(self.gates):
            if gate.id == gate_id:
                return self.gates.pop(i)
        return None

    def get_gate(self, gate_id: str) -> GateInstance | None:
        for gate in self.gates:
            if gate.id == gate_id:
                return gate
        return None

    def index_of(self, gate_id: str) -> int:
        for i, gate in enumerate(self.gates):
            if gate.id == gate_id:
                return i
        return -1

    def set_num_qubits(self, n: int):
        if n < 1 or n > MAX_QUBITS:
            raise ValueError(f"num_qubits must be 1-{MAX_QUBITS}, got {n}")
        # Build the filtered lists first so the swap below is all-or-nothing
        gates = [g for g in self.gates if all(q < n for q in g.qubits)]
        measurements = [m for m in self.measurements if m.qubit < n]
        self.gates, self.measurements, self.num_qubits = gates, measurements, n

    def clear(self):
        self.gates = []
        self.measurements = []

    def ordered_gates(self) -> list[GateInstance]:
        """Gates in application order: by position, ties by insertion order."""
        return sorted(self.gates, key=lambda g: g.position)

    def depth(self) -> int:
        if not self.gates:
            return 0
        return max(g.position for g in self.gates) + 1

    def quantum_cost(self) -> int:
        registry = GateRegistry.instance()
        return sum(registry.cost(g.name) for g in self.gates)

    def gate_count(self) -> int:
        return len(self.gates)

    def unique_gate_names(self) -> set[str]:
        return {g.name for g in self.gates}

    def max_qubit_index(self) -> int:
        """Highest qubit referenced by any gate, -1 when empty."""
        return max((q for g in self.gates for q in g.qubits), default=-1)

    def gate_problems(self, gate: GateInstance, strict_names: bool = True) -> list[str]:
        """Structural problems of one gate against this circuit's register.

        With ``strict_names=False`` an unknown name is not itself a problem,
        but its qubits and position are still checked.
        """
        gate_def = GateRegistry.instance().find(gate.name)
        label = f"{gate.name} ({gate.id or 'unsaved'})"
        found: list[str] = []
        if gate_def is None:
            if strict_names:
                found.append(f"{label}: unknown gate name")
        elif len(gate.qubits) != gate_def.num_qubits:
            found.append(
                f"{label}: expects {gate_def.num_qubits} qubit(s), "
                f"got {len(gate.qubits)}")
        for q in gate.qubits:
            if q < 0 or q >= self.num_qubits:
                found.append(
                    f"{label}: qubit {q} out of range [0, {self.num_qubits - 1}]")
        if len(set(gate.qubits)) != len(gate.qubits):
            found.append(f"{label}: qubits must be distinct, got {gate.qubits}")
        if gate_def is not None:
            n_params = len(gate.parameters) if gate.parameters else 0
            if gate_def.num_params == 0 and n_params:
                found.append(f"{label}: takes no parameters")
            elif gate_def.num_params and n_params not in (0, gate_def.num_params):
                found.append(
                    f"{label}: expects {gate_def.num_params} parameter(s), got {n_params}")
        if gate.position < 0:
            found.append(f"{label}: negative position {gate.position}")
        return found

    def problems(self, strict_names: bool = True) -> list[str]:
        """Structural problems that would make simulation meaningless."""
        found: list[str] = []
        if self.num_qubits < 1 or self.num_qubits > MAX_QUBITS:
            found.append(f"num_qubits must be 1-{MAX_QUBITS}, got {self.num_qubits}")
        for gate in self.gates:
            found.extend(self.gate_problems(gate, strict_names))
        return found

    def validate(self) -> None:
        problems = self.problems()
        if problems:
            raise CircuitValidationError(problems)

    def circuit_hash(self) -> int:
        """Compute a hash of the circuit structure for invalidation checks."""
        parts: list = [self.num_qubits]
        for g in self.gates:
            parts.append((g.name, tuple(g.qubits),
                          tuple(g.parameters or ()), g.position))
        return hash(tuple(parts))

    def copy(self) -> QuantumCircuit:
        """Deep copy that keeps gate ids."""
        return QuantumCircuit(
            num_qubits=self.num_qubits,
            gates=[g.copy() for g in self.gates],
            measurements=[Measurement(m.qubit, m.bit) for m in self.measurements],
            id_generator=self.id_generator,
        )

    def equivalent(self, other: QuantumCircuit) -> bool:
        """Same qubit count, measurements and gate sequence, ignoring ids."""
        if self.num_qubits != other.num_qubits:
            return False
        if len(self.gates) != len(other.gates):
            return False
        if self.measurements != other.measurements:
            return False
        return all(a.same_operation(b) for a, b in zip(self.gates, other.gates))

    def to_dict(self) -> dict:
        return {
            "version": "1.0",
            "num_qubits": self.num_qubits,
            "gates": [g.to_dict() for g in self.gates],
            "measurements": [m.to_dict() for m in self.measurements],
        }

    @classmethod
    def from_dict(cls, data: dict,
                  id_generator: IdGenerator | None = None) -> QuantumCircuit:
        """Build a circuit from a document. Gate ids are regenerated from
        ``id_generator`` (the shared default when omitted)."""
        gates = [GateInstance.from_dict(g) for g in data["gates"]]
        for gate in gates:
            gate.name = canonical_name(gate.name)
        num_qubits = data.get("num_qubits")
        if num_qubits is None:
            num_qubits = max((q for g in gates for q in g.qubits), default=0) + 1
        circuit = cls(
            num_qubits=int(num_qubits),
            measurements=[Measurement.from_dict(m)
                          for m in data.get("measurements", [])],
            id_generator=id_generator or DEFAULT_ID_GENERATOR,
        )
        for gate in gates:
            circuit.add_gate(gate)
        return circuit

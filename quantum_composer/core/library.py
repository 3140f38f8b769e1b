"""Named circuit backups, custom gate macros and user preferences.

All three live on a :class:`KeyValueStore`. Each list is kept under a single
key and every mutation rewrites that key as a whole.
"""

from __future__ import annotations

import datetime
import logging
import uuid
from dataclasses import dataclass, field

from quantum_composer.core.storage import KeyValueStore
from quantum_composer.engine.circuit import (
    DEFAULT_ID_GENERATOR, GateInstance, IdGenerator, QuantumCircuit,
)

logger = logging.getLogger(__name__)

BACKUPS_KEY = "circuit_backups"
CUSTOM_GATES_KEY = "custom_gates"
PREFERENCES_KEY = "preferences"

MAX_INITIAL_LENGTH = 4


def _now() -> str:
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Backups
# ---------------------------------------------------------------------------

@dataclass
class CircuitBackup:
    id: str
    name: str
    circuit: dict
    timestamp: str
    description: str | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "circuit": self.circuit,
            "timestamp": self.timestamp,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: dict) -> CircuitBackup:
        return cls(
            id=data["id"],
            name=data["name"],
            circuit=data["circuit"],
            timestamp=data.get("timestamp", ""),
            description=data.get("description"),
        )


class BackupManager:
    """Save, list, load and delete named circuit snapshots."""

    def __init__(self, store: KeyValueStore):
        self._store = store

    def _read(self) -> list[CircuitBackup]:
        return [CircuitBackup.from_dict(d) for d in self._store.get(BACKUPS_KEY, [])]

    def _write(self, backups: list[CircuitBackup]) -> None:
        self._store.set(BACKUPS_KEY, [b.to_dict() for b in backups])

    def save(self, circuit: QuantumCircuit, name: str,
             description: str | None = None) -> CircuitBackup:
        name = name.strip()
        if not name:
            raise ValueError("Backup name must not be empty")
        backup = CircuitBackup(
            id=uuid.uuid4().hex,
            name=name,
            circuit=circuit.to_dict(),
            timestamp=_now(),
            description=description.strip() if description else None,
        )
        backups = self._read()
        backups.insert(0, backup)
        self._write(backups)
        logger.info("Saved backup '%s' (%s)", backup.name, backup.id)
        return backup

    def list_backups(self) -> list[CircuitBackup]:
        """All backups, newest first."""
        return self._read()

    def get(self, backup_id: str) -> CircuitBackup | None:
        for backup in self._read():
            if backup.id == backup_id:
                return backup
        return None

    def load(self, backup_id: str,
             id_generator: IdGenerator | None = None) -> QuantumCircuit | None:
        """Fresh circuit rebuilt from the snapshot, or None if missing."""
        backup = self.get(backup_id)
        if backup is None:
            return None
        return QuantumCircuit.from_dict(backup.circuit, id_generator)

    def delete(self, backup_id: str) -> bool:
        backups = self._read()
        remaining = [b for b in backups if b.id != backup_id]
        if len(remaining) == len(backups):
            return False
        self._write(remaining)
        logger.info("Deleted backup %s", backup_id)
        return True


# ---------------------------------------------------------------------------
# Custom gates
# ---------------------------------------------------------------------------

@dataclass
class CustomGate:
    """A captured sequence of gates replayed as a unit."""
    id: str
    name: str
    initial: str
    description: str
    gates: list[GateInstance] = field(default_factory=list)
    num_qubits: int = 1
    timestamp: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "initial": self.initial,
            "description": self.description,
            "gates": [g.to_dict() for g in self.gates],
            "num_qubits": self.num_qubits,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict) -> CustomGate:
        return cls(
            id=data["id"],
            name=data["name"],
            initial=data["initial"],
            description=data.get("description", ""),
            gates=[GateInstance.from_dict(g) for g in data.get("gates", [])],
            num_qubits=int(data.get("num_qubits", 1)),
            timestamp=data.get("timestamp", ""),
        )


class CustomGateLibrary:
    """Create custom gates from a selection and replay them.

    Replay places the captured gates at their original absolute qubit
    indices; no remapping onto a chosen insertion qubit is attempted.
    """

    def __init__(self, store: KeyValueStore,
                 id_generator: IdGenerator = DEFAULT_ID_GENERATOR):
        self._store = store
        self._ids = id_generator

    def _read(self) -> list[CustomGate]:
        return [CustomGate.from_dict(d) for d in self._store.get(CUSTOM_GATES_KEY, [])]

    def _write(self, gates: list[CustomGate]) -> None:
        self._store.set(CUSTOM_GATES_KEY, [g.to_dict() for g in gates])

    def create_from_selection(self, circuit: QuantumCircuit,
                              gate_ids: list[str] | set[str],
                              name: str, initial: str,
                              description: str = "") -> CustomGate:
        name, initial = name.strip(), initial.strip()
        if not name:
            raise ValueError("Custom gate name must not be empty")
        if not initial or len(initial) > MAX_INITIAL_LENGTH:
            raise ValueError(
                f"Custom gate initial must be 1-{MAX_INITIAL_LENGTH} characters")
        wanted = set(gate_ids)
        selected = [g for g in circuit.gates if g.id in wanted]
        if not selected:
            raise ValueError("Select at least one gate to create a custom gate")

        captured = [g.copy(new_id=self._ids.next_id()) for g in selected]
        custom = CustomGate(
            id=uuid.uuid4().hex,
            name=name,
            initial=initial,
            description=description.strip(),
            gates=captured,
            num_qubits=max(q for g in captured for q in g.qubits) + 1,
            timestamp=_now(),
        )
        gates = self._read()
        gates.append(custom)
        self._write(gates)
        logger.info("Created custom gate '%s' from %d gate(s)", name, len(captured))
        return custom

    def list_gates(self) -> list[CustomGate]:
        return self._read()

    def get(self, custom_id: str) -> CustomGate | None:
        for custom in self._read():
            if custom.id == custom_id:
                return custom
        return None

    def delete(self, custom_id: str) -> bool:
        gates = self._read()
        remaining = [g for g in gates if g.id != custom_id]
        if len(remaining) == len(gates):
            return False
        self._write(remaining)
        return True

    def instantiate(self, custom: CustomGate) -> list[GateInstance]:
        """Copies of the captured gates under fresh ids."""
        return [g.copy(new_id=self._ids.next_id()) for g in custom.gates]


# ---------------------------------------------------------------------------
# Preferences
# ---------------------------------------------------------------------------

class Preferences:
    """Small UI preferences persisted alongside the circuit library."""

    THEMES = ("light", "dark")

    def __init__(self, store: KeyValueStore):
        self._store = store

    def _read(self) -> dict:
        return self._store.get(PREFERENCES_KEY, {}) or {}

    def _update(self, **values) -> None:
        data = self._read()
        data.update(values)
        self._store.set(PREFERENCES_KEY, data)

    @property
    def theme(self) -> str:
        theme = self._read().get("theme", "light")
        return theme if theme in self.THEMES else "light"

    @theme.setter
    def theme(self, value: str) -> None:
        if value not in self.THEMES:
            raise ValueError(f"Unknown theme: {value!r}")
        self._update(theme=value)

    def toggle_theme(self) -> str:
        self.theme = "dark" if self.theme == "light" else "light"
        return self.theme

    @property
    def tutorial_seen(self) -> bool:
        return bool(self._read().get("tutorial_seen", False))

    def mark_tutorial_seen(self) -> None:
        self._update(tutorial_seen=True)

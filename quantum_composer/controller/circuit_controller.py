"""Circuit controller owning the live circuit model for the editor.

Routes all circuit modifications through a QUndoStack for undo/redo and
holds the editor state the canvas and sidebar share: the gate waiting to be
placed and the current gate selection.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from PyQt6.QtCore import QObject, pyqtSignal
from PyQt6.QtGui import QUndoStack, QUndoCommand

from quantum_composer.core.config import AppConfig
from quantum_composer.core.library import (
    BackupManager, CircuitBackup, CustomGate, CustomGateLibrary,
)
from quantum_composer.core.serialization import CircuitSerializer
from quantum_composer.core.storage import JsonFileStore, KeyValueStore, MemoryStore
from quantum_composer.engine.algorithms import PREBUILT_ALGORITHMS
from quantum_composer.engine.circuit import (
    MAX_QUBITS, GateInstance, Measurement, QuantumCircuit,
)
from quantum_composer.engine.errors import CircuitValidationError
from quantum_composer.engine.gate_registry import GateRegistry

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Edit commands
# ---------------------------------------------------------------------------

class AddGateCommand(QUndoCommand):
    """Places a gate. The id assigned on the first redo survives undo/redo."""

    def __init__(self, circuit: QuantumCircuit, gate: GateInstance, text: str = ""):
        super().__init__(text or f"Add {gate.name}")
        self._circuit = circuit
        self._template = gate
        self._stored: GateInstance | None = None

    @property
    def stored_gate(self) -> GateInstance | None:
        return self._stored

    def redo(self) -> None:
        if self._stored is None:
            self._stored = self._circuit.add_gate(self._template)
        else:
            self._circuit.insert_gate(self._stored)

    def undo(self) -> None:
        if self._stored is not None:
            self._circuit.remove_gate(self._stored.id)


class RemoveGateCommand(QUndoCommand):
    """Takes a gate out and puts it back at the same list index on undo."""

    def __init__(self, circuit: QuantumCircuit, gate: GateInstance, text: str = ""):
        super().__init__(text or f"Remove {gate.name}")
        self._circuit = circuit
        self._removed = gate
        self._index = circuit.index_of(gate.id)

    def redo(self) -> None:
        self._index = self._circuit.index_of(self._removed.id)
        self._circuit.remove_gate(self._removed.id)

    def undo(self) -> None:
        self._circuit.insert_gate(self._removed, self._index)


class _SnapshotCommand(QUndoCommand):
    """Undo restores the register size, gates and measurements seen at creation."""

    def __init__(self, circuit: QuantumCircuit, text: str):
        super().__init__(text)
        self._circuit = circuit
        self._before = (circuit.num_qubits, list(circuit.gates),
                        list(circuit.measurements))

    def undo(self) -> None:
        num_qubits, gates, measurements = self._before
        self._circuit.gates = list(gates)
        self._circuit.measurements = list(measurements)
        self._circuit.num_qubits = num_qubits


class SetQubitCountCommand(_SnapshotCommand):
    """Resizes the register, dropping gates that fall off the end."""

    def __init__(self, circuit: QuantumCircuit, count: int):
        super().__init__(circuit, f"Set {count} qubits")
        self._count = count

    def redo(self) -> None:
        self._circuit.set_num_qubits(self._count)


class ClearCircuitCommand(_SnapshotCommand):
    """Empties the circuit but keeps the register size."""

    def __init__(self, circuit: QuantumCircuit):
        super().__init__(circuit, "Clear circuit")

    def redo(self) -> None:
        self._circuit.clear()


class ReplaceCircuitCommand(_SnapshotCommand):
    """Wholesale swap used by template load, import and backup restore.

    Gates drawn from another IdGenerator get new ids from the target
    circuit's generator once, at construction.
    """

    def __init__(self, circuit: QuantumCircuit, replacement: QuantumCircuit,
                 text: str = "Replace circuit"):
        super().__init__(circuit, text)
        ids = circuit.id_generator
        if replacement.id_generator is ids:
            gates = [g.copy() for g in replacement.gates]
        else:
            gates = [g.copy(new_id=ids.next_id()) for g in replacement.gates]
        self._after = (replacement.num_qubits, gates,
                       [Measurement(m.qubit, m.bit) for m in replacement.measurements])

    def redo(self) -> None:
        num_qubits, gates, measurements = self._after
        self._circuit.num_qubits = num_qubits
        self._circuit.gates = list(gates)
        self._circuit.measurements = list(measurements)


# ---------------------------------------------------------------------------
# Circuit Controller
# ---------------------------------------------------------------------------

@dataclass
class PendingPlacement:
    """A gate picked in the palette and waiting for its wires."""
    name: str
    parameters: list[float] | None = None


class CircuitController(QObject):
    """Controller that owns the QuantumCircuit model for the editor.

    All modifications are routed through a QUndoStack to enable undo/redo.
    Emits circuit_changed whenever the circuit is modified.
    """

    circuit_changed = pyqtSignal()
    selection_changed = pyqtSignal()
    placement_changed = pyqtSignal()

    def __init__(
        self,
        circuit: QuantumCircuit | None = None,
        store: KeyValueStore | None = None,
        parent: QObject | None = None,
        max_qubits: int = MAX_QUBITS,
    ):
        super().__init__(parent)

        self._max_qubits = max(1, min(max_qubits, MAX_QUBITS))

        self._circuit = circuit or QuantumCircuit()
        self._undo_stack = QUndoStack(self)
        self._gate_registry = GateRegistry.instance()
        self._store = store or MemoryStore()
        self._backups = BackupManager(self._store)
        self._custom_gates = CustomGateLibrary(self._store, self._circuit.id_generator)
        self._selected: list[str] = []
        self._pending: PendingPlacement | None = None

        # Re-emit circuit_changed when the undo stack index changes
        self._undo_stack.indexChanged.connect(self._on_stack_changed)

    @classmethod
    def from_config(cls, config: AppConfig,
                    parent: QObject | None = None) -> CircuitController:
        """Controller on an empty circuit of the configured size, persisting
        backups and custom gates under ``config.storage_path``."""
        return cls(
            QuantumCircuit(num_qubits=config.default_qubits),
            store=JsonFileStore(config.storage_path),
            parent=parent,
            max_qubits=config.max_qubits,
        )

    @property
    def circuit(self) -> QuantumCircuit:
        """The underlying circuit model."""
        return self._circuit

    @property
    def undo_stack(self) -> QUndoStack:
        """The undo stack for this controller."""
        return self._undo_stack

    @property
    def backups(self) -> BackupManager:
        return self._backups

    @property
    def custom_gates(self) -> CustomGateLibrary:
        return self._custom_gates

    def _on_stack_changed(self, _index: int) -> None:
        self._prune_selection()
        self.circuit_changed.emit()

    # ------------------------------------------------------------------
    # Public modification methods
    # ------------------------------------------------------------------

    def _checked(self, gate: GateInstance) -> GateInstance:
        """Reject a gate the current register cannot hold."""
        self._gate_registry.get(gate.name)  # Raises if not found
        problems = self._circuit.gate_problems(gate)
        if problems:
            raise CircuitValidationError(problems)
        return gate

    def add_gate(
        self,
        gate_name: str,
        qubits: list[int],
        position: int = 0,
        parameters: list[float] | None = None,
    ) -> GateInstance:
        """Add a gate to the circuit and return the stored instance.

        Args:
            gate_name: Name of the gate (must exist in GateRegistry).
            qubits: Qubit indices, control(s) first for controlled gates.
            position: Column index in the circuit.
            parameters: Angles for rotation gates; catalogue defaults if omitted.
        """
        gate_def = self._gate_registry.get(gate_name)
        if parameters is None and gate_def.is_parameterized:
            parameters = list(gate_def.default_params)
        gate = self._checked(GateInstance(
            name=gate_def.name,
            qubits=list(qubits),
            parameters=list(parameters) if parameters is not None else None,
            position=position,
        ))
        cmd = AddGateCommand(self._circuit, gate)
        self._undo_stack.push(cmd)
        return cmd.stored_gate

    def remove_gate(self, gate_id: str) -> None:
        """Remove a gate by id; unknown ids are ignored."""
        gate = self._circuit.get_gate(gate_id)
        if gate is not None:
            self._undo_stack.push(RemoveGateCommand(self._circuit, gate))

    def remove_selected_gates(self) -> None:
        """Remove every selected gate as a single undoable action."""
        gates = [g for g in (self._circuit.get_gate(i) for i in self._selected) if g]
        if not gates:
            return
        self._undo_stack.beginMacro("Remove selected gates")
        for gate in gates:
            self._undo_stack.push(RemoveGateCommand(self._circuit, gate))
        self._undo_stack.endMacro()

    def set_qubit_count(self, count: int) -> None:
        """Set the number of qubits in the circuit.

        Gates touching qubits beyond the new count are dropped in the same step.
        """
        if count == self._circuit.num_qubits:
            return
        if count < 1 or count > self.max_qubits:
            raise ValueError(f"num_qubits must be 1-{self.max_qubits}, got {count}")
        self._undo_stack.push(SetQubitCountCommand(self._circuit, count))

    @property
    def max_qubits(self) -> int:
        return self._max_qubits

    def clear_circuit(self) -> None:
        """Remove all gates from the circuit."""
        if not self._circuit.gates and not self._circuit.measurements:
            return
        self._undo_stack.push(ClearCircuitCommand(self._circuit))

    def replace_circuit(self, replacement: QuantumCircuit,
                        description: str = "Replace circuit") -> None:
        problems = replacement.problems(strict_names=False)
        if problems:
            raise CircuitValidationError(problems)
        self._undo_stack.push(
            ReplaceCircuitCommand(self._circuit, replacement, description))

    def load_template(self, template_id: str) -> bool:
        """Replace the circuit with a prebuilt algorithm. False if unknown."""
        algorithm = PREBUILT_ALGORITHMS.get(template_id)
        if algorithm is None:
            logger.warning("Unknown algorithm template: %s", template_id)
            return False
        self.replace_circuit(algorithm.build(), f"Load {algorithm.name}")
        return True

    # ------------------------------------------------------------------
    # Interchange
    # ------------------------------------------------------------------

    def export_circuit(self) -> str:
        return CircuitSerializer.to_json(self._circuit)

    def import_circuit(self, text: str) -> None:
        """Replace the circuit with a JSON document.

        Raises CircuitImportError and leaves the circuit untouched when the
        document is malformed.
        """
        imported = CircuitSerializer.from_json(text, self._circuit.id_generator)
        self.replace_circuit(imported, "Import circuit")
        logger.info("Imported circuit with %d gate(s)", imported.gate_count())

    # ------------------------------------------------------------------
    # Pending placement
    # ------------------------------------------------------------------

    @property
    def pending_placement(self) -> PendingPlacement | None:
        return self._pending

    def begin_placement(self, gate_name: str,
                        parameters: list[float] | None = None) -> PendingPlacement:
        gate_def = self._gate_registry.get(gate_name)
        if parameters is None and gate_def.is_parameterized:
            parameters = list(gate_def.default_params)
        self._pending = PendingPlacement(gate_def.name, parameters)
        self.placement_changed.emit()
        return self._pending

    def place_pending(self, qubits: list[int], position: int = 0) -> GateInstance | None:
        """Drop the pending gate onto ``qubits``. No-op without one."""
        if self._pending is None:
            return None
        pending = self._pending
        gate = self.add_gate(pending.name, qubits, position, pending.parameters)
        self._pending = None
        self.placement_changed.emit()
        return gate

    def cancel_placement(self) -> None:
        if self._pending is not None:
            self._pending = None
            self.placement_changed.emit()

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    @property
    def selected_gate_ids(self) -> list[str]:
        return list(self._selected)

    def toggle_gate_selection(self, gate_id: str) -> None:
        if gate_id in self._selected:
            self._selected.remove(gate_id)
        elif self._circuit.get_gate(gate_id) is not None:
            self._selected.append(gate_id)
        else:
            return
        self.selection_changed.emit()

    def clear_selection(self) -> None:
        if self._selected:
            self._selected = []
            self.selection_changed.emit()

    def _prune_selection(self) -> None:
        kept = [i for i in self._selected if self._circuit.get_gate(i) is not None]
        if kept != self._selected:
            self._selected = kept
            self.selection_changed.emit()

    # ------------------------------------------------------------------
    # Backups and custom gates
    # ------------------------------------------------------------------

    def save_backup(self, name: str, description: str | None = None) -> CircuitBackup:
        return self._backups.save(self._circuit, name, description)

    def restore_backup(self, backup_id: str) -> bool:
        restored = self._backups.load(backup_id, self._circuit.id_generator)
        if restored is None:
            return False
        self.replace_circuit(restored, "Restore backup")
        return True

    def create_custom_gate(self, name: str, initial: str,
                           description: str = "") -> CustomGate:
        """Capture the selected gates as a custom gate and clear the selection."""
        custom = self._custom_gates.create_from_selection(
            self._circuit, self._selected, name, initial, description)
        self.clear_selection()
        return custom

    def apply_custom_gate(self, custom_id: str) -> list[GateInstance]:
        """Replay a custom gate at its original qubit indices."""
        custom = self._custom_gates.get(custom_id)
        if custom is None:
            raise KeyError(f"Custom gate '{custom_id}' not found")
        if custom.num_qubits > self._circuit.num_qubits:
            raise CircuitValidationError([
                f"Custom gate '{custom.name}' needs {custom.num_qubits} qubits, "
                f"circuit has {self._circuit.num_qubits}"])
        # add_gate issues the ids, so the captured gates go in as templates
        gates = [self._checked(g) for g in custom.gates]
        commands = [AddGateCommand(self._circuit, g) for g in gates]
        self._undo_stack.beginMacro(f"Apply {custom.name}")
        for cmd in commands:
            self._undo_stack.push(cmd)
        self._undo_stack.endMacro()
        return [cmd.stored_gate for cmd in commands]

    # ------------------------------------------------------------------
    # Undo / Redo
    # ------------------------------------------------------------------

    def undo(self) -> None:
        """Undo the last circuit modification."""
        self._undo_stack.undo()

    def redo(self) -> None:
        """Redo the last undone circuit modification."""
        self._undo_stack.redo()

    def can_undo(self) -> bool:
        return self._undo_stack.canUndo()

    def can_redo(self) -> bool:
        return self._undo_stack.canRedo()

"""Gate catalogue using the Singleton pattern.

``get`` is strict and is what the engine uses. The ``arity``/``cost``/
``default_params`` lookups are tolerant so display, export and scoring paths
never fail on a name they do not know.
"""

from __future__ import annotations

import math

from .errors import UnknownGateError
from .gates import (
    GateDefinition, GateType, _const,
    X_MATRIX, Y_MATRIX, Z_MATRIX, H_MATRIX,
    S_MATRIX, S_DAG_MATRIX, T_MATRIX, T_DAG_MATRIX,
    CNOT_MATRIX, CZ_MATRIX, CY_MATRIX, SWAP_MATRIX, TOFFOLI_MATRIX,
    rx_matrix, ry_matrix, rz_matrix, u3_matrix,
)

HALF_PI = math.pi / 2

# Alternate spellings accepted on import.
_ALIASES = {
    "SDG": "S†",
    "S_DAG": "S†",
    "TDG": "T†",
    "T_DAG": "T†",
    "CNOT": "CX",
    "TOFFOLI": "CCX",
}

# name, display name, symbol, palette color, unitary
_FIXED_SINGLE = (
    ("H", "Hadamard", "H", "#4A90D9", H_MATRIX),
    ("X", "Pauli-X", "X", "#E74C3C", X_MATRIX),
    ("Y", "Pauli-Y", "Y", "#2ECC71", Y_MATRIX),
    ("Z", "Pauli-Z", "Z", "#9B59B6", Z_MATRIX),
    ("S", "Phase (S)", "S", "#F1C40F", S_MATRIX),
    ("S†", "Phase dagger (S†)", "S†", "#D4AC0D", S_DAG_MATRIX),
    ("T", "π/8 (T)", "T", "#EC407A", T_MATRIX),
    ("T†", "π/8 dagger (T†)", "T†", "#D81B60", T_DAG_MATRIX),
)

# name, display name, color, matrix function, parameter names, cost
_ROTATIONS = (
    ("RX", "X rotation", "#F1948A", rx_matrix, ("θ",), 1),
    ("RY", "Y rotation", "#82E0AA", ry_matrix, ("θ",), 1),
    ("RZ", "Z rotation", "#BB8FCE", rz_matrix, ("θ",), 1),
    ("U3", "General rotation", "#5C6BC0", u3_matrix, ("θ", "φ", "λ"), 3),
)

# name, display name, symbol, color, unitary, kind, arity, controls, cost
_MULTI = (
    ("CX", "Controlled-NOT", "CX", "#FF9800", CNOT_MATRIX, GateType.CONTROLLED, 2, 1, 5),
    ("CZ", "Controlled-Z", "CZ", "#00BCD4", CZ_MATRIX, GateType.CONTROLLED, 2, 1, 5),
    ("CY", "Controlled-Y", "CY", "#009688", CY_MATRIX, GateType.CONTROLLED, 2, 1, 5),
    ("SWAP", "Swap", "SW", "#9E9E9E", SWAP_MATRIX, GateType.MULTI, 2, 0, 3),
    ("CCX", "Toffoli", "CCX", "#F43F5E", TOFFOLI_MATRIX, GateType.CONTROLLED, 3, 2, 7),
)


def canonical_name(name: str) -> str:
    """Map an alias such as ``CNOT`` or ``SDG`` to its catalogue name."""
    return _ALIASES.get(name.upper(), name) if isinstance(name, str) else name


class GateRegistry:
    """Singleton registry mapping gate names to GateDefinition objects."""

    _instance: GateRegistry | None = None

    def __init__(self):
        self._gates: dict[str, GateDefinition] = {}

    @classmethod
    def instance(cls) -> GateRegistry:
        if cls._instance is None:
            cls._instance = cls()
            cls._instance._register_builtins()
        return cls._instance

    @classmethod
    def reset(cls):
        """Reset the singleton (for testing)."""
        cls._instance = None

    def _register_builtins(self):
        for name, display, symbol, color, matrix in _FIXED_SINGLE:
            self.register(GateDefinition(
                name=name, display_name=display, gate_type=GateType.SINGLE,
                num_qubits=1, num_params=0, param_names=(),
                matrix_func=_const(matrix), symbol=symbol, color=color))

        for name, display, color, func, params, cost in _ROTATIONS:
            self.register(GateDefinition(
                name=name, display_name=display, gate_type=GateType.SINGLE,
                num_qubits=1, num_params=len(params), param_names=params,
                matrix_func=func, symbol=name, color=color, cost=cost,
                default_params=(HALF_PI,) * len(params)))

        for name, display, symbol, color, matrix, kind, arity, controls, cost in _MULTI:
            self.register(GateDefinition(
                name=name, display_name=display, gate_type=kind,
                num_qubits=arity, num_params=0, param_names=(),
                matrix_func=_const(matrix), symbol=symbol, color=color,
                cost=cost, num_controls=controls))

    def register(self, gate_def: GateDefinition):
        self._gates[gate_def.name] = gate_def

    def get(self, name: str) -> GateDefinition:
        gate_def = self.find(name)
        if gate_def is None:
            raise UnknownGateError(name)
        return gate_def

    def find(self, name: str) -> GateDefinition | None:
        return self._gates.get(canonical_name(name))

    def is_supported(self, name: str) -> bool:
        return self.find(name) is not None

    # -- tolerant lookups ------------------------------------------------

    def arity(self, name: str) -> int:
        gate_def = self.find(name)
        return gate_def.num_qubits if gate_def else 1

    def cost(self, name: str) -> int:
        gate_def = self.find(name)
        return gate_def.cost if gate_def else 1

    def default_params(self, name: str) -> tuple[float, ...]:
        gate_def = self.find(name)
        return gate_def.default_params if gate_def else ()

    # -- listings --------------------------------------------------------

    def all_gates(self) -> list[GateDefinition]:
        return list(self._gates.values())

    def single_qubit_gates(self) -> list[GateDefinition]:
        return [g for g in self._gates.values()
                if g.gate_type == GateType.SINGLE and not g.is_parameterized]

    def rotation_gates(self) -> list[GateDefinition]:
        return [g for g in self._gates.values() if g.is_parameterized]

    def multi_qubit_gates(self) -> list[GateDefinition]:
        return [g for g in self._gates.values()
                if g.gate_type in (GateType.CONTROLLED, GateType.MULTI)]

    def gate_names(self) -> list[str]:
        return list(self._gates.keys())

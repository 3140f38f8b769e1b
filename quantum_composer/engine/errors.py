"""Exception hierarchy shared by the engine, serializer and controllers."""

from __future__ import annotations


class QuantumComposerError(Exception):
    """Base class for all errors raised by quantum_composer."""


class CircuitValidationError(QuantumComposerError, ValueError):
    """A circuit is structurally invalid and must not be simulated."""

    def __init__(self, problems: list[str]):
        self.problems = list(problems)
        super().__init__("; ".join(self.problems) or "invalid circuit")


class UnknownGateError(QuantumComposerError, KeyError):
    """A gate name is not part of the catalogue."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(name)

    def __str__(self) -> str:
        return f"Gate '{self.name}' not found in registry"


class CircuitImportError(QuantumComposerError, ValueError):
    """A circuit document could not be parsed."""

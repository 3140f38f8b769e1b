"""Core quantum state representation using state vectors."""

from __future__ import annotations

import numpy as np

from .circuit import MAX_QUBITS

_INV_SQRT2 = 1.0 / np.sqrt(2.0)


class StateVector:
    """Represents an n-qubit quantum state as a complex numpy array.

    Basis index ``i`` reads as an n-bit string with qubit 0 as the most
    significant bit, so qubit ``q`` lives at bit position ``n - 1 - q``.

    H, X, Z and CX use dedicated bitmask kernels. Every other gate goes
    through tensor contraction, avoiding construction of the full
    2^n x 2^n unitary.
    """

    def __init__(self, num_qubits: int):
        if num_qubits < 1 or num_qubits > MAX_QUBITS:
            raise ValueError(f"num_qubits must be 1-{MAX_QUBITS}, got {num_qubits}")
        self._num_qubits = num_qubits
        self._data = np.zeros(2 ** num_qubits, dtype=np.complex128)
        self._data[0] = 1.0 + 0.0j  # |00...0>
        self._indices = np.arange(2 ** num_qubits)

    @property
    def num_qubits(self) -> int:
        return self._num_qubits

    @property
    def data(self) -> np.ndarray:
        return self._data

    @data.setter
    def data(self, value: np.ndarray):
        if value.shape != (2 ** self._num_qubits,):
            raise ValueError(f"Expected shape ({2**self._num_qubits},), got {value.shape}")
        self._data = value.astype(np.complex128)

    @property
    def probabilities(self) -> np.ndarray:
        """Returns |amplitude|^2 for each basis state."""
        return np.abs(self._data) ** 2

    def norm(self) -> float:
        return float(np.sqrt(np.sum(self.probabilities)))

    def bitmask(self, qubit: int) -> int:
        self._check_qubit(qubit)
        return 1 << (self._num_qubits - 1 - qubit)

    def basis_label(self, index: int) -> str:
        return format(index, f"0{self._num_qubits}b")

    def _check_qubit(self, qubit: int):
        if qubit < 0 or qubit >= self._num_qubits:
            raise ValueError(f"Qubit index {qubit} out of range [0, {self._num_qubits - 1}]")

    # ------------------------------------------------------------------
    # Bitmask kernels
    # ------------------------------------------------------------------

    def apply_h(self, qubit: int):
        """Hadamard: each (|..0..>, |..1..>) pair is mixed exactly once."""
        mask = self.bitmask(qubit)
        low = self._indices[(self._indices & mask) == 0]
        high = low | mask
        a = self._data[low].copy()
        b = self._data[high].copy()
        self._data[low] = (a + b) * _INV_SQRT2
        self._data[high] = (a - b) * _INV_SQRT2

    def apply_x(self, qubit: int):
        """Pauli-X: swap every amplitude with its bit-flipped partner."""
        mask = self.bitmask(qubit)
        self._data = self._data[self._indices ^ mask]

    def apply_z(self, qubit: int):
        """Pauli-Z: negate amplitudes whose qubit bit is 1."""
        mask = self.bitmask(qubit)
        self._data[(self._indices & mask) != 0] *= -1

    def apply_cx(self, control: int, target: int):
        """CNOT: bit-flip the target wherever the control bit is 1."""
        if control == target:
            raise ValueError("CX control and target must differ")
        cmask = self.bitmask(control)
        tmask = self.bitmask(target)
        source = np.where((self._indices & cmask) != 0,
                          self._indices ^ tmask, self._indices)
        self._data = self._data[source]

    # ------------------------------------------------------------------
    # General unitary action
    # ------------------------------------------------------------------

    def apply_gate(self, gate_matrix: np.ndarray, target_qubits: list[int]):
        """Act with a 2^k x 2^k unitary on ``target_qubits``.

        The first target is the most significant row/column bit of
        ``gate_matrix``. Costs O(2^n * 4^k); the full 2^n operator is
        never formed.
        """
        n = self._num_qubits
        targets = list(target_qubits)
        k = len(targets)

        for q in targets:
            self._check_qubit(q)
        if len(set(targets)) != k:
            raise ValueError(f"Target qubits must be distinct, got {targets}")
        if gate_matrix.shape != (2 ** k, 2 ** k):
            raise ValueError(
                f"Gate matrix shape {gate_matrix.shape} does not match {k} qubit(s)")

        # One axis per qubit, axis q <-> qubit q
        psi = self._data.reshape((2,) * n)
        # Output axes 0..k-1, input axes k..2k-1
        op = gate_matrix.reshape((2,) * (2 * k))
        out = np.tensordot(op, psi, axes=(list(range(k, 2 * k)), targets))
        # tensordot leaves the k output axes in front
        out = np.moveaxis(out, list(range(k)), targets)
        self._data = np.ascontiguousarray(out).reshape(2 ** n)

    # ------------------------------------------------------------------
    # Reduced views
    # ------------------------------------------------------------------

    def get_reduced_density_matrix(self, qubit: int) -> np.ndarray:
        """2x2 density matrix of ``qubit`` with every other qubit traced out."""
        self._check_qubit(qubit)
        left = 2 ** qubit
        right = 2 ** (self._num_qubits - qubit - 1)
        psi = self._data.reshape(left, 2, right)
        return np.einsum('aib,ajb->ij', psi, psi.conj())

    def get_bloch_coordinates(self, qubit: int) -> tuple[float, float, float]:
        """(x, y, z) with x = 2 Re rho01, y = 2 Im rho10, z = rho00 - rho11."""
        rho = self.get_reduced_density_matrix(qubit)
        return (float(2.0 * rho[0, 1].real),
                float(2.0 * rho[1, 0].imag),
                float((rho[0, 0] - rho[1, 1]).real))

    def copy(self) -> StateVector:
        clone = StateVector.__new__(StateVector)
        clone._num_qubits = self._num_qubits
        clone._data = self._data.copy()
        clone._indices = self._indices
        return clone

    def reset(self):
        """Back to |00...0>."""
        self._data = np.zeros_like(self._data)
        self._data[0] = 1.0

    def __repr__(self) -> str:
        return f"StateVector(num_qubits={self._num_qubits})"

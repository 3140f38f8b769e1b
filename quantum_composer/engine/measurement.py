"""Shot sampling and measurement-result summaries."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Mapping

import numpy as np

from .analysis import shannon_entropy

DEFAULT_SHOTS = 1024

# Outcomes above this share of the shots count as "effective" states.
EFFECTIVE_STATE_FRACTION = 0.01


class MeasurementEngine:
    """Turns an exact probability distribution into shot counts."""

    @staticmethod
    def _normalised(probabilities: Mapping[str, float]) -> tuple[list[str], np.ndarray]:
        if not probabilities:
            raise ValueError("probability distribution is empty")
        labels = list(probabilities)
        probs = np.array([probabilities[k] for k in labels], dtype=float)
        if np.any(probs < 0):
            raise ValueError("probabilities must be non-negative")
        total = probs.sum()
        if total <= 1e-15:
            raise ValueError("probabilities sum to zero")
        return labels, probs / total

    @staticmethod
    def sample(probabilities: Mapping[str, float], shots: int,
               rng: np.random.Generator | None = None) -> dict[str, int]:
        """Sample 'shots' measurement outcomes.

        Uses numpy multinomial, so the counts always sum to ``shots``.
        """
        if shots < 0:
            raise ValueError(f"shots must be non-negative, got {shots}")
        rng = rng or np.random.default_rng()
        labels, probs = MeasurementEngine._normalised(probabilities)
        counts_array = rng.multinomial(shots, probs)
        return {label: int(c) for label, c in zip(labels, counts_array) if c > 0}

    @staticmethod
    def expected_counts(probabilities: Mapping[str, float],
                        shots: int) -> dict[str, int]:
        """Deterministic counts: round(P * shots) with the remainder
        handed out by largest fractional part so the total is exact.
        """
        if shots < 0:
            raise ValueError(f"shots must be non-negative, got {shots}")
        labels, probs = MeasurementEngine._normalised(probabilities)
        raw = probs * shots
        floors = np.floor(raw).astype(int)
        remainder = shots - int(floors.sum())
        # Stable sort keeps ties in distribution order
        order = np.argsort(-(raw - floors), kind="stable")
        for idx in order[:remainder]:
            floors[idx] += 1
        return {label: int(c) for label, c in zip(labels, floors) if c > 0}


@dataclass
class MeasurementSummary:
    """Shot table plus the statistics shown next to the histogram."""
    total_shots: int
    execution_time_ms: float
    counts: dict[str, int] = field(default_factory=dict)
    entropy: float = 0.0
    effective_states: int = 0

    @classmethod
    def from_counts(cls, counts: Mapping[str, int], shots: int,
                    execution_time_ms: float = 0.0) -> MeasurementSummary:
        counts = {k: int(v) for k, v in counts.items()}
        threshold = shots * EFFECTIVE_STATE_FRACTION
        return cls(
            total_shots=shots,
            execution_time_ms=float(execution_time_ms),
            counts=counts,
            entropy=shannon_entropy(counts),
            effective_states=sum(1 for c in counts.values() if c > threshold),
        )

    def probabilities(self) -> dict[str, float]:
        if self.total_shots <= 0:
            return {}
        return {k: v / self.total_shots for k, v in self.counts.items()}

    def most_likely(self) -> str | None:
        if not self.counts:
            return None
        return max(self.counts, key=lambda k: (self.counts[k], k))

    @property
    def shots_per_second(self) -> float:
        if self.execution_time_ms <= 0:
            return math.inf
        return self.total_shots / (self.execution_time_ms / 1000.0)

    def to_dict(self) -> dict:
        return {
            "total_shots": self.total_shots,
            "execution_time_ms": self.execution_time_ms,
            "counts": dict(self.counts),
            "entropy": self.entropy,
            "effective_states": self.effective_states,
        }

"""Application configuration management."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from quantum_composer.engine.analysis import PROBABILITY_EPSILON
from quantum_composer.engine.circuit import MAX_QUBITS
from quantum_composer.engine.measurement import DEFAULT_SHOTS

logger = logging.getLogger(__name__)

_PERSISTED_FIELDS = (
    "theme", "default_qubits", "default_shots", "result_delay_ms",
    "max_qubits", "probability_epsilon", "storage_dir", "recent_files",
    "last_directory",
)


@dataclass
class AppConfig:
    """Persistent application configuration."""
    theme: str = "light"
    default_qubits: int = 4
    default_shots: int = DEFAULT_SHOTS
    result_delay_ms: int = 1500
    max_qubits: int = MAX_QUBITS
    probability_epsilon: float = PROBABILITY_EPSILON
    storage_dir: str = ""
    recent_files: list[str] = field(default_factory=list)
    last_directory: str = ""

    _config_dir: Path = field(
        default_factory=lambda: Path.home() / ".quantum_composer",
        repr=False)

    @property
    def config_path(self) -> Path:
        return self._config_dir / "config.json"

    @property
    def storage_path(self) -> Path:
        """Directory for backups, custom gates and preferences."""
        return Path(self.storage_dir) if self.storage_dir else self._config_dir / "store"

    def save(self):
        self._config_dir.mkdir(parents=True, exist_ok=True)
        data = {key: getattr(self, key) for key in _PERSISTED_FIELDS}
        data["recent_files"] = self.recent_files[:10]  # Keep last 10
        with open(self.config_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)

    @classmethod
    def load(cls, config_dir: Path | str | None = None) -> AppConfig:
        config = cls() if config_dir is None else cls(_config_dir=Path(config_dir))
        if config.config_path.exists():
            try:
                with open(config.config_path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
                for key, value in data.items():
                    if key in _PERSISTED_FIELDS:
                        setattr(config, key, value)
            except (json.JSONDecodeError, OSError) as exc:
                logger.warning("Ignoring unreadable config %s: %s",
                               config.config_path, exc)
        config.max_qubits = max(1, min(int(config.max_qubits), MAX_QUBITS))
        config.default_qubits = max(1, min(int(config.default_qubits), config.max_qubits))
        return config

    def add_recent_file(self, filepath: str):
        if filepath in self.recent_files:
            self.recent_files.remove(filepath)
        self.recent_files.insert(0, filepath)
        self.recent_files = self.recent_files[:10]

"""YAML-backed persistence for user-tunable tracking settings."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from .sensitivity import SensitivityConfig

logger = logging.getLogger(__name__)

PERSISTED_KEYS = (
    "sensitivity_x",
    "sensitivity_y",
    "sensitivity_z",
    "enable_x",
    "enable_y",
    "enable_z",
    "target_fps",
)


class SettingsStore:
    """Reads and writes a flat ``key: value`` YAML file of persisted settings."""

    def __init__(self, path: str | os.PathLike):
        self.path = Path(path)

    def load(self) -> dict[str, Any]:
        """Persisted values for known keys; a missing file yields {}."""
        if not self.path.exists():
            return {}
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ValueError(f"failed to read settings file {self.path}: {exc}") from exc
        try:
            loaded = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ValueError(f"failed to parse settings file {self.path}: {exc}") from exc

        if loaded is None:
            return {}
        if not isinstance(loaded, dict):
            raise ValueError(
                f"settings file root must be a mapping, got {type(loaded).__name__}"
            )

        values: dict[str, Any] = {}
        for key, value in loaded.items():
            if key not in PERSISTED_KEYS:
                logger.warning("[SETTINGS] ignoring unknown key %r in %s", key, self.path)
                continue
            values[key] = value
        return values

    def save(self, sensitivity: SensitivityConfig, target_fps: int) -> None:
        data = {
            "sensitivity_x": float(sensitivity.sensitivity_x),
            "sensitivity_y": float(sensitivity.sensitivity_y),
            "sensitivity_z": float(sensitivity.sensitivity_z),
            "enable_x": bool(sensitivity.enable_x),
            "enable_y": bool(sensitivity.enable_y),
            "enable_z": bool(sensitivity.enable_z),
            "target_fps": int(target_fps),
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
        os.replace(tmp_path, self.path)
        logger.info("[SETTINGS] saved -> %s", self.path)

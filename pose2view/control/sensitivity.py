"""Per-axis sensitivity settings."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_SENSITIVITY_X = 3440.0
DEFAULT_SENSITIVITY_Y = 1780.0
DEFAULT_SENSITIVITY_Z = 0.01


@dataclass(frozen=True, slots=True)
class SensitivityConfig:
    """Pan/zoom gains; a disabled axis behaves as sensitivity 0."""

    sensitivity_x: float = DEFAULT_SENSITIVITY_X
    sensitivity_y: float = DEFAULT_SENSITIVITY_Y
    sensitivity_z: float = DEFAULT_SENSITIVITY_Z
    enable_x: bool = True
    enable_y: bool = True
    enable_z: bool = True

    @property
    def effective_x(self) -> float:
        return float(self.sensitivity_x) if self.enable_x else 0.0

    @property
    def effective_y(self) -> float:
        return float(self.sensitivity_y) if self.enable_y else 0.0

    @property
    def effective_z(self) -> float:
        return float(self.sensitivity_z) if self.enable_z else 0.0

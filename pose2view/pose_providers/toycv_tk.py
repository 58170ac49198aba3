"""ToyCV-style Tk sliders for head position."""

from __future__ import annotations

import tkinter as tk
from typing import Optional

import numpy as np

from ..control.pose import PoseSample
from ..control.pose_provider import COMMAND_RECENTER, COMMAND_RESET, PoseProvider


class ToyCvTkPoseProvider(PoseProvider):
    """Debug provider in face-landmarker units (translation cm, anchor normalized)."""

    tick_ms = 16

    def __init__(self, title: str = "Pose2View - ToyCV Head Position"):
        self.root = tk.Tk()
        self.root.title(title)

        self._var_x = tk.DoubleVar(value=0.0)
        self._var_y = tk.DoubleVar(value=0.0)
        self._var_z = tk.DoubleVar(value=-50.0)
        self._var_sx = tk.DoubleVar(value=0.5)
        self._var_sy = tk.DoubleVar(value=0.5)
        self._var_use_stable = tk.IntVar(value=1)
        self._var_detected = tk.IntVar(value=1)

        self._on_tick = None
        self._on_command = None
        self._closed = False
        self._build_ui()
        self.root.protocol("WM_DELETE_WINDOW", self._handle_close)

    def _build_ui(self) -> None:
        def add_slider(label: str, var: tk.DoubleVar, lo: float, hi: float, res: float) -> None:
            tk.Label(self.root, text=label).pack(anchor="w", padx=10, pady=2)
            tk.Scale(
                self.root,
                from_=lo,
                to=hi,
                orient="horizontal",
                resolution=res,
                length=520,
                variable=var,
            ).pack(padx=10, pady=2)

        add_slider("Head x (cm)   [-30..30]", self._var_x, -30.0, 30.0, 0.1)
        add_slider("Head y (cm)   [-30..30]", self._var_y, -30.0, 30.0, 0.1)
        add_slider("Head z (cm)   [-120..-10]", self._var_z, -120.0, -10.0, 0.5)
        add_slider("Eye midpoint x [0..1]", self._var_sx, 0.0, 1.0, 0.001)
        add_slider("Eye midpoint y [0..1]", self._var_sy, 0.0, 1.0, 0.001)
        tk.Checkbutton(
            self.root, text="Report eye midpoint (stable point)", variable=self._var_use_stable
        ).pack(anchor="w", padx=10, pady=2)
        tk.Checkbutton(self.root, text="Face detected", variable=self._var_detected).pack(
            anchor="w", padx=10, pady=2
        )

        buttons = tk.Frame(self.root)
        buttons.pack(padx=10, pady=6)
        tk.Button(buttons, text="Recenter", command=lambda: self._emit(COMMAND_RECENTER)).pack(
            side="left", padx=4
        )
        tk.Button(buttons, text="Reset", command=lambda: self._emit(COMMAND_RESET)).pack(
            side="left", padx=4
        )

        self._stats = tk.Label(self.root, text="", justify="left", font=("Consolas", 10))
        self._stats.pack(padx=10, pady=8)

    def _emit(self, command: str) -> None:
        if self._on_command is not None:
            self._on_command(command)

    def _handle_close(self) -> None:
        self._closed = True
        self.root.destroy()

    def get_sample(self) -> Optional[PoseSample]:
        if int(self._var_detected.get()) != 1:
            return None
        stable = None
        if int(self._var_use_stable.get()) == 1:
            stable = np.array(
                [float(self._var_sx.get()), float(self._var_sy.get()), 0.0],
                dtype=np.float64,
            )
        return PoseSample(
            translation=np.array(
                [
                    float(self._var_x.get()),
                    float(self._var_y.get()),
                    float(self._var_z.get()),
                ],
                dtype=np.float64,
            ),
            stable_point=stable,
        )

    def set_status(self, text: str) -> None:
        if not self._closed:
            self._stats.config(text=text)

    def run(self, on_tick, on_command=None):
        self._on_tick = on_tick
        self._on_command = on_command
        self.root.after(self.tick_ms, self._tick)
        self.root.mainloop()

    def _tick(self) -> None:
        if self._closed:
            return
        if self._on_tick is not None:
            self._on_tick()
        self.root.after(self.tick_ms, self._tick)

    def close(self) -> None:
        if not self._closed:
            self._handle_close()

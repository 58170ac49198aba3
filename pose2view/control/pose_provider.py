"""Pose provider interface for head position samples."""

from __future__ import annotations

from typing import Callable, Optional

from .pose import PoseSample

# Commands a provider's UI may emit back to the app.
COMMAND_RECENTER = "recenter"
COMMAND_RESET = "reset"
COMMAND_QUIT = "quit"


class PoseProvider:
    """Base interface for head pose providers.

    Implementations may be UI-based (ToyCV) or real CV (MediaPipe).
    """

    # True when run() already calls cv2.waitKey on every iteration.
    pumps_window_events = False

    def get_sample(self) -> Optional[PoseSample]:
        """Latest pose sample, or None when no face/head is detected."""
        raise NotImplementedError

    def set_status(self, text: str) -> None:
        # Optional UI hook.
        pass

    def run(
        self,
        on_tick: Callable[[], None],
        on_command: Callable[[str], None] | None = None,
    ) -> None:
        """Run the provider's event loop and call on_tick periodically."""
        raise NotImplementedError

    def close(self) -> None:
        pass

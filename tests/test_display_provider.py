import logging

from pose2view.control.display_provider import DisplayFrame, TuiDisplayProvider
from pose2view.control.pose_provider import PoseProvider


class _StatusPoseProvider(PoseProvider):
    def __init__(self):
        self.status = ""

    def get_sample(self):
        return None

    def set_status(self, text: str) -> None:
        self.status = text

    def run(self, on_tick, on_command=None):
        raise NotImplementedError


def _frame(tracked: bool) -> DisplayFrame:
    return DisplayFrame(
        tracked=tracked,
        distance=1.25 if tracked else None,
        angular_size=28.0 if tracked else None,
        display_percent=50.0,
        scale=2.0,
        offset_x=10.0,
        offset_y=-5.0,
        pan_offset_x=10.0,
        pan_offset_y=5.0,
        frames_processed=3,
        frames_skipped=1,
    )


def test_scroll_mode_logs_tracking_state(caplog):
    pose = _StatusPoseProvider()
    display = TuiDisplayProvider(pose_provider=pose, cli_output="scroll")
    with caplog.at_level(logging.INFO, logger="pose2view.control.display_provider"):
        display.update(_frame(tracked=True))
        display.update(_frame(tracked=False))
    messages = [r.getMessage() for r in caplog.records]
    assert any("distance=1.25m" in m for m in messages)
    assert any("face not detected" in m for m in messages)
    assert "face not detected" in pose.status


def test_status_text_reports_scale_and_offsets():
    pose = _StatusPoseProvider()
    TuiDisplayProvider(pose_provider=pose, cli_output="scroll").update(_frame(tracked=True))
    assert "scale 2.000" in pose.status
    assert "distance 1.25 m" in pose.status

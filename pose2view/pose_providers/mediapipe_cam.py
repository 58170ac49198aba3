"""MediaPipe monocular-camera head position provider."""

from __future__ import annotations

import logging
import os
import shutil
import time
import urllib.request
from pathlib import Path
from typing import Optional

import cv2
import mediapipe as mp

from ..control.pose import PoseSample
from ..control.pose_provider import (
    COMMAND_QUIT,
    COMMAND_RECENTER,
    COMMAND_RESET,
    PoseProvider,
)
from ..math3d.face_geometry import stable_point_from_landmarks, translation_from_matrix

logger = logging.getLogger(__name__)


def _resolve_task_model(model_path: str, model_url: str) -> Path:
    """Local Face Landmarker bundle, fetched from ``model_url`` on first use."""
    path = Path(model_path)
    if path.is_file():
        return path
    if not model_url:
        raise RuntimeError(
            f"Face Landmarker model not found at {path}; "
            "pass --mp-task-model or --mp-task-url."
        )

    path.parent.mkdir(parents=True, exist_ok=True)
    partial = path.with_name(path.name + ".part")
    logger.info("[POSE] fetching face landmarker model %s -> %s", model_url, path)
    try:
        with urllib.request.urlopen(model_url, timeout=60) as response, partial.open("wb") as out:
            shutil.copyfileobj(response, out)
    except (OSError, ValueError) as exc:
        partial.unlink(missing_ok=True)
        raise RuntimeError(f"Could not fetch face landmarker model from {model_url}: {exc}") from exc
    os.replace(partial, path)
    logger.info("[POSE] face landmarker model saved (%d bytes)", path.stat().st_size)
    return path


_KEY_COMMANDS = {
    27: COMMAND_QUIT,
    ord("q"): COMMAND_QUIT,
    ord("Q"): COMMAND_QUIT,
    ord("r"): COMMAND_RECENTER,
    ord("R"): COMMAND_RECENTER,
    ord("x"): COMMAND_RESET,
    ord("X"): COMMAND_RESET,
}


class MediaPipeCamPoseProvider(PoseProvider):
    """
    Webcam-based head position provider.

    Runs the MediaPipe Face Landmarker in VIDEO mode and reports the
    translation of the facial transformation matrix (centimeters, camera
    space) plus the inner-eye midpoint as a rotation-insensitive anchor.

    Keys are read from the active OpenCV window:
    [q/ESC] quit, [r] recenter, [x] full reset.
    """

    pumps_window_events = True

    def __init__(
        self,
        camera_index: int = 0,
        camera_width: int = 1280,
        camera_height: int = 720,
        mirror: bool = True,
        task_model_path: str = "assets/models/face_landmarker.task",
        task_model_url: str = "",
    ):
        self.camera_index = int(camera_index)
        self.camera_width = int(camera_width)
        self.camera_height = int(camera_height)
        self.mirror = bool(mirror)
        self.task_model_path = str(task_model_path)
        self.task_model_url = str(task_model_url)

        self._status_text = ""
        self._closed = False
        self._sample: Optional[PoseSample] = None

        self.cap = cv2.VideoCapture(self.camera_index, cv2.CAP_DSHOW)
        if not self.cap.isOpened():
            self.cap.release()
            self.cap = cv2.VideoCapture(self.camera_index)
        if not self.cap.isOpened():
            raise RuntimeError(f"Cannot open webcam index {self.camera_index}")

        if self.camera_width > 0:
            self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.camera_width)
        if self.camera_height > 0:
            self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.camera_height)

        model_path = _resolve_task_model(self.task_model_path, self.task_model_url)

        try:
            BaseOptions = mp.tasks.BaseOptions
            FaceLandmarker = mp.tasks.vision.FaceLandmarker
            FaceLandmarkerOptions = mp.tasks.vision.FaceLandmarkerOptions
            RunningMode = mp.tasks.vision.RunningMode
        except (AttributeError, ImportError) as exc:
            raise RuntimeError(
                "mediapipe.tasks is unavailable. Please upgrade mediapipe (>=0.10)."
            ) from exc
        options = FaceLandmarkerOptions(
            base_options=BaseOptions(model_asset_path=str(model_path)),
            running_mode=RunningMode.VIDEO,
            num_faces=1,
            min_face_detection_confidence=0.5,
            min_face_presence_confidence=0.5,
            min_tracking_confidence=0.5,
            output_face_blendshapes=False,
            output_facial_transformation_matrixes=True,
        )
        self._landmarker = FaceLandmarker.create_from_options(options)
        self._video_ts_ms = 0
        self._t0 = time.monotonic()

        logger.info(
            "[POSE] provider=mediapipe (camera=%s, mirror=%s, task=%s)",
            self.camera_index,
            self.mirror,
            model_path,
        )

    def _extract_sample(self, result) -> Optional[PoseSample]:
        if not result.face_landmarks or not result.facial_transformation_matrixes:
            return None
        translation = translation_from_matrix(result.facial_transformation_matrixes[0])
        if translation is None:
            return None
        return PoseSample(
            translation=translation,
            stable_point=stable_point_from_landmarks(result.face_landmarks[0]),
        )

    def get_sample(self) -> Optional[PoseSample]:
        return self._sample

    def set_status(self, text: str) -> None:
        self._status_text = text

    def run(self, on_tick, on_command=None):
        while not self._closed:
            ok, frame = self.cap.read()
            if ok:
                if self.mirror:
                    frame = cv2.flip(frame, 1)
                rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
                mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb)
                ts_ms = int((time.monotonic() - self._t0) * 1000.0)
                self._video_ts_ms = max(self._video_ts_ms + 1, ts_ms)
                result = self._landmarker.detect_for_video(mp_image, self._video_ts_ms)
                self._sample = self._extract_sample(result)
            else:
                self._sample = None
                time.sleep(0.01)

            on_tick()

            key = cv2.waitKey(1) & 0xFF
            command = _KEY_COMMANDS.get(key)
            if command == COMMAND_QUIT:
                break
            if command is not None and on_command is not None:
                on_command(command)

        self.close()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._landmarker.close()
        except (AttributeError, RuntimeError):
            pass
        try:
            self.cap.release()
        except (AttributeError, cv2.error):
            pass

"""OpenCV window render sink for the background image."""

from __future__ import annotations

import logging

import cv2
import numpy as np

from ..control.render_sink import RenderSink, source_rect

logger = logging.getLogger(__name__)


class CvWindowRenderSink(RenderSink):
    """Draws the viewport sub-rectangle of an image into a resizable window."""

    def __init__(
        self,
        image_path: str,
        title: str = "Pose2View",
        window_width: int = 1280,
        window_height: int = 720,
    ):
        image = cv2.imread(str(image_path), cv2.IMREAD_COLOR)
        if image is None:
            raise RuntimeError(f"Cannot read background image: {image_path}")
        self.image: np.ndarray = image
        self.window_name = title
        self._display_w = int(window_width)
        self._display_h = int(window_height)
        self._closed = False

        cv2.namedWindow(self.window_name, cv2.WINDOW_NORMAL)
        cv2.resizeWindow(self.window_name, self._display_w, self._display_h)

        h, w = self.image.shape[:2]
        logger.info(
            "[RENDER] image %s loaded: %dx%d px (%.2f MP), window %dx%d",
            image_path,
            w,
            h,
            w * h / 1_000_000.0,
            self._display_w,
            self._display_h,
        )

    def image_size(self) -> tuple[int, int]:
        h, w = self.image.shape[:2]
        return int(w), int(h)

    def display_size(self) -> tuple[int, int]:
        return self._display_w, self._display_h

    def poll_resize(self) -> bool:
        """Refresh the stored window size; True when it changed."""
        try:
            _, _, w, h = cv2.getWindowImageRect(self.window_name)
        except cv2.error:
            return False
        if w <= 0 or h <= 0 or (w, h) == (self._display_w, self._display_h):
            return False
        self._display_w, self._display_h = int(w), int(h)
        return True

    def render(self, scale: float, offset_x: float, offset_y: float) -> None:
        if self._closed:
            return
        img_w, img_h = self.image_size()
        rect = source_rect(img_w, img_h, scale, offset_x, offset_y)
        x0 = int(round(rect.x))
        y0 = int(round(rect.y))
        x1 = min(img_w, x0 + max(1, int(round(rect.width))))
        y1 = min(img_h, y0 + max(1, int(round(rect.height))))
        crop = self.image[y0:y1, x0:x1]
        frame = cv2.resize(
            crop,
            (max(1, self._display_w), max(1, self._display_h)),
            interpolation=cv2.INTER_LINEAR,
        )
        cv2.imshow(self.window_name, frame)

    def pump(self) -> None:
        # HighGUI only repaints inside waitKey.
        if not self._closed:
            cv2.waitKey(1)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            cv2.destroyWindow(self.window_name)
        except cv2.error:
            pass

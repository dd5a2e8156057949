"""OpenCV video source for the camera detection method."""

from __future__ import annotations

from collections.abc import Generator
from dataclasses import dataclass
from pathlib import Path

import cv2
import numpy as np
from numpy.typing import NDArray

from kinemotion.core.exceptions import AcquisitionError
from kinemotion.core.logging import get_logger

logger = get_logger(__name__)


@dataclass(slots=True)
class VideoFrame:
    """A decoded video frame with its position in the stream."""

    image: NDArray[np.uint8]
    timestamp: float  # seconds from stream start
    index: int


class CameraSource:
    """Scoped frame reader over a video file or capture device.

    Args:
        source: Path to a video file or an integer device index
    """

    def __init__(self, source: Path | str | int) -> None:
        self.source = source if isinstance(source, int) else str(source)
        self._capture: cv2.VideoCapture | None = None
        self._frame_idx = 0
        self._fps = 0.0

    @property
    def is_open(self) -> bool:
        return self._capture is not None

    @property
    def frame_count(self) -> int:
        """Number of frames read so far."""
        return self._frame_idx

    @property
    def fps(self) -> float:
        return self._fps

    def open(self) -> None:
        """Open the capture.

        Raises:
            AcquisitionError: If the source cannot be opened
        """
        capture = cv2.VideoCapture(self.source)
        if not capture.isOpened():
            capture.release()
            raise AcquisitionError(f"Cannot open video source {self.source!r}")

        self._capture = capture
        self._fps = float(capture.get(cv2.CAP_PROP_FPS) or 0.0)
        self._frame_idx = 0
        logger.info("Camera source opened: %s (%.1f fps)", self.source, self._fps)

    def close(self) -> None:
        """Release the capture."""
        if self._capture is not None:
            self._capture.release()
            self._capture = None
            logger.info("Camera source closed (read %d frames)", self._frame_idx)

    def frames(self) -> Generator[VideoFrame, None, None]:
        """Yield frames until the stream ends.

        Timestamps come from the container when it provides them and from
        the frame rate otherwise.
        """
        if self._capture is None:
            self.open()
        assert self._capture is not None

        while True:
            ok, image = self._capture.read()
            if not ok or image is None:
                break

            position_ms = self._capture.get(cv2.CAP_PROP_POS_MSEC)
            if position_ms and position_ms > 0:
                timestamp = position_ms / 1000.0
            elif self._fps > 0:
                timestamp = self._frame_idx / self._fps
            else:
                timestamp = float(self._frame_idx)

            yield VideoFrame(image=image, timestamp=timestamp, index=self._frame_idx)
            self._frame_idx += 1

    def __iter__(self) -> Generator[VideoFrame, None, None]:
        return self.frames()

    def __enter__(self) -> CameraSource:
        self.open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        self.close()

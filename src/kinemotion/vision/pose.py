"""MediaPipe pose estimation wrapper using the Tasks API."""

from __future__ import annotations

import urllib.request
from pathlib import Path

import cv2
import mediapipe as mp
import numpy as np
from mediapipe.tasks import python
from mediapipe.tasks.python import vision
from numpy.typing import NDArray

from kinemotion.core.config import PoseSettings
from kinemotion.core.exceptions import PoseEstimationError
from kinemotion.core.logging import get_logger
from kinemotion.core.types import LandmarkFrame, Point2D

logger = get_logger(__name__)

MODEL_URL = (
    "https://storage.googleapis.com/mediapipe-models/pose_landmarker/"
    "pose_landmarker_{variant}/float16/latest/pose_landmarker_{variant}.task"
)
MODEL_VARIANTS = {0: "lite", 1: "full", 2: "heavy"}


def ensure_model(settings: PoseSettings) -> Path:
    """Download the pose landmarker model for the configured complexity.

    Returns:
        Path to the local model file

    Raises:
        PoseEstimationError: If download fails
    """
    variant = MODEL_VARIANTS[settings.model_complexity]
    model_path = Path(settings.model_dir) / f"pose_landmarker_{variant}.task"
    if model_path.exists():
        return model_path

    logger.info("Downloading MediaPipe pose landmarker (%s)...", variant)
    model_path.parent.mkdir(parents=True, exist_ok=True)
    try:
        urllib.request.urlretrieve(MODEL_URL.format(variant=variant), model_path)
    except Exception as e:
        raise PoseEstimationError(f"Failed to download model: {e}") from e

    logger.info("Model downloaded to %s", model_path)
    return model_path


class PoseEstimator:
    """Turns BGR video frames into LandmarkFrames.

    MediaPipe result objects never leave this class.
    """

    def __init__(self, settings: PoseSettings | None = None) -> None:
        """Initialize pose estimator with settings.

        Args:
            settings: Pose estimation settings (uses defaults if None)
        """
        self.settings = settings or PoseSettings()
        self._landmarker: vision.PoseLandmarker | None = None

    @property
    def is_initialized(self) -> bool:
        return self._landmarker is not None

    def initialize(self) -> None:
        """Load the MediaPipe pose model.

        Raises:
            PoseEstimationError: If the model fails to load
        """
        try:
            options = vision.PoseLandmarkerOptions(
                base_options=python.BaseOptions(
                    model_asset_path=str(ensure_model(self.settings))
                ),
                running_mode=vision.RunningMode.VIDEO,
                num_poses=1,
                min_pose_detection_confidence=self.settings.min_detection_confidence,
                min_pose_presence_confidence=self.settings.min_tracking_confidence,
                min_tracking_confidence=self.settings.min_tracking_confidence,
            )
            self._landmarker = vision.PoseLandmarker.create_from_options(options)
        except PoseEstimationError:
            raise
        except Exception as e:
            raise PoseEstimationError(f"Failed to initialize MediaPipe: {e}") from e

        logger.info("MediaPipe PoseLandmarker initialized")

    def close(self) -> None:
        """Release MediaPipe resources."""
        if self._landmarker is not None:
            self._landmarker.close()
            self._landmarker = None

    def estimate(self, image: NDArray[np.uint8], timestamp: float) -> LandmarkFrame | None:
        """Run pose estimation on one frame.

        Args:
            image: BGR image
            timestamp: Frame time in seconds; must increase between calls

        Returns:
            Landmarks of the first detected person, or None if nobody is found

        Raises:
            PoseEstimationError: If estimation fails
        """
        if self._landmarker is None:
            self.initialize()
        assert self._landmarker is not None

        try:
            rgb = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
            mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb)
            results = self._landmarker.detect_for_video(mp_image, int(timestamp * 1000))
        except Exception as e:
            raise PoseEstimationError(f"Estimation failed: {e}") from e

        if not results.pose_landmarks:
            return None

        landmarks: list[Point2D | None] = [
            Point2D(
                x=float(lm.x),
                y=float(lm.y),
                visibility=float(lm.visibility if lm.visibility is not None else 1.0),
            )
            for lm in results.pose_landmarks[0]
        ]
        return LandmarkFrame(landmarks=landmarks, timestamp=timestamp)

    def __enter__(self) -> PoseEstimator:
        self.initialize()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        self.close()

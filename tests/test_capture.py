"""Tests for the OpenCV and MediaPipe adapters that need no camera or network."""

from __future__ import annotations

from pathlib import Path

import cv2
import numpy as np
import pytest

from kinemotion.core.config import PoseSettings
from kinemotion.core.exceptions import AcquisitionError
from kinemotion.vision.capture import CameraSource
from kinemotion.vision.pose import PoseEstimator, ensure_model


def _write_video(path: Path, frames: int = 6, fps: float = 30.0) -> Path:
    writer = cv2.VideoWriter(str(path), cv2.VideoWriter_fourcc(*"MJPG"), fps, (64, 48))
    for i in range(frames):
        image = np.full((48, 64, 3), i * 30, dtype=np.uint8)
        writer.write(image)
    writer.release()
    return path


class TestCameraSource:
    """Tests for the scoped video reader."""

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(AcquisitionError):
            CameraSource(tmp_path / "absent.avi").open()

    def test_reads_all_frames(self, tmp_path: Path) -> None:
        """Frames come out in order with increasing timestamps."""
        path = _write_video(tmp_path / "clip.avi")
        with CameraSource(path) as camera:
            frames = list(camera)
            assert camera.frame_count == 6

        assert not camera.is_open
        assert [f.index for f in frames] == list(range(6))
        timestamps = [f.timestamp for f in frames]
        assert timestamps == sorted(timestamps)
        assert frames[0].image.shape == (48, 64, 3)


class TestPoseModel:
    """Tests for model resolution."""

    def test_existing_model_is_reused(self, tmp_path: Path) -> None:
        """A model already on disk is not downloaded again."""
        model = tmp_path / "pose_landmarker_heavy.task"
        model.write_bytes(b"stub")
        settings = PoseSettings(model_complexity=2, model_dir=str(tmp_path))

        assert ensure_model(settings) == model

    def test_estimator_starts_uninitialized(self) -> None:
        estimator = PoseEstimator()
        assert not estimator.is_initialized
        estimator.close()

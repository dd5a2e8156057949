"""Pytest fixtures for Kinemotion tests."""

from __future__ import annotations

import math

import pytest

from kinemotion.core.config import (
    AdviceSettings,
    AnalysisSettings,
    FusionSettings,
    Settings,
    StorageSettings,
)
from kinemotion.core.types import (
    DetectionMethod,
    Gender,
    JumpProtocol,
    LandmarkFrame,
    LandmarkIndex,
    MotionSample,
    Point2D,
    Subject,
    TestConfiguration,
    Vector3,
)
from kinemotion.sensors.live import five_phase_force

SHIN = 0.2
THIGH = 0.2
NUM_LANDMARKS = 33


def _leg(
    landmarks: list[Point2D | None],
    hip: LandmarkIndex,
    knee: LandmarkIndex,
    ankle: LandmarkIndex,
    x: float,
    knee_angle: float,
    foot_y: float,
    visibility: float,
) -> None:
    """Place one leg with the ankle on ``foot_y`` and the given knee angle."""
    theta = math.radians(knee_angle)
    knee_y = foot_y - SHIN
    landmarks[ankle.value] = Point2D(x, foot_y, visibility)
    landmarks[knee.value] = Point2D(x, knee_y, 0.9)
    landmarks[hip.value] = Point2D(
        x + THIGH * math.sin(theta), knee_y + THIGH * math.cos(theta), visibility
    )


def make_frame(
    timestamp: float,
    knee_angle: float = 180.0,
    foot_y: float = 0.9,
    visibility: float = 0.9,
    left_knee_angle: float | None = None,
) -> LandmarkFrame:
    """Synthetic pose frame with both legs placed."""
    landmarks: list[Point2D | None] = [None] * NUM_LANDMARKS
    _leg(
        landmarks,
        LandmarkIndex.RIGHT_HIP,
        LandmarkIndex.RIGHT_KNEE,
        LandmarkIndex.RIGHT_ANKLE,
        0.55,
        knee_angle,
        foot_y,
        visibility,
    )
    _leg(
        landmarks,
        LandmarkIndex.LEFT_HIP,
        LandmarkIndex.LEFT_KNEE,
        LandmarkIndex.LEFT_ANKLE,
        0.45,
        knee_angle if left_knee_angle is None else left_knee_angle,
        foot_y,
        visibility,
    )
    return LandmarkFrame(landmarks=landmarks, timestamp=timestamp)


def five_phase_motion(
    mass_kg: float = 70.0, rate_hz: int = 100, pitch_degrees: float = 0.0
) -> list[MotionSample]:
    """IMU samples reproducing the five-phase CMJ force trace.

    The device is held at a fixed pitch without rotating; flat by default,
    so the force shows up on the z axis only.
    """
    body_weight = mass_kg * 9.81
    pitch = math.radians(pitch_degrees)
    samples = []
    for i in range(round(2.3 * rate_hz)):
        force = five_phase_force(i * 1000.0 / rate_hz, body_weight)
        samples.append(
            MotionSample(
                timestamp=i / rate_hz,
                acceleration=Vector3(
                    0.0, force / mass_kg * math.sin(pitch), force / mass_kg * math.cos(pitch)
                ),
                rotation_rate=Vector3(0.0, 0.0, 0.0),
            )
        )
    return samples


@pytest.fixture
def subject() -> Subject:
    """70 kg adult athlete."""
    return Subject(height_cm=178.0, weight_kg=70.0, age_years=24, gender=Gender.MALE)


@pytest.fixture
def cmj_imu_config() -> TestConfiguration:
    return TestConfiguration(protocol=JumpProtocol.CMJ, method=DetectionMethod.IMU)


@pytest.fixture
def cmj_camera_config() -> TestConfiguration:
    return TestConfiguration(protocol=JumpProtocol.CMJ, method=DetectionMethod.CAMERA)


@pytest.fixture
def dj_imu_config() -> TestConfiguration:
    return TestConfiguration(
        protocol=JumpProtocol.DJ, method=DetectionMethod.IMU, drop_height_cm=30.0
    )


@pytest.fixture
def dj_camera_config() -> TestConfiguration:
    return TestConfiguration(
        protocol=JumpProtocol.DJ, method=DetectionMethod.CAMERA, drop_height_cm=30.0
    )


@pytest.fixture
def fusion_settings() -> FusionSettings:
    return FusionSettings()


@pytest.fixture
def analysis_settings() -> AnalysisSettings:
    return AnalysisSettings()


@pytest.fixture
def advice_settings() -> AdviceSettings:
    return AdviceSettings()


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Default settings with history under a temp directory."""
    return Settings(
        storage=StorageSettings(history_path=str(tmp_path / "history.json")),
    )


@pytest.fixture
def standing_frame() -> LandmarkFrame:
    """Upright pose, both knees straight."""
    return make_frame(0.0)

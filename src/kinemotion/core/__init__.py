"""Core infrastructure: config, types, exceptions, and logging."""

from kinemotion.core.config import Settings, get_settings
from kinemotion.core.exceptions import (
    AcquisitionError,
    HistoryStorageError,
    InsufficientSamplesError,
    KinemotionError,
    PoseEstimationError,
    SessionStateError,
)
from kinemotion.core.logging import get_logger, setup_logging
from kinemotion.core.types import (
    AnalysisResult,
    CameraAngle,
    DetectionMethod,
    ForceSample,
    JointAngleSample,
    JumpMetrics,
    JumpProtocol,
    LandmarkFrame,
    MotionSample,
    OrientationEstimate,
    Point2D,
    Recording,
    SessionState,
    Subject,
    TestConfiguration,
    Vector3,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Types
    "Point2D",
    "Vector3",
    "LandmarkFrame",
    "MotionSample",
    "JointAngleSample",
    "ForceSample",
    "OrientationEstimate",
    "JumpProtocol",
    "DetectionMethod",
    "CameraAngle",
    "TestConfiguration",
    "Subject",
    "SessionState",
    "Recording",
    "JumpMetrics",
    "AnalysisResult",
    # Exceptions
    "KinemotionError",
    "AcquisitionError",
    "PoseEstimationError",
    "SessionStateError",
    "InsufficientSamplesError",
    "HistoryStorageError",
    # Logging
    "setup_logging",
    "get_logger",
]

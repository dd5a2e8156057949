"""Core data types and structures."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum, auto


class JumpProtocol(Enum):
    """Jump test protocols."""

    CMJ = "CMJ"  # Countermovement jump
    SJ = "SJ"  # Squat jump
    DJ = "DJ"  # Drop jump


class DetectionMethod(Enum):
    """Where the kinematic samples come from."""

    CAMERA = "CAMERA"
    IMU = "IMU"


class CameraAngle(Enum):
    """Camera placement relative to the athlete."""

    SAGITTAL = "SAGITTAL"  # Side view
    FRONTAL = "FRONTAL"  # Front view


class Gender(Enum):
    """Subject gender as entered on the setup screen."""

    MALE = "Male"
    FEMALE = "Female"


class SessionState(Enum):
    """States in the capture session state machine."""

    IDLE = auto()
    RECORDING = auto()
    ANALYZING = auto()
    COMPLETE = auto()


class ForceProvenance(Enum):
    """Origin of a live force value."""

    MEASURED = auto()
    SYNTHETIC = auto()


class LandmarkIndex(Enum):
    """MediaPipe pose landmark indices (lower-body subset)."""

    LEFT_HIP = 23
    RIGHT_HIP = 24
    LEFT_KNEE = 25
    RIGHT_KNEE = 26
    LEFT_ANKLE = 27
    RIGHT_ANKLE = 28
    LEFT_HEEL = 29
    RIGHT_HEEL = 30


@dataclass(frozen=True, slots=True)
class Point2D:
    """A single body landmark projected onto the image plane.

    Coordinates are whatever the pose producer emits (normalized [0, 1] for
    MediaPipe); z is dropped.
    """

    x: float
    y: float
    visibility: float = 1.0


@dataclass(frozen=True, slots=True)
class Vector3:
    """Three-axis sensor reading."""

    x: float
    y: float
    z: float

    @property
    def magnitude(self) -> float:
        """Euclidean norm."""
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def dot(self, other: Vector3) -> float:
        """Dot product with another vector."""
        return self.x * other.x + self.y * other.y + self.z * other.z


@dataclass(frozen=True, slots=True)
class MotionSample:
    """One device-motion event.

    Attributes:
        timestamp: Event time in seconds (producer clock)
        acceleration: Acceleration including gravity in m/s^2
        rotation_rate: Gyro rate in rad/s, if the device reports one
    """

    timestamp: float
    acceleration: Vector3
    rotation_rate: Vector3 | None = None


@dataclass(slots=True)
class LandmarkFrame:
    """Landmarks produced by the pose estimator for one video frame.

    Attributes:
        landmarks: Landmarks by MediaPipe index (None where not detected)
        timestamp: Frame time in seconds (producer clock)
    """

    landmarks: list[Point2D | None]
    timestamp: float

    def get_landmark(self, index: LandmarkIndex) -> Point2D | None:
        """Get a specific landmark by its enum index."""
        if index.value >= len(self.landmarks):
            return None
        return self.landmarks[index.value]


@dataclass(frozen=True, slots=True)
class JointAngleSample:
    """Joint angle at a point in session time."""

    time_seconds: float
    angle_degrees: float


@dataclass(frozen=True, slots=True)
class TimeSeriesPoint:
    """Generic chart point (angle, force, foot height)."""

    time: float
    value: float


@dataclass(frozen=True, slots=True)
class ForceSample:
    """One entry of the live force window."""

    time_millis: float
    force_newtons: float
    provenance: ForceProvenance = ForceProvenance.MEASURED


@dataclass(slots=True)
class OrientationEstimate:
    """Complementary filter state in radians."""

    pitch_radians: float = 0.0
    roll_radians: float = 0.0

    @property
    def pitch_degrees(self) -> float:
        return math.degrees(self.pitch_radians)

    @property
    def roll_degrees(self) -> float:
        return math.degrees(self.roll_radians)


@dataclass(frozen=True, slots=True)
class TestConfiguration:
    """Test setup, fixed for the duration of a session."""

    protocol: JumpProtocol
    method: DetectionMethod
    camera_angle: CameraAngle = CameraAngle.SAGITTAL
    drop_height_cm: float | None = None


@dataclass(frozen=True, slots=True)
class Subject:
    """Athlete profile, fixed for the duration of a session."""

    height_cm: float
    weight_kg: float
    age_years: int
    gender: Gender

    def body_weight_n(self, gravity: float = 9.81) -> float:
        """Body weight in newtons."""
        return self.weight_kg * gravity


@dataclass(frozen=True, slots=True)
class Recording:
    """Frozen session buffer handed to the metrics engine.

    Attributes:
        knee_angle: Primary-side knee angle series
        contralateral_knee_angle: Opposite-side knee angle series (camera only)
        foot_height: Lowest foot y per frame (camera only, image coordinates)
        grf: Ground reaction force series in newtons (IMU only)
        duration_s: Session time between start and stop
        primary_side: Body side of ``knee_angle`` ("right" or "left")
    """

    knee_angle: tuple[JointAngleSample, ...] = ()
    contralateral_knee_angle: tuple[JointAngleSample, ...] = ()
    foot_height: tuple[TimeSeriesPoint, ...] = ()
    grf: tuple[TimeSeriesPoint, ...] = ()
    duration_s: float = 0.0
    primary_side: str = "right"


@dataclass(frozen=True, slots=True)
class JumpMetrics:
    """Derived jump performance metrics.

    Attributes:
        jump_height_cm: Height from the flight-time method
        flight_time_ms: Airborne time of the jump
        max_knee_flexion_degrees: 180 minus the smallest recorded knee angle
        contact_time_ms: Ground contact before take-off (drop jump only)
        rsi: Reactive strength index (drop jump only)
        asymmetry_percent: Right vs left flexion difference, positive = right
        peak_power_watts: Peak of force times centre-of-mass velocity
        impulse_height_cm: Height from take-off velocity (impulse-momentum)
    """

    jump_height_cm: float
    flight_time_ms: float
    max_knee_flexion_degrees: float
    contact_time_ms: float | None = None
    rsi: float | None = None
    asymmetry_percent: float | None = None
    peak_power_watts: float | None = None
    impulse_height_cm: float | None = None


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    """Outcome of one capture session."""

    id: str
    created_at: str
    config: TestConfiguration
    subject: Subject
    metrics: JumpMetrics
    knee_angle_series: tuple[TimeSeriesPoint, ...] = ()
    grf_series: tuple[TimeSeriesPoint, ...] = ()
    advice: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class LiveReadout:
    """Display-only snapshot for the live view; never persisted."""

    angle_degrees: float | None
    force_newtons: float
    is_fresh: bool
    provenance: ForceProvenance

"""IMU sensor fusion: complementary-filter orientation and force estimation.

This module is pure logic with NO I/O.
"""

from __future__ import annotations

import math

from kinemotion.core.config import FusionSettings
from kinemotion.core.logging import get_logger
from kinemotion.core.types import OrientationEstimate, Vector3

logger = get_logger(__name__)

_ZERO_RATE = Vector3(0.0, 0.0, 0.0)


def accelerometer_inclination(accel: Vector3) -> tuple[float, float]:
    """Pitch and roll implied by the gravity direction alone.

    Args:
        accel: Acceleration including gravity (m/s^2)

    Returns:
        (pitch, roll) in radians
    """
    pitch = math.atan2(accel.y, accel.z)
    roll = math.atan2(-accel.x, math.hypot(accel.y, accel.z))
    return pitch, roll


def ground_reaction_force(vertical_accel: float, mass: float, gravity: float = 9.81) -> float:
    """Ground reaction force from Newton's second law.

    Args:
        vertical_accel: Gravity-free vertical acceleration of the body (m/s^2)
        mass: Body mass (kg)
        gravity: Gravitational acceleration (m/s^2)

    Returns:
        Force in newtons; can be negative for noisy input
    """
    return mass * (vertical_accel + gravity)


class SensorFusionEstimator:
    """Complementary filter fusing gyro integration with accelerometer tilt.

    Gyro integration is accurate short-term but drifts; the accelerometer
    inclination is drift-free but noisy. Each update blends the two:

        new = alpha * (old + rate * dt) + (1 - alpha) * accel_angle

    Gyro x drives pitch, gyro y drives roll. One instance belongs to one
    capture session; its state is never shared.

    Alongside the plain filter a gated estimate is kept for the gravity
    projection and the flexion proxy. It only blends in the accelerometer
    while the reading is within ``tilt_gate_g`` of 1 g. Otherwise it follows
    the gyro alone, so body acceleration is never mistaken for tilt.
    """

    def __init__(self, settings: FusionSettings | None = None) -> None:
        """Initialize estimator.

        Args:
            settings: Fusion parameters (uses defaults if None)
        """
        self.settings = settings or FusionSettings()
        self.alpha = self.settings.complementary_alpha
        self.gravity = self.settings.gravity
        self._orientation = OrientationEstimate()
        self._tracked = OrientationEstimate()
        self._reference_pitch: float | None = None

    @property
    def orientation(self) -> OrientationEstimate:
        """Copy of the current orientation estimate."""
        return OrientationEstimate(
            pitch_radians=self._orientation.pitch_radians,
            roll_radians=self._orientation.roll_radians,
        )

    @property
    def is_seeded(self) -> bool:
        """Whether a reference orientation has been captured."""
        return self._reference_pitch is not None

    def reset(self) -> None:
        """Forget all filter memory."""
        self._orientation = OrientationEstimate()
        self._tracked = OrientationEstimate()
        self._reference_pitch = None

    def seed(self, accel: Vector3) -> OrientationEstimate:
        """Start the filter from the accelerometer inclination.

        Without a seed the estimate starts level and needs roughly
        ``dt / (1 - alpha)`` seconds to settle on a tilted device.

        Args:
            accel: First acceleration-including-gravity reading

        Returns:
            Seeded orientation
        """
        pitch, roll = accelerometer_inclination(accel)
        self._orientation = OrientationEstimate(pitch_radians=pitch, roll_radians=roll)
        self._tracked = OrientationEstimate(pitch_radians=pitch, roll_radians=roll)
        self._reference_pitch = pitch
        logger.debug(
            "Orientation seeded: pitch=%.1f roll=%.1f", math.degrees(pitch), math.degrees(roll)
        )
        return self.orientation

    def update_orientation(
        self,
        accel: Vector3,
        gyro: Vector3 | None,
        dt: float,
    ) -> OrientationEstimate:
        """Advance the filter by one sample.

        Args:
            accel: Acceleration including gravity (m/s^2)
            gyro: Rotation rate (rad/s); None is treated as no rotation
            dt: True elapsed time since the previous sample (s)

        Returns:
            Updated orientation estimate
        """
        if dt < 0:
            raise ValueError(f"dt must be non-negative, got {dt}")

        rate = gyro or _ZERO_RATE
        pitch_gyro = self._orientation.pitch_radians + rate.x * dt
        roll_gyro = self._orientation.roll_radians + rate.y * dt
        pitch_accel, roll_accel = accelerometer_inclination(accel)

        self._orientation.pitch_radians = self.alpha * pitch_gyro + (1 - self.alpha) * pitch_accel
        self._orientation.roll_radians = self.alpha * roll_gyro + (1 - self.alpha) * roll_accel

        tracked_pitch = self._tracked.pitch_radians + rate.x * dt
        tracked_roll = self._tracked.roll_radians + rate.y * dt
        if self.measures_tilt(accel):
            tracked_pitch = self.alpha * tracked_pitch + (1 - self.alpha) * pitch_accel
            tracked_roll = self.alpha * tracked_roll + (1 - self.alpha) * roll_accel
        self._tracked.pitch_radians = tracked_pitch
        self._tracked.roll_radians = tracked_roll

        if self._reference_pitch is None:
            self._reference_pitch = self._tracked.pitch_radians

        return self.orientation

    def measures_tilt(self, accel: Vector3) -> bool:
        """Whether a reading is close enough to 1 g to show the gravity direction."""
        return abs(accel.magnitude - self.gravity) <= self.settings.tilt_gate_g * self.gravity

    @property
    def tracked_orientation(self) -> OrientationEstimate:
        """Copy of the gated estimate used for projection and flexion."""
        return OrientationEstimate(
            pitch_radians=self._tracked.pitch_radians,
            roll_radians=self._tracked.roll_radians,
        )

    def vertical_acceleration(self, accel: Vector3) -> float:
        """Gravity-free acceleration along the estimated vertical axis.

        Projects the reading onto the gravity direction implied by the
        gated orientation and removes g.

        Args:
            accel: Acceleration including gravity (m/s^2)

        Returns:
            Vertical acceleration (m/s^2), positive upwards
        """
        pitch = self._tracked.pitch_radians
        roll = self._tracked.roll_radians
        gravity_dir = Vector3(
            -math.sin(roll),
            math.cos(roll) * math.sin(pitch),
            math.cos(roll) * math.cos(pitch),
        )
        return accel.dot(gravity_dir) - self.gravity

    def ground_reaction_force(self, vertical_accel: float, mass: float) -> float:
        """Ground reaction force ``mass * (vertical_accel + g)``."""
        return ground_reaction_force(vertical_accel, mass, self.gravity)

    def flexion_proxy_degrees(self) -> float:
        """Knee-angle stand-in for a thigh-mounted sensor.

        The gated pitch change since the reference orientation is taken as
        knee flexion, so a device at its starting inclination reads 180
        degrees.

        Returns:
            Angle in degrees within [0, 180]
        """
        if self._reference_pitch is None:
            return 180.0
        flexion = abs(math.degrees(self._tracked.pitch_radians - self._reference_pitch))
        return max(0.0, min(180.0, 180.0 - flexion))

"""Jump metrics derivation from a frozen session recording.

This module is pure logic with NO I/O and NO OpenCV imports.
"""

from __future__ import annotations

import math
import uuid
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timezone

import numpy as np
from numpy.typing import NDArray

from kinemotion.analysis.phases import (
    JumpPhases,
    find_airborne_runs,
    foot_airborne_mask,
    force_airborne_mask,
    select_jump_phases,
    series_arrays,
)
from kinemotion.core.config import AnalysisSettings
from kinemotion.core.exceptions import InsufficientSamplesError
from kinemotion.core.logging import get_logger
from kinemotion.core.types import (
    AnalysisResult,
    DetectionMethod,
    JointAngleSample,
    JumpMetrics,
    JumpProtocol,
    Recording,
    Subject,
    TestConfiguration,
    TimeSeriesPoint,
)

logger = get_logger(__name__)

GRAVITY = 9.81  # m/s^2


def jump_height_from_flight_time(flight_time_s: float, gravity: float = GRAVITY) -> float:
    """Flight-time method: ``h = g * t^2 / 8``.

    Assumes take-off and landing happen in the same body posture.

    Args:
        flight_time_s: Airborne time in seconds
        gravity: Gravitational acceleration (m/s^2)

    Returns:
        Jump height in centimeters
    """
    return (gravity * flight_time_s**2 / 8.0) * 100.0


def flight_time_from_jump_height(height_cm: float, gravity: float = GRAVITY) -> float:
    """Inverse of :func:`jump_height_from_flight_time`.

    Returns:
        Flight time in seconds
    """
    if height_cm <= 0:
        return 0.0
    return math.sqrt(8.0 * height_cm / (100.0 * gravity))


def reactive_strength_index(jump_height_cm: float, contact_time_ms: float) -> float:
    """RSI = jump height (m) / ground contact time (s); 0 without contact."""
    if contact_time_ms <= 0:
        return 0.0
    return (jump_height_cm / 100.0) / (contact_time_ms / 1000.0)


def asymmetry_index(left: float, right: float) -> float:
    """Percentage difference of right over left relative to their mean.

    Positive values mean the right side dominates. Returns 0 when the mean
    is zero.
    """
    avg = (left + right) / 2.0
    if avg == 0:
        return 0.0
    return (right - left) / avg * 100.0


def max_knee_flexion(series: Sequence[JointAngleSample]) -> float:
    """Peak knee flexion: 180 minus the smallest recorded knee angle.

    Raises:
        InsufficientSamplesError: If the series is empty
    """
    if not series:
        raise InsufficientSamplesError("No knee angle samples recorded")
    return 180.0 - min(s.angle_degrees for s in series)


@dataclass(frozen=True)
class ImpulseEstimate:
    """Impulse-momentum integration up to take-off."""

    takeoff_velocity: float  # m/s
    peak_power_watts: float

    def height_cm(self, gravity: float = GRAVITY) -> float:
        if self.takeoff_velocity <= 0:
            return 0.0
        return self.takeoff_velocity**2 / (2.0 * gravity) * 100.0


def estimate_impulse(
    times: NDArray[np.float64],
    force: NDArray[np.float64],
    body_weight_n: float,
    takeoff_idx: int,
    gravity: float = GRAVITY,
) -> ImpulseEstimate:
    """Integrate net force from the start of the recording to take-off.

    The athlete is assumed motionless at the first sample. Net force is
    taken against ``body_weight_n``, normally calibrated from quiet stance.

    Args:
        times: Sample times (s)
        force: Ground reaction force (N)
        body_weight_n: Body weight (N); mass is derived from it
        takeoff_idx: Index of the first airborne sample
        gravity: Gravitational acceleration

    Returns:
        Take-off velocity and peak propulsive power
    """
    t = times[: takeoff_idx + 1]
    f = np.clip(force[: takeoff_idx + 1], 0.0, None)

    mass = body_weight_n / gravity
    accel = (f - body_weight_n) / mass
    # Cumulative trapezoid
    increments = (accel[1:] + accel[:-1]) / 2.0 * np.diff(t)
    velocity = np.concatenate(([0.0], np.cumsum(increments)))

    power = f * velocity
    return ImpulseEstimate(
        takeoff_velocity=float(velocity[-1]),
        peak_power_watts=float(np.max(power)),
    )


class MetricsDerivationEngine:
    """Turns a frozen recording into jump metrics and chart series.

    Flight and contact times come from the recorded signal: the ground
    reaction force trace for IMU sessions, the foot trajectory for camera
    sessions.
    """

    def __init__(self, settings: AnalysisSettings | None = None, gravity: float = GRAVITY) -> None:
        """Initialize engine.

        Args:
            settings: Phase detection parameters (uses defaults if None)
            gravity: Gravitational acceleration (m/s^2)
        """
        self.settings = settings or AnalysisSettings()
        self.gravity = gravity

    def derive(
        self,
        recording: Recording,
        config: TestConfiguration,
        subject: Subject,
        result_id: str | None = None,
    ) -> AnalysisResult:
        """Compute the analysis result for one session.

        Args:
            recording: Frozen session buffer
            config: Test configuration
            subject: Athlete profile
            result_id: Identifier to use (random if None)

        Returns:
            AnalysisResult without advice

        Raises:
            InsufficientSamplesError: If no knee angle samples were recorded
        """
        flexion = max_knee_flexion(recording.knee_angle)
        drop_jump = config.protocol is JumpProtocol.DJ

        impulse: ImpulseEstimate | None = None
        if config.method is DetectionMethod.IMU:
            phases, impulse = self._force_phases(recording.grf, subject, drop_jump)
        else:
            phases = self._foot_phases(recording.foot_height, drop_jump)

        flight_time_s = phases.flight_time_s
        height_cm = jump_height_from_flight_time(flight_time_s, self.gravity)

        contact_ms: float | None = None
        rsi: float | None = None
        if phases.contact_time_s is not None:
            contact_ms = phases.contact_time_s * 1000.0
            rsi = reactive_strength_index(height_cm, contact_ms)

        asymmetry = self._asymmetry(recording)

        metrics = JumpMetrics(
            jump_height_cm=round(height_cm, 1),
            flight_time_ms=float(round(flight_time_s * 1000.0)),
            max_knee_flexion_degrees=round(flexion, 1),
            contact_time_ms=float(round(contact_ms)) if contact_ms is not None else None,
            rsi=round(rsi, 2) if rsi is not None else None,
            asymmetry_percent=round(asymmetry, 1) if asymmetry is not None else None,
            peak_power_watts=(
                float(round(impulse.peak_power_watts)) if impulse is not None else None
            ),
            impulse_height_cm=(
                round(impulse.height_cm(self.gravity), 1) if impulse is not None else None
            ),
        )

        logger.info(
            "Derived %s metrics: height=%.1f cm, flight=%.0f ms, flexion=%.1f deg",
            config.protocol.value,
            metrics.jump_height_cm,
            metrics.flight_time_ms,
            metrics.max_knee_flexion_degrees,
        )

        return AnalysisResult(
            id=result_id or uuid.uuid4().hex,
            created_at=datetime.now(timezone.utc).isoformat(),
            config=config,
            subject=subject,
            metrics=metrics,
            knee_angle_series=tuple(
                TimeSeriesPoint(time=s.time_seconds, value=s.angle_degrees)
                for s in recording.knee_angle
            ),
            grf_series=tuple(recording.grf),
        )

    def _force_phases(
        self,
        grf: Sequence[TimeSeriesPoint],
        subject: Subject,
        drop_jump: bool,
    ) -> tuple[JumpPhases, ImpulseEstimate | None]:
        """Flight/contact from the force trace, plus impulse if possible."""
        if not grf:
            logger.warning("No force samples recorded; flight time unavailable")
            return JumpPhases(flight=None), None

        times, force = series_arrays(grf)
        airborne = force_airborne_mask(
            force,
            subject.body_weight_n(self.gravity),
            fraction=self.settings.flight_force_fraction,
            min_threshold_n=self.settings.min_flight_force_n,
        )
        runs = find_airborne_runs(times, airborne)
        phases = select_jump_phases(runs, drop_jump, self.settings.min_flight_ms / 1000.0)

        impulse: ImpulseEstimate | None = None
        flight = phases.flight
        if (
            flight is not None
            and not drop_jump
            and flight.start_idx >= self.settings.min_force_samples
        ):
            body_weight = self._stance_body_weight(times, force, subject)
            impulse = estimate_impulse(times, force, body_weight, flight.start_idx, self.gravity)

        return phases, impulse

    def _stance_body_weight(
        self,
        times: NDArray[np.float64],
        force: NDArray[np.float64],
        subject: Subject,
    ) -> float:
        """Mean force over the opening quiet-stance window.

        Falls back to the subject's nominal weight when the window holds no
        usable samples.
        """
        window = force[times <= times[0] + self.settings.baseline_window_s]
        if window.size == 0 or float(np.mean(window)) <= 0:
            return subject.body_weight_n(self.gravity)

        body_weight = float(np.mean(window))
        logger.debug(
            "Stance body weight %.1f N (nominal %.1f N)",
            body_weight,
            subject.body_weight_n(self.gravity),
        )
        return body_weight

    def _foot_phases(self, foot_height: Sequence[TimeSeriesPoint], drop_jump: bool) -> JumpPhases:
        """Flight/contact from the foot trajectory."""
        if not foot_height:
            logger.warning("No foot samples recorded; flight time unavailable")
            return JumpPhases(flight=None)

        times, foot_y = series_arrays(foot_height)
        airborne = foot_airborne_mask(foot_y, self.settings.foot_lift_threshold)
        runs = find_airborne_runs(times, airborne)
        return select_jump_phases(runs, drop_jump, self.settings.min_flight_ms / 1000.0)

    @staticmethod
    def _asymmetry(recording: Recording) -> float | None:
        """Right-vs-left peak flexion asymmetry when both sides were tracked."""
        if not recording.knee_angle or not recording.contralateral_knee_angle:
            return None

        primary = max_knee_flexion(recording.knee_angle)
        other = max_knee_flexion(recording.contralateral_knee_angle)
        if recording.primary_side == "right":
            return asymmetry_index(left=other, right=primary)
        return asymmetry_index(left=primary, right=other)

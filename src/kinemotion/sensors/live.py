"""Live force readout for the capture view.

Values produced here feed the display only. They never enter the
analysis buffer.
"""

from __future__ import annotations

import math
from collections import deque

from kinemotion.core.config import FusionSettings
from kinemotion.core.logging import get_logger
from kinemotion.core.types import ForceProvenance, ForceSample, Vector3
from kinemotion.sensors.filters import ExponentialSmoother

logger = get_logger(__name__)

# (end of phase in ms, multiple of body weight)
FIVE_PHASE_PROFILE: tuple[tuple[float, float], ...] = (
    (1000.0, 1.0),  # quiet stance
    (1300.0, 0.4),  # unweighting
    (1600.0, 2.2),  # propulsion
    (2000.0, 0.0),  # flight
    (2300.0, 3.5),  # landing
)


def five_phase_force(elapsed_ms: float, body_weight_n: float) -> float:
    """Idealized countermovement-jump force trace.

    Args:
        elapsed_ms: Time since recording started
        body_weight_n: Athlete body weight in newtons

    Returns:
        Force in newtons; body weight after the landing phase
    """
    for phase_end, multiple in FIVE_PHASE_PROFILE:
        if elapsed_ms < phase_end:
            return body_weight_n * multiple
    return body_weight_n


class SyntheticForceWaveform:
    """Placeholder waveform shown while no real sensor data is arriving.

    Every sample it produces is tagged SYNTHETIC.
    """

    provenance = ForceProvenance.SYNTHETIC

    def __init__(self, body_weight_n: float) -> None:
        self.body_weight_n = body_weight_n

    def value(self, now_ms: float, recording_elapsed_ms: float | None = None) -> float:
        """Placeholder force.

        Args:
            now_ms: Wall-clock milliseconds, drives the idle ripple
            recording_elapsed_ms: Time into the recording, or None when idle

        Returns:
            Force in newtons
        """
        if recording_elapsed_ms is not None:
            return five_phase_force(recording_elapsed_ms, self.body_weight_n)
        return self.body_weight_n + math.sin(now_ms / 300.0) * 20.0

    def sample(self, now_ms: float, recording_elapsed_ms: float | None = None) -> ForceSample:
        return ForceSample(
            time_millis=now_ms,
            force_newtons=self.value(now_ms, recording_elapsed_ms),
            provenance=self.provenance,
        )


class LiveForceWindow:
    """Fixed-capacity sliding window of recent force readouts."""

    def __init__(self, capacity: int = 150) -> None:
        self.capacity = capacity
        self._samples: deque[ForceSample] = deque(maxlen=capacity)

    def __len__(self) -> int:
        return len(self._samples)

    @property
    def samples(self) -> list[ForceSample]:
        """Snapshot of the window, oldest first."""
        return list(self._samples)

    @property
    def latest(self) -> ForceSample | None:
        return self._samples[-1] if self._samples else None

    def push(self, sample: ForceSample) -> None:
        self._samples.append(sample)

    def clear(self) -> None:
        self._samples.clear()


class ForceMagnitudeEstimator:
    """Orientation-independent force estimate for the live view.

    Uses ``mass * |a|`` so one g reads as body weight however the phone is
    held, smoothed exponentially. When no reading has arrived within the
    staleness timeout the readout switches to a synthetic placeholder.
    """

    def __init__(
        self,
        mass_kg: float,
        settings: FusionSettings | None = None,
        fallback: SyntheticForceWaveform | None = None,
    ) -> None:
        """Initialize estimator.

        Args:
            mass_kg: Athlete mass
            settings: Fusion parameters (uses defaults if None)
            fallback: Placeholder strategy used while stale
        """
        self.settings = settings or FusionSettings()
        self.mass_kg = mass_kg
        self._smoother = ExponentialSmoother(alpha=self.settings.force_smoothing_alpha)
        self._fallback = fallback or SyntheticForceWaveform(mass_kg * self.settings.gravity)
        self._last_sample_ms: float | None = None

    @property
    def smoothed_force(self) -> float:
        """Latest smoothed measured force in newtons."""
        return self._smoother.value

    def reset(self) -> None:
        self._smoother.reset()
        self._last_sample_ms = None

    def update(self, accel: Vector3, now_ms: float) -> float:
        """Feed one accelerometer reading.

        Args:
            accel: Acceleration including gravity (m/s^2)
            now_ms: Arrival time in milliseconds

        Returns:
            Smoothed force in newtons
        """
        force = self.mass_kg * accel.magnitude
        self._last_sample_ms = now_ms
        return self._smoother.update(force)

    def is_fresh(self, now_ms: float) -> bool:
        """Whether a real reading arrived within the staleness timeout."""
        if self._last_sample_ms is None:
            return False
        return now_ms - self._last_sample_ms < self.settings.staleness_timeout_ms

    def readout(self, now_ms: float, recording_elapsed_ms: float | None = None) -> ForceSample:
        """Current value for display, measured or synthetic.

        Args:
            now_ms: Current time in milliseconds
            recording_elapsed_ms: Time into the recording, or None when idle

        Returns:
            ForceSample tagged with its provenance
        """
        if self.is_fresh(now_ms):
            return ForceSample(
                time_millis=now_ms,
                force_newtons=self._smoother.value,
                provenance=ForceProvenance.MEASURED,
            )
        return self._fallback.sample(now_ms, recording_elapsed_ms)

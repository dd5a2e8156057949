"""Inertial sensing: sensor fusion, live force readout, and motion sources."""

from kinemotion.sensors.filters import ExponentialSmoother
from kinemotion.sensors.fusion import SensorFusionEstimator, ground_reaction_force
from kinemotion.sensors.live import (
    ForceMagnitudeEstimator,
    LiveForceWindow,
    SyntheticForceWaveform,
    five_phase_force,
)
from kinemotion.sensors.source import MotionCsvSource

__all__ = [
    "SensorFusionEstimator",
    "ground_reaction_force",
    "ForceMagnitudeEstimator",
    "LiveForceWindow",
    "SyntheticForceWaveform",
    "five_phase_force",
    "ExponentialSmoother",
    "MotionCsvSource",
]

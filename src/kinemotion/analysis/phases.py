"""Flight and ground-contact phase detection over recorded series.

This module is pure logic with NO I/O.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from kinemotion.core.types import TimeSeriesPoint


@dataclass(frozen=True)
class AirborneRun:
    """A contiguous stretch of airborne samples.

    Attributes:
        start_idx: First airborne sample
        end_idx: First grounded sample after the run (== len when unfinished)
        takeoff_time: Time of the first airborne sample (s)
        landing_time: Time of the first grounded sample after the run (s)
        takeoff_observed: False when the recording starts mid-run
        landing_observed: False when the recording ends mid-run
    """

    start_idx: int
    end_idx: int
    takeoff_time: float
    landing_time: float
    takeoff_observed: bool
    landing_observed: bool

    @property
    def duration_s(self) -> float:
        return self.landing_time - self.takeoff_time

    @property
    def is_complete(self) -> bool:
        return self.takeoff_observed and self.landing_observed


@dataclass(frozen=True)
class JumpPhases:
    """Phases relevant to the jump metrics.

    Attributes:
        flight: The jump's flight, or None if none was detected
        contact_time_s: Ground contact preceding the flight (drop jumps)
    """

    flight: AirborneRun | None
    contact_time_s: float | None = None

    @property
    def flight_time_s(self) -> float:
        return self.flight.duration_s if self.flight is not None else 0.0


def series_arrays(
    series: Sequence[TimeSeriesPoint],
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Split a series into (times, values) arrays."""
    times = np.fromiter((p.time for p in series), dtype=np.float64, count=len(series))
    values = np.fromiter((p.value for p in series), dtype=np.float64, count=len(series))
    return times, values


def find_airborne_runs(
    times: NDArray[np.float64],
    airborne: NDArray[np.bool_],
) -> list[AirborneRun]:
    """Group airborne samples into runs.

    Args:
        times: Sample times in seconds, strictly increasing
        airborne: Per-sample airborne flag

    Returns:
        Runs in time order
    """
    n = len(airborne)
    if n == 0:
        return []

    # Rising/falling edges of the airborne mask
    padded = np.concatenate(([False], airborne.astype(bool), [False]))
    edges = np.flatnonzero(np.diff(padded.astype(np.int8)))
    starts, ends = edges[0::2], edges[1::2]

    runs: list[AirborneRun] = []
    for start, end in zip(starts, ends, strict=True):
        landing_observed = bool(end < n)
        runs.append(
            AirborneRun(
                start_idx=int(start),
                end_idx=int(end),
                takeoff_time=float(times[start]),
                landing_time=float(times[end] if landing_observed else times[n - 1]),
                takeoff_observed=bool(start > 0),
                landing_observed=landing_observed,
            )
        )
    return runs


def force_airborne_mask(
    force: NDArray[np.float64],
    body_weight_n: float,
    fraction: float = 0.1,
    min_threshold_n: float = 20.0,
) -> NDArray[np.bool_]:
    """Samples where the body is unloaded enough to be airborne.

    Negative noise is clamped to zero before thresholding.
    """
    threshold = max(min_threshold_n, fraction * body_weight_n)
    return np.clip(force, 0.0, None) < threshold


def foot_airborne_mask(
    foot_y: NDArray[np.float64],
    lift_threshold: float = 0.02,
    ground_percentile: float = 95.0,
) -> NDArray[np.bool_]:
    """Samples where the feet are above ground level.

    Ground is the lowest foot position seen (largest image y, taken as a
    high percentile to ignore outliers), so an athlete starting on a drop
    box reads as off the ground until they step down.
    """
    if len(foot_y) == 0:
        return np.zeros(0, dtype=bool)
    ground = float(np.percentile(foot_y, ground_percentile))
    return (ground - foot_y) > lift_threshold


def select_jump_phases(
    runs: list[AirborneRun],
    drop_jump: bool,
    min_flight_s: float = 0.05,
) -> JumpPhases:
    """Pick the jump flight and, for drop jumps, the contact before it.

    Counter-movement and squat jumps take the longest complete flight. A drop
    jump takes the first complete flight that follows an earlier landing
    (stepping off the box); its contact time runs from that landing to the
    take-off.

    Args:
        runs: Airborne runs in time order
        drop_jump: Whether the protocol is a drop jump
        min_flight_s: Shorter runs are treated as noise

    Returns:
        Selected phases
    """
    flights = [r for r in runs if r.is_complete and r.duration_s >= min_flight_s]
    if not flights:
        return JumpPhases(flight=None)

    if drop_jump:
        landings = [r for r in runs if r.landing_observed]
        for flight in flights:
            prior = [r for r in landings if r.end_idx <= flight.start_idx]
            if prior:
                contact = flight.takeoff_time - prior[-1].landing_time
                return JumpPhases(flight=flight, contact_time_s=contact)

    longest = max(flights, key=lambda r: r.duration_s)
    return JumpPhases(flight=longest)

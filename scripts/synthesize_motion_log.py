#!/usr/bin/env python3
"""Write a synthetic motion log for offline testing.

Produces a CSV in the ``kinemotion imu`` input format from the idealized
five-phase countermovement trace, so the pipeline can be exercised without
a phone.
"""

from __future__ import annotations

import argparse
import random
import sys
from datetime import datetime
from pathlib import Path

from kinemotion.core.logging import get_logger, setup_logging
from kinemotion.sensors.live import FIVE_PHASE_PROFILE, five_phase_force

logger = get_logger(__name__)

DEFAULT_OUTPUT_DIR = Path("data/recordings")
GRAVITY = 9.81


def write_log(
    output_path: Path,
    mass_kg: float,
    rate_hz: float = 100.0,
    noise: float = 0.0,
    seed: int | None = None,
) -> int:
    """Write one five-phase jump as accelerometer samples.

    Args:
        output_path: CSV file to create
        mass_kg: Athlete mass
        rate_hz: Sample rate
        noise: Standard deviation of accelerometer noise (m/s^2)
        seed: Random seed for reproducible noise

    Returns:
        Number of samples written
    """
    rng = random.Random(seed)
    body_weight = mass_kg * GRAVITY
    duration_ms = FIVE_PHASE_PROFILE[-1][0]
    count = round(duration_ms * rate_hz / 1000.0)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding="utf-8") as f:
        f.write("t,ax,ay,az,gx,gy,gz\n")
        for i in range(count):
            t = i / rate_hz
            az = five_phase_force(i * 1000.0 / rate_hz, body_weight) / mass_kg
            ax, ay = (rng.gauss(0.0, noise), rng.gauss(0.0, noise)) if noise else (0.0, 0.0)
            if noise:
                az += rng.gauss(0.0, noise)
            f.write(f"{t:.4f},{ax:.5f},{ay:.5f},{az:.5f},0,0,0\n")

    return count


def main() -> int:
    parser = argparse.ArgumentParser(description="Write a synthetic CMJ motion log")
    parser.add_argument("-o", "--output", type=Path, default=None, help="Output CSV path")
    parser.add_argument("--mass", type=float, default=70.0, help="Athlete mass (kg)")
    parser.add_argument("--rate", type=float, default=100.0, help="Sample rate (Hz)")
    parser.add_argument("--noise", type=float, default=0.0, help="Accelerometer noise (m/s^2)")
    parser.add_argument("--seed", type=int, default=None)
    args = parser.parse_args()

    setup_logging("INFO")

    output = args.output
    if output is None:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        output = DEFAULT_OUTPUT_DIR / f"cmj_{timestamp}.csv"

    try:
        count = write_log(output, args.mass, args.rate, args.noise, args.seed)
    except OSError as e:
        logger.error("Could not write %s: %s", output, e)
        return 1

    logger.info("Wrote %d samples to %s", count, output)
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""Recorded motion-sample source.

Reads device-motion logs with columns ``t,ax,ay,az`` and optional
``gx,gy,gz``. Times are in seconds, acceleration includes gravity (m/s^2),
rotation rates are rad/s.
"""

from __future__ import annotations

import csv
from collections.abc import Generator
from pathlib import Path
from typing import IO

from kinemotion.core.exceptions import AcquisitionError
from kinemotion.core.logging import get_logger
from kinemotion.core.types import MotionSample, Vector3

logger = get_logger(__name__)

REQUIRED_COLUMNS = ("t", "ax", "ay", "az")
GYRO_COLUMNS = ("gx", "gy", "gz")


def parse_motion_row(row: dict[str, str]) -> MotionSample:
    """Convert one CSV row into a MotionSample.

    Raises:
        ValueError: If a required column is missing or not numeric
    """
    accel = Vector3(float(row["ax"]), float(row["ay"]), float(row["az"]))

    gyro: Vector3 | None = None
    if all(row.get(col) not in (None, "") for col in GYRO_COLUMNS):
        gyro = Vector3(float(row["gx"]), float(row["gy"]), float(row["gz"]))

    return MotionSample(timestamp=float(row["t"]), acceleration=accel, rotation_rate=gyro)


class MotionCsvSource:
    """Scoped reader over a motion log file.

    The file is opened on ``__enter__``/``open()`` and always closed on
    exit, whichever way the session ends.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._handle: IO[str] | None = None
        self._sample_count = 0

    @property
    def is_open(self) -> bool:
        return self._handle is not None

    @property
    def sample_count(self) -> int:
        """Number of samples yielded so far."""
        return self._sample_count

    def open(self) -> None:
        """Open the log file.

        Raises:
            AcquisitionError: If the file cannot be opened
        """
        try:
            self._handle = self.path.open(newline="")
        except OSError as e:
            raise AcquisitionError(f"Cannot open motion log {self.path}: {e}") from e
        self._sample_count = 0
        logger.info("Motion source opened: %s", self.path)

    def close(self) -> None:
        """Release the file handle."""
        if self._handle is not None:
            self._handle.close()
            self._handle = None
            logger.info("Motion source closed (%d samples)", self._sample_count)

    def samples(self) -> Generator[MotionSample, None, None]:
        """Yield motion samples in file order.

        Raises:
            AcquisitionError: If the header or a row is malformed
        """
        if self._handle is None:
            self.open()
        assert self._handle is not None

        reader = csv.DictReader(self._handle)
        missing = [col for col in REQUIRED_COLUMNS if col not in (reader.fieldnames or [])]
        if missing:
            raise AcquisitionError(f"Motion log missing columns: {', '.join(missing)}")

        for line_no, row in enumerate(reader, start=2):
            try:
                sample = parse_motion_row(row)
            except (KeyError, TypeError, ValueError) as e:
                raise AcquisitionError(f"Bad motion sample on line {line_no}: {e}") from e
            self._sample_count += 1
            yield sample

    def __iter__(self) -> Generator[MotionSample, None, None]:
        return self.samples()

    def __enter__(self) -> MotionCsvSource:
        self.open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        self.close()

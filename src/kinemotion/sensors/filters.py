"""Signal smoothing utilities for live sensor readouts."""

from __future__ import annotations


class ExponentialSmoother:
    """First-order low-pass filter.

    ``s = alpha * s + (1 - alpha) * x``; higher alpha smooths more.
    """

    def __init__(self, alpha: float = 0.8, initial: float = 0.0) -> None:
        """Initialize smoother.

        Args:
            alpha: Weight kept from the previous smoothed value, in [0, 1)
            initial: Starting smoothed value
        """
        if not 0.0 <= alpha < 1.0:
            raise ValueError(f"alpha must be in [0, 1), got {alpha}")
        self.alpha = alpha
        self._initial = initial
        self._value = initial
        self._count = 0

    @property
    def value(self) -> float:
        """Current smoothed value."""
        return self._value

    @property
    def sample_count(self) -> int:
        """Number of values fed since the last reset."""
        return self._count

    def reset(self) -> None:
        """Return to the initial value."""
        self._value = self._initial
        self._count = 0

    def update(self, value: float) -> float:
        """Add value and return smoothed result.

        Args:
            value: New measurement

        Returns:
            Smoothed value
        """
        self._value = self.alpha * self._value + (1.0 - self.alpha) * value
        self._count += 1
        return self._value

"""Custom exceptions for Kinemotion."""


class KinemotionError(Exception):
    """Base exception for all Kinemotion errors."""

    pass


class AcquisitionError(KinemotionError):
    """Camera or motion sensor could not be opened or read."""

    def __init__(self, message: str = "Failed to acquire input device") -> None:
        self.message = message
        super().__init__(self.message)


class PoseEstimationError(KinemotionError):
    """Pose estimation failed or returned invalid data."""

    def __init__(self, message: str = "Pose estimation failed") -> None:
        self.message = message
        super().__init__(self.message)


class SessionStateError(KinemotionError):
    """Operation not allowed in the current capture session state."""

    def __init__(self, message: str = "Invalid session state transition") -> None:
        self.message = message
        super().__init__(self.message)


class InsufficientSamplesError(KinemotionError):
    """Recorded series too short to derive metrics."""

    def __init__(self, message: str = "Insufficient samples") -> None:
        self.message = message
        super().__init__(self.message)


class HistoryStorageError(KinemotionError):
    """Result history could not be written."""

    def __init__(self, message: str = "Failed to save history") -> None:
        self.message = message
        super().__init__(self.message)

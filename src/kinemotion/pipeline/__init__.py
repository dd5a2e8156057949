"""Capture session orchestration."""

from kinemotion.pipeline.session import CaptureSessionController

__all__ = ["CaptureSessionController"]

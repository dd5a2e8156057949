"""Command-line entry point for Kinemotion."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from pathlib import Path

from kinemotion.core.config import Settings, get_settings
from kinemotion.core.exceptions import AcquisitionError, KinemotionError, PoseEstimationError
from kinemotion.core.logging import get_logger, setup_logging
from kinemotion.core.types import (
    AnalysisResult,
    CameraAngle,
    DetectionMethod,
    Gender,
    JumpProtocol,
    Subject,
    TestConfiguration,
)
from kinemotion.pipeline.session import CaptureSessionController
from kinemotion.sensors.source import MotionCsvSource
from kinemotion.storage.history import HistoryStore

logger = get_logger(__name__)


def format_result(result: AnalysisResult) -> str:
    """Human-readable summary of one result."""
    m = result.metrics
    lines = [
        f"{result.config.protocol.value} via {result.config.method.value}  ({result.created_at})",
        f"  Jump height:       {m.jump_height_cm:.1f} cm",
        f"  Flight time:       {m.flight_time_ms:.0f} ms",
        f"  Max knee flexion:  {m.max_knee_flexion_degrees:.1f} deg",
    ]
    if m.contact_time_ms is not None:
        lines.append(f"  Contact time:      {m.contact_time_ms:.0f} ms")
    if m.rsi is not None:
        lines.append(f"  RSI:               {m.rsi:.2f}")
    if m.asymmetry_percent is not None:
        lines.append(f"  Asymmetry:         {m.asymmetry_percent:+.1f} %")
    if m.peak_power_watts is not None:
        lines.append(f"  Peak power:        {m.peak_power_watts:.0f} W")
    if m.impulse_height_cm is not None:
        lines.append(f"  Impulse height:    {m.impulse_height_cm:.1f} cm")

    if result.advice:
        lines.append("")
        lines.append("Advice:")
        lines.extend(f"  - {line}" for line in result.advice)
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kinemotion",
        description="Kinemotion - Vertical jump analysis from video or motion sensors",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--history", action="store_true", help="List saved results and exit")
    parser.add_argument(
        "--clear-history", action="store_true", help="Delete all saved results and exit"
    )

    subparsers = parser.add_subparsers(dest="source")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--protocol", choices=[p.value for p in JumpProtocol], default=JumpProtocol.CMJ.value
    )
    common.add_argument("--weight", type=float, default=70.0, help="Body mass (kg)")
    common.add_argument("--height", type=float, default=175.0, help="Standing height (cm)")
    common.add_argument("--age", type=int, default=25)
    common.add_argument("--gender", choices=[g.value for g in Gender], default=Gender.MALE.value)
    common.add_argument("--drop-height", type=float, default=None, help="Drop box height (cm)")
    common.add_argument("--save", action="store_true", help="Append the result to history")

    imu = subparsers.add_parser("imu", parents=[common], help="Analyze a recorded motion log")
    imu.add_argument("path", type=Path, help="CSV with t,ax,ay,az[,gx,gy,gz]")

    video = subparsers.add_parser("video", parents=[common], help="Analyze a video file")
    video.add_argument("path", type=Path, help="Video file")
    video.add_argument(
        "--camera-angle",
        choices=[a.value for a in CameraAngle],
        default=CameraAngle.SAGITTAL.value,
    )

    return parser


def _session_inputs(
    args: argparse.Namespace, method: DetectionMethod
) -> tuple[TestConfiguration, Subject]:
    config = TestConfiguration(
        protocol=JumpProtocol(args.protocol),
        method=method,
        camera_angle=CameraAngle(getattr(args, "camera_angle", CameraAngle.SAGITTAL.value)),
        drop_height_cm=args.drop_height,
    )
    subject = Subject(
        height_cm=args.height,
        weight_kg=args.weight,
        age_years=args.age,
        gender=Gender(args.gender),
    )
    return config, subject


def run_imu_session(args: argparse.Namespace, settings: Settings) -> AnalysisResult | None:
    """Replay a motion log through one capture session.

    Returns:
        The analysis result, or None if the log holds no samples
    """
    config, subject = _session_inputs(args, DetectionMethod.IMU)
    controller = CaptureSessionController(config, subject, settings)

    with MotionCsvSource(args.path) as source:
        samples = iter(source)
        first = next(samples, None)
        if first is None:
            logger.error("Motion log %s is empty", args.path)
            return None

        controller.start(now=first.timestamp)
        controller.add_motion(first)
        for sample in samples:
            controller.add_motion(sample)

    return controller.stop()


def run_video_session(args: argparse.Namespace, settings: Settings) -> AnalysisResult | None:
    """Run pose estimation over a video file through one capture session.

    Returns:
        The analysis result, or None if the video holds no frames
    """
    # OpenCV and MediaPipe are only needed on this path
    from kinemotion.vision.capture import CameraSource
    from kinemotion.vision.pose import PoseEstimator

    config, subject = _session_inputs(args, DetectionMethod.CAMERA)
    controller = CaptureSessionController(config, subject, settings)

    with CameraSource(args.path) as camera, PoseEstimator(settings.pose) as estimator:
        for frame in camera:
            if not controller.is_recording:
                controller.start(now=frame.timestamp)

            landmarks = estimator.estimate(frame.image, frame.timestamp)
            if landmarks is not None:
                controller.add_landmarks(landmarks)

            if frame.index % 30 == 0:
                logger.debug("Frame %d, %d angle samples", frame.index, controller.sample_count)

    if not controller.is_recording:
        logger.error("Video %s has no frames", args.path)
        return None

    return controller.stop()


def show_history(store: HistoryStore) -> None:
    history = store.load()
    if not history:
        print("No saved results.")
        return
    for result in history:
        print(format_result(result))
        print()


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry point.

    Returns:
        Exit code (0 success, 1 input error, 2 analysis error, 3 unexpected)
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.debug:
        import os

        os.environ["LOG_LEVEL"] = "DEBUG"
        get_settings.cache_clear()

    settings = get_settings()
    setup_logging(settings.logging.level, settings.logging.file)
    store = HistoryStore(settings.storage)

    if args.clear_history:
        try:
            store.clear()
        except KinemotionError as e:
            logger.error("Could not clear history: %s", e)
            return 1
        print("History cleared.")
        return 0

    if args.history:
        show_history(store)
        return 0

    if args.source is None:
        parser.print_help()
        return 1

    try:
        if args.source == "imu":
            result = run_imu_session(args, settings)
        else:
            result = run_video_session(args, settings)

        if result is None:
            return 1

        print(format_result(result))
        if args.save:
            store.save(result)
        return 0

    except (AcquisitionError, PoseEstimationError) as e:
        logger.error("Input failed: %s", e)
        return 1

    except KinemotionError as e:
        logger.error("Analysis error: %s", e)
        return 2

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 0

    except Exception as e:
        logger.exception("Unexpected error: %s", e)
        return 3


if __name__ == "__main__":
    sys.exit(main())

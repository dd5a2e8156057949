"""Joint-angle kinematics from 2D landmarks.

This module is pure logic with NO I/O and NO OpenCV imports.
"""

from __future__ import annotations

import math

from kinemotion.core.types import LandmarkFrame, LandmarkIndex, Point2D

# (hip, knee, ankle) per side
KNEE_TRIPLETS: dict[str, tuple[LandmarkIndex, LandmarkIndex, LandmarkIndex]] = {
    "right": (LandmarkIndex.RIGHT_HIP, LandmarkIndex.RIGHT_KNEE, LandmarkIndex.RIGHT_ANKLE),
    "left": (LandmarkIndex.LEFT_HIP, LandmarkIndex.LEFT_KNEE, LandmarkIndex.LEFT_ANKLE),
}

FOOT_INDICES = (
    LandmarkIndex.LEFT_ANKLE,
    LandmarkIndex.RIGHT_ANKLE,
    LandmarkIndex.LEFT_HEEL,
    LandmarkIndex.RIGHT_HEEL,
)

EXTENDED_DEGREES = 180.0


def joint_angle(a: Point2D, b: Point2D, c: Point2D) -> float:
    """Angle at vertex ``b`` between segments b->a and b->c.

    A zero-length segment has no direction; the joint is then reported as
    fully extended (180 degrees).

    Args:
        a: Proximal point (e.g. hip)
        b: Joint vertex (e.g. knee)
        c: Distal point (e.g. ankle)

    Returns:
        Angle in degrees within [0, 180]
    """
    v1x, v1y = a.x - b.x, a.y - b.y
    v2x, v2y = c.x - b.x, c.y - b.y

    mag1 = math.hypot(v1x, v1y)
    mag2 = math.hypot(v2x, v2y)
    if mag1 == 0.0 or mag2 == 0.0:
        return EXTENDED_DEGREES

    cosine = (v1x * v2x + v1y * v2y) / (mag1 * mag2)
    # Rounding can push |cos| a hair past 1 for collinear segments
    cosine = max(-1.0, min(1.0, cosine))
    return math.degrees(math.acos(cosine))


def extract_knee_angle(
    frame: LandmarkFrame,
    side: str = "right",
    min_visibility: float = 0.5,
) -> float | None:
    """Knee angle for one side of the body.

    Only the hip and ankle visibilities gate the sample; the knee is used as
    reported.

    Args:
        frame: Pose estimator output
        side: "right" or "left"
        min_visibility: Endpoint visibility must exceed this

    Returns:
        Knee angle in degrees, or None if the sample should be skipped
    """
    hip_idx, knee_idx, ankle_idx = KNEE_TRIPLETS[side]
    hip = frame.get_landmark(hip_idx)
    knee = frame.get_landmark(knee_idx)
    ankle = frame.get_landmark(ankle_idx)

    if hip is None or knee is None or ankle is None:
        return None
    if hip.visibility <= min_visibility or ankle.visibility <= min_visibility:
        return None

    return joint_angle(hip, knee, ankle)


def extract_foot_height(frame: LandmarkFrame, min_visibility: float = 0.5) -> float | None:
    """Lowest visible foot point in image coordinates (largest y).

    Args:
        frame: Pose estimator output
        min_visibility: Landmark visibility must exceed this

    Returns:
        Foot y coordinate, or None if no foot landmark is visible
    """
    y_values = [
        point.y
        for point in (frame.get_landmark(idx) for idx in FOOT_INDICES)
        if point is not None and point.visibility > min_visibility
    ]
    return max(y_values) if y_values else None


def opposite_side(side: str) -> str:
    """The other body side."""
    return "left" if side == "right" else "right"

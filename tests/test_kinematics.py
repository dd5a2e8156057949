"""Tests for joint-angle kinematics."""

from __future__ import annotations

import pytest
from conftest import make_frame

from kinemotion.core.types import LandmarkFrame, LandmarkIndex, Point2D
from kinemotion.vision.kinematics import (
    extract_foot_height,
    extract_knee_angle,
    joint_angle,
    opposite_side,
)


class TestJointAngle:
    """Tests for the three-point joint angle."""

    def test_right_angle(self) -> None:
        """Perpendicular segments give 90 degrees."""
        angle = joint_angle(Point2D(0.0, 1.0), Point2D(0.0, 0.0), Point2D(1.0, 0.0))
        assert angle == pytest.approx(90.0)

    def test_opposite_collinear_is_straight(self) -> None:
        """Segments pointing apart give 180 degrees."""
        angle = joint_angle(Point2D(-1.0, 0.0), Point2D(0.0, 0.0), Point2D(1.0, 0.0))
        assert angle == pytest.approx(180.0)

    def test_same_direction_collinear_is_zero(self) -> None:
        """Segments pointing the same way give 0 degrees."""
        angle = joint_angle(Point2D(1.0, 0.0), Point2D(0.0, 0.0), Point2D(2.0, 0.0))
        assert angle == pytest.approx(0.0, abs=1e-6)

    def test_zero_length_segment_is_exactly_180(self) -> None:
        """A degenerate segment reports a fully extended joint."""
        b = Point2D(0.3, 0.3)
        assert joint_angle(b, b, Point2D(1.0, 1.0)) == 180.0
        assert joint_angle(Point2D(1.0, 1.0), b, b) == 180.0

    @pytest.mark.parametrize(
        "a, c",
        [
            ((0.1, 0.9), (0.7, 0.2)),
            ((0.5, 0.51), (0.49, 0.5)),
            ((-3.0, 2.0), (4.0, 4.0)),
            ((1e-6, 0.0), (0.0, 1e-6)),
        ],
    )
    def test_range_for_non_degenerate_input(
        self, a: tuple[float, float], c: tuple[float, float]
    ) -> None:
        """Angles stay within (0, 180]."""
        angle = joint_angle(Point2D(*a), Point2D(0.0, 0.0), Point2D(*c))
        assert 0.0 < angle <= 180.0

    def test_near_collinear_does_not_raise(self) -> None:
        """Cosine rounding past 1 is clipped before acos."""
        angle = joint_angle(
            Point2D(0.1, 0.1), Point2D(0.2, 0.2), Point2D(0.30000000000000004, 0.3)
        )
        assert angle == pytest.approx(180.0)


class TestExtractKneeAngle:
    """Tests for per-frame knee angle extraction."""

    def test_straight_leg(self, standing_frame: LandmarkFrame) -> None:
        """Upright pose reads close to 180 degrees."""
        assert extract_knee_angle(standing_frame, "right") == pytest.approx(180.0)

    def test_bent_knee(self) -> None:
        """Knee angle matches the placed geometry."""
        frame = make_frame(0.0, knee_angle=95.0)
        assert extract_knee_angle(frame, "right") == pytest.approx(95.0)

    def test_sides_are_independent(self) -> None:
        """Left and right legs are read from their own landmarks."""
        frame = make_frame(0.0, knee_angle=100.0, left_knee_angle=120.0)
        assert extract_knee_angle(frame, "right") == pytest.approx(100.0)
        assert extract_knee_angle(frame, "left") == pytest.approx(120.0)

    def test_low_visibility_skipped(self) -> None:
        """Hip or ankle at or below the threshold skips the sample."""
        frame = make_frame(0.0, visibility=0.5)
        assert extract_knee_angle(frame, "right", min_visibility=0.5) is None

    def test_missing_landmark_skipped(self, standing_frame: LandmarkFrame) -> None:
        """A missing knee skips the sample."""
        standing_frame.landmarks[LandmarkIndex.RIGHT_KNEE.value] = None
        assert extract_knee_angle(standing_frame, "right") is None

    def test_short_landmark_list(self) -> None:
        """Frames without lower-body landmarks are skipped."""
        frame = LandmarkFrame(landmarks=[Point2D(0.5, 0.5)] * 10, timestamp=0.0)
        assert extract_knee_angle(frame, "right") is None


class TestExtractFootHeight:
    """Tests for foot position extraction."""

    def test_lowest_point(self) -> None:
        """Returns the largest visible ankle/heel y."""
        frame = make_frame(0.0, foot_y=0.8)
        frame.landmarks[LandmarkIndex.LEFT_HEEL.value] = Point2D(0.45, 0.83, 0.9)
        assert extract_foot_height(frame) == pytest.approx(0.83)

    def test_invisible_feet(self) -> None:
        """No visible foot landmark gives None."""
        frame = make_frame(0.0, visibility=0.1)
        assert extract_foot_height(frame) is None


def test_opposite_side() -> None:
    """Sides swap."""
    assert opposite_side("right") == "left"
    assert opposite_side("left") == "right"

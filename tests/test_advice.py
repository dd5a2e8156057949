"""Tests for the advice rule table."""

from __future__ import annotations

import pytest

from kinemotion.analysis.advice import DEFAULT_CATEGORIES, AdviceRuleEngine
from kinemotion.core.config import AdviceSettings
from kinemotion.core.types import JumpMetrics, JumpProtocol


def _metrics(flexion: float = 90.0, **kwargs: float | None) -> JumpMetrics:
    return JumpMetrics(
        jump_height_cm=30.0,
        flight_time_ms=495.0,
        max_knee_flexion_degrees=flexion,
        **kwargs,
    )


def _names(engine: AdviceRuleEngine, metrics: JumpMetrics, protocol: JumpProtocol) -> list[str]:
    return [rule.name for rule in engine.matching_rules(metrics, protocol)]


class TestKneeFlexionRules:
    """Exactly one knee-flexion line per result."""

    @pytest.mark.parametrize(
        "flexion, expected",
        [(45.0, "shallow_squat"), (90.0, "good_rom"), (130.0, "overly_deep")],
    )
    def test_depth_bands(self, flexion: float, expected: str) -> None:
        """Flexion picks the matching band."""
        names = _names(AdviceRuleEngine(), _metrics(flexion), JumpProtocol.SJ)
        assert names == [expected]

    def test_boundaries_are_good(self) -> None:
        """Thresholds themselves fall in the good band."""
        engine = AdviceRuleEngine()
        assert _names(engine, _metrics(60.0), JumpProtocol.SJ) == ["good_rom"]
        assert _names(engine, _metrics(110.0), JumpProtocol.SJ) == ["good_rom"]

    def test_shallow_message(self) -> None:
        """Message names the threshold."""
        advice = AdviceRuleEngine().evaluate(_metrics(45.0), JumpProtocol.SJ)
        assert len(advice) == 1
        assert "<60°" in advice[0]


class TestReactiveStrengthRules:
    """RSI feedback only applies to drop jumps."""

    def test_low_rsi(self) -> None:
        names = _names(AdviceRuleEngine(), _metrics(rsi=1.2), JumpProtocol.DJ)
        assert names == ["good_rom", "low_rsi"]

    def test_excellent_rsi(self) -> None:
        names = _names(AdviceRuleEngine(), _metrics(rsi=2.8), JumpProtocol.DJ)
        assert names == ["good_rom", "excellent_rsi"]

    def test_moderate_rsi_silent(self) -> None:
        names = _names(AdviceRuleEngine(), _metrics(rsi=2.0), JumpProtocol.DJ)
        assert names == ["good_rom"]

    def test_missing_rsi_silent(self) -> None:
        """A drop jump without measured contact gets no RSI line."""
        names = _names(AdviceRuleEngine(), _metrics(), JumpProtocol.DJ)
        assert names == ["good_rom"]

    def test_ignored_outside_drop_jump(self) -> None:
        names = _names(AdviceRuleEngine(), _metrics(rsi=0.5), JumpProtocol.SJ)
        assert names == ["good_rom"]


class TestAsymmetryRule:
    """High asymmetry warning."""

    def test_right_dominant(self) -> None:
        """Positive asymmetry names the right leg."""
        advice = AdviceRuleEngine().evaluate(_metrics(asymmetry_percent=14.0), JumpProtocol.SJ)
        assert len(advice) == 2
        assert "right leg" in advice[1]

    def test_left_dominant(self) -> None:
        """Negative asymmetry names the left leg."""
        advice = AdviceRuleEngine().evaluate(_metrics(asymmetry_percent=-14.0), JumpProtocol.SJ)
        assert "left leg" in advice[1]

    def test_within_tolerance(self) -> None:
        names = _names(AdviceRuleEngine(), _metrics(asymmetry_percent=10.0), JumpProtocol.SJ)
        assert "high_asymmetry" not in names


class TestTechniqueRule:
    """CMJ always carries the hip-hinge tip."""

    @pytest.mark.parametrize("flexion", [10.0, 45.0, 90.0, 150.0])
    def test_cmj_always_has_hip_hinge(self, flexion: float) -> None:
        names = _names(AdviceRuleEngine(), _metrics(flexion), JumpProtocol.CMJ)
        assert names[-1] == "hip_hinge"

    def test_not_for_other_protocols(self) -> None:
        for protocol in (JumpProtocol.SJ, JumpProtocol.DJ):
            assert "hip_hinge" not in _names(AdviceRuleEngine(), _metrics(), protocol)


class TestAdviceRuleEngine:
    """Engine-level behaviour."""

    def test_deterministic(self) -> None:
        """Same input, same ordered output."""
        engine = AdviceRuleEngine()
        metrics = _metrics(45.0, rsi=1.0, asymmetry_percent=-22.0)
        first = engine.evaluate(metrics, JumpProtocol.DJ)

        for _ in range(5):
            assert engine.evaluate(metrics, JumpProtocol.DJ) == first

    def test_category_order(self) -> None:
        """Lines follow the table order."""
        metrics = _metrics(130.0, rsi=3.0, asymmetry_percent=30.0)
        names = _names(AdviceRuleEngine(), metrics, JumpProtocol.DJ)
        assert names == ["overly_deep", "excellent_rsi", "high_asymmetry"]

    def test_configurable_thresholds(self) -> None:
        """Thresholds come from settings."""
        engine = AdviceRuleEngine(AdviceSettings(shallow_flexion_deg=50.0))
        assert _names(engine, _metrics(55.0), JumpProtocol.SJ) == ["good_rom"]

    def test_custom_table(self) -> None:
        """The table itself is data."""
        engine = AdviceRuleEngine(categories=DEFAULT_CATEGORIES[-1:])
        assert engine.evaluate(_metrics(), JumpProtocol.SJ) == []

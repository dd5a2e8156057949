"""Rule-based coaching feedback from jump metrics.

This module is pure logic with NO I/O. Rules are data: each category is an
ordered list of (condition, message) entries and contributes at most one
line, the first whose condition holds.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from kinemotion.core.config import AdviceSettings
from kinemotion.core.types import JumpMetrics, JumpProtocol

Condition = Callable[[JumpMetrics, JumpProtocol, AdviceSettings], bool]


@dataclass(frozen=True)
class AdviceRule:
    """One candidate feedback line.

    Attributes:
        name: Short identifier for logging and tests
        condition: Predicate over (metrics, protocol, thresholds)
        message: Text, formatted with the thresholds and ``side``
    """

    name: str
    condition: Condition
    message: str


@dataclass(frozen=True)
class AdviceCategory:
    """Mutually exclusive rules; the first match wins."""

    name: str
    rules: tuple[AdviceRule, ...]


def _dominant_side(metrics: JumpMetrics) -> str:
    return "right" if (metrics.asymmetry_percent or 0.0) > 0 else "left"


DEFAULT_CATEGORIES: tuple[AdviceCategory, ...] = (
    AdviceCategory(
        name="knee_flexion",
        rules=(
            AdviceRule(
                name="shallow_squat",
                condition=lambda m, p, s: m.max_knee_flexion_degrees < s.shallow_flexion_deg,
                message=(
                    "Insufficient knee flexion (<{shallow:.0f}°): your countermovement is "
                    "too shallow, limiting elastic energy storage. Practise full-range squats "
                    "and deepen the eccentric phase."
                ),
            ),
            AdviceRule(
                name="overly_deep",
                condition=lambda m, p, s: m.max_knee_flexion_degrees > s.deep_flexion_deg,
                message=(
                    "Squat too deep (>{deep:.0f}°): an overly deep dip lengthens the "
                    "transition and lowers stretch-shortening cycle efficiency. Try a "
                    "shorter countermovement to react faster."
                ),
            ),
            AdviceRule(
                name="good_rom",
                condition=lambda m, p, s: True,
                message=(
                    "Good knee range of motion: your squat depth is moderate, which "
                    "favours force transfer."
                ),
            ),
        ),
    ),
    AdviceCategory(
        name="reactive_strength",
        rules=(
            AdviceRule(
                name="low_rsi",
                condition=lambda m, p, s: (
                    p is JumpProtocol.DJ and m.rsi is not None and m.rsi < s.low_rsi
                ),
                message=(
                    "Low RSI: reactive strength is lacking. Start with low-intensity "
                    "plyometrics such as ankle hops and focus on shortening ground contact."
                ),
            ),
            AdviceRule(
                name="excellent_rsi",
                condition=lambda m, p, s: (
                    p is JumpProtocol.DJ and m.rsi is not None and m.rsi > s.high_rsi
                ),
                message=(
                    "Excellent RSI: your reactive strength is very good. Progress to higher "
                    "drop jumps or single-leg plyometrics."
                ),
            ),
        ),
    ),
    AdviceCategory(
        name="asymmetry",
        rules=(
            AdviceRule(
                name="high_asymmetry",
                condition=lambda m, p, s: (
                    m.asymmetry_percent is not None
                    and abs(m.asymmetry_percent) > s.asymmetry_risk_percent
                ),
                message=(
                    "High-risk warning: the {side} leg is clearly dominant (asymmetry > "
                    "{asymmetry:.0f}%). Pause high-intensity bilateral jumping and prioritise "
                    "unilateral strength work to balance both sides and lower injury risk."
                ),
            ),
        ),
    ),
    AdviceCategory(
        name="technique",
        rules=(
            AdviceRule(
                name="hip_hinge",
                condition=lambda m, p, s: p is JumpProtocol.CMJ,
                message=(
                    "CMJ tip: to jump higher, focus on an explosive hip hinge rather than "
                    "relying on the quadriceps alone."
                ),
            ),
        ),
    ),
)


class AdviceRuleEngine:
    """Evaluates the advice table in a fixed order.

    Same metrics and protocol always give the same list.
    """

    def __init__(
        self,
        settings: AdviceSettings | None = None,
        categories: tuple[AdviceCategory, ...] = DEFAULT_CATEGORIES,
    ) -> None:
        """Initialize engine.

        Args:
            settings: Rule thresholds (uses defaults if None)
            categories: Rule table, evaluated in order
        """
        self.settings = settings or AdviceSettings()
        self.categories = categories

    def matching_rules(self, metrics: JumpMetrics, protocol: JumpProtocol) -> list[AdviceRule]:
        """First matching rule of each category, in table order."""
        matched: list[AdviceRule] = []
        for category in self.categories:
            for rule in category.rules:
                if rule.condition(metrics, protocol, self.settings):
                    matched.append(rule)
                    break
        return matched

    def evaluate(self, metrics: JumpMetrics, protocol: JumpProtocol) -> list[str]:
        """Produce ordered feedback lines.

        Args:
            metrics: Derived jump metrics
            protocol: Jump protocol of the session

        Returns:
            Feedback strings; may be empty
        """
        context = {
            "shallow": self.settings.shallow_flexion_deg,
            "deep": self.settings.deep_flexion_deg,
            "asymmetry": self.settings.asymmetry_risk_percent,
            "side": _dominant_side(metrics),
        }
        return [rule.message.format(**context) for rule in self.matching_rules(metrics, protocol)]

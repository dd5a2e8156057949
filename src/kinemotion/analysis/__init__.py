"""Pure analysis logic: phase detection, metrics derivation, and advice.

This module contains NO I/O operations and NO OpenCV imports.
All functions operate on typed dataclasses and return results.
"""

from kinemotion.analysis.advice import AdviceRuleEngine
from kinemotion.analysis.metrics import MetricsDerivationEngine

__all__ = ["MetricsDerivationEngine", "AdviceRuleEngine"]

"""Tuning rules (thresholds, weights, lexicon) for brewguard."""

from brewguard.rules.loader import RulesLoader, load_rules
from brewguard.rules.models import (
    DEFAULT_RULES,
    Lexicon,
    MatchThresholds,
    PipelineThresholds,
    QualityWeights,
    Rules,
)

__all__ = [
    "DEFAULT_RULES",
    "Lexicon",
    "MatchThresholds",
    "PipelineThresholds",
    "QualityWeights",
    "Rules",
    "RulesLoader",
    "load_rules",
]

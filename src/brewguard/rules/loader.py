"""Tuning rules loader.

Loads threshold and lexicon overrides from YAML files. Keys that are not
present keep their default values, so a rules file only needs to list
what it changes.
"""

import logging
from pathlib import Path

import yaml

from brewguard.rules.models import DEFAULT_RULES, Rules

logger = logging.getLogger(__name__)

# Module-level loader for convenience function
_default_loader: "RulesLoader | None" = None


def load_rules(rules_path: Path | None = None) -> Rules:
    """Convenience function to load tuning rules.

    Args:
        rules_path: Path to a rules YAML file (defaults are used if None)

    Returns:
        Validated Rules
    """
    global _default_loader
    if rules_path is None:
        return DEFAULT_RULES
    if _default_loader is None:
        _default_loader = RulesLoader()
    return _default_loader.load_from_path(rules_path)


class RulesLoader:
    """Load and validate tuning rules from YAML files."""

    def __init__(self) -> None:
        self._cache: dict[str, Rules] = {}

    def load_from_path(self, yaml_path: Path) -> Rules:
        """Load rules from a specific YAML file.

        Args:
            yaml_path: Path to rules.yaml

        Returns:
            Validated Rules

        Raises:
            ValueError: If file not found or not a mapping
        """
        yaml_path = Path(yaml_path)
        cache_key = str(yaml_path.resolve())

        if cache_key in self._cache:
            return self._cache[cache_key]

        if not yaml_path.exists():
            raise ValueError(f"Rules file not found: {yaml_path}")

        logger.info(f"Loading tuning rules: {yaml_path}")
        raw = yaml.safe_load(yaml_path.read_text(encoding="utf-8")) or {}

        # Support both top-level and nested 'rules:' key
        if "rules" in raw:
            raw = raw["rules"]
        if not isinstance(raw, dict):
            raise ValueError(f"Rules file must contain a mapping: {yaml_path}")

        rules = Rules.model_validate(raw)
        self._cache[cache_key] = rules

        logger.info(
            f"Loaded rules '{rules.name}' "
            f"({len(rules.lexicon.keywords)} keywords)"
        )
        return rules

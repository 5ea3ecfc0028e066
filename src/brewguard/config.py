"""Configuration management for brewguard using pydantic-settings.

This module provides the BrewguardConfig class for managing settings from
environment variables and .env files. The validation logic itself never
reads configuration: callers resolve it here and pass plain values in.

Settings priority (highest to lowest):
1. CLI flags (applied after BrewguardConfig creation)
2. Environment variables (BREWGUARD_* prefix)
3. .env file
4. brewguard.yaml project config
5. Default values
"""

import logging
from pathlib import Path

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from brewguard.rules.loader import load_rules
from brewguard.rules.models import Rules

logger = logging.getLogger(__name__)

# Map brewguard.yaml keys to BrewguardConfig field names
_YAML_TO_FIELD = {
    "strict_grounding": "strict_grounding_mode",
    "strict_grounding_mode": "strict_grounding_mode",
    "rules": "rules_path",
    "concurrency": "concurrency",
}


class _ProjectYamlSource(PydanticBaseSettingsSource):
    """Read project config from brewguard.yaml (lower priority than env vars)."""

    def get_field_value(self, field, field_name):  # type: ignore[override]
        return None, field_name, False

    def __call__(self) -> dict:
        project_file = Path("brewguard.yaml")
        if not project_file.exists():
            return {}

        raw = yaml.safe_load(project_file.read_text()) or {}

        result: dict = {}
        for yaml_key, field_name in _YAML_TO_FIELD.items():
            if yaml_key in raw:
                result[field_name] = raw[yaml_key]
        return result


class BrewguardConfig(BaseSettings):
    """Configuration settings for brewguard loaded from environment variables.

    All environment variables are prefixed with BREWGUARD_
    (e.g., BREWGUARD_STRICT_GROUNDING_MODE=true). Empty values are unset.

    Example:
        >>> config = BrewguardConfig()
        >>> rules = config.load_rules()
        >>> print(config.strict_grounding_mode)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="BREWGUARD_",
        extra="ignore",
        env_ignore_empty=True,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            _ProjectYamlSource(settings_cls),
            file_secret_settings,
        )

    strict_grounding_mode: bool = Field(
        default=False,
        description="Hard-block low-quality breweries whose claims are not grounded in web sources",
    )

    rules_path: Path | None = Field(
        default=None,
        description="Path to a YAML file overriding match thresholds, score weights and keywords",
    )

    concurrency: int = Field(
        default=1,
        ge=1,
        description="Candidates validated concurrently within a stage",
    )

    @field_validator("rules_path", mode="before")
    @classmethod
    def resolve_rules_path(cls, v: Path | str | None) -> Path | None:
        """Expand ~ and make the rules path absolute."""
        if v is None:
            return None
        return Path(v).expanduser().resolve()

    def load_rules(self) -> Rules:
        """Load tuning rules from `rules_path`, or the defaults.

        Raises:
            ValueError: If rules_path is set but the file does not exist
        """
        return load_rules(self.rules_path)

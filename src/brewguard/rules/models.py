"""Pydantic models for tuning rules.

Thresholds, score weights and lookup tables used by the matcher and the
validators. Defaults reproduce the calibrated production values; a YAML
file can override any of them (see `brewguard.rules.loader`).
"""

from pydantic import BaseModel, ConfigDict, Field


class MatchThresholds(BaseModel):
    """Similarity cut-offs for the fuzzy name pass."""

    model_config = ConfigDict(frozen=True)

    candidate: float = Field(default=0.6, ge=0.0, le=1.0)  # kept as fuzzy candidate
    similar: float = Field(default=0.7, ge=0.0, le=1.0)  # counts as "similar"
    high_confidence: float = Field(default=0.85, ge=0.0, le=1.0)
    token: float = Field(default=0.8, ge=0.0, le=1.0)  # per-token keyword similarity
    partial_ratio: float = Field(default=0.5, ge=0.0, le=1.0)
    partial_confidence_factor: float = Field(default=0.8, ge=0.0, le=1.0)
    max_ambiguities: int = Field(default=5, ge=1)


class QualityWeights(BaseModel):
    """Raw points per field; brewery totals are divided by `brewery_max`."""

    model_config = ConfigDict(frozen=True)

    brewery_max: float = Field(default=10.0, gt=0.0)
    name: float = 3.0
    website: float = 2.0
    address: float = 2.0
    description: float = 1.5
    email: float = 1.0
    phone: float = 0.5
    founding_year: float = 0.5
    products: float = 0.5
    social_links: float = 0.5
    ai_confidence: float = 0.5

    # Cap applied when no identifier (website, address, long description) exists
    no_identifier_cap: float = Field(default=0.3, ge=0.0, le=1.0)
    min_description_length: int = 50
    min_phone_digits: int = 7
    ai_confidence_threshold: float = Field(default=0.9, ge=0.0, le=1.0)

    beer_name: float = 1.0
    beer_alcohol: float = 0.15
    beer_style: float = 0.15
    beer_volume: float = 0.1
    beer_description: float = 0.1


class PipelineThresholds(BaseModel):
    """Confidence levels used by the validation stages."""

    model_config = ConfigDict(frozen=True)

    brewery_quality: float = Field(default=0.7, ge=0.0, le=1.0)
    beer_quality: float = Field(default=0.7, ge=0.0, le=1.0)
    update_existing_confidence: float = Field(default=0.95, ge=0.0, le=1.0)
    grounded_confidence: float = Field(default=0.65, ge=0.0, le=1.0)


class Lexicon(BaseModel):
    """Word lists and labels."""

    model_config = ConfigDict(frozen=True)

    # Brand roots and styles that identify a brewery on their own
    keywords: tuple[str, ...] = (
        "viana", "moretti", "peroni", "heineken", "corona", "guinness",
        "budweiser", "pilsner", "ipa", "lager", "stout", "weizen",
    )
    field_labels: dict[str, str] = Field(default_factory=lambda: {
        "name": "Brewery name",
        "website": "Website",
        "legal_address": "Address",
        "email": "Email",
        "phone": "Phone",
        "founding_year": "Founding year",
    })
    required_fields: tuple[str, ...] = ("name", "website", "legal_address")
    optional_fields: tuple[str, ...] = ("email", "phone", "founding_year")
    search_templates: tuple[str, ...] = (
        '"{name}" brewery',
        '"{name}" birrificio',
        "{name} brewery website",
        "{name} craft beer",
    )
    social_domains: tuple[str, ...] = (
        "facebook.com", "instagram.com", "youtube.com", "twitter.com",
        "x.com", "linkedin.com", "tiktok.com", "untappd.com",
    )

    def label_for(self, field: str) -> str:
        return self.field_labels.get(field, field)


class Rules(BaseModel):
    """Complete tuning configuration for one validation run."""

    model_config = ConfigDict(frozen=True)

    name: str = "default"
    match: MatchThresholds = Field(default_factory=MatchThresholds)
    quality: QualityWeights = Field(default_factory=QualityWeights)
    pipeline: PipelineThresholds = Field(default_factory=PipelineThresholds)
    lexicon: Lexicon = Field(default_factory=Lexicon)


DEFAULT_RULES = Rules()

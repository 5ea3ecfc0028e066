"""Pydantic models for match results."""

from typing import Literal

from pydantic import BaseModel, Field, model_validator

from brewguard.extract.models import CanonicalBrewery

MatchType = Literal[
    "EXACT_NAME",
    "FUZZY_HIGH_CONFIDENCE",
    "AMBIGUOUS_SINGLE",
    "AMBIGUOUS_FUZZY",
    "WEBSITE",
    "EMAIL",
    "ADDRESS",
    "PARTIAL_AMBIGUOUS",
    "NONE",
]

DisambiguationReason = Literal[
    "MULTIPLE_KEYWORD_MATCHES",
    "MULTIPLE_SIMILAR_MATCHES",
    "SINGLE_AMBIGUOUS_MATCH",
    "PARTIAL_NAME_MATCH",
]


class MatchAux(BaseModel):
    """Auxiliary identifying fields of a candidate."""

    website: str | None = None
    email: str | None = None
    legal_address: str | None = None
    production_address: str | None = None


class Ambiguity(BaseModel):
    """One plausible canonical match a human has to choose between."""

    entity: CanonicalBrewery
    confidence: float = Field(ge=0.0, le=1.0)
    reason: MatchType
    similarity: float = Field(default=0.0, ge=0.0, le=1.0)
    keyword_match: bool = False
    matching_parts: list[str] = Field(default_factory=list)


class MatchResult(BaseModel):
    """Outcome of matching one candidate name against the canonical list.

    Exactly one of three shapes: a confident `matched` entity, a list of
    `ambiguities` with `needs_disambiguation` set, or neither (new entity).
    """

    matched: CanonicalBrewery | None = None
    match_type: MatchType = "NONE"
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    ambiguities: list[Ambiguity] = Field(default_factory=list)
    needs_disambiguation: bool = False
    disambiguation_reason: DisambiguationReason | None = None

    @model_validator(mode="after")
    def _check_shape(self) -> "MatchResult":
        if self.needs_disambiguation:
            if self.matched is not None:
                raise ValueError("an ambiguous match cannot carry a matched entity")
            if not self.ambiguities:
                raise ValueError("an ambiguous match needs at least one candidate")
        return self

    @property
    def found(self) -> bool:
        """True when a single canonical entity was matched with confidence."""
        return self.matched is not None

"""Pydantic models for validation results.

One `EntityValidation` per candidate, `UserAction`s for everything a human
has to decide, and one `ValidationOutcome` per pipeline run carrying the
single flow decision the caller acts on.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field, model_validator

from brewguard.extract.models import CandidateBeer, CandidateBrewery, CanonicalBrewery, EntityKind
from brewguard.matching.models import MatchResult

ActionType = Literal[
    "MANUAL_VERIFICATION",
    "RESOLVE_CONFLICTS",
    "COMPLETE_DATA",
    "GROUNDING_REQUIRED",
    "BREWERY_REQUIRED",
    "RETRY",
    "MANUAL_BEER_VERIFICATION",
    "RESOLVE_BEER_CONFLICTS",
    "DISAMBIGUATION",
]
Priority = Literal["low", "medium", "high"]
SaveAction = Literal["SAVE_DIRECTLY", "UPDATE_EXISTING", "NONE"]
Flow = Literal["DIRECT_SAVE", "REQUIRES_CONFIRMATION", "REQUIRES_COMPLETION", "BLOCKED"]


class MissingField(BaseModel):
    """A field the user should fill in."""

    field: str
    label: str
    priority: Priority = "low"


class UserAction(BaseModel):
    """Something a human has to confirm, choose or complete."""

    type: ActionType
    title: str
    description: str = ""
    data: dict[str, Any] = Field(default_factory=dict)
    priority: Priority = "medium"
    candidate_id: str | None = None


class EntityValidation(BaseModel):
    """Validation result for one brewery or beer candidate."""

    kind: EntityKind
    candidate_id: str | None = None
    name: str | None = None
    candidate: CandidateBrewery | CandidateBeer | None = None
    is_valid: bool = False
    action: SaveAction = "NONE"
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    quality_score: float | None = Field(default=None, ge=0.0, le=1.0)
    existing_match: CanonicalBrewery | None = None
    match: MatchResult | None = None
    brewery_name: str | None = None  # beers: the verified brewery they belong to
    issues: list[str] = Field(default_factory=list)
    requires_user_action: bool = False
    user_action: UserAction | None = None

    @model_validator(mode="after")
    def _check_action(self) -> "EntityValidation":
        if self.requires_user_action != (self.user_action is not None):
            raise ValueError("requires_user_action must come with exactly one user_action")
        return self


class ValidationSummary(BaseModel):
    total_breweries: int = 0
    total_beers: int = 0
    verified_breweries: int = 0
    unverified_breweries: int = 0
    verified_beers: int = 0
    unverified_beers: int = 0


class TraceEvent(BaseModel):
    """One decision taken by the pipeline, in order."""

    stage: Literal["fetch", "brewery", "beer", "flow"]
    event: str
    candidate: str | None = None
    detail: dict[str, Any] = Field(default_factory=dict)


class ValidationOutcome(BaseModel):
    """Top-level result of one validation run."""

    flow: Flow = "REQUIRES_COMPLETION"
    message: str = ""
    verified_breweries: list[EntityValidation] = Field(default_factory=list)
    unverified_breweries: list[EntityValidation] = Field(default_factory=list)
    verified_beers: list[EntityValidation] = Field(default_factory=list)
    unverified_beers: list[EntityValidation] = Field(default_factory=list)
    user_actions: list[UserAction] = Field(default_factory=list)
    error_messages: list[str] = Field(default_factory=list)
    summary: ValidationSummary = Field(default_factory=ValidationSummary)
    trace: list[TraceEvent] = Field(default_factory=list)

    @property
    def can_save_directly(self) -> bool:
        return self.flow == "DIRECT_SAVE"

    @property
    def requires_user_confirmation(self) -> bool:
        return self.flow == "REQUIRES_CONFIRMATION"

    @property
    def requires_user_completion(self) -> bool:
        return self.flow == "REQUIRES_COMPLETION"

    @property
    def blocked_by_validation(self) -> bool:
        return self.flow == "BLOCKED"

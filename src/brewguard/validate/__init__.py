"""Validation — quality, grounding and the staged approval pipeline.

Turns untrusted AI extractions into per-entity decisions (save, update,
ask a human) and one flow decision for the whole run.
"""

from brewguard.validate.grounding import is_grounded
from brewguard.validate.models import EntityValidation, UserAction, ValidationOutcome
from brewguard.validate.pipeline import (
    avalidate_candidates,
    classify_flow,
    validate_beer,
    validate_brewery,
    validate_candidates,
    validate_extraction,
)
from brewguard.validate.quality import assess_beer, assess_brewery

__all__ = [
    "EntityValidation",
    "UserAction",
    "ValidationOutcome",
    "assess_beer",
    "assess_brewery",
    "avalidate_candidates",
    "classify_flow",
    "is_grounded",
    "validate_beer",
    "validate_brewery",
    "validate_candidates",
    "validate_extraction",
]
